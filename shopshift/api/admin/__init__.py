"""Admin API Router package: Aggregates all manager-facing endpoints.

Included routers:
    - shift_templates: Shift template management
    - shift_assignments: Assigning workers and completing shifts
    - hour_requests: Review queue for worker requests
"""

from fastapi import APIRouter

from shopshift.api.admin.shift_templates import router as shift_templates_router
from shopshift.api.admin.shift_assignments import router as shift_assignments_router
from shopshift.api.admin.hour_requests import router as hour_requests_router

admin_router: APIRouter = APIRouter()

admin_router.include_router(shift_templates_router, prefix="/shift-templates", tags=["Admin Shift Templates"])
admin_router.include_router(shift_assignments_router, prefix="/shift-assignments", tags=["Admin Shift Assignments"])
admin_router.include_router(hour_requests_router, prefix="/hour-requests", tags=["Admin Hour Requests"])
