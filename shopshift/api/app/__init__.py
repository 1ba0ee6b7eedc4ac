"""App API Router package: Aggregates all staff-facing endpoints.

Included routers:
    - me: The authenticated user and capabilities
    - shift_templates: Read-only template access
    - shift_assignments: Listings, joining, approval, rejection and edits
    - shift_timing: Lead-time preview
    - hour_requests: Join, switch and other worker requests
"""

from fastapi import APIRouter

from shopshift.api.app.me import router as me_router
from shopshift.api.app.shift_templates import router as shift_templates_router
from shopshift.api.app.shift_assignments import router as shift_assignments_router
from shopshift.api.app.shift_timing import router as shift_timing_router
from shopshift.api.app.hour_requests import router as hour_requests_router

app_router: APIRouter = APIRouter()

app_router.include_router(me_router, tags=["App Me"])
app_router.include_router(shift_templates_router, prefix="/shift-templates", tags=["Shift Templates"])
app_router.include_router(shift_assignments_router, prefix="/shift-assignments", tags=["Shift Assignments"])
app_router.include_router(shift_timing_router, prefix="/shift-timing", tags=["Shift Timing"])
app_router.include_router(hour_requests_router, prefix="/hour-requests", tags=["Hour Requests"])
