"""Shift template management tests."""

import pytest
from httpx import AsyncClient

from tests.conftest import ADMIN, APP, auth_header, days_ahead

ADMIN_URL = f"{ADMIN}/shift-templates"
URL = f"{APP}/shift-templates"


def _payload(**overrides) -> dict:
    payload = {
        "name": "Morning",
        "type": "operational",
        "open_time": "7:00",
        "close_time": "15:00",
        "hourly_requirements": [
            {"start_time": "07:00", "end_time": "11:00", "min_workers": 2, "optimal_workers": 3},
            {"start_time": "11:00", "end_time": "15:00", "min_workers": 1, "optimal_workers": 2},
        ],
        "recurring_days": ["monday"],
        "color": "#ffaa00",
    }
    payload.update(overrides)
    return payload


class TestCreateTemplate:
    """Template creation and requirement validation."""

    async def test_create(self, client: AsyncClient, manager_token, manager_user):
        res = await client.post(ADMIN_URL, json=_payload(), headers=auth_header(manager_token))
        assert res.status_code == 201, res.text
        data = res.json()
        assert data["name"] == "Morning"
        assert data["open_time"] == "07:00"
        assert data["close_time"] == "15:00"
        assert data["recurring_days"] == ["monday"]
        assert data["is_active"] is True
        assert data["created_by"] == str(manager_user.id)
        assert len(data["hourly_requirements"]) == 2

    async def test_worker_cannot_create(self, client: AsyncClient, worker_token):
        res = await client.post(ADMIN_URL, json=_payload(), headers=auth_header(worker_token))
        assert res.status_code == 403

    @pytest.mark.parametrize("overrides", [
        {"open_time": "15:00", "close_time": "07:00"},
        {"hourly_requirements": []},
        {"hourly_requirements": [
            {"start_time": "07:00", "end_time": "12:00", "min_workers": 1, "optimal_workers": 1},
            {"start_time": "11:00", "end_time": "15:00", "min_workers": 1, "optimal_workers": 1},
        ]},
        {"hourly_requirements": [
            {"start_time": "07:00", "end_time": "11:00", "min_workers": 3, "optimal_workers": 2},
        ]},
        {"hourly_requirements": [
            {"start_time": "06:00", "end_time": "11:00", "min_workers": 1, "optimal_workers": 1},
        ]},
        {"hourly_requirements": [
            {"start_time": "07:00", "end_time": "11:00", "min_workers": -1, "optimal_workers": 1},
        ]},
    ])
    async def test_invalid_requirements(self, client: AsyncClient, manager_token, overrides):
        res = await client.post(ADMIN_URL, json=_payload(**overrides), headers=auth_header(manager_token))
        assert res.status_code == 400

    async def test_unknown_weekday_is_422(self, client: AsyncClient, manager_token):
        res = await client.post(
            ADMIN_URL, json=_payload(recurring_days=["funday"]), headers=auth_header(manager_token)
        )
        assert res.status_code == 422


class TestUpdateTemplate:
    """Partial updates."""

    async def test_rename(self, client: AsyncClient, manager_token, template):
        res = await client.put(
            f"{ADMIN_URL}/{template.id}", json={"name": "Shop floor"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 200
        assert res.json()["name"] == "Shop floor"
        assert res.json()["open_time"] == "06:00"

    async def test_narrowing_hours_revalidates_requirements(self, client: AsyncClient, manager_token, template):
        res = await client.put(
            f"{ADMIN_URL}/{template.id}", json={"close_time": "20:00"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 400

    async def test_deactivate(self, client: AsyncClient, manager_token, template):
        res = await client.put(
            f"{ADMIN_URL}/{template.id}", json={"is_active": False}, headers=auth_header(manager_token)
        )
        assert res.json()["is_active"] is False

        listing = await client.get(URL, headers=auth_header(manager_token))
        assert listing.json() == []

    async def test_unknown_template(self, client: AsyncClient, manager_token):
        res = await client.put(
            f"{ADMIN_URL}/00000000-0000-0000-0000-000000000000", json={"name": "X"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 404


class TestDeleteTemplate:
    """Unused templates are deleted, used ones deactivated."""

    async def test_delete_unused(self, client: AsyncClient, manager_token, template):
        res = await client.delete(f"{ADMIN_URL}/{template.id}", headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json() == {"deleted": True, "deactivated": False}

        detail = await client.get(f"{URL}/{template.id}", headers=auth_header(manager_token))
        assert detail.status_code == 404

    async def test_delete_used_deactivates(self, client: AsyncClient, manager_token, worker_user, template):
        await client.post(f"{ADMIN}/shift-assignments", json={
            "shift_template_id": str(template.id),
            "worker_id": str(worker_user.id),
            "date": days_ahead(3),
            "assigned_hours": [{"start_time": "08:00", "end_time": "12:00"}],
        }, headers=auth_header(manager_token))

        res = await client.delete(f"{ADMIN_URL}/{template.id}", headers=auth_header(manager_token))
        assert res.json() == {"deleted": False, "deactivated": True}

        detail = await client.get(f"{URL}/{template.id}", headers=auth_header(manager_token))
        assert detail.json()["is_active"] is False


class TestReadTemplates:
    """Staff-facing template reads."""

    async def test_list_by_weekday(self, client: AsyncClient, manager_token, worker_token):
        await client.post(ADMIN_URL, json=_payload(), headers=auth_header(manager_token))

        # 2026-01-05 is a Monday
        monday = await client.get(URL, params={"date": "2026-01-05"}, headers=auth_header(worker_token))
        assert [t["name"] for t in monday.json()] == ["Morning"]

        tuesday = await client.get(URL, params={"date": "2026-01-06"}, headers=auth_header(worker_token))
        assert tuesday.json() == []

    async def test_get_by_id(self, client: AsyncClient, worker_token, template):
        res = await client.get(f"{URL}/{template.id}", headers=auth_header(worker_token))
        assert res.status_code == 200
        assert res.json()["name"] == "Floor"
        assert res.json()["hourly_requirements"][0]["start_time"] == "06:00"
