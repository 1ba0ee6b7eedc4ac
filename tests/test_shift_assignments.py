"""Shift assignment workflow tests.

Manager assignment, worker joins, approval, rejection, completion,
copy-on-write edits and listings. Dates are relative to today (UTC) with
shifts starting at 08:00, so e.g. days_ahead(6) is always more than 120
hours out and days_ahead(1) always less than 48.
"""

import asyncio
import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shopshift.models.assignment import ShiftAssignment
from shopshift.repositories.assignment_repository import assignment_repository
from shopshift.utils.exceptions import DuplicateError
from tests.conftest import ADMIN, APP, auth_header, days_ahead, utc_today

ASSIGN_URL = f"{ADMIN}/shift-assignments"
URL = f"{APP}/shift-assignments"

MORNING = [{"start_time": "08:00", "end_time": "16:00"}]


async def _assign(client: AsyncClient, token: str, template, worker, date: str, **extra):
    payload = {
        "shift_template_id": str(template.id),
        "worker_id": str(worker.id),
        "date": date,
        "assigned_hours": MORNING,
        **extra,
    }
    return await client.post(ASSIGN_URL, json=payload, headers=auth_header(token))


async def _join(client: AsyncClient, token: str, template, date: str, **extra):
    payload = {"shift_template_id": str(template.id), "date": date, **extra}
    return await client.post(f"{URL}/join", json=payload, headers=auth_header(token))


async def _detail(client: AsyncClient, token: str, assignment_id: str) -> dict:
    res = await client.get(f"{URL}/{assignment_id}", headers=auth_header(token))
    assert res.status_code == 200, res.text
    return res.json()


class TestManagerAssignment:
    """Manager assigns workers to shifts."""

    async def test_assign_other_worker_72h_out_needs_worker(
        self, client: AsyncClient, manager_token, worker_user, template
    ):
        """Three days out, another worker's assignment still waits for them."""
        res = await _assign(client, manager_token, template, worker_user, days_ahead(3))
        assert res.status_code == 201, res.text
        assert res.json()["status"] == "pending_worker_approval"

        data = await _detail(client, manager_token, res.json()["id"])
        assert data["manager_approved_at"] is not None
        assert data["worker_approved_at"] is None
        assert data["resolution"] == "active"

    async def test_assign_other_worker_30h_out_needs_worker(
        self, client: AsyncClient, manager_token, worker_user, template
    ):
        res = await _assign(client, manager_token, template, worker_user, days_ahead(1))
        assert res.status_code == 201
        assert res.json()["status"] == "pending_worker_approval"

    async def test_self_assignment_is_confirmed(
        self, client: AsyncClient, manager_token, manager_user, template
    ):
        res = await _assign(client, manager_token, template, manager_user, days_ahead(1))
        assert res.status_code == 201
        assert res.json()["status"] == "confirmed"

        data = await _detail(client, manager_token, res.json()["id"])
        assert data["worker_approved_at"] is not None
        assert data["manager_approved_at"] is not None

    async def test_target_must_be_worker(self, client: AsyncClient, manager_token, staff_user, template):
        res = await _assign(client, manager_token, template, staff_user, days_ahead(3))
        assert res.status_code == 400
        assert res.json()["detail"] == "Target user is not a worker"

    async def test_unknown_worker(self, client: AsyncClient, manager_token, worker_user, template):
        res = await client.post(ASSIGN_URL, json={
            "shift_template_id": str(template.id),
            "worker_id": str(uuid.uuid4()),
            "date": days_ahead(3),
            "assigned_hours": MORNING,
        }, headers=auth_header(manager_token))
        assert res.status_code == 404

    async def test_unknown_template(self, client: AsyncClient, manager_token, worker_user):
        res = await client.post(ASSIGN_URL, json={
            "shift_template_id": str(uuid.uuid4()),
            "worker_id": str(worker_user.id),
            "date": days_ahead(3),
            "assigned_hours": MORNING,
        }, headers=auth_header(manager_token))
        assert res.status_code == 404

    async def test_inactive_template(self, client: AsyncClient, db: AsyncSession, manager_token, worker_user, template):
        template.is_active = False
        await db.commit()
        res = await _assign(client, manager_token, template, worker_user, days_ahead(3))
        assert res.status_code == 400

    async def test_hours_outside_template_bounds(self, client: AsyncClient, manager_token, worker_user, template):
        res = await _assign(
            client, manager_token, template, worker_user, days_ahead(3),
            assigned_hours=[{"start_time": "05:00", "end_time": "09:00"}],
        )
        assert res.status_code == 400
        assert "within shift hours" in res.json()["detail"]

    async def test_start_must_precede_end(self, client: AsyncClient, manager_token, worker_user, template):
        res = await _assign(
            client, manager_token, template, worker_user, days_ahead(3),
            assigned_hours=[{"start_time": "12:00", "end_time": "12:00"}],
        )
        assert res.status_code == 400

    async def test_malformed_clock_is_422(self, client: AsyncClient, manager_token, worker_user, template):
        res = await _assign(
            client, manager_token, template, worker_user, days_ahead(3),
            assigned_hours=[{"start_time": "8am", "end_time": "12:00"}],
        )
        assert res.status_code == 422

    async def test_duplicate_assignment_conflicts(self, client: AsyncClient, manager_token, worker_user, template):
        first = await _assign(client, manager_token, template, worker_user, days_ahead(3))
        assert first.status_code == 201
        second = await _assign(client, manager_token, template, worker_user, days_ahead(3))
        assert second.status_code == 409
        assert second.json()["detail"] == "Worker is already assigned to this shift on this date"

    async def test_concurrent_assignments_admit_one(
        self, client: AsyncClient, manager_token, worker_user, template
    ):
        results = await asyncio.gather(
            _assign(client, manager_token, template, worker_user, days_ahead(3)),
            _assign(client, manager_token, template, worker_user, days_ahead(3)),
        )
        assert sorted(r.status_code for r in results) == [201, 409]

        listing = await client.get(URL, params={"date": days_ahead(3)}, headers=auth_header(manager_token))
        assert len(listing.json()) == 1

    async def test_active_row_unique_under_race(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        manager_user,
        worker_user,
        template,
    ):
        """Two writers that both passed the duplicate check: the index admits only one."""
        row = {
            "shift_template_id": template.id,
            "worker_id": worker_user.id,
            "date": utc_today(),
            "assigned_hours": MORNING,
            "assigned_by": manager_user.id,
            "status": "pending_worker_approval",
        }
        async with session_factory() as first:
            await assignment_repository.create(first, dict(row))
            await first.commit()

        async with session_factory() as second:
            with pytest.raises(DuplicateError):
                await assignment_repository.create(second, dict(row))
            await second.rollback()

            count = (await second.execute(
                select(func.count()).select_from(ShiftAssignment).where(ShiftAssignment.worker_id == worker_user.id)
            )).scalar()
        assert count == 1


class TestJoinShift:
    """Worker joins a shift directly."""

    async def test_join_130h_out_is_confirmed(self, client: AsyncClient, worker_token, template):
        res = await _join(client, worker_token, template, days_ahead(6), requested_hours=MORNING)
        assert res.status_code == 201, res.text
        assert res.json()["status"] == "confirmed"

        data = await _detail(client, worker_token, res.json()["id"])
        assert data["worker_approved_at"] is not None
        assert data["manager_approved_at"] is not None

    async def test_join_100h_out_needs_manager(self, client: AsyncClient, worker_token, template):
        res = await _join(client, worker_token, template, days_ahead(4), requested_hours=MORNING)
        assert res.status_code == 201
        assert res.json()["status"] == "pending_manager_approval"

        data = await _detail(client, worker_token, res.json()["id"])
        assert data["worker_approved_at"] is not None
        assert data["manager_approved_at"] is None

    async def test_manager_join_is_confirmed(self, client: AsyncClient, manager_token, template):
        res = await _join(client, manager_token, template, days_ahead(1), requested_hours=MORNING)
        assert res.status_code == 201
        assert res.json()["status"] == "confirmed"

    async def test_default_hours_cover_store_hours(self, client: AsyncClient, worker_token, template):
        res = await _join(client, worker_token, template, days_ahead(4))
        data = await _detail(client, worker_token, res.json()["id"])
        assert data["assigned_hours"] == [{"start_time": "06:00", "end_time": "22:00"}]

    async def test_hours_outside_bounds(self, client: AsyncClient, worker_token, template):
        res = await _join(
            client, worker_token, template, days_ahead(4),
            requested_hours=[{"start_time": "20:00", "end_time": "23:00"}],
        )
        assert res.status_code == 400

    async def test_join_twice_conflicts(self, client: AsyncClient, worker_token, template):
        await _join(client, worker_token, template, days_ahead(4))
        res = await _join(client, worker_token, template, days_ahead(4))
        assert res.status_code == 409


class TestApproval:
    """Approving pending assignments."""

    async def test_manager_approves_join(self, client: AsyncClient, worker_token, manager_token, template):
        created = await _join(client, worker_token, template, days_ahead(4))
        assignment_id = created.json()["id"]
        before = await _detail(client, worker_token, assignment_id)

        res = await client.post(f"{URL}/{assignment_id}/approve", headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json()["status"] == "confirmed"

        after = await _detail(client, worker_token, assignment_id)
        assert after["manager_approved_at"] is not None
        assert after["worker_approved_at"] == before["worker_approved_at"]

    async def test_worker_approves_own_assignment(
        self, client: AsyncClient, manager_token, worker_token, worker_user, template
    ):
        created = await _assign(client, manager_token, template, worker_user, days_ahead(3))
        assignment_id = created.json()["id"]
        before = await _detail(client, manager_token, assignment_id)

        res = await client.post(f"{URL}/{assignment_id}/approve", headers=auth_header(worker_token))
        assert res.status_code == 200
        assert res.json()["status"] == "confirmed"

        after = await _detail(client, manager_token, assignment_id)
        assert after["worker_approved_at"] is not None
        assert after["manager_approved_at"] == before["manager_approved_at"]

    async def test_other_worker_cannot_approve(
        self, client: AsyncClient, manager_token, other_worker_token, worker_user, template
    ):
        created = await _assign(client, manager_token, template, worker_user, days_ahead(3))
        res = await client.post(f"{URL}/{created.json()['id']}/approve", headers=auth_header(other_worker_token))
        assert res.status_code == 409
        assert res.json()["detail"] == "Assignment is not pending your approval"

    async def test_worker_cannot_approve_own_join(self, client: AsyncClient, worker_token, template):
        created = await _join(client, worker_token, template, days_ahead(4))
        res = await client.post(f"{URL}/{created.json()['id']}/approve", headers=auth_header(worker_token))
        assert res.status_code == 409

    async def test_confirmed_cannot_be_approved_again(self, client: AsyncClient, worker_token, template):
        created = await _join(client, worker_token, template, days_ahead(6))
        res = await client.post(f"{URL}/{created.json()['id']}/approve", headers=auth_header(worker_token))
        assert res.status_code == 409

    async def test_unknown_assignment(self, client: AsyncClient, manager_token):
        res = await client.post(f"{URL}/{uuid.uuid4()}/approve", headers=auth_header(manager_token))
        assert res.status_code == 404


class TestReject:
    """Declining pending assignments."""

    async def test_worker_rejects_with_reason(
        self, client: AsyncClient, manager_token, worker_token, worker_user, template
    ):
        created = await _assign(client, manager_token, template, worker_user, days_ahead(3), assignment_notes="Cover")
        assignment_id = created.json()["id"]

        res = await client.post(
            f"{URL}/{assignment_id}/reject", json={"reason": "Exam day"}, headers=auth_header(worker_token)
        )
        assert res.status_code == 200
        assert res.json()["status"] == "rejected"

        data = await _detail(client, manager_token, assignment_id)
        assert data["assignment_notes"] == "Cover\nRejected: Exam day"
        assert data["resolution"] == "declined"

    async def test_second_reject_conflicts_without_touching_notes(
        self, client: AsyncClient, manager_token, worker_token, worker_user, template
    ):
        created = await _assign(client, manager_token, template, worker_user, days_ahead(3))
        assignment_id = created.json()["id"]
        await client.post(f"{URL}/{assignment_id}/reject", json={"reason": "No"}, headers=auth_header(worker_token))
        notes = (await _detail(client, manager_token, assignment_id))["assignment_notes"]

        res = await client.post(f"{URL}/{assignment_id}/reject", json={"reason": "No"}, headers=auth_header(worker_token))
        assert res.status_code == 409
        assert (await _detail(client, manager_token, assignment_id))["assignment_notes"] == notes

    async def test_reject_without_body(self, client: AsyncClient, manager_token, worker_user, template):
        created = await _assign(client, manager_token, template, worker_user, days_ahead(3))
        res = await client.post(f"{URL}/{created.json()['id']}/reject", headers=auth_header(manager_token))
        assert res.status_code == 200

    async def test_other_worker_cannot_reject(
        self, client: AsyncClient, manager_token, other_worker_token, worker_user, template
    ):
        created = await _assign(client, manager_token, template, worker_user, days_ahead(3))
        res = await client.post(f"{URL}/{created.json()['id']}/reject", headers=auth_header(other_worker_token))
        assert res.status_code == 403

    async def test_confirmed_cannot_be_rejected(self, client: AsyncClient, worker_token, template):
        created = await _join(client, worker_token, template, days_ahead(6))
        res = await client.post(f"{URL}/{created.json()['id']}/reject", headers=auth_header(worker_token))
        assert res.status_code == 409

    async def test_rejected_frees_the_slot(
        self, client: AsyncClient, manager_token, worker_token, worker_user, template
    ):
        created = await _assign(client, manager_token, template, worker_user, days_ahead(3))
        await client.post(f"{URL}/{created.json()['id']}/reject", headers=auth_header(worker_token))

        listing = await client.get(URL, params={"date": days_ahead(3)}, headers=auth_header(manager_token))
        assert listing.json() == []

        again = await _assign(client, manager_token, template, worker_user, days_ahead(3))
        assert again.status_code == 201


class TestComplete:
    """Completing confirmed assignments."""

    async def test_complete_started_shift(self, client: AsyncClient, manager_token, manager_user, template):
        created = await _assign(client, manager_token, template, manager_user, days_ahead(-1))
        res = await client.post(f"{ASSIGN_URL}/{created.json()['id']}/complete", headers=auth_header(manager_token))
        assert res.status_code == 200
        assert res.json()["status"] == "completed"

    async def test_future_shift_cannot_complete(self, client: AsyncClient, manager_token, manager_user, template):
        created = await _assign(client, manager_token, template, manager_user, days_ahead(2))
        res = await client.post(f"{ASSIGN_URL}/{created.json()['id']}/complete", headers=auth_header(manager_token))
        assert res.status_code == 409
        assert res.json()["detail"] == "Shift has not started yet"

    async def test_pending_cannot_complete(self, client: AsyncClient, manager_token, worker_user, template):
        created = await _assign(client, manager_token, template, worker_user, days_ahead(-1))
        res = await client.post(f"{ASSIGN_URL}/{created.json()['id']}/complete", headers=auth_header(manager_token))
        assert res.status_code == 409
        assert res.json()["detail"] == "Only confirmed assignments can be completed"

    async def test_worker_cannot_complete(self, client: AsyncClient, worker_token, template):
        created = await _join(client, worker_token, template, days_ahead(6))
        res = await client.post(f"{ASSIGN_URL}/{created.json()['id']}/complete", headers=auth_header(worker_token))
        assert res.status_code == 403


class TestEdit:
    """Copy-on-write edits."""

    async def test_worker_edit_creates_replacement(
        self, client: AsyncClient, db: AsyncSession, worker_token, worker_user, template
    ):
        created = await _join(client, worker_token, template, days_ahead(6), requested_hours=MORNING)
        original_id = created.json()["id"]

        res = await client.post(f"{URL}/{original_id}/edit", json={
            "requested_hours": [{"start_time": "10:00", "end_time": "14:00"}],
        }, headers=auth_header(worker_token))
        assert res.status_code == 201, res.text
        new_id = res.json()["id"]
        assert new_id != original_id
        assert res.json()["status"] == "pending_manager_approval"

        original = await _detail(client, worker_token, original_id)
        assert original["status"] == "rejected"
        assert original["resolution"] == "superseded"
        assert original["superseded_by_id"] == new_id
        assert f"Replaced by edit request: {new_id}" in original["assignment_notes"]

        replacement = await _detail(client, worker_token, new_id)
        assert replacement["assigned_hours"] == [{"start_time": "10:00", "end_time": "14:00"}]
        assert replacement["assignment_notes"] == f"Edited from original assignment: {original_id}"
        assert replacement["worker_approved_at"] is not None
        assert replacement["manager_approved_at"] is None

        active = (await db.execute(
            select(func.count()).select_from(ShiftAssignment).where(
                ShiftAssignment.worker_id == worker_user.id,
                ShiftAssignment.status != "rejected",
            )
        )).scalar()
        assert active == 1

    async def test_manager_edit_of_worker_keeps_breaks(
        self, client: AsyncClient, manager_token, worker_user, template
    ):
        breaks = [{"start_time": "12:00", "end_time": "12:30", "is_paid": False}]
        created = await _assign(client, manager_token, template, worker_user, days_ahead(3), break_periods=breaks)

        res = await client.post(f"{URL}/{created.json()['id']}/edit", json={
            "requested_hours": [{"start_time": "09:00", "end_time": "17:00"}],
            "request_notes": "Shifted an hour",
        }, headers=auth_header(manager_token))
        assert res.status_code == 201
        assert res.json()["status"] == "pending_worker_approval"

        replacement = await _detail(client, manager_token, res.json()["id"])
        assert replacement["break_periods"] == breaks
        assert replacement["assignment_notes"] == "Shifted an hour"
        assert replacement["manager_approved_at"] is not None
        assert replacement["worker_approved_at"] is None

    async def test_manager_edit_of_own_is_confirmed(
        self, client: AsyncClient, manager_token, manager_user, template
    ):
        created = await _assign(client, manager_token, template, manager_user, days_ahead(1))
        res = await client.post(f"{URL}/{created.json()['id']}/edit", json={}, headers=auth_header(manager_token))
        assert res.status_code == 201
        assert res.json()["status"] == "confirmed"

    async def test_worker_cannot_edit_inside_window(
        self, client: AsyncClient, manager_token, worker_token, worker_user, template
    ):
        created = await _assign(client, manager_token, template, worker_user, days_ahead(1))
        res = await client.post(f"{URL}/{created.json()['id']}/edit", json={}, headers=auth_header(worker_token))
        assert res.status_code == 403

    async def test_edit_window_checked_before_hours(
        self, client: AsyncClient, manager_token, worker_token, worker_user, template
    ):
        created = await _assign(client, manager_token, template, worker_user, days_ahead(1))
        res = await client.post(f"{URL}/{created.json()['id']}/edit", json={
            "requested_hours": [{"start_time": "04:00", "end_time": "10:00"}],
        }, headers=auth_header(worker_token))
        assert res.status_code == 403

    async def test_superseded_original_cannot_be_edited(self, client: AsyncClient, worker_token, template):
        created = await _join(client, worker_token, template, days_ahead(6))
        original_id = created.json()["id"]
        first = await client.post(f"{URL}/{original_id}/edit", json={}, headers=auth_header(worker_token))
        assert first.status_code == 201

        second = await client.post(f"{URL}/{original_id}/edit", json={}, headers=auth_header(worker_token))
        assert second.status_code == 409

    async def test_other_worker_cannot_edit(self, client: AsyncClient, worker_token, other_worker_token, template):
        created = await _join(client, worker_token, template, days_ahead(6))
        res = await client.post(f"{URL}/{created.json()['id']}/edit", json={}, headers=auth_header(other_worker_token))
        assert res.status_code == 403

    async def test_edit_hours_must_fit_template(self, client: AsyncClient, worker_token, template):
        created = await _join(client, worker_token, template, days_ahead(6))
        res = await client.post(f"{URL}/{created.json()['id']}/edit", json={
            "requested_hours": [{"start_time": "04:00", "end_time": "10:00"}],
        }, headers=auth_header(worker_token))
        assert res.status_code == 400


class TestQueries:
    """Listings, detail and timing preview."""

    async def test_date_listing_is_enriched(
        self, client: AsyncClient, manager_token, worker_user, template
    ):
        await _assign(client, manager_token, template, worker_user, days_ahead(3))
        res = await client.get(URL, params={"date": days_ahead(3)}, headers=auth_header(manager_token))
        assert res.status_code == 200
        [item] = res.json()
        assert item["worker"] == {"id": str(worker_user.id), "name": "Test Worker"}
        assert item["shift"]["name"] == "Floor"
        assert item["assigned_by"]["name"] == "Test Manager"

    async def test_worker_listing_with_range(
        self, client: AsyncClient, manager_token, worker_token, worker_user, template
    ):
        await _assign(client, manager_token, template, worker_user, days_ahead(3))
        await _assign(client, manager_token, template, worker_user, days_ahead(6))

        res = await client.get(
            f"{URL}/workers/{worker_user.id}",
            params={"start_date": days_ahead(4), "end_date": days_ahead(6)},
            headers=auth_header(worker_token),
        )
        assert res.status_code == 200
        assert [a["date"] for a in res.json()] == [days_ahead(6)]

    async def test_pending_for_manager_and_worker(
        self, client: AsyncClient, manager_token, worker_token, other_worker_token, worker_user, template
    ):
        await _assign(client, manager_token, template, worker_user, days_ahead(3))
        await _join(client, other_worker_token, template, days_ahead(4))

        manager_view = await client.get(f"{URL}/pending", headers=auth_header(manager_token))
        assert {a["status"] for a in manager_view.json()} == {
            "pending_worker_approval", "pending_manager_approval",
        }

        worker_view = await client.get(f"{URL}/pending", headers=auth_header(worker_token))
        assert [a["worker_id"] for a in worker_view.json()] == [str(worker_user.id)]

    async def test_detail_hidden_from_other_workers(
        self, client: AsyncClient, worker_token, other_worker_token, template
    ):
        created = await _join(client, worker_token, template, days_ahead(6))
        res = await client.get(f"{URL}/{created.json()['id']}", headers=auth_header(other_worker_token))
        assert res.status_code == 403

    async def test_timing_preview(self, client: AsyncClient, worker_token):
        far = await client.get(
            f"{APP}/shift-timing", params={"date": days_ahead(6), "start_time": "08:00"},
            headers=auth_header(worker_token),
        )
        assert far.status_code == 200
        assert far.json()["auto_approve_worker_request"] is True
        assert far.json()["can_worker_edit_assignment"] is True

        near = await client.get(
            f"{APP}/shift-timing", params={"date": days_ahead(1), "start_time": "08:00"},
            headers=auth_header(worker_token),
        )
        assert near.json()["auto_approve_manager_assignment"] is False
        assert near.json()["can_worker_edit_assignment"] is False
        assert 0 < near.json()["hours_until"] < 48
