"""Tests for leave requests and task assignment."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.employee import Employee
from app.models.notification import (RECIPIENT_ADMIN, RECIPIENT_EMPLOYEE,
                                     Notification)
from app.models.task import Task

LEAVE = {
    "from_date": "2024-03-11",
    "to_date": "2024-03-12",
    "leave_type": "Sick Leave",
    "reason": "Flu",
}


# ── Leaves ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_apply_leave_is_pending_and_notifies_admins(
    async_client: AsyncClient, login_as, admin, employee_user, db_session
):
    login_as(employee_user)
    resp = await async_client.post("/api/v1/employee/leaves", json=LEAVE)
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "Pending"
    assert data["employee_id"] == employee_user.employee_id

    result = await db_session.execute(
        select(Notification).where(Notification.recipient_kind == RECIPIENT_ADMIN)
    )
    notes = list(result.scalars().all())
    assert len(notes) == 1
    assert notes[0].type == "leave"
    assert notes[0].related_id == data["id"]


@pytest.mark.asyncio
async def test_leave_validation(async_client: AsyncClient, login_as, employee_user):
    login_as(employee_user)
    resp = await async_client.post(
        "/api/v1/employee/leaves", json={**LEAVE, "from_date": "2024-03-12", "to_date": "2024-03-11"}
    )
    assert resp.status_code == 422

    resp = await async_client.post("/api/v1/employee/leaves", json={**LEAVE, "leave_type": "Vacation"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_review_leave_notifies_employee(
    async_client: AsyncClient, login_as, admin, employee_user, db_session
):
    login_as(employee_user)
    leave_id = (await async_client.post("/api/v1/employee/leaves", json=LEAVE)).json()["id"]

    login_as(admin)
    resp = await async_client.patch(f"/api/v1/admin/leaves/{leave_id}", json={"status": "Approved"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "Approved"

    result = await db_session.execute(
        select(Notification).where(Notification.recipient_kind == RECIPIENT_EMPLOYEE)
    )
    notes = list(result.scalars().all())
    assert len(notes) == 1
    assert notes[0].recipient_id == employee_user.employee_id
    assert "approved" in notes[0].message

    resp = await async_client.patch(f"/api/v1/admin/leaves/{leave_id}", json={"status": "Rejected"})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_review_leave_validation(async_client: AsyncClient, login_as, admin):
    login_as(admin)
    resp = await async_client.patch("/api/v1/admin/leaves/999", json={"status": "Approved"})
    assert resp.status_code == 404

    resp = await async_client.patch("/api/v1/admin/leaves/999", json={"status": "Maybe"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_leaves(async_client: AsyncClient, login_as, admin, employee_user):
    login_as(employee_user)
    await async_client.post("/api/v1/employee/leaves", json=LEAVE)
    mine = await async_client.get("/api/v1/employee/leaves")
    assert len(mine.json()) == 1

    login_as(admin)
    pending = await async_client.get("/api/v1/admin/leaves", params={"status": "Pending"})
    assert len(pending.json()) == 1
    approved = await async_client.get("/api/v1/admin/leaves", params={"status": "Approved"})
    assert approved.json() == []


# ── Tasks ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_assign_task_notifies_employee(
    async_client: AsyncClient, login_as, admin, employee, db_session
):
    login_as(admin)
    resp = await async_client.post(
        "/api/v1/admin/tasks",
        json={"employee_id": employee.id, "project_id": 7, "description": "Write the release notes"},
    )
    assert resp.status_code == 201
    assert resp.json()["status"] == "Not Started"

    result = await db_session.execute(select(Notification))
    notes = list(result.scalars().all())
    assert len(notes) == 1
    assert notes[0].recipient_kind == RECIPIENT_EMPLOYEE
    assert notes[0].recipient_id == employee.id
    assert notes[0].type == "project"
    assert notes[0].related_id == 7


@pytest.mark.asyncio
async def test_assign_task_to_unknown_employee(async_client: AsyncClient, login_as, admin):
    login_as(admin)
    resp = await async_client.post(
        "/api/v1/admin/tasks",
        json={"employee_id": 999, "project_id": 1, "description": "Nobody"},
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_employee_updates_own_task(async_client: AsyncClient, login_as, employee_user, db_session):
    task = Task(employee_id=employee_user.employee_id, project_id=1, description="Fix login")
    db_session.add(task)
    await db_session.commit()

    login_as(employee_user)
    mine = await async_client.get("/api/v1/employee/tasks")
    assert [t["id"] for t in mine.json()] == [task.id]

    resp = await async_client.patch(f"/api/v1/employee/tasks/{task.id}/status", json={"status": "Completed"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "Completed"

    resp = await async_client.patch(f"/api/v1/employee/tasks/{task.id}/status", json={"status": "Done"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_employee_cannot_touch_other_tasks(async_client: AsyncClient, login_as, employee_user, db_session):
    other = Employee(name="John Roe", is_active=True)
    db_session.add(other)
    await db_session.flush()
    task = Task(employee_id=other.id, project_id=1, description="Not yours")
    db_session.add(task)
    await db_session.commit()

    login_as(employee_user)
    resp = await async_client.patch(f"/api/v1/employee/tasks/{task.id}/status", json={"status": "Completed"})
    assert resp.status_code == 404


# ── Employee registry ───────────────────────────────────────────────
@pytest.mark.asyncio
async def test_register_employee_creates_login(async_client: AsyncClient, login_as, admin):
    login_as(admin)
    payload = {
        "name": "Sam Poe",
        "email": "Sam@Example.com",
        "password": "long-enough-1",
        "department": "Sales",
        "position": "Lead",
    }
    resp = await async_client.post("/api/v1/admin/employees", json=payload)
    assert resp.status_code == 201
    data = resp.json()
    assert data["email"] == "sam@example.com"

    resp = await async_client.post("/api/v1/admin/employees", json=payload)
    assert resp.status_code == 400

    resp = await async_client.get(f"/api/v1/admin/employees/{data['id']}")
    assert resp.status_code == 200
    listing = await async_client.get("/api/v1/admin/employees")
    assert [e["name"] for e in listing.json()] == ["Sam Poe"]
