"""Tests for the attendance state machine (service layer, explicit clock)."""

from datetime import date, datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (AlreadyCheckedIn, AlreadyCheckedOut,
                                 AlreadyOnBreak, BreakAlreadyTaken,
                                 ConcurrentModification, NotCheckedIn,
                                 NotOnBreak, OnBreak)
from app.models.attendance import (STATUS_ON_BREAK, STATUS_PRESENT,
                                   STATUS_WORKING)
from app.schemas.attendance import AttendanceUpsert
from app.services import attendance as attendance_service

UTC = timezone.utc
DAY = date(2024, 3, 4)
NINE = datetime(2024, 3, 4, 9, 0, tzinfo=UTC)
NOON = datetime(2024, 3, 4, 12, 0, tzinfo=UTC)
HALF_TWELVE = datetime(2024, 3, 4, 12, 30, tzinfo=UTC)
FIVE = datetime(2024, 3, 4, 17, 0, tzinfo=UTC)
NEXT_MORNING = datetime(2024, 3, 5, 9, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_full_day_sequence(db_session, employee):
    record = await attendance_service.check_in(db_session, employee.id, NINE)
    assert record.status == STATUS_WORKING
    assert record.attendance_date == DAY

    record = await attendance_service.break_in(db_session, employee.id, NOON)
    assert record.status == STATUS_ON_BREAK

    record = await attendance_service.break_out(db_session, employee.id, HALF_TWELVE)
    assert record.status == STATUS_WORKING

    record = await attendance_service.check_out(db_session, employee.id, FIVE)
    assert record.status == STATUS_PRESENT
    assert record.working_minutes == 450


@pytest.mark.asyncio
async def test_check_out_without_break(db_session, employee):
    await attendance_service.check_in(db_session, employee.id, NINE)
    record = await attendance_service.check_out(db_session, employee.id, FIVE)
    assert record.status == STATUS_PRESENT
    assert record.working_minutes == 480


@pytest.mark.asyncio
async def test_duplicate_check_in_is_rejected(db_session, employee):
    await attendance_service.check_in(db_session, employee.id, NINE)
    with pytest.raises(AlreadyCheckedIn):
        await attendance_service.check_in(db_session, employee.id, NOON)

    record = await attendance_service.get_day_record(db_session, employee.id, DAY)
    assert record.check_in is not None
    assert record.check_in.hour == 9


@pytest.mark.asyncio
async def test_check_in_after_check_out_is_rejected(db_session, employee):
    await attendance_service.check_in(db_session, employee.id, NINE)
    await attendance_service.check_out(db_session, employee.id, FIVE)
    with pytest.raises(AlreadyCheckedIn):
        await attendance_service.check_in(db_session, employee.id, FIVE)


@pytest.mark.asyncio
async def test_new_day_starts_a_new_record(db_session, employee):
    await attendance_service.check_in(db_session, employee.id, NINE)
    await attendance_service.check_out(db_session, employee.id, FIVE)

    record = await attendance_service.check_in(db_session, employee.id, NEXT_MORNING)
    assert record.attendance_date == date(2024, 3, 5)
    assert record.status == STATUS_WORKING


@pytest.mark.asyncio
async def test_transitions_before_check_in_are_rejected(db_session, employee):
    with pytest.raises(NotCheckedIn):
        await attendance_service.break_in(db_session, employee.id, NOON)
    with pytest.raises(NotCheckedIn):
        await attendance_service.break_out(db_session, employee.id, NOON)
    with pytest.raises(NotCheckedIn):
        await attendance_service.check_out(db_session, employee.id, FIVE)

    assert await attendance_service.get_day_record(db_session, employee.id, DAY) is None


@pytest.mark.asyncio
async def test_break_twice_is_rejected(db_session, employee):
    await attendance_service.check_in(db_session, employee.id, NINE)
    await attendance_service.break_in(db_session, employee.id, NOON)
    with pytest.raises(AlreadyOnBreak):
        await attendance_service.break_in(db_session, employee.id, NOON)

    await attendance_service.break_out(db_session, employee.id, HALF_TWELVE)
    with pytest.raises(BreakAlreadyTaken):
        await attendance_service.break_in(db_session, employee.id, FIVE)

    record = await attendance_service.get_day_record(db_session, employee.id, DAY)
    assert record.break_start.hour == 12 and record.break_start.minute == 0
    assert record.break_end.minute == 30


@pytest.mark.asyncio
async def test_break_out_without_break_leaves_record_unchanged(db_session, employee):
    await attendance_service.check_in(db_session, employee.id, NINE)
    with pytest.raises(NotOnBreak):
        await attendance_service.break_out(db_session, employee.id, NOON)

    record = await attendance_service.get_day_record(db_session, employee.id, DAY)
    assert record.break_start is None
    assert record.break_end is None
    assert record.status == STATUS_WORKING


@pytest.mark.asyncio
async def test_check_out_on_break_is_rejected(db_session, employee):
    await attendance_service.check_in(db_session, employee.id, NINE)
    await attendance_service.break_in(db_session, employee.id, NOON)
    with pytest.raises(OnBreak):
        await attendance_service.check_out(db_session, employee.id, FIVE)

    record = await attendance_service.get_day_record(db_session, employee.id, DAY)
    assert record.check_out is None
    assert record.status == STATUS_ON_BREAK


@pytest.mark.asyncio
async def test_second_check_out_is_rejected(db_session, employee):
    await attendance_service.check_in(db_session, employee.id, NINE)
    await attendance_service.check_out(db_session, employee.id, FIVE)
    with pytest.raises(AlreadyCheckedOut):
        await attendance_service.check_out(db_session, employee.id, FIVE)


@pytest.mark.asyncio
async def test_break_after_check_out_is_rejected(db_session, employee):
    await attendance_service.check_in(db_session, employee.id, NINE)
    await attendance_service.check_out(db_session, employee.id, FIVE)
    with pytest.raises(NotCheckedIn):
        await attendance_service.break_in(db_session, employee.id, FIVE)


@pytest.mark.asyncio
async def test_racing_first_check_in_maps_to_already_checked_in(db_session, employee, monkeypatch):
    await attendance_service.check_in(db_session, employee.id, NINE)

    # The losing request read "no record yet" before the winner committed
    async def _nothing_yet(*_args):
        return None

    monkeypatch.setattr(attendance_service, "get_day_record", _nothing_yet)
    with pytest.raises(AlreadyCheckedIn):
        await attendance_service.check_in(db_session, employee.id, NOON)


@pytest.mark.asyncio
async def test_lost_update_is_reported_as_concurrent_modification(db_session, employee):
    await attendance_service.check_in(db_session, employee.id, NINE)

    async with AsyncSession(db_session.bind, expire_on_commit=False) as other:
        # Load a copy that will go stale
        stale = await attendance_service.get_day_record(other, employee.id, DAY)  # noqa: F841 (keep alive in identity map)

        await attendance_service.break_in(db_session, employee.id, NOON)

        with pytest.raises(ConcurrentModification):
            await attendance_service.break_in(other, employee.id, HALF_TWELVE)


@pytest.mark.asyncio
async def test_upsert_creates_and_overwrites(db_session, employee):
    body = AttendanceUpsert(
        employee_id=employee.id,
        attendance_date=DAY,
        check_in=NINE,
        check_out=FIVE,
        break_start=NOON,
        break_end=HALF_TWELVE,
    )
    record = await attendance_service.upsert_attendance(db_session, body)
    assert record.status == STATUS_PRESENT
    assert record.working_minutes == 450

    record = await attendance_service.upsert_attendance(
        db_session,
        AttendanceUpsert(employee_id=employee.id, attendance_date=DAY, check_in=NINE),
    )
    assert record.status == STATUS_WORKING
    assert record.check_out is None
    assert record.working_minutes == 0


@pytest.mark.asyncio
async def test_list_attendance_newest_first(db_session, employee):
    await attendance_service.check_in(db_session, employee.id, NINE)
    await attendance_service.check_in(db_session, employee.id, NEXT_MORNING)

    records = await attendance_service.list_attendance(db_session, employee.id)
    assert [r.attendance_date for r in records] == [date(2024, 3, 5), DAY]

    only_day = await attendance_service.list_attendance(db_session, day=DAY)
    assert len(only_day) == 1

    limited = await attendance_service.list_attendance(db_session, employee.id, limit=1)
    assert len(limited) == 1
