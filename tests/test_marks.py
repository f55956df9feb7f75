from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from academic_records.api.v1.enrollments import service as enrollment_service
from academic_records.api.v1.marks import service as marks_service
from academic_records.api.v1.marks.schemas import MarksUpdate
from academic_records.core.enums import PerformanceBand
from academic_records.core.exceptions import NotFoundError, ValidationError
from academic_records.core.models import Marks


@pytest.fixture()
async def enrollment_id(db_session: AsyncSession, make_student, make_subject) -> int:
    student = await make_student("Asha Rao")
    math = await make_subject("Mathematics", "MATH101")
    await enrollment_service.set_enrollments(db_session, student.id, [math.id])
    [enrollment] = await enrollment_service.list_enrollments(db_session, student_id=student.id)
    return enrollment.id


@pytest.mark.asyncio
async def test_save_marks_computes_total_and_percentage(db_session: AsyncSession, enrollment_id: int) -> None:
    saved = await marks_service.save_marks(db_session, enrollment_id, 45, 40, 80)
    assert saved.total_marks == 165
    assert saved.percentage == 82.5
    assert saved.performance_band == PerformanceBand.GOOD


@pytest.mark.asyncio
async def test_save_marks_twice_updates_in_place(db_session: AsyncSession, enrollment_id: int) -> None:
    first = await marks_service.save_marks(db_session, enrollment_id, 45, 40, 80)
    second = await marks_service.save_marks(db_session, enrollment_id, 10, 20, 30)

    assert second.id == first.id
    assert second.total_marks == 60
    assert second.percentage == 30
    assert second.updated_at >= first.updated_at

    count = await db_session.execute(
        select(func.count(Marks.id)).where(Marks.enrollment_id == enrollment_id)
    )
    assert count.scalar_one() == 1


@pytest.mark.asyncio
async def test_save_marks_out_of_range(db_session: AsyncSession, enrollment_id: int) -> None:
    with pytest.raises(ValidationError) as exc:
        await marks_service.save_marks(db_session, enrollment_id, 51, 40, 80)
    assert exc.value.fields == ["cat1"]
    assert await marks_service.list_marks(db_session) == []


@pytest.mark.asyncio
async def test_save_marks_unknown_enrollment(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await marks_service.save_marks(db_session, 999, 10, 10, 10)


@pytest.mark.asyncio
async def test_update_marks_keeps_stored_components(db_session: AsyncSession, enrollment_id: int) -> None:
    await marks_service.save_marks(db_session, enrollment_id, 45, 40, 80)
    updated = await marks_service.update_marks(db_session, enrollment_id, MarksUpdate(fat=Decimal("100")))
    assert (updated.cat1, updated.cat2, updated.fat) == (45, 40, 100)
    assert updated.total_marks == 185
    assert updated.percentage == 92.5


@pytest.mark.asyncio
async def test_update_marks_rejects_out_of_range_merge(db_session: AsyncSession, enrollment_id: int) -> None:
    await marks_service.save_marks(db_session, enrollment_id, 45, 40, 80)
    stored = await db_session.execute(select(Marks).where(Marks.enrollment_id == enrollment_id))
    row = stored.scalar_one()
    row.cat2 = Decimal("60")  # corrupt the stored value behind the service's back
    await db_session.commit()

    with pytest.raises(ValidationError) as exc:
        await marks_service.update_marks(db_session, enrollment_id, MarksUpdate(cat1=Decimal("10")))
    assert exc.value.fields == ["cat2"]


@pytest.mark.asyncio
async def test_update_marks_missing_row(db_session: AsyncSession, enrollment_id: int) -> None:
    with pytest.raises(NotFoundError):
        await marks_service.update_marks(db_session, enrollment_id, MarksUpdate(cat1=Decimal("10")))


@pytest.mark.asyncio
async def test_delete_marks_is_idempotent(db_session: AsyncSession, enrollment_id: int) -> None:
    await marks_service.save_marks(db_session, enrollment_id, 45, 40, 80)
    assert await marks_service.delete_marks(db_session, enrollment_id) is True
    assert await marks_service.delete_marks(db_session, enrollment_id) is False
    with pytest.raises(NotFoundError):
        await marks_service.get_marks(db_session, enrollment_id)


@pytest.mark.asyncio
async def test_stored_percentage_always_matches_components(db_session: AsyncSession, enrollment_id: int) -> None:
    await marks_service.save_marks(db_session, enrollment_id, Decimal("12.25"), Decimal("33.5"), Decimal("71.75"))
    await marks_service.update_marks(db_session, enrollment_id, MarksUpdate(cat2=Decimal("49.5")))
    row = (await db_session.execute(select(Marks).where(Marks.enrollment_id == enrollment_id))).scalar_one()
    total = Decimal(str(row.cat1)) + Decimal(str(row.cat2)) + Decimal(str(row.fat))
    assert Decimal(str(row.total_marks)) == total
    assert Decimal(str(row.percentage)) == (total / 200 * 100).quantize(Decimal("0.01"))


@pytest.mark.asyncio
async def test_list_marks_details(db_session: AsyncSession, enrollment_id: int) -> None:
    await marks_service.save_marks(db_session, enrollment_id, 45, 40, 80)
    [row] = await marks_service.list_marks(db_session)
    assert row.student_name == "Asha Rao"
    assert row.student_code == "STU001"
    assert row.subject_name == "Mathematics"
    assert row.subject_code == "MATH101"


@pytest.mark.asyncio
async def test_marks_api(client: AsyncClient, enrollment_id: int) -> None:
    response = await client.post(
        "/api/v1/marks",
        json={"enrollment_id": enrollment_id, "cat1": 45, "cat2": 40, "fat": 80},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["total_marks"] == 165
    assert data["percentage"] == 82.5

    response = await client.put(f"/api/v1/enrollments/{enrollment_id}/marks", json={"cat1": 50})
    assert response.status_code == 200
    assert response.json()["total_marks"] == 170

    response = await client.get(f"/api/v1/enrollments/{enrollment_id}/marks")
    assert response.status_code == 200
    assert response.json()["percentage"] == 85

    response = await client.get("/api/v1/marks")
    assert response.status_code == 200
    assert response.json()[0]["student_code"] == "STU001"

    response = await client.delete(f"/api/v1/enrollments/{enrollment_id}/marks")
    assert response.status_code == 204

    response = await client.get(f"/api/v1/enrollments/{enrollment_id}/marks")
    assert response.status_code == 404

    response = await client.delete(f"/api/v1/enrollments/{enrollment_id}/marks")
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_marks_api_rejects_out_of_range(client: AsyncClient, enrollment_id: int) -> None:
    response = await client.post(
        "/api/v1/marks",
        json={"enrollment_id": enrollment_id, "cat1": 51, "cat2": 40, "fat": 80},
    )
    assert response.status_code == 422

    response = await client.put(f"/api/v1/enrollments/{enrollment_id}/marks", json={"fat": 100})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_three_decimal_components_keep_total_consistent(db_session: AsyncSession, enrollment_id: int) -> None:
    await marks_service.save_marks(db_session, enrollment_id, Decimal("0.005"), Decimal("0.005"), Decimal("0.005"))
    row = (await db_session.execute(select(Marks).where(Marks.enrollment_id == enrollment_id))).scalar_one()
    total = Decimal(str(row.cat1)) + Decimal(str(row.cat2)) + Decimal(str(row.fat))
    assert total == Decimal("0.03")
    assert Decimal(str(row.total_marks)) == total


@pytest.mark.asyncio
async def test_save_marks_malformed_component(db_session: AsyncSession, enrollment_id: int) -> None:
    with pytest.raises(ValidationError) as exc:
        await marks_service.save_marks(db_session, enrollment_id, 10, "abc", Decimal("NaN"))
    assert exc.value.fields == ["cat2", "fat"]
    assert await marks_service.list_marks(db_session) == []


@pytest.mark.asyncio
async def test_marks_api_rounds_components(client: AsyncClient, enrollment_id: int) -> None:
    response = await client.post(
        "/api/v1/marks",
        json={"enrollment_id": enrollment_id, "cat1": 0.005, "cat2": 0.005, "fat": 0.005},
    )
    assert response.status_code == 201

    response = await client.get(f"/api/v1/enrollments/{enrollment_id}/marks")
    data = response.json()
    assert [data["cat1"], data["cat2"], data["fat"]] == [0.01, 0.01, 0.01]
    assert data["total_marks"] == 0.03
