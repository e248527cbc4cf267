import uuid
from datetime import date

import pytest
from httpx import AsyncClient
from sqlalchemy import false, func, select
from sqlalchemy import update as sa_update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.academic_years import service as academic_year_service
from app.core.exceptions import Conflict
from app.core.models import AcademicYear

from conftest import login


def year_payload(start: int, is_current: bool = False, name: str = None) -> dict:
    return {
        "name": name or f"{start}-{start + 1}",
        "from_year": f"{start}-06-01",
        "to_year": f"{start + 1}-05-31",
        "is_current": is_current,
    }


async def current_count(db_session: AsyncSession) -> int:
    result = await db_session.execute(
        select(func.count()).select_from(AcademicYear).where(AcademicYear.is_current.is_(True))
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_create_academic_year(admin_client: AsyncClient) -> None:
    response = await admin_client.post("/api/academic-year/create", json=year_payload(2023))
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "2023-2024"
    assert data["from_year"] == "2023-06-01"
    assert data["is_current"] is False
    uuid.UUID(data["id"])


@pytest.mark.asyncio
async def test_create_duplicate_period_rejected(admin_client: AsyncClient) -> None:
    first = await admin_client.post("/api/academic-year/create", json=year_payload(2023))
    assert first.status_code == 201

    second = await admin_client.post("/api/academic-year/create", json=year_payload(2023, name="Other name"))
    assert second.status_code == 409
    assert second.json()["detail"] == "Academic year already exists"


@pytest.mark.asyncio
async def test_create_rejects_inverted_dates(admin_client: AsyncClient) -> None:
    payload = year_payload(2023)
    payload["to_year"] = "2022-01-01"
    response = await admin_client.post("/api/academic-year/create", json=payload)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_new_current_year_replaces_previous(admin_client: AsyncClient, db_session: AsyncSession) -> None:
    a = (await admin_client.post("/api/academic-year/create", json=year_payload(2023, is_current=True))).json()
    b = (await admin_client.post("/api/academic-year/create", json=year_payload(2024, is_current=True))).json()
    assert a["is_current"] is True
    assert b["is_current"] is True

    current = await admin_client.get("/api/academic-year/current")
    assert current.status_code == 200
    assert current.json()["id"] == b["id"]

    listing = (await admin_client.get("/api/academic-year")).json()
    by_id = {y["id"]: y for y in listing["years"]}
    assert by_id[a["id"]]["is_current"] is False
    assert by_id[b["id"]]["is_current"] is True
    assert await current_count(db_session) == 1


@pytest.mark.asyncio
async def test_get_current_is_public_and_404_without_current(client: AsyncClient) -> None:
    response = await client.get("/api/academic-year/current")
    assert response.status_code == 404
    assert response.json()["detail"] == "No current academic year found"


@pytest.mark.asyncio
async def test_update_to_current_clears_siblings(admin_client: AsyncClient, db_session: AsyncSession) -> None:
    a = (await admin_client.post("/api/academic-year/create", json=year_payload(2023, is_current=True))).json()
    b = (await admin_client.post("/api/academic-year/create", json=year_payload(2024))).json()

    response = await admin_client.patch(f"/api/academic-year/update/{b['id']}", json={"is_current": True})
    assert response.status_code == 200
    assert response.json()["is_current"] is True

    current = (await admin_client.get("/api/academic-year/current")).json()
    assert current["id"] == b["id"]
    assert current["id"] != a["id"]
    assert await current_count(db_session) == 1


@pytest.mark.asyncio
async def test_update_applies_only_given_fields(admin_client: AsyncClient) -> None:
    created = (await admin_client.post("/api/academic-year/create", json=year_payload(2023))).json()

    response = await admin_client.patch(f"/api/academic-year/update/{created['id']}", json={"name": "Renamed"})
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert data["from_year"] == created["from_year"]
    assert data["is_current"] is False


@pytest.mark.asyncio
async def test_update_unknown_id_leaves_current_year_alone(admin_client: AsyncClient) -> None:
    a = (await admin_client.post("/api/academic-year/create", json=year_payload(2023, is_current=True))).json()

    response = await admin_client.patch(f"/api/academic-year/update/{uuid.uuid4()}", json={"is_current": True})
    assert response.status_code == 404

    current = (await admin_client.get("/api/academic-year/current")).json()
    assert current["id"] == a["id"]


@pytest.mark.asyncio
async def test_update_requires_session(client: AsyncClient) -> None:
    response = await client.patch(f"/api/academic-year/update/{uuid.uuid4()}", json={"name": "x"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_delete_current_year_is_refused(admin_client: AsyncClient) -> None:
    a = (await admin_client.post("/api/academic-year/create", json=year_payload(2023, is_current=True))).json()

    response = await admin_client.delete(f"/api/academic-year/delete/{a['id']}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete current academic year"

    current = (await admin_client.get("/api/academic-year/current")).json()
    assert current["id"] == a["id"]
    assert current["is_current"] is True


@pytest.mark.asyncio
async def test_delete_academic_year(admin_client: AsyncClient) -> None:
    a = (await admin_client.post("/api/academic-year/create", json=year_payload(2023))).json()

    response = await admin_client.delete(f"/api/academic-year/delete/{a['id']}")
    assert response.status_code == 200
    assert response.json()["message"] == "Academic year deleted successfully"

    missing = await admin_client.delete(f"/api/academic-year/delete/{a['id']}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_list_is_paginated(admin_client: AsyncClient) -> None:
    for i in range(25):
        response = await admin_client.post("/api/academic-year/create", json=year_payload(2000 + i))
        assert response.status_code == 201

    response = await admin_client.get("/api/academic-year", params={"page": 2, "limit": 10})
    assert response.status_code == 200
    data = response.json()
    assert len(data["years"]) == 10
    assert data["pagination"] == {"page": 2, "pages": 3, "total": 25}
    names = [y["name"] for y in data["years"]]
    assert names == sorted(names)
    assert names[0] == "2010-2011"


@pytest.mark.asyncio
async def test_list_search_is_case_insensitive(admin_client: AsyncClient) -> None:
    await admin_client.post("/api/academic-year/create", json=year_payload(2023, name="Spring Term 2023"))
    await admin_client.post("/api/academic-year/create", json=year_payload(2024, name="Autumn 2024"))

    data = (await admin_client.get("/api/academic-year", params={"search": "spring"})).json()
    assert [y["name"] for y in data["years"]] == ["Spring Term 2023"]
    assert data["pagination"]["total"] == 1


@pytest.mark.asyncio
async def test_list_and_create_are_admin_only(client: AsyncClient, teacher) -> None:
    await login(client, teacher.email)

    listing = await client.get("/api/academic-year")
    assert listing.status_code == 401
    created = await client.post("/api/academic-year/create", json=year_payload(2023))
    assert created.status_code == 401
    assert created.json()["detail"] == "User role 'teacher' is not authorized to access this route"


@pytest.mark.asyncio
async def test_concurrent_current_year_is_rejected(
    admin_client: AsyncClient, db_session: AsyncSession, monkeypatch
) -> None:
    first = (await admin_client.post("/api/academic-year/create", json=year_payload(2023, is_current=True))).json()

    # Another writer marks its year current after the clear, so the clear matches nothing.
    monkeypatch.setattr(academic_year_service, "update", lambda model: sa_update(model).where(false()))
    response = await admin_client.post("/api/academic-year/create", json=year_payload(2024, is_current=True))

    assert response.status_code == 409
    assert response.json()["detail"] == academic_year_service.CURRENT_YEAR_RACE_MESSAGE
    assert await current_count(db_session) == 1
    current = (await admin_client.get("/api/academic-year/current")).json()
    assert current["id"] == first["id"]


@pytest.mark.asyncio
async def test_delete_losing_race_to_class_insert_is_a_conflict(db_session: AsyncSession, monkeypatch) -> None:
    ay = AcademicYear(name="2023-2024", from_year=date(2023, 6, 1), to_year=date(2024, 5, 31))
    db_session.add(ay)
    await db_session.commit()

    async def commit_violating_foreign_key() -> None:
        raise IntegrityError("DELETE FROM academic_years", {}, Exception("foreign key violation"))

    monkeypatch.setattr(db_session, "commit", commit_violating_foreign_key)
    with pytest.raises(Conflict) as exc_info:
        await academic_year_service.delete_academic_year(db_session, ay.id)
    assert exc_info.value.message == academic_year_service.YEAR_IN_USE_MESSAGE


@pytest.mark.asyncio
async def test_update_and_delete_are_audited_by_name(admin_client: AsyncClient) -> None:
    a = (await admin_client.post("/api/academic-year/create", json=year_payload(2023))).json()

    await admin_client.patch(f"/api/academic-year/update/{a['id']}", json={"name": "Year 23/24"})
    await admin_client.delete(f"/api/academic-year/delete/{a['id']}")

    logs = (await admin_client.get("/api/activities")).json()["logs"]
    actions = [log["action"] for log in logs]
    assert actions == [
        "Deleted academic year Year 23/24",
        "Updated academic year Year 23/24",
        "Created academic year 2023-2024",
    ]
