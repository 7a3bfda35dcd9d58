from datetime import datetime, timedelta, timezone

import pytest

from portal_api.api import organizations as organizations_api
from portal_api.core.errors import NotFoundError
from portal_api.models.catalog import Tag
from portal_api.models.organization import Organization
from portal_api.services.organizations import (
    decrement_dataset_count,
    decrement_public_dataset_count,
    increment_dataset_count,
    increment_public_dataset_count,
)


def _create_org(api_client, headers, code="bps", name="Badan Pusat Statistik") -> dict:
    response = api_client.post("/organizations", json={"code": code, "name": name}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_organization_uppercases_code_and_derives_slug(api_client, auth_headers):
    data = _create_org(api_client, auth_headers, code=" bps ")

    assert data["code"] == "BPS"
    assert data["slug"] == "badan-pusat-statistik"
    assert data["status"] == "active"
    assert (data["total_datasets"], data["public_datasets"]) == (0, 0)


def test_duplicate_organization_code_conflicts_case_insensitively(api_client, auth_headers):
    _create_org(api_client, auth_headers, code="BPS")

    response = api_client.post("/organizations", json={"code": "bps", "name": "Lain"}, headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["message"] == "Organization code already exists"


def test_concurrent_duplicate_code_maps_to_conflict(api_client, auth_headers, monkeypatch, db):
    _create_org(api_client, auth_headers, code="BPS")
    monkeypatch.setattr(organizations_api, "_code_taken", lambda db, code: False)

    response = api_client.post("/organizations", json={"code": "bps", "name": "Lain"}, headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"
    assert response.json()["message"] == "Organization code already exists"
    assert db.query(Organization).count() == 1


def test_lookup_by_code_ignores_case(api_client, auth_headers):
    created = _create_org(api_client, auth_headers)

    response = api_client.get("/organizations/code/bps")

    assert response.status_code == 200
    assert response.json()["data"]["id"] == created["id"]
    assert api_client.get("/organizations/code/NOPE").status_code == 404


def test_update_and_status_change(api_client, auth_headers):
    created = _create_org(api_client, auth_headers)

    updated = api_client.put(
        f"/organizations/{created['id']}",
        json={"name": "Dinas Kesehatan", "email": "  "},
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["code"] == "RESOURCE_UPDATED"
    assert updated.json()["data"]["slug"] == "dinas-kesehatan"
    assert updated.json()["data"]["email"] is None

    suspended = api_client.patch(
        f"/organizations/{created['id']}/status", json={"status": "suspended"}, headers=auth_headers
    )
    assert suspended.json()["data"]["status"] == "suspended"

    filtered = api_client.get("/organizations", params={"status": "suspended"}).json()
    assert [item["id"] for item in filtered["data"]] == [created["id"]]


def test_delete_organization(api_client, auth_headers):
    created = _create_org(api_client, auth_headers)

    assert api_client.delete(f"/organizations/{created['id']}", headers=auth_headers).status_code == 200
    assert api_client.get(f"/organizations/{created['id']}").status_code == 404


def test_organization_writes_require_authentication(api_client):
    assert api_client.post("/organizations", json={"code": "BPS", "name": "Badan"}).status_code == 401


@pytest.fixture
def empty_org(db) -> Organization:
    org = Organization(code="EMPTY", name="Empty", slug="empty")
    db.add(org)
    db.commit()
    return org


def test_counters_never_drop_below_zero(db, empty_org):
    decrement_dataset_count(db, empty_org.id, is_public=True)
    decrement_public_dataset_count(db, empty_org.id)
    db.commit()

    db.expire_all()
    org = db.get(Organization, empty_org.id)
    assert (org.total_datasets, org.public_datasets) == (0, 0)


def test_public_counter_never_exceeds_total(db, empty_org):
    increment_dataset_count(db, empty_org.id, is_public=False)
    increment_public_dataset_count(db, empty_org.id)
    increment_public_dataset_count(db, empty_org.id)
    db.commit()

    db.expire_all()
    org = db.get(Organization, empty_org.id)
    assert (org.total_datasets, org.public_datasets) == (1, 1)


def test_counter_update_for_unknown_organization_fails(db):
    with pytest.raises(NotFoundError):
        increment_dataset_count(db, "missing", is_public=False)


@pytest.mark.parametrize("prefix", ["/tags", "/topics", "/business-fields"])
def test_named_catalog_items_crud(api_client, auth_headers, prefix):
    created = api_client.post(prefix, json={"name": "Kependudukan Daerah"}, headers=auth_headers)
    assert created.status_code == 201
    item = created.json()["data"]
    assert item["slug"] == "kependudukan-daerah"

    renamed = api_client.put(f"{prefix}/{item['id']}", json={"name": "Ekonomi"}, headers=auth_headers)
    assert renamed.json()["data"]["slug"] == "ekonomi"

    assert api_client.get(f"{prefix}/{item['id']}").json()["data"]["name"] == "Ekonomi"
    assert api_client.delete(f"{prefix}/{item['id']}", headers=auth_headers).status_code == 200
    assert api_client.get(f"{prefix}/{item['id']}").status_code == 404


def test_catalog_lists_sort_by_name_ascending(api_client, auth_headers):
    for name in ("Sosial", "Ekonomi", "Kesehatan"):
        api_client.post("/tags", json={"name": name}, headers=auth_headers)

    names = [item["name"] for item in api_client.get("/tags").json()["data"]]

    assert names == ["Ekonomi", "Kesehatan", "Sosial"]


def test_catalog_order_ignores_sort_parameters(api_client, db):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for offset, name in enumerate(("Zeta", "Alpha", "Mid")):
        db.add(Tag(name=name, slug=name.lower(), created_at=base + timedelta(days=offset)))
    db.commit()

    for params in ({}, {"sort_by": "nope"}, {"sort_by": "created_at"}, {"sort_by": "id", "sort_order": "DESC"}):
        names = [item["name"] for item in api_client.get("/tags", params=params).json()["data"]]
        assert names == ["Alpha", "Mid", "Zeta"]


def test_catalog_writes_require_authentication(api_client):
    assert api_client.post("/tags", json={"name": "Ekonomi"}).status_code == 401
    assert api_client.post("/units", json={"name": "Kilogram", "symbol": "kg"}).status_code == 401


def test_units_crud(api_client, auth_headers):
    created = api_client.post("/units", json={"name": "Kilogram", "symbol": "kg"}, headers=auth_headers)
    assert created.status_code == 201
    unit_id = created.json()["data"]["id"]

    found = api_client.get("/units", params={"search": "kg"}).json()
    assert [item["id"] for item in found["data"]] == [unit_id]

    updated = api_client.put(f"/units/{unit_id}", json={"name": "Gram", "symbol": "g"}, headers=auth_headers)
    assert updated.json()["data"]["symbol"] == "g"

    assert api_client.delete(f"/units/{unit_id}", headers=auth_headers).status_code == 200
    assert api_client.get(f"/units/{unit_id}").json()["message"] == "Unit not found"


def test_users_are_listed_updated_and_soft_deleted(api_client, auth_headers, create_user):
    other = create_user(email="b@x", username="bob")

    listed = api_client.get("/users", params={"search": "bob"}, headers=auth_headers).json()
    assert [item["id"] for item in listed["data"]] == [other.id]
    assert "password_hash" not in listed["data"][0]

    updated = api_client.put(f"/users/{other.id}", json={"name": "Bob Builder", "phone": ""}, headers=auth_headers)
    assert updated.status_code == 200
    assert updated.json()["data"]["name"] == "Bob Builder"
    assert updated.json()["data"]["phone"] is None

    assert api_client.delete(f"/users/{other.id}", headers=auth_headers).status_code == 200
    assert api_client.get(f"/users/{other.id}", headers=auth_headers).status_code == 404

    reused = api_client.post(
        "/auth/register",
        json={
            "organization_id": "O1",
            "role_id": "R1",
            "name": "Bob Again",
            "username": "bob",
            "email": "b@x",
            "password": "password123",
        },
    )
    assert reused.status_code == 201


def test_user_status_update(api_client, auth_headers, create_user):
    other = create_user(email="b@x", username="bob")

    response = api_client.patch(f"/users/{other.id}/status", json={"status": "inactive"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "inactive"


def test_users_require_authentication(api_client):
    assert api_client.get("/users").status_code == 401
