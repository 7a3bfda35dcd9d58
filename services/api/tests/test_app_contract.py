from sqlalchemy import Column, MetaData, String, Table
from sqlalchemy.dialects import sqlite

from portal_api.utils.listing import build_meta, fixed_order, normalize_pagination, resolve_sort


def test_health_is_public(api_client):
    response = api_client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["code"] == "OPERATION_SUCCESSFUL"
    assert body["message"] == "Service is healthy"
    assert body["data"] == {"status": "ok", "version": "1.0.0"}


def test_readiness_checks_database(api_client):
    response = api_client.get("/health/ready")

    assert response.status_code == 200
    assert response.json()["message"] == "Service is ready"


def test_request_id_is_echoed(api_client):
    response = api_client.get("/health", headers={"X-Request-Id": "req-123"})

    assert response.headers["X-Request-Id"] == "req-123"
    assert api_client.get("/health").headers["X-Request-Id"]


def test_unknown_route_uses_error_envelope(api_client):
    response = api_client.get("/no-such-route")

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"
    assert response.json()["details"] == []


def test_non_json_content_type_is_rejected(api_client):
    response = api_client.post(
        "/auth/login",
        content="email=a@x&password=password123",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    assert response.status_code == 415
    assert response.json()["message"] == "Content-Type must be application/json"


def test_malformed_json_is_bad_request(api_client):
    response = api_client.post(
        "/auth/login",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "BAD_REQUEST"
    assert response.json()["message"] == "Invalid request body"


def test_field_errors_are_reported_per_field(api_client):
    response = api_client.post("/auth/login", json={"email": "not-an-email"})

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "VALIDATION_FAILED"
    assert body["message"] == "Validation failed"
    assert {"field": "email", "message": "email must be a valid email"} in body["details"]
    assert {"field": "password", "message": "password is required"} in body["details"]


def test_cors_preflight_is_allowed(api_client):
    response = api_client.options(
        "/datasets",
        headers={
            "Origin": "https://portal.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-max-age"] == "86400"


def test_normalize_pagination_bounds():
    assert normalize_pagination(None, None).limit == 20
    assert normalize_pagination(-3, 0).page == 1
    assert normalize_pagination(2, 500).limit == 100
    assert normalize_pagination(2, 5000, max_limit=1000).limit == 1000
    assert normalize_pagination(3, 10).offset == 20


def test_meta_total_pages():
    pagination = normalize_pagination(1, 10)

    assert build_meta(pagination, 0)["total_pages"] == 0
    assert build_meta(pagination, 1)["total_pages"] == 1
    assert build_meta(pagination, 10)["total_pages"] == 1
    assert build_meta(pagination, 11)["total_pages"] == 2


def test_sort_column_always_comes_from_whitelist():
    table = Table("items", MetaData(), Column("id", String), Column("name", String), Column("created_at", String))
    whitelist = {"name": table.c.name, "created_at": table.c.created_at}

    def render(sort_by, sort_order):
        clauses = resolve_sort(sort_by, sort_order, whitelist, tiebreaker=table.c.id)
        return [str(clause.compile(dialect=sqlite.dialect())) for clause in clauses]

    for hostile in ("name; DROP TABLE items", "1=1", "", None, "NAME", "password", "id"):
        assert render(hostile, "DESC") == ["items.created_at DESC", "items.id DESC"]

    assert render("name", "asc") == ["items.name ASC", "items.id ASC"]


def test_fixed_order_ignores_direction():
    table = Table("rows", MetaData(), Column("id", String), Column("row_index", String))

    rendered = [str(clause.compile(dialect=sqlite.dialect())) for clause in fixed_order(table.c.row_index, table.c.id)]

    assert rendered == ["rows.row_index ASC", "rows.id ASC"]
