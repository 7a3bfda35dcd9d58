from datetime import datetime, timedelta, timezone

from portal_api.models.engagement import Notification
from portal_api.services.notifications import cleanup_read_notifications


def _notify(api_client, headers, user_id: str, title: str = "Dataset baru") -> dict:
    response = api_client.post(
        "/notifications",
        json={"user_id": user_id, "title": title, "message": "Ada dataset baru.", "type": "info", "category": "dataset"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def _unread(api_client, headers) -> int:
    return api_client.get("/notifications/unread-count", headers=headers).json()["data"]["unread_count"]


def test_notifications_are_scoped_to_caller(api_client, auth_headers, seed_user):
    mine = _notify(api_client, auth_headers, seed_user.id)
    other = _notify(api_client, auth_headers, "someone-else")

    listed = api_client.get("/notifications", headers=auth_headers).json()
    assert [item["id"] for item in listed["data"]] == [mine["id"]]
    assert api_client.get(f"/notifications/{other['id']}", headers=auth_headers).status_code == 404
    assert api_client.delete(f"/notifications/{other['id']}", headers=auth_headers).status_code == 404


def test_mark_read_and_unread_count(api_client, auth_headers, seed_user):
    first = _notify(api_client, auth_headers, seed_user.id, title="Satu")
    _notify(api_client, auth_headers, seed_user.id, title="Dua")
    foreign = _notify(api_client, auth_headers, "someone-else")
    assert _unread(api_client, auth_headers) == 2

    marked = api_client.post(
        "/notifications/mark-read",
        json={"notification_ids": [first["id"], foreign["id"]]},
        headers=auth_headers,
    )
    assert marked.json()["code"] == "RESOURCE_UPDATED"
    assert marked.json()["data"] == {"affected": 1}
    assert _unread(api_client, auth_headers) == 1

    read_only = api_client.get("/notifications", params={"is_read": "true"}, headers=auth_headers).json()
    assert [item["id"] for item in read_only["data"]] == [first["id"]]

    everything = api_client.post("/notifications/mark-all-read", headers=auth_headers)
    assert everything.json()["data"] == {"affected": 1}
    assert _unread(api_client, auth_headers) == 0


def test_bulk_notifications_skip_duplicate_recipients(api_client, auth_headers, seed_user):
    response = api_client.post(
        "/notifications/bulk",
        json={
            "user_ids": [seed_user.id, seed_user.id, "u-2"],
            "title": "Pemeliharaan",
            "message": "Sistem akan dipelihara malam ini.",
            "type": "warning",
            "category": "system",
        },
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert response.json()["data"] == {"affected": 2}
    assert _unread(api_client, auth_headers) == 1


def test_deleted_notification_is_hidden(api_client, auth_headers, seed_user):
    notification = _notify(api_client, auth_headers, seed_user.id)

    assert api_client.delete(f"/notifications/{notification['id']}", headers=auth_headers).status_code == 200
    assert api_client.get(f"/notifications/{notification['id']}", headers=auth_headers).status_code == 404
    assert _unread(api_client, auth_headers) == 0


def test_cleanup_removes_only_old_read_notifications(db):
    now = datetime.now(timezone.utc)
    common = {"user_id": "u-1", "title": "t", "message": "m", "type": "info", "category": "system"}
    db.add_all(
        [
            Notification(read=True, read_at=now - timedelta(days=60), **common),
            Notification(read=True, read_at=now - timedelta(days=1), **common),
            Notification(read=False, **common),
        ]
    )
    db.commit()

    removed = cleanup_read_notifications(db, timedelta(days=30))

    assert removed == 1
    assert db.query(Notification).count() == 2


def test_notifications_require_authentication(api_client):
    assert api_client.get("/notifications").status_code == 401


def _ticket_body(**extra) -> dict:
    body = {"title": "Data tidak lengkap", "description": "Kolom tahun 2023 kosong.", "category": "data_request"}
    body.update(extra)
    return body


def test_ticket_lifecycle(api_client, auth_headers, seed_user):
    created = api_client.post("/tickets", json=_ticket_body(), headers=auth_headers)
    assert created.status_code == 201
    ticket = created.json()["data"]
    assert ticket["status"] == "open"
    assert ticket["priority"] == "medium"
    assert ticket["user_id"] == seed_user.id

    assigned = api_client.patch(f"/tickets/{ticket['id']}/assign", json={"assigned_to": "staff-1"}, headers=auth_headers)
    assert assigned.json()["data"]["assigned_to"] == "staff-1"

    in_progress = api_client.patch(
        f"/tickets/{ticket['id']}/status", json={"status": "in_progress"}, headers=auth_headers
    )
    assert in_progress.json()["data"]["resolved_at"] is None

    resolved = api_client.patch(f"/tickets/{ticket['id']}/status", json={"status": "resolved"}, headers=auth_headers)
    assert resolved.json()["data"]["status"] == "resolved"
    assert resolved.json()["data"]["resolved_at"] is not None

    listed = api_client.get("/tickets", params={"assigned_to": "staff-1"}, headers=auth_headers).json()
    assert [item["id"] for item in listed["data"]] == [ticket["id"]]

    assert api_client.delete(f"/tickets/{ticket['id']}", headers=auth_headers).status_code == 200
    assert api_client.get(f"/tickets/{ticket['id']}", headers=auth_headers).json()["message"] == "Ticket not found"


def test_ticket_update_and_validation(api_client, auth_headers):
    ticket = api_client.post("/tickets", json=_ticket_body(), headers=auth_headers).json()["data"]

    updated = api_client.put(
        f"/tickets/{ticket['id']}",
        json=_ticket_body(title="Data tahun 2023 hilang", priority="urgent", category="technical"),
        headers=auth_headers,
    )
    assert updated.json()["data"]["priority"] == "urgent"

    invalid = api_client.post("/tickets", json=_ticket_body(priority="critical"), headers=auth_headers)
    assert invalid.status_code == 422


def _setting_body(key: str = "site.title", value: str = "Portal Data", **extra) -> dict:
    body = {"key": key, "value": value, "type": "string", "category": "system"}
    body.update(extra)
    return body


def test_setting_key_is_unique_per_scope(api_client, auth_headers):
    assert api_client.post("/settings", json=_setting_body(), headers=auth_headers).status_code == 201

    duplicate = api_client.post("/settings", json=_setting_body(value="Lain"), headers=auth_headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["message"] == "Setting key already exists"

    personal = api_client.post(
        "/settings", json=_setting_body(value="Portal Saya", user_id="u-1", category="user"), headers=auth_headers
    )
    assert personal.status_code == 201


def test_settings_by_keys_prefer_user_values(api_client, auth_headers):
    api_client.post("/settings", json=_setting_body(), headers=auth_headers)
    api_client.post("/settings", json=_setting_body(key="site.lang", value="id"), headers=auth_headers)
    api_client.post(
        "/settings", json=_setting_body(value="Portal Saya", user_id="u-1", category="user"), headers=auth_headers
    )

    global_values = api_client.get("/settings/keys", params={"keys": "site.title,site.lang"}, headers=auth_headers)
    assert global_values.json()["data"] == {"site.title": "Portal Data", "site.lang": "id"}

    user_values = api_client.get(
        "/settings/keys", params={"keys": "site.title, site.lang", "user_id": "u-1"}, headers=auth_headers
    )
    assert user_values.json()["data"] == {"site.title": "Portal Saya", "site.lang": "id"}

    missing = api_client.get("/settings/keys", params={"keys": " , "}, headers=auth_headers)
    assert missing.status_code == 400
    assert missing.json()["message"] == "Keys parameter is required"


def test_setting_lookup_update_and_delete(api_client, auth_headers):
    setting = api_client.post("/settings", json=_setting_body(), headers=auth_headers).json()["data"]

    by_key = api_client.get("/settings/key/site.title", headers=auth_headers)
    assert by_key.json()["data"]["id"] == setting["id"]

    by_category = api_client.get("/settings/category/system", headers=auth_headers).json()
    assert [item["key"] for item in by_category["data"]] == ["site.title"]

    updated = api_client.put(
        f"/settings/{setting['id']}", json={"value": "Portal Baru", "type": "string"}, headers=auth_headers
    )
    assert updated.json()["data"]["value"] == "Portal Baru"

    assert api_client.delete(f"/settings/{setting['id']}", headers=auth_headers).status_code == 200
    assert api_client.get("/settings/key/site.title", headers=auth_headers).status_code == 404
    assert api_client.post("/settings", json=_setting_body(), headers=auth_headers).status_code == 201


def test_settings_list_sorts_by_key(api_client, auth_headers):
    for key in ("b.key", "c.key", "a.key"):
        api_client.post("/settings", json=_setting_body(key=key), headers=auth_headers)

    for params in ({}, {"sort_by": "created_at", "sort_order": "DESC"}, {"sort_by": "id"}):
        listed = api_client.get("/settings", params=params, headers=auth_headers).json()["data"]
        assert [item["key"] for item in listed] == ["a.key", "b.key", "c.key"]


def test_integration_hides_api_key_and_records_sync(api_client, auth_headers):
    created = api_client.post(
        "/integrations",
        json={"name": "Satu Data", "type": "api", "config": "{}", "api_key": "secret-key"},
        headers=auth_headers,
    )
    assert created.status_code == 201
    integration = created.json()["data"]
    assert "api_key" not in integration
    assert integration["organization_id"] == "O1"
    assert integration["status"] == "active"
    assert integration["last_sync_at"] is None

    synced = api_client.post(f"/integrations/{integration['id']}/sync", headers=auth_headers)
    assert synced.status_code == 200
    assert synced.json()["data"]["last_sync_at"] is not None

    paused = api_client.patch(
        f"/integrations/{integration['id']}/status", json={"status": "inactive"}, headers=auth_headers
    )
    assert paused.json()["data"]["status"] == "inactive"

    assert api_client.delete(f"/integrations/{integration['id']}", headers=auth_headers).status_code == 200
    assert api_client.get(f"/integrations/{integration['id']}", headers=auth_headers).status_code == 404


def test_analytics_summaries(api_client, auth_headers):
    body = {"classification": "public", "category": "statistics"}
    draft = api_client.post("/datasets", json={"name": "Data Draft", **body}, headers=auth_headers).json()["data"]
    published = api_client.post("/datasets", json={"name": "Data Terbit", **body}, headers=auth_headers).json()["data"]
    api_client.patch(f"/datasets/{published['id']}/status", json={"status": "published"}, headers=auth_headers)
    publication = api_client.post(
        "/publications",
        json={"title": "Laporan Terbit", "content": "Isi", "dataset_id": published["id"]},
        headers=auth_headers,
    ).json()["data"]
    api_client.get(f"/publications/{publication['id']}")
    api_client.post(f"/publications/{publication['id']}/download", headers=auth_headers)

    stats = api_client.get("/analytics/stats/datasets").json()["data"]
    assert stats["total_datasets"] == 2
    assert (stats["published_count"], stats["draft_count"], stats["archived_count"]) == (1, 1, 0)
    assert (stats["total_views"], stats["total_downloads"]) == (1, 1)

    popular = api_client.get("/analytics/popular/datasets", params={"limit": 0}).json()["data"]
    assert [(item["id"], item["views"], item["downloads"]) for item in popular] == [(published["id"], 1, 1)]
    assert draft["id"] not in [item["id"] for item in popular]

    trend = api_client.get("/analytics/trend/datasets", params={"period": "monthly"}).json()["data"]
    assert sum(item["count"] for item in trend) == 2

    users = api_client.get("/analytics/stats/users").json()["data"]
    assert users["total_users"] == 1
    assert users["active_users"] == 1


def test_dashboard_combines_every_summary(api_client):
    response = api_client.get("/analytics/dashboard")

    assert response.status_code == 200
    data = response.json()["data"]
    assert set(data) == {
        "dataset_stats",
        "organization_stats",
        "user_stats",
        "popular_datasets",
        "popular_tags",
        "dataset_trend",
    }
    assert data["dataset_stats"]["total_datasets"] == 0
    assert data["popular_tags"] == []


def test_trend_rejects_unknown_period(api_client):
    assert api_client.get("/analytics/trend/datasets", params={"period": "yearly"}).status_code == 422
