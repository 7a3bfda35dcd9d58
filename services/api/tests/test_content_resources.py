import json
from pathlib import Path

import pytest


def _publication_body(**extra) -> dict:
    body = {
        "title": "Statistik Daerah 2024",
        "description": "Ringkasan tahunan",
        "content": "Isi lengkap publikasi.",
        "authors": ["Sri Wahyuni", "Budi"],
        "tags": ["ekonomi"],
    }
    body.update(extra)
    return body


def _visualization_body(**extra) -> dict:
    body = {"title": "Grafik Inflasi", "type": "line", "config": {"x": "bulan", "y": "nilai"}}
    body.update(extra)
    return body


@pytest.fixture
def dataset_id(api_client, auth_headers) -> str:
    response = api_client.post(
        "/datasets",
        json={"name": "Data Cuaca", "classification": "public", "category": "climate"},
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


def test_create_publication_starts_as_draft_with_json_lists(api_client, auth_headers):
    response = api_client.post("/publications", json=_publication_body(), headers=auth_headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "draft"
    assert (data["view_count"], data["download_count"]) == (0, 0)
    assert json.loads(data["authors"]) == ["Sri Wahyuni", "Budi"]


def test_reading_publication_counts_views(api_client, auth_headers):
    publication_id = api_client.post("/publications", json=_publication_body(), headers=auth_headers).json()["data"]["id"]

    api_client.get(f"/publications/{publication_id}")
    second = api_client.get(f"/publications/{publication_id}")

    assert second.json()["data"]["view_count"] == 2


def test_download_counter_and_status_publish(api_client, auth_headers):
    publication_id = api_client.post("/publications", json=_publication_body(), headers=auth_headers).json()["data"]["id"]

    downloaded = api_client.post(f"/publications/{publication_id}/download", headers=auth_headers)
    assert downloaded.json()["data"]["download_count"] == 1

    published = api_client.patch(
        f"/publications/{publication_id}/status", json={"status": "published"}, headers=auth_headers
    )
    assert published.json()["data"]["status"] == "published"
    assert published.json()["data"]["published_date"] is not None

    listed = api_client.get("/publications", params={"status": "published"}).json()
    assert [item["id"] for item in listed["data"]] == [publication_id]


def test_deleted_publication_disappears(api_client, auth_headers):
    publication_id = api_client.post("/publications", json=_publication_body(), headers=auth_headers).json()["data"]["id"]

    assert api_client.delete(f"/publications/{publication_id}", headers=auth_headers).status_code == 200

    missing = api_client.get(f"/publications/{publication_id}")
    assert missing.status_code == 404
    assert missing.json()["message"] == "Publication not found"
    assert api_client.get("/publications").json()["meta"]["total"] == 0


def test_publication_filters_by_dataset(api_client, auth_headers):
    linked = api_client.post(
        "/publications", json=_publication_body(dataset_id="ds-1"), headers=auth_headers
    ).json()["data"]
    api_client.post("/publications", json=_publication_body(title="Lainnya"), headers=auth_headers)

    response = api_client.get("/publications/dataset/ds-1")

    assert [item["id"] for item in response.json()["data"]] == [linked["id"]]


def test_publication_writes_require_authentication(api_client):
    assert api_client.post("/publications", json=_publication_body()).status_code == 401


def test_visualization_lifecycle_and_stats(api_client, auth_headers):
    line = api_client.post("/visualizations", json=_visualization_body(is_highlight=True), headers=auth_headers)
    assert line.status_code == 201
    assert json.loads(line.json()["data"]["config"]) == {"x": "bulan", "y": "nilai"}
    pie = api_client.post("/visualizations", json=_visualization_body(type="pie"), headers=auth_headers).json()["data"]
    gone = api_client.post("/visualizations", json=_visualization_body(type="bar"), headers=auth_headers).json()["data"]

    api_client.patch(f"/visualizations/{pie['id']}/status", json={"status": "published"}, headers=auth_headers)
    api_client.delete(f"/visualizations/{gone['id']}", headers=auth_headers)

    stats = api_client.get("/visualizations/stats").json()["data"]
    assert stats == {
        "total": 2,
        "by_status": {"draft": 1, "published": 1},
        "by_type": {"line": 1, "pie": 1},
        "highlighted": 1,
    }
    assert api_client.get(f"/visualizations/{gone['id']}").status_code == 404


def test_visualization_rejects_unknown_type(api_client, auth_headers):
    response = api_client.post("/visualizations", json=_visualization_body(type="radar"), headers=auth_headers)

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "type"


def test_file_upload_is_stored_and_soft_deleted(api_client, auth_headers, tmp_path):
    response = api_client.post(
        "/files/upload",
        files={"file": ("../laporan.CSV", b"a,b\n1,2\n", "text/csv")},
        data={"dataset_id": "ds-1"},
        headers=auth_headers,
    )

    assert response.status_code == 201, response.text
    data = response.json()["data"]
    assert data["original_name"] == "laporan.CSV"
    assert data["extension"] == "csv"
    assert data["size"] == 8
    assert data["mime_type"] == "text/csv"
    assert data["status"] == "ready"
    assert (Path(tmp_path / "storage") / data["storage_path"]).read_bytes() == b"a,b\n1,2\n"

    listed = api_client.get("/files/dataset/ds-1", headers=auth_headers).json()
    assert [item["id"] for item in listed["data"]] == [data["id"]]

    failed = api_client.patch(f"/files/{data['id']}/status", json={"status": "failed"}, headers=auth_headers)
    assert failed.json()["data"]["status"] == "failed"

    assert api_client.delete(f"/files/{data['id']}", headers=auth_headers).status_code == 200
    assert api_client.get(f"/files/{data['id']}", headers=auth_headers).status_code == 404


def test_data_rows_are_ordered_by_row_index(api_client, auth_headers, dataset_id):
    bulk = api_client.post(
        f"/datasets/{dataset_id}/data-rows/bulk",
        json={"rows": [{"row_index": 2, "data": {"kota": "Bandung"}}, {"row_index": 0, "data": {"kota": "Jakarta"}}]},
        headers=auth_headers,
    )
    assert bulk.status_code == 201
    assert bulk.json()["data"] == {"affected": 2}
    single = api_client.post(
        f"/datasets/{dataset_id}/data-rows",
        json={"row_index": 1, "data": {"kota": "Surabaya"}},
        headers=auth_headers,
    )
    assert single.status_code == 201

    rows = api_client.get(f"/datasets/{dataset_id}/data-rows", headers=auth_headers).json()["data"]
    assert [row["row_index"] for row in rows] == [0, 1, 2]
    assert json.loads(rows[0]["data"]) == {"kota": "Jakarta"}

    reordered = api_client.get(
        f"/datasets/{dataset_id}/data-rows", params={"sort_by": "created_at", "sort_order": "DESC"}, headers=auth_headers
    )
    assert [row["row_index"] for row in reordered.json()["data"]] == [0, 1, 2]

    searched = api_client.get(f"/datasets/{dataset_id}/data-rows", params={"search": "Surabaya"}, headers=auth_headers)
    assert [row["row_index"] for row in searched.json()["data"]] == [1]

    stats = api_client.get(f"/datasets/{dataset_id}/data-rows/stats", headers=auth_headers).json()["data"]
    assert stats == {"dataset_id": dataset_id, "total_rows": 3, "max_row_index": 2}


def test_data_row_limit_allows_large_pages(api_client, auth_headers, dataset_id):
    response = api_client.get(f"/datasets/{dataset_id}/data-rows", params={"limit": 5000}, headers=auth_headers)

    assert response.json()["meta"]["limit"] == 1000


def test_single_data_row_update_and_delete(api_client, auth_headers, dataset_id):
    row = api_client.post(
        f"/datasets/{dataset_id}/data-rows",
        json={"row_index": 0, "data": {"nilai": 1}},
        headers=auth_headers,
    ).json()["data"]

    updated = api_client.put(f"/data-rows/{row['id']}", json={"data": {"nilai": 2}}, headers=auth_headers)
    assert json.loads(updated.json()["data"]["data"]) == {"nilai": 2}

    assert api_client.delete(f"/data-rows/{row['id']}", headers=auth_headers).status_code == 200
    missing = api_client.get(f"/data-rows/{row['id']}", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["message"] == "Data row not found"


def test_clearing_dataset_rows(api_client, auth_headers, dataset_id):
    api_client.post(
        f"/datasets/{dataset_id}/data-rows/bulk",
        json={"rows": [{"row_index": index, "data": {"i": index}} for index in range(3)]},
        headers=auth_headers,
    )

    cleared = api_client.delete(f"/datasets/{dataset_id}/data-rows", headers=auth_headers)

    assert cleared.json()["data"] == {"affected": 3}
    stats = api_client.get(f"/datasets/{dataset_id}/data-rows/stats", headers=auth_headers).json()["data"]
    assert stats["total_rows"] == 0
    assert stats["max_row_index"] is None


def test_data_rows_need_existing_dataset(api_client, auth_headers):
    response = api_client.post(
        "/datasets/missing/data-rows",
        json={"row_index": 0, "data": {}},
        headers=auth_headers,
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Dataset not found"


def test_feedback_flow(api_client, auth_headers, seed_user):
    created = api_client.post(
        "/feedbacks",
        json={"rating": 4, "comment": "Data sangat membantu penelitian", "category": "usability"},
        headers=auth_headers,
    )
    assert created.status_code == 201
    feedback = created.json()["data"]
    assert feedback["user_id"] == seed_user.id
    assert feedback["status"] == "pending"

    resolved = api_client.patch(
        f"/feedbacks/{feedback['id']}/status", json={"status": "resolved"}, headers=auth_headers
    )
    assert resolved.json()["data"]["status"] == "resolved"

    assert api_client.delete(f"/feedbacks/{feedback['id']}", headers=auth_headers).status_code == 200
    assert api_client.get(f"/feedbacks/{feedback['id']}", headers=auth_headers).status_code == 404


def test_feedback_rating_is_bounded(api_client, auth_headers):
    response = api_client.post(
        "/feedbacks",
        json={"rating": 6, "comment": "Terlalu bagus untuk dinilai", "category": "other"},
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "rating"
