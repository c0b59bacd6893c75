"""
API tests for the chapter endpoints.
"""

import json

import pytest
from fastapi.testclient import TestClient

from chapter_api.common.dependencies import INVALID_TOKEN_MESSAGE, MISSING_TOKEN_MESSAGE
from chapter_api.common.exceptions import PayloadTooLargeError
from chapter_api.features.chapters.routers.v1 import _read_body

CHAPTERS_URL = "/api/v1/chapters"
MISSING_ID = "00000000-0000-4000-8000-000000000000"


@pytest.fixture
def create_chapter(client, admin_headers, chapter_payload):
    def create(**overrides):
        response = client.post(
            f"{CHAPTERS_URL}/single", json=chapter_payload(**overrides), headers=admin_headers
        )
        assert response.status_code == 201
        return response.json()["data"]

    return create


def test_list_chapters_envelope(client, create_chapter):
    create_chapter()

    response = client.get(CHAPTERS_URL)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["timestamp"].endswith("Z")
    assert "error" not in body
    assert len(body["data"]["chapters"]) == 1
    assert body["data"]["pagination"] == {
        "currentPage": 1,
        "totalPages": 1,
        "totalChapters": 1,
        "hasNextPage": False,
        "hasPrevPage": False,
        "limit": 10,
    }


def test_list_chapters_with_trailing_slash(client):
    response = client.get(f"{CHAPTERS_URL}/")

    assert response.status_code == 200
    assert response.json()["data"]["chapters"] == []


def test_list_chapters_filters_by_query(client, create_chapter):
    create_chapter(subject="Physics")
    create_chapter(subject="Chemistry", isWeakChapter=True, **{"class": "Class 12"})

    response = client.get(
        CHAPTERS_URL, params={"subject": "Chemistry", "class": "Class 12", "weakChapters": "true"}
    )

    chapters = response.json()["data"]["chapters"]
    assert [c["subject"] for c in chapters] == ["Chemistry"]
    assert chapters[0]["class"] == "Class 12"


@pytest.mark.parametrize("params", [
    {"subject": "Biology"},
    {"class": "Class 9"},
    {"weakChapters": "maybe"},
    {"limit": "101"},
    {"page": "0"},
])
def test_list_chapters_rejects_bad_query(client, params):
    response = client.get(CHAPTERS_URL, params=params)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    assert body["details"]


def test_get_chapter(client, create_chapter):
    created = create_chapter(chapter="Thermodynamics")

    response = client.get(f"{CHAPTERS_URL}/{created['id']}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["chapter"] == "Thermodynamics"
    assert data["totalQuestions"] == 10
    assert data["completionPercentage"] == 50


def test_get_chapter_invalid_id(client):
    response = client.get(f"{CHAPTERS_URL}/not-a-uuid")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid chapter ID format"


def test_get_chapter_not_found(client):
    response = client.get(f"{CHAPTERS_URL}/{MISSING_ID}")

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["error"] == "Chapter not found"


def test_writes_require_a_token(client, chapter_payload):
    response = client.post(f"{CHAPTERS_URL}/single", json=chapter_payload())

    assert response.status_code == 401
    assert response.json()["error"] == MISSING_TOKEN_MESSAGE


@pytest.mark.parametrize("authorization", ["Bearer wrong-token", "Basic dGVzdA=="])
def test_writes_reject_wrong_credentials(client, chapter_payload, authorization):
    response = client.post(
        f"{CHAPTERS_URL}/single", json=chapter_payload(), headers={"Authorization": authorization}
    )

    if authorization.startswith("Bearer"):
        assert response.status_code == 403
        assert response.json()["error"] == INVALID_TOKEN_MESSAGE
    else:
        assert response.status_code == 401


def test_create_single_validation_error(client, admin_headers, chapter_payload):
    response = client.post(
        f"{CHAPTERS_URL}/single", json=chapter_payload(questionSolved=-1), headers=admin_headers
    )

    assert response.status_code == 400
    details = response.json()["details"]
    assert details[0]["field"] == "questionSolved"


def test_bulk_upload_all_created(client, admin_headers, chapter_payload):
    response = client.post(
        CHAPTERS_URL, json=[chapter_payload(chapter="A"), chapter_payload(chapter="B")], headers=admin_headers
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "2 chapters created successfully, 0 failed"
    assert [s["index"] for s in body["data"]["successful"]] == [0, 1]
    assert body["data"]["failed"] == []


def test_bulk_upload_partial_success(client, admin_headers, chapter_payload):
    records = [chapter_payload(), chapter_payload(subject="Biology"), chapter_payload()]

    response = client.post(CHAPTERS_URL, json=records, headers=admin_headers)

    assert response.status_code == 207
    failed = response.json()["data"]["failed"]
    assert [f["index"] for f in failed] == [1]
    assert failed[0]["chapter"]["subject"] == "Biology"


def test_bulk_upload_nothing_created(client, admin_headers):
    response = client.post(CHAPTERS_URL, json=[{"chapter": "Only a name"}], headers=admin_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "0 chapters created successfully, 1 failed"


def test_bulk_upload_from_json_file(client, admin_headers, chapter_payload):
    content = json.dumps([chapter_payload(), chapter_payload(chapter="Optics")])

    response = client.post(
        CHAPTERS_URL,
        files={"chapters": ("chapters.json", content, "application/json")},
        headers=admin_headers,
    )

    assert response.status_code == 201
    assert len(response.json()["data"]["successful"]) == 2


def test_bulk_upload_rejects_non_json_file(client, admin_headers):
    response = client.post(
        CHAPTERS_URL,
        files={"chapters": ("chapters.csv", "a,b", "text/csv")},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Unsupported file type. Only JSON files are allowed"


def test_bulk_upload_rejects_malformed_file(client, admin_headers):
    response = client.post(
        CHAPTERS_URL,
        files={"chapters": ("chapters.json", "[{", "application/json")},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid JSON file format"


def test_bulk_upload_file_must_hold_an_array(client, admin_headers, chapter_payload):
    response = client.post(
        CHAPTERS_URL,
        files={"chapters": ("chapters.json", json.dumps(chapter_payload()), "application/json")},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Chapters data must be an array"


@pytest.mark.parametrize("kwargs, error", [
    ({"json": []}, "Chapters array cannot be empty"),
    ({"content": "[{", "headers": {"Content-Type": "application/json"}}, "Invalid JSON format"),
    ({"json": {"chapter": "Optics"}}, "Please provide chapters data as JSON array in request body or upload a JSON file"),
])
def test_bulk_upload_rejects_bad_body(client, admin_headers, kwargs, error):
    headers = {**admin_headers, **kwargs.pop("headers", {})}

    response = client.post(CHAPTERS_URL, headers=headers, **kwargs)

    assert response.status_code == 400
    assert response.json()["error"] == error


def test_bulk_upload_too_large(make_app, settings, cache, admin_headers, chapter_payload):
    settings.max_upload_size_bytes = 64
    with TestClient(make_app(settings, cache)) as small_client:
        response = small_client.post(
            CHAPTERS_URL, json=[chapter_payload()] * 5, headers=admin_headers
        )

    assert response.status_code == 413


def test_update_chapter(client, admin_headers, create_chapter, chapter_payload):
    created = create_chapter()

    response = client.put(
        f"{CHAPTERS_URL}/{created['id']}",
        json=chapter_payload(status="Completed", questionSolved=10),
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Chapter updated successfully"
    assert body["data"]["status"] == "Completed"
    assert client.get(f"{CHAPTERS_URL}/{created['id']}").json()["data"]["status"] == "Completed"


def test_update_missing_chapter(client, admin_headers, chapter_payload):
    response = client.put(f"{CHAPTERS_URL}/{MISSING_ID}", json=chapter_payload(), headers=admin_headers)

    assert response.status_code == 404


def test_delete_chapter(client, admin_headers, create_chapter):
    created = create_chapter()
    url = f"{CHAPTERS_URL}/{created['id']}"
    client.get(url)

    response = client.delete(url, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Chapter deleted successfully"
    assert "data" not in response.json()
    assert client.get(url).status_code == 404
    assert client.delete(url, headers=admin_headers).status_code == 404


def test_analytics_endpoint(client, create_chapter):
    create_chapter(status="Completed")
    create_chapter(subject="Mathematics")

    response = client.get(f"{CHAPTERS_URL}/analytics")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["overview"]["totalChapters"] == 2
    assert data["overview"]["completionPercentage"] == 50
    assert [row["subject"] for row in data["subjectDistribution"]] == ["Mathematics", "Physics"]


def test_filters_endpoint(client, create_chapter):
    create_chapter(unit="Optics")

    response = client.get(f"{CHAPTERS_URL}/filters")

    assert response.status_code == 200
    assert response.json()["data"] == {
        "subjects": ["Physics"],
        "classes": ["Class 11"],
        "units": ["Optics"],
        "statuses": ["In Progress"],
    }


@pytest.mark.asyncio
async def test_declared_length_rejected_before_reading_body(mocker):
    request = mocker.Mock(headers={"content-length": "1048577"})
    request.body = mocker.AsyncMock(return_value=b"[]")

    with pytest.raises(PayloadTooLargeError):
        await _read_body(request, max_bytes=1024 * 1024)

    request.body.assert_not_awaited()
