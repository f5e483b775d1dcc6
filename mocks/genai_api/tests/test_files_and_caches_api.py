from __future__ import annotations

from typing import Any

from fastapi.testclient import TestClient


SCOPE = "/v1/projects/mock-project/locations/us-central1"
AUTH = {"Authorization": "Bearer t"}


def test_file_lifecycle(client: TestClient) -> None:
    uploaded = client.post(f"{SCOPE}/files", files={"file": ("notes.txt", b"hello file", "text/plain")})

    assert uploaded.status_code == 200
    metadata = uploaded.json()["file"]
    assert metadata["displayName"] == "notes.txt"
    assert metadata["sizeBytes"] == "10"
    file_id = metadata["name"].split("/", 1)[1]

    assert client.get(f"{SCOPE}/files/{file_id}").json()["file"]["name"] == metadata["name"]
    assert len(client.get(f"{SCOPE}/files").json()["files"]) == 1
    assert client.delete(f"{SCOPE}/files/{file_id}").json() == {}
    missing = client.get(f"{SCOPE}/files/{file_id}")
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == f"File {metadata['name']} not found."


def test_upload_without_file(client: TestClient) -> None:
    response = client.post(f"{SCOPE}/files")

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "No file uploaded"


def test_upload_over_limit(make_client: Any) -> None:
    client = make_client(max_upload_bytes=8)

    response = client.post(f"{SCOPE}/files", files={"file": ("big.bin", b"123456789", "application/octet-stream")})

    assert response.status_code == 400


def test_cached_content_lifecycle(client: TestClient) -> None:
    created = client.post(
        f"{SCOPE}/cachedContents",
        json={
            "model": "gemini-1.5-pro",
            "displayName": "handbook",
            "contents": [{"role": "user", "parts": [{"text": "x" * 400}]}],
            "ttl": "600s",
        },
    )

    assert created.status_code == 201
    resource = created.json()
    cache_id = resource["name"].rsplit("/", 1)[1]
    assert resource["usageMetadata"] == {"totalTokenCount": 100}

    listed = client.get(f"{SCOPE}/cachedContents").json()["cachedContents"]
    patched = client.patch(f"{SCOPE}/cachedContents/{cache_id}", json={"ttl": "7200s"})

    assert [item["name"] for item in listed] == [resource["name"]]
    assert patched.json()["expireTime"] > resource["expireTime"]

    generated = client.post(
        f"{SCOPE}/publishers/google/models/gemini-1.5-pro:generateContent",
        json={"contents": [{"role": "user", "parts": [{"text": "hello"}]}], "cachedContent": resource["name"]},
        headers=AUTH,
    ).json()
    assert generated["usageMetadata"]["cachedContentTokenCount"] == 100
    assert client.get("/admin/cache/stats").json()["stats"]["totalHits"] == 1

    assert client.delete(f"{SCOPE}/cachedContents/{cache_id}").status_code == 204
    missing = client.get(f"{SCOPE}/cachedContents/{cache_id}")
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == f"Cached content {cache_id} not found or expired."


def test_cached_content_requires_model(client: TestClient) -> None:
    response = client.post(f"{SCOPE}/cachedContents", json={"contents": []})

    assert response.status_code == 400


def test_cache_list_paging(client: TestClient) -> None:
    for _ in range(3):
        client.post(f"{SCOPE}/cachedContents", json={"model": "gemini-1.5-pro", "contents": []})

    first = client.get(f"{SCOPE}/cachedContents?pageSize=2").json()
    second = client.get(f"{SCOPE}/cachedContents?pageSize=2&pageToken={first['nextPageToken']}").json()

    assert len(first["cachedContents"]) == 2
    assert len(second["cachedContents"]) == 1
    assert "nextPageToken" not in second
