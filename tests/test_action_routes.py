"""Tests for the tagged action endpoint."""

import base64

from common.passwords import hash_password
from server.routes.action_routes import ACTION_HANDLERS

RELEASE_TARGET = "https://uploads.github.com/repos/octo/media/releases/3/assets{?name,label}"


def run_action(client, action, **fields):
    return client.post("/api/actions", json={"action": action, **fields})


def upload_asset(client, data=b"asset bytes", **fields):
    response = run_action(
        client,
        "upload-asset",
        fileBase64=base64.b64encode(data).decode(),
        fileName="asset.bin",
        uploadUrl=RELEASE_TARGET,
        **fields,
    )
    assert response.status_code == 200
    return response.json()["data"]


def test_every_action_has_a_handler():
    assert len(ACTION_HANDLERS) == 6


def test_create_release(app_client, fake_github):
    response = run_action(app_client, "create-release", releaseTag="batch-7")

    assert response.status_code == 200
    assert response.json()["tagName"] == "batch-7"
    assert fake_github.releases[0]["tag_name"] == "batch-7"


def test_upload_asset(app_client, fake_github):
    data = upload_asset(app_client, b"abc")

    assert data["size"] == 3
    assert fake_github.assets[0][1] == b"abc"


def test_finalize_chunks(app_client):
    for index, piece in enumerate((b"he", b"llo")):
        app_client.post(
            "/uploads/chunk",
            params={"uploadId": "act-1", "chunkIndex": index, "totalChunks": 2, "fileName": "hello.txt"},
            content=piece,
        )

    response = run_action(app_client, "finalize-chunks", uploadId="act-1", destination=RELEASE_TARGET)

    assert response.status_code == 200
    assert response.json()["data"]["size"] == 5


def test_create_view_and_get_files(app_client):
    file_id = upload_asset(app_client)["file_id"]

    view = run_action(app_client, "create-view", fileIds=[file_id], origin="https://share.example").json()
    files = run_action(app_client, "get-files", id=view["id"]).json()["files"]

    assert view["shareUrl"] == f"https://share.example/d/{view['id']}"
    assert files[0]["fileId"] == file_id


def test_create_group(app_client):
    file_id = upload_asset(app_client)["file_id"]

    response = run_action(app_client, "create-group", groupId="trip", fileIds=[file_id])

    assert response.status_code == 200
    assert response.json()["kind"] == "group"
    assert run_action(app_client, "create-group", groupId="trip", fileIds=[file_id]).status_code == 409


def test_get_files_password_gate(app_client):
    secret = hash_password("open sesame")
    file_id = upload_asset(app_client, passwordHash=secret)["file_id"]

    denied = run_action(app_client, "get-files", id=file_id)
    allowed = run_action(app_client, "get-files", id=file_id, pwd=secret)

    assert denied.status_code == 403
    assert denied.json()["requiresPassword"] is True
    assert allowed.status_code == 200


def test_unknown_action(app_client):
    response = run_action(app_client, "delete-everything")

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_missing_fields(app_client):
    response = run_action(app_client, "upload-asset", fileName="a.bin")

    assert response.status_code == 422
