"""미디어 업로드/목록/수정/삭제 API 동작을 검증합니다."""

import os

from app.config import settings
from tests.helpers import ADMIN, EDITOR, VIEWER, auth_headers

PNG = b"\x89PNG\r\n\x1a\n"


def _upload(client, headers, name="logo.png", body=PNG, mime="image/png", **form):
    return client.post("/api/admin/media", headers=headers, files={"file": (name, body, mime)}, data=form)


def test_upload_requires_auth(client, seed_users):
    resp = client.post("/api/admin/media", files={"file": ("logo.png", PNG, "image/png")})
    assert resp.status_code == 401


def test_upload_list_and_update(client, seed_users):
    headers = auth_headers(client, EDITOR)
    resp = _upload(client, headers, alt_text="회사 로고")
    assert resp.status_code == 201, resp.text
    media = resp.json()["data"]
    assert media["original_name"] == "logo.png"
    assert media["url"] == f"/uploads/media/{media['filename']}"
    assert media["size"] == len(PNG)
    assert media["alt_text"] == "회사 로고"
    assert os.path.exists(os.path.join(settings.UPLOAD_DIR, "media", media["filename"]))

    _upload(client, headers, name="guide.pdf", body=b"%PDF-1.4", mime="application/pdf")
    images = client.get("/api/admin/media?mime_type=image/", headers=headers).json()["data"]
    assert [m["original_name"] for m in images] == ["logo.png"]

    resp = client.put(f"/api/admin/media/{media['media_id']}", headers=headers, json={"alt_text": "Logo"})
    assert resp.json()["data"]["alt_text"] == "Logo"


def test_upload_rejects_unknown_extension(client, seed_users):
    resp = _upload(client, auth_headers(client, ADMIN), name="run.exe", body=b"MZ", mime="application/octet-stream")
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_FILE_TYPE"


def test_upload_rejects_oversized_file(client, seed_users, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 4)
    resp = _upload(client, auth_headers(client, ADMIN))
    assert resp.status_code == 413


def test_delete_removes_file(client, seed_users):
    headers = auth_headers(client, ADMIN)
    media = _upload(client, headers).json()["data"]
    path = os.path.join(settings.UPLOAD_DIR, "media", media["filename"])

    resp = client.delete(f"/api/admin/media?id={media['media_id']}", headers=headers)
    assert resp.status_code == 200
    assert not os.path.exists(path)
    assert client.get("/api/admin/media", headers=headers).json()["data"] == []


def test_editor_cannot_delete_others_upload(client, seed_users):
    media = _upload(client, auth_headers(client, ADMIN)).json()["data"]
    resp = client.delete(f"/api/admin/media?id={media['media_id']}", headers=auth_headers(client, EDITOR))
    assert resp.status_code == 403


def test_viewer_cannot_upload(client, seed_users):
    assert _upload(client, auth_headers(client, VIEWER)).status_code == 403
