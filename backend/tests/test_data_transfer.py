"""데이터 내보내기(JSON/CSV/ZIP)와 가져오기(검증, 중복, 오류 처리)를 검증합니다."""

import io
import json
import zipfile

import pytest

from app.config import settings
from app.errors import ImportAborted, PayloadTooLarge, ValidationFailed
from app.models.backup import BackupManifest
from app.models.portfolio import ExperienceEntry, Tool
from app.models.project import Project
from app.schemas.data_transfer import ExportOptions, ImportOptions
from app.services import data_transfer_service
from tests.helpers import ADMIN, EDITOR, auth_headers


def _experience_rows(valid: int, invalid: int) -> list:
    rows = [
        {"company": f"Company {i}", "position": "Engineer", "start_date": "2020-01-01"}
        for i in range(valid)
    ]
    rows += [
        {"company": f"Broken {i}", "position": "Engineer", "start_date": "not-a-date"}
        for i in range(invalid)
    ]
    return rows


def _bundle(**tables) -> dict:
    data = {"_metadata": {"version": "1.0.0"}}
    data.update(tables)
    return data


def test_export_json_contains_metadata_and_checksum(db, seed_content):
    result = data_transfer_service.export_data(db, ExportOptions(compression=False))
    assert result.filename.startswith("portfolio-export-")
    assert result.filename.endswith(".json")
    body = json.loads(result.file)
    meta = body["_metadata"]
    assert meta["total_tables"] == len(body) - 1
    assert meta["total_records"] == sum(len(v) for k, v in body.items() if k != "_metadata")
    assert "media_file" not in body
    assert "content_version" not in body
    assert len(result.checksum) == 64
    assert result.size == len(result.file)


def test_export_compression_makes_compact_json(db, seed_content):
    pretty = data_transfer_service.export_data(db, ExportOptions(compression=False, tables=["project"]))
    compact = data_transfer_service.export_data(db, ExportOptions(compression=True, tables=["project"]))
    assert compact.size < pretty.size
    assert json.loads(compact.file)["project"] == json.loads(pretty.file)["project"]


def test_export_skips_unknown_tables(db, seed_content):
    result = data_transfer_service.export_data(db, ExportOptions(tables=["project", "nope"]))
    body = json.loads(result.file)
    assert set(body) == {"project", "_metadata"}


def test_export_csv_zip(db, seed_content):
    result = data_transfer_service.export_data(db, ExportOptions(format="csv", tables=["project", "blog_post"]))
    assert result.filename.endswith(".zip")
    with zipfile.ZipFile(io.BytesIO(result.file)) as zf:
        names = set(zf.namelist())
        assert names == {"project.csv", "blog_post.csv", "_metadata.json"}
        header = zf.read("project.csv").decode("utf-8").splitlines()[0]
        assert '"slug"' in header


def test_export_zip_bundle_with_media(db, seed_content):
    from app.models.media import MediaFile

    db.add(MediaFile(filename="abc.png", original_name="logo.png", url="/uploads/media/abc.png", size=3))
    db.commit()
    result = data_transfer_service.export_data(db, ExportOptions(format="zip", include_media=True))
    with zipfile.ZipFile(io.BytesIO(result.file)) as zf:
        names = set(zf.namelist())
    assert "data.json" in names
    assert "tables/project.json" in names
    assert "tables/media_file.json" in names
    assert "media/abc.png.meta.json" in names


def test_export_api_sets_content_disposition(client, seed_content):
    resp = client.get("/api/admin/data/export?format=json&tables=project,case_study", headers=auth_headers(client, ADMIN))
    assert resp.status_code == 200
    assert resp.headers["content-disposition"].startswith('attachment; filename="portfolio-export-')
    assert resp.headers["content-type"].startswith("application/json")
    assert set(resp.json()) == {"project", "case_study", "_metadata"}

    resp = client.post("/api/admin/data/export", headers=auth_headers(client, ADMIN), json={"format": "csv"})
    assert resp.headers["content-type"] == "application/zip"


def test_export_requires_admin(client, seed_users):
    resp = client.get("/api/admin/data/export", headers=auth_headers(client, EDITOR))
    assert resp.status_code == 403


def test_import_skip_errors_processes_every_row(db, seed_users):
    data = _bundle(experience_entry=_experience_rows(valid=5, invalid=2))
    result = data_transfer_service.import_data(
        db, data, ImportOptions(skip_errors=True, create_backup=False)
    )
    assert result["imported"] == 5
    assert result["skipped"] == 2
    assert len(result["errors"]) == 2
    assert {e["table"] for e in result["errors"]} == {"experience_entry"}
    assert db.query(ExperienceEntry).count() == 5


def test_csv_import_skips_row_with_unparseable_number(db, seed_users):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("_metadata.json", json.dumps({"version": "1.0.0"}))
        zf.writestr(
            "tool.csv",
            "tool_id,name,display_order\n1,Docker,1\n2,Vim,abc\n3,Git,3\n",
        )

    data = data_transfer_service.parse_import_file("tools.zip", buffer.getvalue())
    assert data["tool"][1]["display_order"] == "abc"

    result = data_transfer_service.import_data(db, data, ImportOptions(skip_errors=True, create_backup=False))
    assert result["imported"] == 2
    assert result["skipped"] == 1
    assert result["errors"][0]["record"] == 2
    assert sorted(t.name for t in db.query(Tool).all()) == ["Docker", "Git"]


def test_import_without_skip_errors_commits_nothing(db, seed_users):
    rows = _experience_rows(valid=3, invalid=0)
    rows.insert(1, {"company": "Missing Position", "start_date": "2020-01-01"})
    data = _bundle(experience_entry=rows)
    with pytest.raises(ImportAborted) as excinfo:
        data_transfer_service.import_data(db, data, ImportOptions(skip_errors=False, create_backup=False))
    assert excinfo.value.details["errors"][0]["table"] == "experience_entry"
    db.expire_all()
    assert db.query(ExperienceEntry).count() == 0


def test_import_duplicates_skipped_or_overwritten(db, seed_content):
    project = seed_content["project"]
    exported = json.loads(data_transfer_service.export_data(db, ExportOptions(tables=["project"])).file)
    exported["project"][0]["title"] = "Imported Title"

    result = data_transfer_service.import_data(db, exported, ImportOptions(create_backup=False))
    assert result["imported"] == 0
    assert result["skipped"] == 1
    db.expire_all()
    assert db.get(Project, project.project_id).title == "Order Dashboard"

    result = data_transfer_service.import_data(db, exported, ImportOptions(create_backup=False, overwrite=True))
    assert result["imported"] == 1
    db.expire_all()
    assert db.get(Project, project.project_id).title == "Imported Title"


def test_import_creates_pre_update_backup(db, seed_users):
    data = _bundle(experience_entry=_experience_rows(valid=1, invalid=0))
    result = data_transfer_service.import_data(db, data, ImportOptions(create_backup=True))
    backup = db.get(BackupManifest, result["backup_id"])
    assert backup.backup_type == "pre-update"
    assert backup.status == "completed"


def test_validate_import_data_reports_problems():
    assert data_transfer_service.validate_import_data([]) == ["데이터는 객체여야 합니다."]
    problems = data_transfer_service.validate_import_data({"mystery": [], "project": {}})
    assert len(problems) == 3
    with pytest.raises(ValidationFailed) as excinfo:
        data_transfer_service.import_data(None, {"project": []}, ImportOptions())
    assert excinfo.value.code == "INVALID_IMPORT_DATA"


def test_parse_import_file_limits_and_formats(monkeypatch):
    with pytest.raises(ValidationFailed) as excinfo:
        data_transfer_service.parse_import_file("data.json", b"{not json")
    assert excinfo.value.code == "INVALID_IMPORT_FILE"

    monkeypatch.setattr(settings, "MAX_IMPORT_SIZE", 10)
    with pytest.raises(PayloadTooLarge):
        data_transfer_service.parse_import_file("data.json", b"x" * 11)


def test_csv_export_can_be_imported(db, seed_content):
    exported = data_transfer_service.export_data(db, ExportOptions(format="csv", tables=["project"]))
    db.query(Project).delete()
    db.commit()

    data = data_transfer_service.parse_import_file(exported.filename, exported.file)
    row = data["project"][0]
    assert row["technologies"] == ["FastAPI"]
    assert row["is_featured"] is False
    assert isinstance(row["project_id"], int)

    result = data_transfer_service.import_data(db, data, ImportOptions(create_backup=False))
    assert result["imported"] == 1
    db.expire_all()
    assert db.query(Project).one().slug == "order-dashboard"


def test_import_api_multipart(client, db, seed_users):
    payload = json.dumps(_bundle(experience_entry=_experience_rows(valid=2, invalid=1))).encode("utf-8")
    resp = client.post(
        "/api/admin/data/import",
        headers=auth_headers(client, ADMIN),
        files={"file": ("export.json", payload, "application/json")},
        data={"skipErrors": "true", "createBackup": "false"},
    )
    assert resp.status_code == 200, resp.text
    result = resp.json()["data"]
    assert result["imported"] == 2
    assert result["skipped"] == 1
    assert result["backup_id"] is None


def test_import_api_abort_returns_errors(client, seed_users):
    payload = json.dumps(_bundle(experience_entry=_experience_rows(valid=1, invalid=1))).encode("utf-8")
    resp = client.post(
        "/api/admin/data/import",
        headers=auth_headers(client, ADMIN),
        files={"file": ("export.json", payload, "application/json")},
        data={"createBackup": "false"},
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"]["code"] == "IMPORT_FAILED"
    assert len(body["error"]["details"]["errors"]) == 1


def test_import_api_requires_file(client, seed_users):
    resp = client.post("/api/admin/data/import", headers=auth_headers(client, ADMIN), data={"overwrite": "true"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "MISSING_REQUIRED_FIELDS"
