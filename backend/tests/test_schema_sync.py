from pathlib import Path
from uuid import uuid4

from sqlalchemy import Column, Index, Integer, MetaData, String, Table, create_engine, inspect

from app.utils.schema_sync import sync_missing_schema_objects


def _temp_engine():
    db_path = Path(f"./schema_sync_{uuid4().hex}.db").resolve()
    return create_engine(f"sqlite:///{db_path}"), db_path


def test_sync_missing_schema_objects_adds_column_and_index():
    engine, db_path = _temp_engine()

    base_metadata = MetaData()
    Table(
        "media_file",
        base_metadata,
        Column("media_id", Integer, primary_key=True),
        Column("filename", String(255), nullable=False),
    )
    base_metadata.create_all(engine)

    target_metadata = MetaData()
    table = Table(
        "media_file",
        target_metadata,
        Column("media_id", Integer, primary_key=True),
        Column("filename", String(255), nullable=False),
        Column("alt_text", String(300), nullable=True),
    )
    Index("idx_media_file_filename", table.c.filename)

    added = sync_missing_schema_objects(engine, target_metadata)

    inspector = inspect(engine)
    column_names = {row["name"] for row in inspector.get_columns("media_file")}
    index_names = {row.get("name") for row in inspector.get_indexes("media_file")}

    assert "alt_text" in column_names
    assert "idx_media_file_filename" in index_names
    assert added == ["column:media_file.alt_text", "index:idx_media_file_filename"]

    # 두 번째 실행은 변경 사항이 없다.
    assert sync_missing_schema_objects(engine, target_metadata) == []

    engine.dispose()
    if db_path.exists():
        db_path.unlink()


def test_sync_missing_schema_objects_creates_missing_table():
    engine, db_path = _temp_engine()

    metadata = MetaData()
    Table(
        "audit_event",
        metadata,
        Column("event_id", Integer, primary_key=True),
        Column("action", String(50), nullable=False),
    )

    added = sync_missing_schema_objects(engine, metadata)

    assert added == ["table:audit_event"]
    assert "audit_event" in inspect(engine).get_table_names()

    engine.dispose()
    if db_path.exists():
        db_path.unlink()
