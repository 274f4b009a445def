"""Backfill missing slugs for projects, case studies and blog posts.

Usage:
    python scripts/migrate_add_slugs.py [--dry-run]
"""
import argparse
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import or_

from app.database import SessionLocal, engine, Base
import app.models  # noqa: F401
from app.services.version_service import CONTENT_MODELS
from app.utils.schema_sync import sync_missing_schema_objects
from app.utils.slug import ensure_unique_slug, generate_slug, validate_slug


def backfill(db, model, dry_run: bool = False) -> int:
    pk = model.__mapper__.primary_key[0]
    taken = {row[0] for row in db.query(model.slug).filter(model.slug.isnot(None)).all() if row[0]}
    rows = db.query(model).filter(or_(model.slug.is_(None), model.slug == "")).order_by(pk).all()
    for row in rows:
        base = generate_slug(row.title or "")
        if not validate_slug(base):
            base = f"{model.__tablename__.replace('_', '-')}-{getattr(row, pk.key)}"
        slug = ensure_unique_slug(base, taken)
        taken.add(slug)
        print(f"  {model.__tablename__}#{getattr(row, pk.key)}: {slug}")
        if not dry_run:
            row.slug = slug
    return len(rows)


def migrate(dry_run: bool = False):
    Base.metadata.create_all(bind=engine)
    sync_missing_schema_objects(engine, Base.metadata)
    db = SessionLocal()
    try:
        total = 0
        for model in CONTENT_MODELS.values():
            total += backfill(db, model, dry_run=dry_run)
        if dry_run:
            db.rollback()
            print(f"[dry-run] {total} rows would be updated.")
        else:
            db.commit()
            print(f"{total} rows updated.")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()
    migrate(dry_run=args.dry_run)
