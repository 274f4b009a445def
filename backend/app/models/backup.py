"""백업 매니페스트와 백업 스케줄 설정 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, JSON, ForeignKey
from sqlalchemy.sql import func

from app.database import Base


class BackupManifest(Base):
    __tablename__ = "backup_manifest"

    backup_id = Column(String(40), primary_key=True)
    backup_type = Column(String(20), nullable=False)  # manual/scheduled/pre-update
    status = Column(String(20), nullable=False, default="pending")  # pending/in_progress/completed/failed
    filename = Column(String(255))
    size = Column(Integer, default=0)
    checksum = Column(String(64))
    record_count = Column(Integer, default=0)
    tables = Column(JSON)  # list[str]
    include_media = Column(Boolean, default=False)
    include_system_data = Column(Boolean, default=False)
    compressed = Column(Boolean, default=False)
    error_message = Column(Text)
    created_by = Column(Integer, ForeignKey("admin_user.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    completed_at = Column(DateTime)


class BackupSchedule(Base):
    __tablename__ = "backup_schedule"

    schedule_id = Column(Integer, primary_key=True, autoincrement=True)
    schedule = Column(String(20), nullable=False, default="daily")  # hourly/daily/weekly/monthly
    retention = Column(Integer, nullable=False, default=30)
    include_media = Column(Boolean, default=True)
    include_system_data = Column(Boolean, default=True)
    compression = Column(Boolean, default=True)
    destinations = Column(JSON)  # list[str]
    is_enabled = Column(Boolean, default=True)
    updated_by = Column(Integer, ForeignKey("admin_user.user_id"), nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
