"""프로젝트/케이스 스터디/블로그의 변경 이력을 저장하는 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON, ForeignKey, Index, UniqueConstraint
from sqlalchemy.sql import func

from app.database import Base


class ContentVersion(Base):
    __tablename__ = "content_version"

    version_id = Column(Integer, primary_key=True, autoincrement=True)
    content_type = Column(String(20), nullable=False)  # blog/project/case_study
    content_id = Column(Integer, nullable=False)
    version = Column(Integer, nullable=False)
    title = Column(String(200), nullable=False)
    content = Column(JSON, nullable=False)  # 전체 스냅샷
    meta = Column("metadata", JSON)
    changes = Column(JSON, nullable=False)  # [{field, old_value, new_value, change_type}]
    change_type = Column(String(20), nullable=False)  # create/update/restore
    created_by = Column(Integer, ForeignKey("admin_user.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    checksum = Column(String(64), nullable=False)
    size = Column(Integer, nullable=False, default=0)
    compressed = Column(Boolean, default=False)

    __table_args__ = (
        UniqueConstraint("content_type", "content_id", "version", name="uq_content_version_no"),
        Index("idx_content_version_content", "content_type", "content_id", "version"),
    )
