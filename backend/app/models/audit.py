"""관리자 작업 감사 로그(append-only) SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, JSON, Index

from app.database import Base


class AuditEvent(Base):
    __tablename__ = "audit_event"

    event_id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(80), nullable=False)
    resource = Column(String(80), nullable=False)
    resource_id = Column(String(80))
    user_id = Column(Integer)
    user_email = Column(String(120))
    ip_address = Column(String(64))
    timestamp = Column(DateTime, nullable=False)
    success = Column(Boolean, nullable=False, default=True)
    severity = Column(String(10), nullable=False, default="low")  # low/medium/high/critical
    meta = Column("metadata", JSON)
    error_message = Column(Text)

    __table_args__ = (
        Index("idx_audit_event_timestamp", "timestamp"),
        Index("idx_audit_event_action", "action", "resource"),
    )
