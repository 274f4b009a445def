"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from app.models.user import User
from app.models.site_content import ContentSection, SiteSettings
from app.models.portfolio import ExperienceEntry, SkillCategory, Tool
from app.models.project import CaseStudy, Project
from app.models.blog import BlogPost
from app.models.media import MediaFile
from app.models.content_version import ContentVersion
from app.models.backup import BackupManifest, BackupSchedule
from app.models.audit import AuditEvent

__all__ = [
    "User",
    "ContentSection", "SiteSettings",
    "ExperienceEntry", "SkillCategory", "Tool",
    "CaseStudy", "Project",
    "BlogPost",
    "MediaFile",
    "ContentVersion",
    "BackupManifest", "BackupSchedule",
    "AuditEvent",
]
