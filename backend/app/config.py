"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./portfolio_cms.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Media upload
    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024  # 50 MB
    ALLOWED_EXTENSIONS: List[str] = [
        "jpg", "jpeg", "png", "gif", "webp", "svg",
        "pdf", "mp4", "webm",
    ]
    UPLOAD_DIR: str = "uploads"

    # Backup
    BACKUP_DIR: str = "backups"
    BACKUP_RETENTION_COUNT: int = 30
    BACKUP_COMPRESSION: bool = True

    # Data export/import
    MAX_IMPORT_SIZE: int = 100 * 1024 * 1024  # 100 MB
    EXPORT_FILENAME_PREFIX: str = "portfolio-export"
    EXPORT_FORMAT_VERSION: str = "1.0.0"

    # Audit log
    AUDIT_QUEUE_SIZE: int = 1000
    AUDIT_RETENTION_DAYS: int = 365

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
