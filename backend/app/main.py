"""FastAPI 애플리케이션 진입점. 로깅, 예외 핸들러, 미들웨어, API 라우터를 등록합니다."""

import logging
import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from app.config import settings
from app.database import Base, engine
from app.errors import register_exception_handlers
import app.models  # noqa: F401 - 모델 import로 metadata 등록
from app.routers import (
    auth, content, projects, case_studies, blog, portfolio, media,
    backup, data_transfer, audit,
)
from app.services.audit_service import audit_logger
from app.utils.schema_sync import sync_missing_schema_objects

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Portfolio CMS 관리자 API",
    description="포트폴리오 사이트 콘텐츠 관리, 백업/복원, 데이터 이전, 감사 로그 API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(auth.router)
app.include_router(content.router)
app.include_router(projects.router)
app.include_router(case_studies.router)
app.include_router(blog.router)
app.include_router(portfolio.router)
app.include_router(media.router)
app.include_router(backup.router)
app.include_router(data_transfer.router)
app.include_router(audit.router)


@app.on_event("startup")
def ensure_schema():
    # 신규 기능 배포 시 누락된 테이블/컬럼을 자동 생성합니다.
    Base.metadata.create_all(bind=engine)
    sync_missing_schema_objects(engine, Base.metadata)


@app.on_event("shutdown")
def flush_audit_queue():
    written = audit_logger.flush()
    if written:
        logger.info("[audit] flushed %d pending events on shutdown", written)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "Portfolio CMS 관리자 API"}


# Static file serving for uploads
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")
