import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from app.config import settings
from app.database import Base, build_engine, get_db
from app.main import app
from app.models.user import User
from app.schemas.blog import BlogPostCreate
from app.schemas.project import CaseStudyCreate, ProjectCreate
from app.services import content_service
from app.services.audit_service import audit_logger

TEST_DB_URL = "sqlite:///./test_portfolio_cms.db"

engine = build_engine(TEST_DB_URL)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db
audit_logger.configure(session_factory=TestingSession)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    audit_logger.reset()
    yield
    audit_logger.reset()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def storage_dirs(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "BACKUP_DIR", str(tmp_path / "backups"))
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    return tmp_path


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    users = {
        "admin": User(email="admin@portfolio.dev", name="Admin", role="admin"),
        "editor": User(email="editor@portfolio.dev", name="Editor", role="editor"),
        "viewer": User(email="viewer@portfolio.dev", name="Viewer", role="viewer"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def seed_content(db, seed_users):
    admin = seed_users["admin"]
    case_study = content_service.create_content(
        db, "case_study", CaseStudyCreate(title="Order Platform", technologies=["Python"]), admin
    )
    project = content_service.create_content(
        db,
        "project",
        ProjectCreate(
            title="Order Dashboard",
            description="실시간 주문 대시보드",
            technologies=["FastAPI"],
            case_study_id=case_study.case_study_id,
        ),
        admin,
    )
    post = content_service.create_content(
        db, "blog", BlogPostCreate(title="Hello World", content="첫 글", tags=["intro"]), admin
    )
    return {"case_study": case_study, "project": project, "blog": post}
