"""Seed the database with sample admin accounts and portfolio content."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date
from app.database import SessionLocal, engine, Base
import app.models  # noqa: F401

from app.models.user import User
from app.models.site_content import ContentSection, SiteSettings
from app.models.portfolio import ExperienceEntry, SkillCategory, Tool
from app.schemas.blog import BlogPostCreate
from app.schemas.project import CaseStudyCreate, ProjectCreate
from app.services import content_service


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        # Users
        users = [
            User(email="admin@portfolio.dev", name="관리자 김철수", role="admin"),
            User(email="editor@portfolio.dev", name="에디터 이영희", role="editor"),
            User(email="viewer@portfolio.dev", name="뷰어 박민준", role="viewer"),
        ]
        db.add_all(users)
        db.flush()
        admin = users[0]

        # Site sections
        db.add_all([
            ContentSection(section_key="hero", title="안녕하세요, 개발자 김철수입니다",
                           subtitle="백엔드와 데이터 파이프라인을 만듭니다",
                           content="Python과 클라우드로 신뢰할 수 있는 서비스를 만듭니다.",
                           data={"cta_label": "프로젝트 보기", "cta_href": "/projects"},
                           display_order=1, updated_by=admin.user_id),
            ContentSection(section_key="about", title="소개",
                           content="10년차 소프트웨어 엔지니어로 웹 서비스와 데이터 플랫폼을 개발해 왔습니다.",
                           display_order=2, updated_by=admin.user_id),
            ContentSection(section_key="contact", title="연락처",
                           content="협업 제안은 이메일로 보내 주세요.",
                           data={"email": "hello@portfolio.dev"},
                           display_order=3, updated_by=admin.user_id),
        ])
        db.add_all([
            SiteSettings(setting_key="site_title", value="김철수 포트폴리오", description="브라우저 탭 제목"),
            SiteSettings(setting_key="social_links", value={"github": "https://github.com/example"},
                         description="푸터 소셜 링크"),
        ])

        # Experience
        db.add_all([
            ExperienceEntry(company="데이터랩", position="시니어 백엔드 엔지니어", location="서울",
                            start_date=date(2021, 3, 1), is_current=True,
                            achievements=["주문 API 응답시간 40% 단축"], technologies=["Python", "FastAPI", "PostgreSQL"],
                            display_order=1),
            ExperienceEntry(company="커머스웍스", position="백엔드 엔지니어", location="판교",
                            start_date=date(2017, 1, 1), end_date=date(2021, 2, 28),
                            achievements=["정산 배치 재설계"], technologies=["Django", "Celery"],
                            display_order=2),
        ])

        # Skills / tools
        backend = SkillCategory(name="Backend", icon="server",
                                skills=[{"name": "Python", "level": 90}, {"name": "SQL", "level": 80}],
                                display_order=1)
        infra = SkillCategory(name="Infra", icon="cloud",
                              skills=[{"name": "Docker", "level": 75}], display_order=2)
        db.add_all([backend, infra])
        db.flush()
        db.add_all([
            Tool(category_id=backend.category_id, name="FastAPI", proficiency=90, display_order=1),
            Tool(category_id=backend.category_id, name="SQLAlchemy", proficiency=85, display_order=2),
            Tool(category_id=infra.category_id, name="Terraform", proficiency=60, display_order=1),
        ])
        db.commit()

        # Versioned content goes through the service so slugs and version 1 are created.
        case = content_service.create_content(db, "case_study", CaseStudyCreate(
            title="Order Platform Migration",
            client="커머스웍스",
            summary="모놀리식 주문 시스템을 서비스 단위로 분리",
            technologies=["Python", "Kafka"],
            is_published=True,
        ), admin)
        content_service.create_content(db, "project", ProjectCreate(
            title="Realtime Order Dashboard",
            description="주문 흐름을 실시간으로 보여주는 대시보드",
            technologies=["FastAPI", "WebSocket"],
            is_featured=True,
            case_study_id=case.case_study_id,
        ), admin)
        content_service.create_content(db, "blog", BlogPostCreate(
            title="SQLite Savepoints in Practice",
            excerpt="pysqlite에서 SAVEPOINT를 안전하게 쓰는 방법",
            content="SQLAlchemy begin_nested와 pysqlite 트랜잭션 모드 이야기.",
            tags=["python", "sqlite"],
            is_published=True,
        ), admin)

        print("Seed data created successfully.")
        print("  Admin:  admin@portfolio.dev")
        print("  Editor: editor@portfolio.dev")
        print("  Viewer: viewer@portfolio.dev")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
