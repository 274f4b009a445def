"""SQLAlchemy 엔진/세션 팩토리와 요청 단위 세션 의존성을 정의합니다."""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings


def enable_sqlite_savepoints(engine: Engine) -> Engine:
    # pysqlite는 DML 전까지 BEGIN을 내보내지 않는다. 트랜잭션 밖에서 SAVEPOINT가 먼저 실행되면
    # RELEASE가 곧 COMMIT이 되므로, SAVEPOINT 직전에 실제 BEGIN을 열어 둔다.
    @event.listens_for(engine, "savepoint")
    def _begin_before_savepoint(conn, name):
        dbapi_connection = conn.connection.dbapi_connection
        if not dbapi_connection.in_transaction:
            dbapi_connection.execute("BEGIN")

    return engine


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        return enable_sqlite_savepoints(
            create_engine(url, connect_args={"check_same_thread": False})
        )
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
