from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from authsome_otp.config import settings


def _build_database_url(raw_url: str) -> str:
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return raw_url


def create_db_engine(url: str, **kwargs) -> Engine:
    url = _build_database_url(url)
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True, **kwargs)


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        bind=bind, autoflush=False, autocommit=False, expire_on_commit=False
    )


DATABASE_URL = _build_database_url(settings.database_url)
engine = create_db_engine(DATABASE_URL)
SessionLocal = create_session_factory(engine)
Base = declarative_base()


def init_db(bind: Engine = engine) -> None:
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not configured")
    from authsome_otp.models.schema import otp as _otp  # noqa: F401

    Base.metadata.create_all(bind=bind)


@contextmanager
def session_scope(factory: sessionmaker = SessionLocal):
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
