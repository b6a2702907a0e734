from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from revenue.core.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables registered on Base."""
    import revenue.models  # noqa: F401  (registers models on Base.metadata)

    Base.metadata.create_all(bind=engine)
