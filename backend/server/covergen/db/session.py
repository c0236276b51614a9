"""
Database session management
"""
from typing import Generator
from sqlalchemy.orm import Session
from covergen.db.base import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_db_and_tables():
    """
    Create database tables
    """
    import covergen.models  # noqa: F401
    from covergen.db.base import Base, engine
    Base.metadata.create_all(bind=engine)
