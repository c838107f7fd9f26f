# setukpa/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from setukpa.core.config import settings

if settings.DATABASE_URL.startswith("sqlite"):
    # request threads share SQLite connections
    engine = create_engine(settings.DATABASE_URL, connect_args={"check_same_thread": False})
else:
    engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """One session per request, closed when the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
