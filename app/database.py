from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import settings


def build_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI serves sync handlers from a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_connection(db: Session) -> None:
    """Open the session's connection, or reuse the one it already holds."""
    db.connection()


def init_db():
    # Import models so every table is registered on Base.metadata
    from app.stock.category import models as _category_models  # noqa: F401
    from app.stock.history import models as _history_models  # noqa: F401
    from app.stock.products import models as _product_models  # noqa: F401
    from app.stock.related import models as _related_models  # noqa: F401

    Base.metadata.create_all(bind=engine)
