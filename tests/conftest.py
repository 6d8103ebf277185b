import os
import tempfile

# Point the app at throwaway storage before any app module builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = ""
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="catalog-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.stock.category.models import Category
from app.stock.history.models import MovementType, StockHistory
from app.stock.products.models import Product


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    directory = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(directory))
    return directory


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def category(db):
    category = Category(name="Electronics", description="Phones and gadgets")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def make_product(db, category):
    counter = {"n": 0}

    def _make(name=None, code=None, price=10.0, stock=3, category_id=None, is_deleted=False):
        counter["n"] += 1
        n = counter["n"]
        product = Product(
            name=name or f"Product {n}",
            code_product=code or f"P{n:03d}",
            price=price,
            stock=stock,
            id_category=category_id or category.id_category,
            is_deleted=is_deleted,
        )
        db.add(product)
        db.flush()
        db.add(StockHistory(
            id_product=product.id_product,
            quantity_before=0,
            quantity_after=stock,
            movement_type=MovementType.ADDED,
        ))
        db.commit()
        db.refresh(product)
        return product

    return _make
