import os

# configure before evshop is imported: in-memory db, no redis lock, no kafka
os.environ["POSTGRES_DSN"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["KAFKA_BOOTSTRAP"] = ""

from datetime import datetime, timedelta
from decimal import Decimal

import jwt
import pytest
from fastapi.testclient import TestClient

from evshop.core.config import settings
from evshop.db.models import PRODUCT_MODELS
from evshop.db.session import Base, SessionLocal, engine
from evshop.main import app
from evshop.schemas import ProductType


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


def make_token(sub: str = "user-1", role: str = "customer") -> str:
    payload = {"sub": sub, "role": role, "type": "access", "exp": datetime.utcnow() + timedelta(hours=1)}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token(sub='admin-1', role='admin')}"}


@pytest.fixture
def customer_headers():
    return {"Authorization": f"Bearer {make_token(sub='user-1')}"}


@pytest.fixture
def make_product(db):
    def _make(product_type="Box", price="100", stock=5, name=None, **extra):
        model = PRODUCT_MODELS[ProductType(product_type)]
        extra.setdefault("images", [f"https://cdn.example.com/{product_type.lower()}.jpg"])
        obj = model(name=name or f"{product_type} item", price=Decimal(str(price)), stock=stock, **extra)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj
    return _make


@pytest.fixture
def stock_of(db):
    def _stock(product):
        db.expire_all()
        return db.get(type(product), product.id).stock
    return _stock
