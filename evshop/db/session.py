from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from evshop.core.config import settings

class Base(DeclarativeBase): pass

def _engine_kwargs(dsn: str) -> dict:
    # in-memory sqlite has to share one connection across threads
    if dsn.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_pre_ping": True}

engine = create_engine(settings.POSTGRES_DSN, **_engine_kwargs(settings.POSTGRES_DSN))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
