# lib/db.py
from __future__ import annotations

from sqlalchemy import (
    JSON, CheckConstraint, Column, DateTime, Float, Integer, String, Text,
    create_engine, func
)
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def get_app_db_url() -> str:
    from config.settings import settings

    return settings.DATABASE_URL


_engine = None
_SessionLocal = None


def make_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def make_session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def get_engine():
    global _engine, _SessionLocal
    if _engine is None:
        _engine = make_engine(get_app_db_url())
        _SessionLocal = make_session_factory(_engine)
    return _engine


def get_session_factory() -> sessionmaker:
    if _SessionLocal is None:
        get_engine()
    return _SessionLocal


def init_db(engine=None):
    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)


class CreditAccount(Base):
    __tablename__ = "credit_accounts"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String(128), nullable=False, unique=True)
    credits = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_credit_accounts_non_negative"),
    )


class Plan(Base):
    __tablename__ = "plans"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String(128), nullable=False, index=True)

    text = Column(Text, nullable=False)            # JSON string of the AI plan
    budget = Column(Float, nullable=False, default=0)
    currency = Column(String(8), nullable=False, default="INR")
    start_date = Column(String(10), nullable=False)  # YYYY-MM-DD
    end_date = Column(String(10), nullable=False)

    destination = Column(String(256), nullable=True)
    destination_country = Column(String(128), nullable=True)
    destination_lat = Column(Float, nullable=True)
    destination_lng = Column(Float, nullable=True)
    destination_image = Column(Text, nullable=True)

    weather_data = Column(JSON, nullable=True)
    places_data = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
