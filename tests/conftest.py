from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from campaign_dashboard import models  # noqa: F401  -- ensure all models are registered
from campaign_dashboard.db import Base, get_db
from campaign_dashboard.main import app
from campaign_dashboard.models import Ad, AdSet, Campaign, CreativeType
from campaign_dashboard.schemas import AdCreate, AdSetCreate, CampaignCreate
from campaign_dashboard.services.hierarchy import HierarchyStore


# ---------------------------------------------------------------------------
# Test DB
# ---------------------------------------------------------------------------


def setup_test_db():
    """Create an in-memory SQLite engine and session factory."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(engine)
    return engine, TestingSessionLocal


@pytest.fixture
def session_factory():
    engine, TestingSessionLocal = setup_test_db()
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db: Session) -> HierarchyStore:
    return HierarchyStore(db)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------


def campaign_payload(**overrides) -> CampaignCreate:
    data = dict(
        name="Spring Launch",
        objective="conversions",
        total_budget=Decimal("1000.00"),
        start_date=date(2026, 3, 1),
        end_date=date(2026, 3, 31),
    )
    data.update(overrides)
    return CampaignCreate(**data)


def ad_set_payload(campaign_id, **overrides) -> AdSetCreate:
    data = dict(
        name="Lookalike 1%",
        campaign_id=campaign_id,
        daily_budget=Decimal("50.00"),
        start_date=date(2026, 3, 1),
        end_date=date(2026, 3, 31),
        targeting_description="US, 25-44, interested in running",
    )
    data.update(overrides)
    return AdSetCreate(**data)


def ad_payload(ad_set_id, **overrides) -> AdCreate:
    data = dict(
        name="Hero image",
        ad_set_id=ad_set_id,
        creative_type=CreativeType.IMAGE,
        media_url="https://cdn.example.com/hero.png",
        headline="Run further",
        body_text="Lightweight shoes for long distances.",
        call_to_action="Shop Now",
        destination_url="https://shop.example.com/shoes",
    )
    data.update(overrides)
    return AdCreate(**data)


def make_campaign(store: HierarchyStore, **overrides) -> Campaign:
    return store.create_campaign(campaign_payload(**overrides)).unwrap()


def make_ad_set(store: HierarchyStore, campaign_id, **overrides) -> AdSet:
    return store.create_ad_set(ad_set_payload(campaign_id, **overrides)).unwrap()


def make_ad(store: HierarchyStore, ad_set_id, **overrides) -> Ad:
    return store.create_ad(ad_payload(ad_set_id, **overrides)).unwrap()


