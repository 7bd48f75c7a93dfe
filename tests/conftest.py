"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Тесты не должны трогать рабочую базу
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

# Добавить корень проекта в PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base, Member, Product, CommissionConfig, Purchase
from mlm_system.config.mlm_config import MlmConfiguration, StructureMode
from mlm_system.events.event_bus import eventBus
from mlm_system.utils.time_machine import timeMachine


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def clean_event_bus():
    """Handlers never leak between tests."""
    eventBus.clear()
    yield
    eventBus.clear()


@pytest.fixture(autouse=True)
def real_time():
    yield
    timeMachine.resetToRealTime()


@pytest.fixture
def unilevel_config():
    return MlmConfiguration(structureMode=StructureMode.UNILEVEL, unilevelMaxDepth=5)


@pytest.fixture
def make_member(session):
    """Create a member under `upline` (a Member or None)."""

    def _make(upline=None, rank="starter", position=None, status="active", name=None):
        member = Member(
            uplineID=upline.memberID if upline is not None else None,
            position=position,
            rank=rank,
            status=status,
            name=name,
            walletBalance=Decimal("0")
        )
        session.add(member)
        session.commit()
        return member

    return _make


@pytest.fixture
def make_chain(make_member):
    """Create root -> ... -> leaf of `length` members and return them root first."""

    def _make(length, rank="starter"):
        members = []
        upline = None
        for index in range(length):
            upline = make_member(upline=upline, rank=rank, name=f"M{index}")
            members.append(upline)
        return members

    return _make


@pytest.fixture
def make_product(session):
    """
    Create a product with commission levels.
    `levels` is a list of (rewardType, value) or (rewardType, value, minRank), level 1 first.
    """

    def _make(price="2000.00", levels=(), pv="100"):
        product = Product(name="Starter Pack", price=Decimal(price), pv=Decimal(pv), isActive=True)
        session.add(product)
        session.flush()

        for level, entry in enumerate(levels, start=1):
            rewardType, value = entry[0], Decimal(str(entry[1]))
            minRank = entry[2] if len(entry) > 2 else None
            session.add(CommissionConfig(
                productID=product.productID,
                level=level,
                rewardType=rewardType,
                percentage=value if rewardType == "percentage" else Decimal("0"),
                fixedAmount=value if rewardType == "fixed" else Decimal("0"),
                minRank=minRank
            ))
        session.commit()
        return product

    return _make


@pytest.fixture
def make_purchase(session):
    def _make(member, product, quantity=1, createdAt=None):
        purchase = Purchase(
            memberID=member.memberID,
            productID=product.productID,
            quantity=quantity,
            totalAmount=Decimal(str(product.price)) * quantity,
            totalPV=Decimal("0"),
            status="completed"
        )
        if createdAt is not None:
            purchase.createdAt = createdAt
        session.add(purchase)
        session.commit()
        return purchase

    return _make
