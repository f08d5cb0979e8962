"""Shared fixtures: in-memory storage and wired application state."""

from datetime import date
from decimal import Decimal

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.config.settings import StorageSettings
from expense_tracker.models.finance import (
    ExpenseCategory,
    ExpenseOwner,
    PaymentTemplate,
)
from expense_tracker.orchestrator import create_app_state
from expense_tracker.services.storage import CollectionRepository, InMemoryKeyValueStore


@pytest.fixture
def audit_logger():
    return AuditLogger("expense_tracker.tests")


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(kv_store, audit_logger):
    return CollectionRepository(kv_store, StorageSettings(), audit_logger)


@pytest.fixture
def state(repository, audit_logger):
    return create_app_state(repository, audit_logger)


@pytest.fixture
def rent_template():
    return PaymentTemplate(
        description="Rent",
        amount=Decimal("1200.00"),
        category=ExpenseCategory.HOUSING,
        owner=ExpenseOwner.MINE,
        base_date=date(2024, 1, 31),
    )
