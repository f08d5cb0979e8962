"""
Collection Repository

Maps the three collections onto a KeyValueStore. Each collection is a
JSON array under its own key and is loaded independently: a corrupt or
unreadable value yields an empty collection for that key only, and the
other collections still load.
"""

from typing import Optional

import structlog
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from expense_tracker.audit.logger import AuditLogger, get_audit_logger
from expense_tracker.config.settings import StorageSettings
from expense_tracker.errors import PersistenceReadError
from expense_tracker.models.finance import (
    InvestmentAccount,
    ScheduledPayment,
    Transaction,
)
from expense_tracker.services.storage.interface import KeyValueStore

logger = structlog.get_logger(__name__)

_transactions = TypeAdapter(list[Transaction])
_payments = TypeAdapter(list[ScheduledPayment])
_accounts = TypeAdapter(list[InvestmentAccount])


class CollectionRepository:
    """
    Loads and saves whole collections.

    Args:
        store: Backing key-value store
        storage_settings: Key names; defaults come from the environment
        audit_logger: Receives collection load failures
    """

    def __init__(
        self,
        store: KeyValueStore,
        storage_settings: Optional[StorageSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._settings = storage_settings or StorageSettings()
        self._audit = audit_logger or get_audit_logger()

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def _decode(self, key: str, adapter: TypeAdapter) -> list:
        raw = self._store.get(key)
        if raw is None or not raw.strip():
            return []
        try:
            value = adapter.validate_json(raw)
        except PydanticValidationError as e:
            raise PersistenceReadError(key, f"{e.error_count()} invalid value(s)")
        return value

    def _load(self, key: str, adapter: TypeAdapter) -> list:
        try:
            items = self._decode(key, adapter)
        except PersistenceReadError as e:
            logger.warning("collection_load_failed", key=e.key, reason=e.reason)
            self._audit.log_collection_load_failed(e.key, e.reason)
            return []

        logger.debug("collection_loaded", key=key, count=len(items))
        return items

    def _save(self, key: str, adapter: TypeAdapter, items: list) -> None:
        payload = adapter.dump_json(items).decode("utf-8")
        self._store.set(key, payload)
        logger.debug("collection_saved", key=key, count=len(items))

    def load_transactions(self) -> list[Transaction]:
        return self._load(self._settings.transactions_key, _transactions)

    def load_scheduled_payments(self) -> list[ScheduledPayment]:
        return self._load(self._settings.scheduled_payments_key, _payments)

    def load_investment_accounts(self) -> list[InvestmentAccount]:
        return self._load(self._settings.investment_accounts_key, _accounts)

    def save_transactions(self, transactions: list[Transaction]) -> None:
        self._save(self._settings.transactions_key, _transactions, transactions)

    def save_scheduled_payments(self, payments: list[ScheduledPayment]) -> None:
        self._save(self._settings.scheduled_payments_key, _payments, payments)

    def save_investment_accounts(self, accounts: list[InvestmentAccount]) -> None:
        self._save(self._settings.investment_accounts_key, _accounts, accounts)
