"""
Account Domain Service

Orchestrates the account, alias and transaction stores to implement the
account use cases: balance lookup, transfer creation, alias management.
Stores are injected and shared by reference; the service never copies them.
"""

from typing import Any, List, Mapping, Optional
import threading

from .accounts import Account, AccountStore
from .aliases import Alias, AliasStore, AliasType, is_valid_alias_type
from .errors import (
    CapacityExceeded, Entity, FieldViolation, InsufficientFunds, NotFound, ValidationFailed
)
from .logging_config import get_logger, log_action
from .transactions import (
    Transaction, TransactionPage, TransactionQuery, TransactionStore, validate_transfer_payload
)


DEFAULT_MAX_ALIASES = 20


class AccountService:
    """
    Business rules for accounts, transfers and aliases

    Compound operations (existence + sufficiency + append, count + insert)
    run under a single re-entrant lock so they stay atomic on threaded hosts.
    """

    def __init__(
        self,
        account_store: AccountStore,
        alias_store: AliasStore,
        transaction_store: TransactionStore,
        max_aliases: int = DEFAULT_MAX_ALIASES
    ):
        self.account_store = account_store
        self.alias_store = alias_store
        self.transaction_store = transaction_store
        self.max_aliases = max_aliases
        self._lock = threading.RLock()
        self.logger = get_logger("pispi.service")

    def _require_account(self, numero: str, entity: Entity = Entity.ACCOUNT) -> Account:
        account = self.account_store.find_by_numero(numero)
        if account is None:
            raise NotFound(entity, numero)
        return account

    def get_account(self, numero: str) -> Optional[Account]:
        """Plain store lookup; None when the account does not exist"""
        return self.account_store.find_by_numero(numero)

    def get_transactions(self, query: TransactionQuery) -> TransactionPage:
        return self.transaction_store.query(query)

    def create_transaction(self, payload: Mapping[str, Any]) -> Transaction:
        """
        Record an intra-bank transfer.

        Args:
            payload: mapping with compteDebiteur, compteCrediteur, montant and optional motif

        Returns:
            The recorded Transaction, in INITIE state

        Raises:
            ValidationFailed: on any structural defect (first one as message, all attached)
            NotFound: when the debit or credit account does not exist
            InsufficientFunds: when the debit balance is below the amount
        """
        validation = validate_transfer_payload(payload)
        if not validation.is_valid:
            raise ValidationFailed(validation.errors)

        debit_numero = payload["compteDebiteur"]
        credit_numero = payload["compteCrediteur"]
        montant = payload["montant"]

        with self._lock:
            debit = self._require_account(debit_numero, Entity.DEBIT_ACCOUNT)
            self._require_account(credit_numero, Entity.CREDIT_ACCOUNT)

            # Equal balance is sufficient
            if debit.solde < montant:
                log_action(
                    self.logger, "warning", "Transfer rejected: insufficient funds",
                    action="create_transaction", resource=f"compte:{debit_numero}",
                    extra={"solde": debit.solde, "montant": montant}
                )
                raise InsufficientFunds(debit_numero, debit.solde, montant)

            return self.transaction_store.append(
                debit_numero, credit_numero, montant, payload.get("motif")
            )

    def get_alias(self, numero: str) -> List[Alias]:
        with self._lock:
            self._require_account(numero)
            return self.alias_store.find_by_account(numero)

    def create_alias(self, numero: str, alias_type: Any) -> Alias:
        """
        Create an alias for an existing account.

        The capacity check uses the count taken before the store applies its
        own working-set eviction.
        """
        if not is_valid_alias_type(alias_type):
            allowed = ", ".join(t.value for t in AliasType)
            raise ValidationFailed([FieldViolation(
                "type", f"Type d'alias invalide: {alias_type}. Types autorisés: {allowed}"
            )])

        with self._lock:
            self._require_account(numero)

            count = self.alias_store.count(numero)
            if count >= self.max_aliases:
                log_action(
                    self.logger, "warning", "Alias rejected: capacity reached",
                    action="create_alias", resource=f"compte:{numero}",
                    extra={"count": count, "limit": self.max_aliases}
                )
                raise CapacityExceeded(
                    Entity.ACCOUNT, numero, self.max_aliases,
                    "Limite d'alias dépassée pour ce compte"
                )

            return self.alias_store.save(numero, AliasType(alias_type))

    def delete_alias(self, numero: str, cle: str) -> bool:
        """Delete an alias; False means no such alias on this account"""
        with self._lock:
            self._require_account(numero)
            return self.alias_store.delete(numero, cle)
