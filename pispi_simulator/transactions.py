"""
Transaction Module

Append-only log of intra-bank transfers with filtered, sorted and paginated
queries. Recording a transfer never moves money: balances stay untouched.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional
import threading
import time

from .accounts import is_valid_account_number
from .errors import FieldViolation, ValidationFailed
from .logging_config import get_logger, log_action


MOTIF_MAX_LENGTH = 140
MAX_PAGE_SIZE = 100
DEFAULT_SORT = "-dateCreation"


class TransactionStatus(Enum):
    """Transfer lifecycle states; only INITIE is ever produced here"""
    INITIE = "INITIE"
    IRREVOCABLE = "IRREVOCABLE"
    REJETE = "REJETE"
    ANNULE = "ANNULE"


@dataclass(frozen=True)
class Transaction:
    """Recorded transfer"""
    tx_id: str
    statut: TransactionStatus
    date_creation: datetime
    compte_debiteur: str
    compte_crediteur: str
    montant: int
    motif: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "txId": self.tx_id,
            "statut": self.statut.value,
            "dateCreation": self.date_creation.isoformat(),
            "compteDebiteur": self.compte_debiteur,
            "compteCrediteur": self.compte_crediteur,
            "montant": self.montant,
            "motif": self.motif,
        }


@dataclass
class TransferValidation:
    """Outcome of a structural check on a transfer payload"""
    errors: List[FieldViolation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _is_amount(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_transfer_payload(payload: Mapping[str, Any]) -> TransferValidation:
    """
    Check every structural rule of a transfer payload.

    All violations are collected so callers can report them in one pass.
    """
    result = TransferValidation()

    if not is_valid_account_number(payload.get("compteDebiteur")):
        result.errors.append(FieldViolation("compteDebiteur", "compteDebiteur invalide"))

    if not is_valid_account_number(payload.get("compteCrediteur")):
        result.errors.append(FieldViolation("compteCrediteur", "compteCrediteur invalide"))

    montant = payload.get("montant")
    if not _is_amount(montant) or montant <= 0:
        result.errors.append(FieldViolation("montant", "montant doit être positif"))

    motif = payload.get("motif")
    if motif is not None:
        if not isinstance(motif, str):
            result.errors.append(FieldViolation("motif", "motif doit être une chaîne de caractères"))
        elif len(motif) > MOTIF_MAX_LENGTH:
            result.errors.append(
                FieldViolation("motif", f"motif trop long (max {MOTIF_MAX_LENGTH} caractères)")
            )

    return result


@dataclass(frozen=True)
class TransactionQuery:
    """Filter, sort and pagination parameters for listing transfers"""
    page: int = 1
    size: int = 20
    sort: str = DEFAULT_SORT
    statut: Optional[str] = None

    def __post_init__(self):
        violations = []
        if not _is_amount(self.page) or self.page < 1:
            violations.append(FieldViolation("page", "La page doit être >= 1"))
        if not _is_amount(self.size) or self.size < 1:
            violations.append(FieldViolation("size", "La taille doit être >= 1"))
        elif self.size > MAX_PAGE_SIZE:
            violations.append(FieldViolation("size", f"La taille doit être <= {MAX_PAGE_SIZE}"))
        if violations:
            raise ValidationFailed(violations)

    @property
    def sort_field(self) -> str:
        sort = self.sort or DEFAULT_SORT
        return sort[1:] if sort.startswith("-") else sort

    @property
    def descending(self) -> bool:
        return (self.sort or DEFAULT_SORT).startswith("-")


@dataclass(frozen=True)
class PageMeta:
    total: int
    page: int
    size: int
    next: Optional[int] = None
    prev: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "page": self.page,
            "size": self.size,
            "next": self.next,
            "prev": self.prev,
        }


@dataclass(frozen=True)
class TransactionPage:
    data: List[Transaction]
    meta: PageMeta

    def to_dict(self) -> Dict[str, Any]:
        return {"data": [t.to_dict() for t in self.data], "meta": self.meta.to_dict()}


def _tx_id_order(transaction: Transaction):
    # TXN001 sorts before TXN1700000000000
    return (len(transaction.tx_id), transaction.tx_id)


def _sort_key(field_name: str):
    if field_name == "dateCreation":
        return lambda t: t.date_creation

    def numeric(transaction: Transaction):
        value = transaction.to_dict().get(field_name)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        # Non-numeric fields compare equal and fall back to txId order
        return 0

    return numeric


def seed_transactions(now: Optional[datetime] = None) -> List[Transaction]:
    now = now or datetime.now(timezone.utc)
    return [
        Transaction(
            tx_id="TXN001",
            statut=TransactionStatus.IRREVOCABLE,
            date_creation=now - timedelta(hours=1),
            compte_debiteur="CIC2344256727788288822",
            compte_crediteur="CIC2344256727788288823",
            montant=100000,
            motif="Transfert test",
        ),
        Transaction(
            tx_id="TXN002",
            statut=TransactionStatus.INITIE,
            date_creation=now - timedelta(minutes=30),
            compte_debiteur="CIC2344256727788288823",
            compte_crediteur="CIC2344256727788288822",
            montant=50000,
            motif="Paiement service",
        ),
    ]


class TransactionStore:
    """Append-only in-memory transfer log"""

    def __init__(self, transactions: Optional[Iterable[Transaction]] = None):
        self._transactions: List[Transaction] = list(transactions or ())
        self._last_suffix = 0
        self._lock = threading.RLock()
        self.logger = get_logger("pispi.transactions")

    @classmethod
    def seeded(cls) -> 'TransactionStore':
        return cls(seed_transactions())

    def _next_tx_id(self) -> str:
        # Millisecond clock, bumped so two transfers in the same ms stay distinct
        suffix = max(int(time.time() * 1000), self._last_suffix + 1)
        self._last_suffix = suffix
        return f"TXN{suffix}"

    def append(self, compte_debiteur: str, compte_crediteur: str,
               montant: int, motif: Optional[str] = None) -> Transaction:
        """Record a transfer in INITIE state. No validation happens here."""
        with self._lock:
            transaction = Transaction(
                tx_id=self._next_tx_id(),
                statut=TransactionStatus.INITIE,
                date_creation=datetime.now(timezone.utc),
                compte_debiteur=compte_debiteur,
                compte_crediteur=compte_crediteur,
                montant=montant,
                motif=motif,
            )
            self._transactions.append(transaction)

            log_action(
                self.logger, "info", "Transaction recorded",
                action="create_transaction", resource=f"transaction:{transaction.tx_id}",
                extra={
                    "montant": montant,
                    "compteDebiteur": compte_debiteur,
                    "compteCrediteur": compte_crediteur,
                }
            )
            return transaction

    def query(self, query: TransactionQuery) -> TransactionPage:
        """Filter by status, sort, then slice the requested page"""
        with self._lock:
            rows = list(self._transactions)

        if query.statut:
            rows = [t for t in rows if t.statut.value == query.statut]

        # Stable sorts: txId ascending is the tiebreak for any sort field
        rows.sort(key=_tx_id_order)
        rows.sort(key=_sort_key(query.sort_field), reverse=query.descending)

        total = len(rows)
        start = (query.page - 1) * query.size
        end = start + query.size

        meta = PageMeta(
            total=total,
            page=query.page,
            size=query.size,
            next=query.page + 1 if end < total else None,
            prev=query.page - 1 if query.page > 1 else None,
        )
        return TransactionPage(data=rows[start:end], meta=meta)
