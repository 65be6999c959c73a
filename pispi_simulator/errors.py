"""
Domain Error Module

Closed set of typed errors raised by the account domain. The HTTP layer
switches on ``kind`` to build its problem documents; nothing downstream ever
inspects the human-readable message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence


class ErrorKind(Enum):
    """Error categories exposed to the boundary layer"""
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    INTERNAL_INCONSISTENCY = "internal_inconsistency"


class Entity(Enum):
    """Entities a NotFound or CapacityExceeded error can refer to"""
    ACCOUNT = "numero"
    DEBIT_ACCOUNT = "compteDebiteur"
    CREDIT_ACCOUNT = "compteCrediteur"
    ALIAS = "cle"
    WEBHOOK = "id"

    @property
    def param_name(self) -> str:
        """Request parameter that identifies the entity"""
        return self.value


@dataclass(frozen=True)
class FieldViolation:
    """A single structural defect on one input field"""
    name: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "reason": self.reason}


class DomainError(Exception):
    """Base class for all account-domain errors"""

    kind: ErrorKind = ErrorKind.INTERNAL_INCONSISTENCY

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def invalid_params(self) -> List[Dict[str, str]]:
        """Structured per-field details for the boundary layer"""
        return []


class ValidationFailed(DomainError):
    """Input has one or more structural defects"""

    kind = ErrorKind.VALIDATION_FAILED

    def __init__(self, violations: Sequence[FieldViolation]):
        if not violations:
            raise ValueError("ValidationFailed requires at least one violation")
        self.violations = list(violations)
        super().__init__(self.violations[0].reason)

    @classmethod
    def single(cls, name: str, reason: str) -> 'ValidationFailed':
        return cls([FieldViolation(name, reason)])

    def invalid_params(self) -> List[Dict[str, str]]:
        return [v.to_dict() for v in self.violations]


class NotFound(DomainError):
    """A referenced entity does not exist"""

    kind = ErrorKind.NOT_FOUND

    _messages = {
        Entity.ACCOUNT: "Compte {identifier} non trouvé",
        Entity.DEBIT_ACCOUNT: "Compte débiteur {identifier} non trouvé",
        Entity.CREDIT_ACCOUNT: "Compte créditeur {identifier} non trouvé",
        Entity.ALIAS: "Alias {identifier} non trouvé",
        Entity.WEBHOOK: "Webhook {identifier} non trouvé",
    }

    _reasons = {
        Entity.ACCOUNT: "Ce compte n'existe pas",
        Entity.DEBIT_ACCOUNT: "Le compte débiteur n'existe pas",
        Entity.CREDIT_ACCOUNT: "Le compte créditeur n'existe pas",
        Entity.ALIAS: "L'alias n'existe pas",
        Entity.WEBHOOK: "Webhook non trouvé",
    }

    def __init__(self, entity: Entity, identifier: str, message: Optional[str] = None):
        self.entity = entity
        self.identifier = identifier
        super().__init__(message or self._messages[entity].format(identifier=identifier))

    def invalid_params(self) -> List[Dict[str, str]]:
        return [{"name": self.entity.param_name, "reason": self._reasons[self.entity]}]


class InsufficientFunds(DomainError):
    """Debit account balance is below the requested amount"""

    kind = ErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, numero: str, solde: int, montant: int):
        self.numero = numero
        self.solde = solde
        self.montant = montant
        super().__init__("Solde insuffisant")

    def invalid_params(self) -> List[Dict[str, str]]:
        return [{"name": "montant", "reason": "Le solde du compte débiteur est insuffisant"}]


class CapacityExceeded(DomainError):
    """An owner already holds the maximum number of entities allowed"""

    kind = ErrorKind.CAPACITY_EXCEEDED

    def __init__(self, entity: Entity, identifier: str, limit: int, message: Optional[str] = None):
        self.entity = entity
        self.identifier = identifier
        self.limit = limit
        super().__init__(message or f"Limite de {limit} atteinte pour {identifier}")

    def invalid_params(self) -> List[Dict[str, str]]:
        return [{"name": self.entity.param_name, "reason": self.message}]


class InternalInconsistency(DomainError):
    """An invariant was broken; surfaced as a generic failure"""

    kind = ErrorKind.INTERNAL_INCONSISTENCY
