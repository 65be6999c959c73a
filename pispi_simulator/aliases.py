"""
Alias Module

Aliases are payment addresses pointing at an account. The store keeps a small
physical working set per account: once an account holds ``working_set``
aliases, inserting another first drops everything but its
``retained_on_overflow`` earliest-inserted aliases. This is independent of
the business cap enforced by the domain service.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional
import re
import threading
import uuid

from .logging_config import get_logger, log_action


ALIAS_KEY_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)


class AliasType(Enum):
    """Supported alias kinds"""
    SHID = "SHID"
    MCOD = "MCOD"


def is_valid_alias_type(alias_type: Any) -> bool:
    return isinstance(alias_type, str) and alias_type in AliasType._value2member_map_


def is_valid_alias_key(cle: Any) -> bool:
    """Check that ``cle`` has the shape of an RFC 4122 version 4 UUID"""
    return isinstance(cle, str) and ALIAS_KEY_PATTERN.fullmatch(cle) is not None


@dataclass(frozen=True)
class Alias:
    """Alias snapshot"""
    cle: str
    type: AliasType
    compte: str
    date_creation: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cle": self.cle,
            "type": self.type.value,
            "compte": self.compte,
            "dateCreation": self.date_creation.isoformat(),
        }


def seed_aliases(now: Optional[datetime] = None) -> List[Alias]:
    """
    Fixture aliases, oldest first.

    CIC2344256727788288822 gets two aliases and CIC9999999999999999999 is
    filled up to the 20 alias business cap.
    """
    now = now or datetime.now(timezone.utc)
    # Oldest first, so 9c2c3500 precedes 8b1b2499 in listings and survives
    # eviction as the earliest-inserted alias
    aliases = [
        Alias("9c2c3500-4f61-4c6c-a868-bd8b94e9bb8f", AliasType.MCOD,
              "CIC2344256727788288822", now - timedelta(days=2)),
        Alias("8b1b2499-3e50-435b-b757-ac7a83d8aa7f", AliasType.SHID,
              "CIC2344256727788288822", now - timedelta(days=1)),
    ]
    for index in range(20):
        aliases.append(Alias(
            cle=str(uuid.UUID(int=index + 1, version=4)),
            type=AliasType.SHID if index % 2 == 0 else AliasType.MCOD,
            compte="CIC9999999999999999999",
            date_creation=now - timedelta(days=20 - index),
        ))
    return aliases


class AliasStore:
    """In-memory alias table, kept in insertion order"""

    def __init__(self, aliases: Optional[Iterable[Alias]] = None,
                 working_set: int = 3, retained_on_overflow: int = 2):
        if not 0 <= retained_on_overflow < working_set:
            raise ValueError("retained_on_overflow must be smaller than working_set")
        self._aliases: List[Alias] = list(aliases or ())
        self.working_set = working_set
        self.retained_on_overflow = retained_on_overflow
        self._lock = threading.RLock()
        self.logger = get_logger("pispi.aliases")

    @classmethod
    def seeded(cls, working_set: int = 3, retained_on_overflow: int = 2) -> 'AliasStore':
        return cls(seed_aliases(), working_set, retained_on_overflow)

    def find_by_account(self, numero: str) -> List[Alias]:
        with self._lock:
            return [a for a in self._aliases if a.compte == numero]

    def count(self, numero: str) -> int:
        with self._lock:
            return sum(1 for a in self._aliases if a.compte == numero)

    def _new_key(self) -> str:
        existing = {a.cle.lower() for a in self._aliases}
        while True:
            cle = str(uuid.uuid4())
            if cle not in existing:
                return cle

    def save(self, numero: str, alias_type: AliasType) -> Alias:
        """
        Create an alias for ``numero``.

        When the account already holds ``working_set`` aliases or more, only
        its ``retained_on_overflow`` earliest-inserted aliases survive before
        the new one is appended.
        """
        with self._lock:
            owned = [a for a in self._aliases if a.compte == numero]
            if len(owned) >= self.working_set:
                kept = owned[:self.retained_on_overflow]
                evicted = owned[self.retained_on_overflow:]
                self._aliases = [a for a in self._aliases if a.compte != numero] + kept
                log_action(
                    self.logger, "warning", "Alias working set full, evicting aliases",
                    action="evict_aliases", resource=f"compte:{numero}",
                    extra={"evicted": [a.cle for a in evicted]}
                )

            alias = Alias(cle=self._new_key(), type=alias_type, compte=numero)
            self._aliases.append(alias)

            log_action(
                self.logger, "info", "Alias created",
                action="create_alias", resource=f"compte:{numero}",
                extra={"cle": alias.cle, "type": alias_type.value}
            )
            return alias

    def delete(self, numero: str, cle: str) -> bool:
        """Remove the alias matching both account and key; False when none matches"""
        with self._lock:
            for index, alias in enumerate(self._aliases):
                if alias.compte == numero and alias.cle == cle:
                    del self._aliases[index]
                    log_action(
                        self.logger, "info", "Alias deleted",
                        action="delete_alias", resource=f"compte:{numero}",
                        extra={"cle": cle}
                    )
                    return True
            return False
