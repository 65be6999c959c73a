"""
Account Module

Bank accounts exposed by the simulated participant. Accounts are loaded once
at store construction and never mutated afterwards: transfers are recorded
but balances are not recomputed.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional
import re
import threading

from .logging_config import get_logger


ACCOUNT_NUMBER_PATTERN = re.compile(r"CIC[0-9]+")
DEFAULT_CURRENCY = "XOF"


def is_valid_account_number(numero: Any) -> bool:
    """Check that ``numero`` looks like ``CIC`` followed by digits"""
    return isinstance(numero, str) and ACCOUNT_NUMBER_PATTERN.fullmatch(numero) is not None


@dataclass(frozen=True)
class Account:
    """
    Account snapshot

    ``solde`` is expressed in minor currency units.
    """
    numero: str
    solde: int
    devise: str = DEFAULT_CURRENCY

    def __post_init__(self):
        if not is_valid_account_number(self.numero):
            raise ValueError(f"Invalid account number: {self.numero}")
        if self.solde < 0:
            raise ValueError("Account balance cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {"numero": self.numero, "solde": self.solde, "devise": self.devise}


# Fixture accounts, each encoding one conformance scenario
SEED_ACCOUNTS = (
    Account("CIC2344256727788288822", 1500000),  # normal account
    Account("CIC2344256727788288823", 750000),   # normal account
    Account("CIC9999999999999999999", 100000),   # already holds 20 aliases
    Account("CIC8888888888888888888", 50000),    # insufficient funds for common amounts
    Account("CIC7777777777777777777", 200000),   # no aliases
)


class AccountStore:
    """Read-only in-memory table of accounts keyed by account number"""

    def __init__(self, accounts: Optional[Iterable[Account]] = None):
        self._accounts: Dict[str, Account] = {}
        self._lock = threading.RLock()
        self.logger = get_logger("pispi.accounts")
        for account in accounts or ():
            if account.numero in self._accounts:
                raise ValueError(f"Duplicate account number: {account.numero}")
            self._accounts[account.numero] = account

    @classmethod
    def seeded(cls) -> 'AccountStore':
        """Store populated with the conformance fixture accounts"""
        return cls(SEED_ACCOUNTS)

    def find_by_numero(self, numero: str) -> Optional[Account]:
        """Look up an account, returning None when it does not exist"""
        with self._lock:
            self.logger.debug("Account lookup", extra={"resource": f"compte:{numero}"})
            return self._accounts.get(numero)
