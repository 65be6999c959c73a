"""
Test suite for accounts module

Tests account-number validation, the Account snapshot and the read-only store.
"""

import pytest
from dataclasses import FrozenInstanceError

from pispi_simulator.accounts import (
    Account, AccountStore, SEED_ACCOUNTS, is_valid_account_number
)


class TestAccountNumberValidation:
    """Test the CIC[0-9]+ account number shape"""

    def test_valid_numbers(self):
        """Test well-formed account numbers of any length"""
        assert is_valid_account_number("CIC1")
        assert is_valid_account_number("CIC2344256727788288822")
        assert is_valid_account_number("CIC" + "9" * 200)

    def test_invalid_numbers(self):
        """Test malformed account numbers"""
        assert not is_valid_account_number("CIC")
        assert not is_valid_account_number("cic123")
        assert not is_valid_account_number("ABC123")
        assert not is_valid_account_number("CIC12a")
        assert not is_valid_account_number(" CIC123")
        assert not is_valid_account_number("CIC123\n")
        assert not is_valid_account_number("")

    def test_non_string_values(self):
        """Test that non-strings are never valid"""
        assert not is_valid_account_number(None)
        assert not is_valid_account_number(123)


class TestAccount:
    """Test Account snapshot"""

    def test_default_currency(self):
        """Test XOF is the default currency"""
        account = Account("CIC100", 5000)
        assert account.devise == "XOF"
        assert account.to_dict() == {"numero": "CIC100", "solde": 5000, "devise": "XOF"}

    def test_account_is_immutable(self):
        """Test that balance cannot be mutated"""
        account = Account("CIC100", 5000)
        with pytest.raises(FrozenInstanceError):
            account.solde = 0

    def test_negative_balance_rejected(self):
        """Test balance must be non-negative"""
        with pytest.raises(ValueError, match="negative"):
            Account("CIC100", -1)

    def test_invalid_number_rejected(self):
        """Test account number must match the CIC pattern"""
        with pytest.raises(ValueError, match="Invalid account number"):
            Account("BAD", 10)


class TestAccountStore:
    """Test in-memory account table"""

    def test_seeded_store(self):
        """Test fixture accounts are all reachable"""
        store = AccountStore.seeded()
        for account in SEED_ACCOUNTS:
            assert store.find_by_numero(account.numero) == account

        assert store.find_by_numero("CIC8888888888888888888").solde == 50000
        assert store.find_by_numero("CIC2344256727788288822").solde == 1500000

    def test_missing_account(self):
        """Test lookup of an unknown account returns None"""
        store = AccountStore.seeded()
        assert store.find_by_numero("CIC0000000000") is None

    def test_empty_store(self):
        """Test a store built without accounts"""
        store = AccountStore()
        assert store.find_by_numero("CIC2344256727788288822") is None

    def test_duplicate_accounts_rejected(self):
        """Test account numbers are unique"""
        with pytest.raises(ValueError, match="Duplicate"):
            AccountStore([Account("CIC1", 10), Account("CIC1", 20)])
