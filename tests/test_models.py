import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import Transaction, TransactionType, ClientAccount, ProcessingResult, ProcessingStats


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=Decimal("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == Decimal("100.0")
        assert transaction.disputed is False

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None
        assert transaction.amount_or_zero() == Decimal("0")


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.locked is False
        assert account.frozen is False

    def test_total_property(self):
        account = ClientAccount(
            client_id=1,
            available=Decimal("100"),
            held=Decimal("50"),
        )
        assert account.total == Decimal("150")

    def test_chained_mutators(self):
        account = ClientAccount(client_id=1, available=Decimal("10"))
        returned = account.decrease_available(Decimal("4")).increase_held(Decimal("4"))

        assert returned is account
        assert account.available == Decimal("6")
        assert account.held == Decimal("4")

        account.decrease_held(Decimal("4")).increase_available(Decimal("4"))
        assert account.available == Decimal("10")
        assert account.held == Decimal("0")

    def test_decrease_available_has_no_floor(self):
        account = ClientAccount(client_id=1, available=Decimal("3"))
        account.decrease_available(Decimal("5"))
        assert account.available == Decimal("-2")

    def test_withdraw_success(self):
        account = ClientAccount(client_id=1, available=Decimal("10"))
        assert account.withdraw(Decimal("10")) == ProcessingResult.SUCCESS
        assert account.available == Decimal("0")

    def test_withdraw_insufficient_funds_leaves_state(self):
        account = ClientAccount(client_id=1, available=Decimal("5"), held=Decimal("2"))
        assert account.withdraw(Decimal("5.01")) == ProcessingResult.INSUFFICIENT_FUNDS
        assert account == ClientAccount(client_id=1, available=Decimal("5"), held=Decimal("2"))

    def test_freeze_is_idempotent(self):
        account = ClientAccount(client_id=1)
        assert account.check_frozen() == ProcessingResult.SUCCESS

        account.freeze().freeze()
        assert account.frozen is True
        assert account.check_frozen() == ProcessingResult.ACCOUNT_FROZEN

    def test_check_frozen_has_no_side_effect(self):
        account = ClientAccount(client_id=1, available=Decimal("1"))
        account.check_frozen()
        assert account == ClientAccount(client_id=1, available=Decimal("1"))


class TestProcessingResult:
    def test_enum_values(self):
        assert ProcessingResult.SUCCESS.value == "success"
        assert ProcessingResult.INSUFFICIENT_FUNDS.value == "insufficient_funds"
        assert ProcessingResult.TRANSACTION_NOT_FOUND.value == "transaction_not_found"

    def test_only_success_is_success(self):
        successes = [result for result in ProcessingResult if result.is_success]
        assert successes == [ProcessingResult.SUCCESS]
        assert len(ProcessingResult) == 9


class TestProcessingStats:
    def test_counts(self):
        stats = ProcessingStats()
        stats.record_result(ProcessingResult.SUCCESS)
        stats.record_result(ProcessingResult.SUCCESS)
        stats.record_result(ProcessingResult.INVALID_DISPUTE)
        stats.record_skipped_row()

        assert stats.processed == 2
        assert stats.failed == 1
        assert stats.skipped_rows == 1
        assert stats.summary() == "Processed: 2, Failed: 1, Skipped rows: 1 (invalid_dispute=1)"

    def test_summary_without_failures(self):
        assert ProcessingStats().summary() == "Processed: 0, Failed: 0, Skipped rows: 0"
