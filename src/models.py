from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import NamedTuple, Optional


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    SUCCESS = "success"
    ACCOUNT_FROZEN = "account_frozen"
    ACCOUNT_NOT_FOUND = "account_not_found"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_CHARGEBACK = "invalid_chargeback"
    INVALID_DISPUTE = "invalid_dispute"
    INVALID_RESOLVE = "invalid_resolve"
    TRANSACTION_NOT_FOUND = "transaction_not_found"

    @property
    def is_success(self) -> bool:
        return self is ProcessingResult.SUCCESS


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None
    # Bookkeeping for stored deposits; never read from input.
    disputed: bool = False

    def amount_or_zero(self) -> Decimal:
        """Amount to apply, treating a missing amount as zero."""
        return self.amount if self.amount is not None else Decimal("0")

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    """
    Balances for a single client.

    Amounts passed to the mutators are assumed to be validated by the caller.
    Mutators return the account so a guard can be chained with the mutation,
    e.g. ``account.increase_available(x).increase_held(y)``.
    """

    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    @property
    def frozen(self) -> bool:
        return self.locked

    def increase_available(self, amount: Decimal) -> "ClientAccount":
        self.available += amount
        return self

    def decrease_available(self, amount: Decimal) -> "ClientAccount":
        self.available -= amount
        return self

    def increase_held(self, amount: Decimal) -> "ClientAccount":
        self.held += amount
        return self

    def decrease_held(self, amount: Decimal) -> "ClientAccount":
        self.held -= amount
        return self

    def withdraw(self, amount: Decimal) -> ProcessingResult:
        if self.available >= amount:
            self.available -= amount
            return ProcessingResult.SUCCESS
        return ProcessingResult.INSUFFICIENT_FUNDS

    def freeze(self) -> "ClientAccount":
        self.locked = True
        return self

    def check_frozen(self) -> ProcessingResult:
        if self.locked:
            return ProcessingResult.ACCOUNT_FROZEN
        return ProcessingResult.SUCCESS


class AccountSummary(NamedTuple):
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


class ProcessingStats:
    """Counters for one ingestion run."""

    def __init__(self):
        self.processed = 0
        self.skipped_rows = 0
        self.rejected: Counter = Counter()

    @property
    def failed(self) -> int:
        return sum(self.rejected.values())

    def record_result(self, result: ProcessingResult) -> None:
        if result.is_success:
            self.processed += 1
        else:
            self.rejected[result] += 1

    def record_skipped_row(self) -> None:
        self.skipped_rows += 1

    def summary(self) -> str:
        line = f"Processed: {self.processed}, Failed: {self.failed}, Skipped rows: {self.skipped_rows}"
        if self.rejected:
            breakdown = ", ".join(
                f"{result.value}={count}"
                for result, count in sorted(self.rejected.items(), key=lambda item: item[0].value)
            )
            line += f" ({breakdown})"
        return line
