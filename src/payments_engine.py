import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional

from models import Transaction, TransactionType, ClientAccount, AccountSummary, ProcessingStats
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
# Fixed-point range of the amounts the engine accepts: at most 28 significant
# digits and 28 decimal places.
MAX_AMOUNT_DIGITS = 28
MAX_AMOUNT_SCALE = 28


def parse_unsigned(value: str, maximum: int) -> int:
    """Plain ASCII digits only; rejects signs, underscores and other numerals int() allows."""
    if not (value.isascii() and value.isdigit()):
        raise ValueError(f"{value!r} is not an unsigned integer")
    number = int(value)
    if number > maximum:
        raise ValueError(f"{number} out of range")
    return number


def parse_amount(value: str) -> Decimal:
    if not value.isascii() or "_" in value:
        raise ValueError(f"amount {value!r} is not a decimal number")
    amount = Decimal(value)
    if not amount.is_finite():
        raise ValueError(f"amount {value} is not a finite number")
    _, digits, exponent = amount.as_tuple()
    if amount.adjusted() >= MAX_AMOUNT_DIGITS or len(digits) > MAX_AMOUNT_DIGITS or exponent < -MAX_AMOUNT_SCALE:
        raise ValueError(f"amount {value} is out of range")
    return amount


class PaymentsEngine:
    """
    Reads transactions from CSV and applies them one at a time, in file order.
    Malformed rows are dropped before they reach the processor; rejected
    transactions are counted and otherwise ignored.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        self.process_transactions(self.read_transactions(filepath))
        logger.info(self._stats.summary())
        return self._state.get_all_accounts()

    def process_transactions(self, transactions: Iterable[Transaction]) -> None:
        """Apply each transaction in order. Failures never stop the run."""
        for transaction in transactions:
            result = self._processor.process_transaction(transaction)
            self._stats.record_result(result)

    def account_summaries(self) -> Iterator[AccountSummary]:
        return self._processor.account_summaries()

    def read_transactions(self, filepath: str) -> Iterator[Transaction]:
        """Lazily read CSV rows, yielding only the ones that parse."""
        # Undecodable bytes become U+FFFD, which fails field parsing and drops just that row.
        with open(filepath, "r", newline="", encoding="utf-8", errors="replace") as f:
            reader = csv.DictReader(f)
            for row in reader:
                transaction = self._parse_csv_row(row)
                if transaction is None:
                    self._stats.record_skipped_row()
                    continue
                yield transaction

    def _parse_csv_row(self, row: Dict[Optional[str], object]) -> Optional[Transaction]:
        """Parse CSV row into Transaction."""
        try:
            # Short rows leave trailing values as None; overlong rows collect extras under a None key.
            normalized = {
                k.strip(): (v or "").strip()
                for k, v in row.items()
                if k is not None
            }

            transaction_type_str = normalized["type"].lower()
            client_id = parse_unsigned(normalized["client"], MAX_CLIENT_ID)
            transaction_id = parse_unsigned(normalized["tx"], MAX_TRANSACTION_ID)

            amount = None
            amount_str = normalized.get("amount", "")
            if amount_str:
                amount = parse_amount(amount_str)

            return Transaction(
                transaction_type=TransactionType(transaction_type_str),
                client_id=client_id,
                transaction_id=transaction_id,
                amount=amount,
            )
        except (KeyError, ValueError, InvalidOperation) as e:
            logger.warning(f"Failed to parse row {row}: {e}")
            return None
