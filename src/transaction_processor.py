import logging
from typing import Iterator, Optional, Tuple

from models import Transaction, TransactionType, ClientAccount, ProcessingResult, AccountSummary
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to account state and keeps the dispute history.
    Every handler runs all of its checks before its first mutation, so a
    rejected transaction leaves state exactly as it found it.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Applied to the account
            Any other member: the reason the transaction was rejected
        """
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                result = self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                result = self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                result = self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                result = self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                result = self._handle_chargeback(transaction)
            case _:
                raise ValueError(f"Unknown transaction type: {transaction.transaction_type!r}")

        logger.debug(f"{transaction}: {result.value}")
        return result

    def account_summaries(self) -> Iterator[AccountSummary]:
        """
        Yield a summary row per known client.
        Order follows account creation, not client id; sort if output must be stable.
        """
        for account in self._state.iter_accounts():
            yield AccountSummary(
                client_id=account.client_id,
                available=account.available,
                held=account.held,
                total=account.total,
                locked=account.frozen,
            )

    def _lookup_disputable(
        self, transaction_id: int
    ) -> Tuple[ProcessingResult, Optional[Transaction], Optional[ClientAccount]]:
        """Find a stored transaction and the account of the client it belongs to."""
        original = self._state.get_transaction(transaction_id)
        if original is None:
            return ProcessingResult.TRANSACTION_NOT_FOUND, None, None

        account = self._state.get_account(original.client_id)
        if account is None:
            logger.warning(f"Tx {transaction_id}: stored for client {original.client_id} but no such account exists")
            return ProcessingResult.ACCOUNT_NOT_FOUND, original, None

        return ProcessingResult.SUCCESS, original, account

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        amount = transaction.amount_or_zero()
        if amount < 0:
            logger.warning(f"Deposit tx {transaction.transaction_id}: invalid amount {amount}")
            return ProcessingResult.INVALID_AMOUNT

        account = self._state.get_or_create_account(transaction.client_id)
        result = account.check_frozen()
        if not result.is_success:
            logger.info(f"Deposit tx {transaction.transaction_id}: account {account.client_id} is frozen")
            return result

        account.increase_available(amount)
        self._state.store_transaction(transaction)
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        amount = transaction.amount_or_zero()
        if amount < 0:
            logger.warning(f"Withdrawal tx {transaction.transaction_id}: invalid amount {amount}")
            return ProcessingResult.INVALID_AMOUNT

        account = self._state.get_or_create_account(transaction.client_id)
        result = account.check_frozen()
        if not result.is_success:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: account {account.client_id} is frozen")
            return result

        result = account.withdraw(amount)
        if not result.is_success:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: insufficient funds (available {account.available}, requested {amount})")
            return result

        self._state.store_transaction(transaction)
        return ProcessingResult.SUCCESS

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        result, original, account = self._lookup_disputable(transaction.transaction_id)
        if not result.is_success:
            return result

        if original.disputed:
            logger.info(f"Dispute for tx {transaction.transaction_id}: transaction already disputed")
            return ProcessingResult.INVALID_DISPUTE

        # Withdrawals cannot be disputed, the funds have already left the account.
        if original.transaction_type != TransactionType.DEPOSIT:
            logger.info(f"Dispute for tx {transaction.transaction_id}: only deposits can be disputed (got {original.transaction_type.value})")
            return ProcessingResult.INVALID_DISPUTE

        result = account.check_frozen()
        if not result.is_success:
            logger.info(f"Dispute for tx {transaction.transaction_id}: account {account.client_id} is frozen")
            return result

        # May take available below zero if part of the deposit was already withdrawn.
        amount = original.amount_or_zero()
        account.decrease_available(amount).increase_held(amount)
        original.disputed = True
        return ProcessingResult.SUCCESS

    # Resolve and chargeback skip the frozen check: disputes opened before a
    # chargeback froze the account can still be settled.

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        result, original, account = self._lookup_disputable(transaction.transaction_id)
        if not result.is_success:
            return result

        if not original.disputed:
            logger.info(f"Resolve for tx {transaction.transaction_id}: transaction is not disputed")
            return ProcessingResult.INVALID_RESOLVE

        amount = original.amount_or_zero()
        account.decrease_held(amount).increase_available(amount)
        # A settled transaction cannot be disputed again.
        self._state.remove_transaction(original.transaction_id)
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        result, original, account = self._lookup_disputable(transaction.transaction_id)
        if not result.is_success:
            return result

        if not original.disputed:
            logger.info(f"Chargeback for tx {transaction.transaction_id}: transaction is not disputed")
            return ProcessingResult.INVALID_CHARGEBACK

        account.decrease_held(original.amount_or_zero()).freeze()
        self._state.remove_transaction(original.transaction_id)
        return ProcessingResult.SUCCESS
