from typing import Dict, Iterator, Optional

from models import Transaction, ClientAccount


class StateManager:
    """
    Owns the client accounts and the transaction history used for dispute lookups.
    Single-threaded: one record is applied at a time, so both maps are always
    seen as a consistent pair.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Transaction] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Retrieve an existing account without creating it."""
        return self._accounts.get(client_id)

    def store_transaction(self, transaction: Transaction) -> None:
        """
        Store transaction for future dispute lookups.
        A transaction reusing an id replaces the stored entry.
        """
        self._transactions[transaction.transaction_id] = transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def remove_transaction(self, transaction_id: int) -> None:
        """Drop a transaction from history once its dispute is settled."""
        self._transactions.pop(transaction_id, None)

    def iter_accounts(self) -> Iterator[ClientAccount]:
        """Iterate over known accounts in insertion order."""
        return iter(self._accounts.values())

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
