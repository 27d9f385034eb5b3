"""
Ledger - account balances and their transaction history.

Every balance change is recorded as a transaction row in the same database
transaction, so an account's stored balance always equals the sum of its
rows.

Usage:
    from ledger.services import LedgerService

    LedgerService.topup(account_id, 5000)
    result = LedgerService.transfer(account_id, other_id, 2500)

Key components:
    - models.py: Account, TransactionCategory, Transaction
    - services.py: LedgerService (all balance mutations and queries)
    - exceptions.py: LedgerError hierarchy
    - types.py: TransferResult, AccountAudit
"""
