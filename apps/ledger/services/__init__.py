"""
Ledger app services layer.

LedgerProcessor is the only writer of card balances; the other modules
cover commission settlement and the read side (lists and summaries).
"""

from .exceptions import (
    InvalidAmountError,
    TransactionNotFoundError,
    CommissionNotFoundError,
    DuplicateCommissionError,
    CardBoundElsewhereError,
)
from .processor import (
    LedgerEntry,
    LedgerProcessor,
    validate_amount,
    generate_receipt,
)
from .commission_management import (
    record_commission,
    get_commission,
    list_commissions,
    summarize_commissions,
    pay_commission,
    cancel_commission,
)
from .transaction_queries import (
    get_transaction,
    list_transactions,
    summarize_transactions,
)

__all__ = [
    # Exceptions
    'InvalidAmountError',
    'TransactionNotFoundError',
    'CommissionNotFoundError',
    'DuplicateCommissionError',
    'CardBoundElsewhereError',

    # Processor
    'LedgerEntry',
    'LedgerProcessor',
    'validate_amount',
    'generate_receipt',

    # Commissions
    'record_commission',
    'get_commission',
    'list_commissions',
    'summarize_commissions',
    'pay_commission',
    'cancel_commission',

    # Transactions (read side)
    'get_transaction',
    'list_transactions',
    'summarize_transactions',
]
