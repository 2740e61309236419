"""
Cards app services layer.

Card lifecycle outside of money movements: create, edit, delete and the
administrative block/expire/activate overrides.
"""

from .exceptions import (
    CardNotFoundError,
    DuplicateCardCodeError,
    CardHasTransactionsError,
    CardSuspendedError,
    EstablishmentMismatchError,
)
from .card_management import (
    get_card,
    list_cards,
    create_card,
    update_card,
    delete_card,
    block_card,
    expire_card,
    activate_card,
)

__all__ = [
    # Exceptions
    'CardNotFoundError',
    'DuplicateCardCodeError',
    'CardHasTransactionsError',
    'CardSuspendedError',
    'EstablishmentMismatchError',

    # Card management
    'get_card',
    'list_cards',
    'create_card',
    'update_card',
    'delete_card',
    'block_card',
    'expire_card',
    'activate_card',
]
