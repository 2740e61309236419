"""
Displays app services layer.

Point-of-sale display units: registration, installation at establishments,
maintenance and removal.
"""

from .exceptions import (
    DisplayNotFoundError,
    DisplayNotInstallableError,
    DisplayDeployedError,
    DisplayEstablishmentMismatchError,
)
from .display_management import (
    get_display,
    list_displays,
    summarize_displays,
    create_display,
    update_display,
    delete_display,
)

__all__ = [
    # Exceptions
    'DisplayNotFoundError',
    'DisplayNotInstallableError',
    'DisplayDeployedError',
    'DisplayEstablishmentMismatchError',

    # Display management
    'get_display',
    'list_displays',
    'summarize_displays',
    'create_display',
    'update_display',
    'delete_display',
]
