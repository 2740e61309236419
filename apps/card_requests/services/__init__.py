"""
Card requests app services layer.

Establishments ask their franchisee for more physical cards; the franchisee
side approves, denies, ships and confirms delivery.
"""

from .exceptions import (
    CardRequestNotFoundError,
    InvalidRequestDatesError,
    RequestNotCancellableError,
)
from .request_management import (
    get_request,
    list_requests,
    summarize_requests,
    create_request,
    update_request,
    cancel_request,
)

__all__ = [
    # Exceptions
    'CardRequestNotFoundError',
    'InvalidRequestDatesError',
    'RequestNotCancellableError',

    # Request management
    'get_request',
    'list_requests',
    'summarize_requests',
    'create_request',
    'update_request',
    'cancel_request',
]
