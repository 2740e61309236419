"""
Franchises app services layer.

Network management for franchisees and establishments, plus the
best-effort linkage of both to payment gateway customers.
"""

from .exceptions import (
    FranchisorNotFoundError,
    FranchiseeNotFoundError,
    EstablishmentNotFoundError,
    DuplicateDocumentError,
    InvalidCommissionRateError,
    OrganisationInUseError,
)
from .network_management import (
    validate_commission_rate,
    get_franchisee,
    list_franchisees,
    create_franchisee,
    update_franchisee,
    update_commission_rate,
    delete_franchisee,
    get_establishment,
    list_establishments,
    create_establishment,
    update_establishment,
    set_establishment_status,
    delete_establishment,
)
from .external_linkage import (
    link_external_customer,
    schedule_external_linkage,
)

__all__ = [
    # Exceptions
    'FranchisorNotFoundError',
    'FranchiseeNotFoundError',
    'EstablishmentNotFoundError',
    'DuplicateDocumentError',
    'InvalidCommissionRateError',
    'OrganisationInUseError',

    # Network management
    'validate_commission_rate',
    'get_franchisee',
    'list_franchisees',
    'create_franchisee',
    'update_franchisee',
    'update_commission_rate',
    'delete_franchisee',
    'get_establishment',
    'list_establishments',
    'create_establishment',
    'update_establishment',
    'set_establishment_status',
    'delete_establishment',

    # External linkage
    'link_external_customer',
    'schedule_external_linkage',
]
