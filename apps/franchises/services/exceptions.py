"""
Domain-specific exceptions for the franchise network.

All of them are kinds of the shared error taxonomy, so views can let them
propagate to the project exception handler.
"""
from apps.core.exceptions import ConflictError, EntityNotFound, ValidationFailed


class FranchisorNotFoundError(EntityNotFound):
    default_detail = 'Franchisor not found.'
    default_code = 'franchisor_not_found'


class FranchiseeNotFoundError(EntityNotFound):
    default_detail = 'Franchisee not found.'
    default_code = 'franchisee_not_found'


class EstablishmentNotFoundError(EntityNotFound):
    default_detail = 'Establishment not found.'
    default_code = 'establishment_not_found'


class DuplicateDocumentError(ConflictError):
    default_detail = 'An organisation with this CNPJ already exists.'
    default_code = 'duplicate_document'


class InvalidCommissionRateError(ValidationFailed):
    default_detail = 'Commission rate must be between 0 and 100.'
    default_code = 'invalid_commission_rate'


class OrganisationInUseError(ConflictError):
    default_detail = 'This organisation still has dependent records.'
    default_code = 'organisation_in_use'
