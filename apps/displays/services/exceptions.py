"""Domain-specific exceptions for display units."""
from apps.core.exceptions import ConflictError, EntityNotFound, ValidationFailed


class DisplayNotFoundError(EntityNotFound):
    default_detail = 'Display not found.'
    default_code = 'display_not_found'


class DisplayNotInstallableError(ValidationFailed):
    default_detail = 'A display cannot be INSTALLED without an establishment.'
    default_code = 'display_without_establishment'


class DisplayDeployedError(ConflictError):
    default_detail = 'Installed or maintained displays cannot be deleted.'
    default_code = 'display_deployed'


class DisplayEstablishmentMismatchError(ValidationFailed):
    default_detail = "Establishment does not belong to the display's franchisee."
    default_code = 'establishment_mismatch'
