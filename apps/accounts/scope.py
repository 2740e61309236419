"""
Row-level access scoping.

A ``ScopePredicate`` is derived once per request from the authenticated
account and passed explicitly to every service call. It answers two
questions the same way everywhere:

- which rows of a queryset the actor may see (``apply``)
- whether a single row is inside the actor's reach (``permits``/``require``)

Lookups by id resolve the row first and check scope second, so a missing
row is reported as not found and an existing row outside the scope as
forbidden.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from uuid import UUID

from apps.core.exceptions import ScopeForbidden

from .models import UserRole

logger = logging.getLogger(__name__)


class ScopeKind(str, Enum):
    UNRESTRICTED = 'UNRESTRICTED'
    FRANCHISEE = 'FRANCHISEE'
    ESTABLISHMENT = 'ESTABLISHMENT'


@dataclass(frozen=True)
class ScopePredicate:
    kind: ScopeKind
    franchisee_id: Optional[UUID] = None
    establishment_id: Optional[UUID] = None

    @classmethod
    def unrestricted(cls) -> 'ScopePredicate':
        return cls(ScopeKind.UNRESTRICTED)

    @classmethod
    def franchisee(cls, franchisee_id: UUID) -> 'ScopePredicate':
        return cls(ScopeKind.FRANCHISEE, franchisee_id=franchisee_id)

    @classmethod
    def establishment(cls, establishment_id: UUID, franchisee_id: UUID) -> 'ScopePredicate':
        return cls(
            ScopeKind.ESTABLISHMENT,
            franchisee_id=franchisee_id,
            establishment_id=establishment_id,
        )

    @property
    def is_franchisor(self) -> bool:
        return self.kind == ScopeKind.UNRESTRICTED

    @property
    def is_franchisee(self) -> bool:
        return self.kind == ScopeKind.FRANCHISEE

    @property
    def is_establishment(self) -> bool:
        return self.kind == ScopeKind.ESTABLISHMENT

    def apply(
        self,
        queryset,
        *,
        franchisee_lookup: str = 'franchisee_id',
        establishment_lookup: Optional[str] = 'establishment_id',
        franchisee_id: Optional[UUID] = None,
    ):
        """
        Narrow a queryset to the rows this actor may see.

        Args:
            queryset: Queryset to filter
            franchisee_lookup: Lookup path from the model to its owning franchisee id
            establishment_lookup: Lookup path to the establishment id, or None
                when the model has no establishment owner
            franchisee_id: Optional narrowing, only honoured for franchisors

        Returns:
            Filtered queryset
        """
        if self.kind == ScopeKind.UNRESTRICTED:
            if franchisee_id:
                return queryset.filter(**{franchisee_lookup: franchisee_id})
            return queryset
        if self.kind == ScopeKind.FRANCHISEE:
            return queryset.filter(**{franchisee_lookup: self.franchisee_id})
        if establishment_lookup is None:
            return queryset.none()
        return queryset.filter(**{establishment_lookup: self.establishment_id})

    def permits(
        self,
        *,
        franchisee_id: Optional[UUID],
        establishment_id: Optional[UUID] = None,
        allow_unbound: bool = False,
    ) -> bool:
        """
        Check a single row's owners against this scope.

        ``allow_unbound`` lets an establishment reach a row of its own
        franchisee that is not bound to any establishment yet (a fresh card).
        """
        if self.kind == ScopeKind.UNRESTRICTED:
            return True
        if self.kind == ScopeKind.FRANCHISEE:
            return franchisee_id == self.franchisee_id
        if establishment_id is not None:
            return establishment_id == self.establishment_id
        return allow_unbound and franchisee_id == self.franchisee_id

    def require(self, *, message: Optional[str] = None, **owners) -> None:
        """Raise ScopeForbidden unless ``permits(**owners)``."""
        if not self.permits(**owners):
            logger.info('Scope %s denied access to %s', self, owners)
            raise ScopeForbidden(message or 'This record is outside your scope.')

    def require_role(self, *kinds: ScopeKind, message: Optional[str] = None) -> None:
        """Raise ScopeForbidden unless the actor's scope is one of ``kinds``."""
        if self.kind not in kinds:
            logger.info('Scope %s lacks role %s', self.kind.value, [kind.value for kind in kinds])
            raise ScopeForbidden(message or 'Your role cannot perform this action.')

    def require_franchisor(self, message: Optional[str] = None) -> None:
        self.require_role(
            ScopeKind.UNRESTRICTED,
            message=message or 'Only the franchisor can perform this action.',
        )

    def require_manager(self, message: Optional[str] = None) -> None:
        """Franchisor or franchisee; establishments are refused."""
        self.require_role(
            ScopeKind.UNRESTRICTED,
            ScopeKind.FRANCHISEE,
            message=message or 'Establishments cannot perform this action.',
        )


def scope_for(user) -> ScopePredicate:
    """
    Derive the scope of an authenticated account.

    Raises:
        ScopeForbidden: If the account's role has no organisation link
    """
    if user.is_superuser or user.role == UserRole.FRANCHISOR:
        return ScopePredicate.unrestricted()

    if user.role == UserRole.FRANCHISEE and user.franchisee_id:
        return ScopePredicate.franchisee(user.franchisee_id)

    if user.role == UserRole.ESTABLISHMENT and user.establishment_id:
        return ScopePredicate.establishment(
            user.establishment_id,
            user.establishment.franchisee_id,
        )

    raise ScopeForbidden('Your account is not linked to any organisation.')


class ScopedViewMixin:
    """
    Derive ``self.scope`` once per request, after authentication and
    permission checks have run.
    """

    scope: ScopePredicate

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.scope = scope_for(request.user)
