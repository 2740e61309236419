from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import models
import uuid


class CardStatus(models.TextChoices):
    AVAILABLE = 'AVAILABLE', 'Available'
    ACTIVE = 'ACTIVE', 'Active'
    USED = 'USED', 'Used'
    BLOCKED = 'BLOCKED', 'Blocked'
    EXPIRED = 'EXPIRED', 'Expired'


class Card(models.Model):
    """
    Prepaid stored-value card.

    The balance only changes through the ledger processor, which locks the
    row and records a Transaction for every change.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=50, unique=True, db_index=True)
    qr_code = models.CharField(max_length=255, blank=True)
    balance = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    status = models.CharField(
        max_length=10,
        choices=CardStatus.choices,
        default=CardStatus.AVAILABLE,
    )
    franchisee = models.ForeignKey(
        'franchises.Franchisee',
        on_delete=models.PROTECT,
        related_name='cards',
    )
    establishment = models.ForeignKey(
        'franchises.Establishment',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='cards',
    )
    customer_reference = models.CharField(max_length=100, blank=True)
    activated_at = models.DateTimeField(null=True, blank=True)
    used_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'cards'
        indexes = [
            models.Index(fields=['franchisee', 'status'], name='cards_franchi_7c4d10_idx'),
            models.Index(fields=['establishment', 'status'], name='cards_establi_2a9f63_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(balance__gte=0),
                name='card_balance_non_negative',
            ),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.code} ({self.status})"

    @property
    def is_suspended(self):
        return self.status in (CardStatus.BLOCKED, CardStatus.EXPIRED)
