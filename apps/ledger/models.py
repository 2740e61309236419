from decimal import Decimal
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
import uuid


class TransactionKind(models.TextChoices):
    RECHARGE = 'RECHARGE', 'Recharge'
    USAGE = 'USAGE', 'Usage'


class TransactionStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class CommissionStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    PAID = 'PAID', 'Paid'
    CANCELLED = 'CANCELLED', 'Cancelled'


class Transaction(models.Model):
    """
    One balance movement on a card.

    A COMPLETED transaction is always matched by exactly one balance change
    already applied to its card.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kind = models.CharField(max_length=10, choices=TransactionKind.choices)
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    status = models.CharField(
        max_length=10,
        choices=TransactionStatus.choices,
        default=TransactionStatus.PENDING,
    )
    card = models.ForeignKey(
        'cards.Card',
        on_delete=models.PROTECT,
        related_name='transactions',
    )
    establishment = models.ForeignKey(
        'franchises.Establishment',
        on_delete=models.PROTECT,
        related_name='transactions',
    )
    balance_after = models.DecimalField(max_digits=10, decimal_places=2)
    customer_name = models.CharField(max_length=150, blank=True)
    customer_phone = models.CharField(max_length=20, blank=True)
    receipt = models.CharField(max_length=64, blank=True, db_index=True)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ledger_transactions',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'ledger_transactions'
        indexes = [
            models.Index(fields=['card', 'created_at'], name='ledger_tran_card_id_4f1e2b_idx'),
            models.Index(fields=['establishment', 'created_at'], name='ledger_tran_establi_9a3c57_idx'),
            models.Index(fields=['kind', 'status'], name='ledger_tran_kind_6d2e80_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name='transaction_amount_positive',
            ),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.kind} {self.amount} on {self.card_id}"


class Commission(models.Model):
    """
    Franchisee's share of one usage transaction.

    ``rate`` is the franchisee's rate at the time of the usage; later rate
    changes never recompute it. The one-to-one link keeps at most one
    commission per transaction at the database level.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
    )
    status = models.CharField(
        max_length=10,
        choices=CommissionStatus.choices,
        default=CommissionStatus.PENDING,
    )
    franchisee = models.ForeignKey(
        'franchises.Franchisee',
        on_delete=models.PROTECT,
        related_name='commissions',
    )
    establishment = models.ForeignKey(
        'franchises.Establishment',
        on_delete=models.PROTECT,
        related_name='commissions',
    )
    transaction = models.OneToOneField(
        Transaction,
        on_delete=models.PROTECT,
        related_name='commission',
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'commissions'
        indexes = [
            models.Index(fields=['franchisee', 'status'], name='commissions_franchi_1b8d42_idx'),
            models.Index(fields=['establishment', 'created_at'], name='commissions_establi_5e0f39_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.amount} ({self.rate}%) {self.status}"
