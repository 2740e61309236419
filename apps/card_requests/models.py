from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
import uuid


class RequestStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    APPROVED = 'APPROVED', 'Approved'
    DENIED = 'DENIED', 'Denied'
    SHIPPED = 'SHIPPED', 'Shipped'
    DELIVERED = 'DELIVERED', 'Delivered'


class CardRequest(models.Model):
    """An establishment's request to its franchisee for more physical cards."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    establishment = models.ForeignKey(
        'franchises.Establishment',
        on_delete=models.PROTECT,
        related_name='card_requests',
    )
    franchisee = models.ForeignKey(
        'franchises.Franchisee',
        on_delete=models.PROTECT,
        related_name='card_requests',
    )
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(1000)],
    )
    status = models.CharField(
        max_length=10,
        choices=RequestStatus.choices,
        default=RequestStatus.PENDING,
    )
    notes = models.TextField(blank=True)
    requested_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='card_requests',
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'card_requests'
        indexes = [
            models.Index(fields=['franchisee', 'status'], name='card_reques_franchi_8e2a71_idx'),
            models.Index(fields=['establishment', 'created_at'], name='card_reques_establi_0c5b94_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1) & models.Q(quantity__lte=1000),
                name='card_request_quantity_range',
            ),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.quantity} cards for {self.establishment_id} ({self.status})"
