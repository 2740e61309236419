from django.db import models
import uuid


class DisplayStatus(models.TextChoices):
    AVAILABLE = 'AVAILABLE', 'Available'
    INSTALLED = 'INSTALLED', 'Installed'
    MAINTENANCE = 'MAINTENANCE', 'Maintenance'


class UnitType(models.TextChoices):
    COUNTER = 'COUNTER', 'Counter'
    WALL = 'WALL', 'Wall'
    TABLE = 'TABLE', 'Table'


class Display(models.Model):
    """Physical point-of-sale display unit owned by a franchisee."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    franchisee = models.ForeignKey(
        'franchises.Franchisee',
        on_delete=models.PROTECT,
        related_name='displays',
    )
    establishment = models.ForeignKey(
        'franchises.Establishment',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='displays',
    )
    unit_type = models.CharField(
        max_length=10,
        choices=UnitType.choices,
        default=UnitType.COUNTER,
    )
    status = models.CharField(
        max_length=12,
        choices=DisplayStatus.choices,
        default=DisplayStatus.AVAILABLE,
    )
    installed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'displays'
        indexes = [
            models.Index(fields=['franchisee', 'status'], name='displays_franchi_3d6c08_idx'),
            models.Index(fields=['establishment'], name='displays_establi_7f1a25_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(status='INSTALLED') | models.Q(establishment__isnull=False),
                name='display_installed_has_establishment',
            ),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_unit_type_display()} display ({self.status})"
