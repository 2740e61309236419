from decimal import Decimal
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
import uuid


class ExternalLinkage(models.TextChoices):
    UNLINKED = 'UNLINKED', 'Unlinked'
    LINKED = 'LINKED', 'Linked'
    LINK_FAILED = 'LINK_FAILED', 'Link failed'


class OrganisationStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    INACTIVE = 'INACTIVE', 'Inactive'


class ExternalLinkageModel(models.Model):
    """
    Customer record at the payment gateway.

    The local row is created first; the gateway customer is created after
    commit and its outcome is recorded here without touching the rest of
    the row.
    """

    external_linkage = models.CharField(
        max_length=20,
        choices=ExternalLinkage.choices,
        default=ExternalLinkage.UNLINKED,
    )
    external_customer_id = models.CharField(max_length=64, blank=True)
    external_link_error = models.TextField(blank=True)

    class Meta:
        abstract = True

    def mark_linked(self, customer_id):
        self.external_linkage = ExternalLinkage.LINKED
        self.external_customer_id = customer_id
        self.external_link_error = ''
        self.save(update_fields=[
            'external_linkage', 'external_customer_id', 'external_link_error', 'updated_at',
        ])

    def mark_link_failed(self, reason):
        self.external_linkage = ExternalLinkage.LINK_FAILED
        self.external_link_error = reason
        self.save(update_fields=['external_linkage', 'external_link_error', 'updated_at'])


class Franchisor(models.Model):
    """Top of the network; owns every franchisee."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    cnpj = models.CharField(max_length=18, unique=True)
    email = models.EmailField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'franchisors'
        ordering = ['name']

    def __str__(self):
        return self.name


class Franchisee(ExternalLinkageModel):
    """Regional operator owning cards, establishments and a commission rate."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    franchisor = models.ForeignKey(
        Franchisor,
        on_delete=models.PROTECT,
        related_name='franchisees',
    )
    name = models.CharField(max_length=200)
    cnpj = models.CharField(max_length=18, unique=True)
    email = models.EmailField(max_length=255)
    phone = models.CharField(max_length=20, blank=True)
    region = models.CharField(max_length=100, blank=True)
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('10.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
        help_text='Percentage of each card usage owed as commission',
    )
    status = models.CharField(
        max_length=10,
        choices=OrganisationStatus.choices,
        default=OrganisationStatus.ACTIVE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'franchisees'
        indexes = [
            models.Index(fields=['franchisor', 'status'], name='franchisees_franchi_5b1c2e_idx'),
            models.Index(fields=['region'], name='franchisees_region_8d0a4f_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(commission_rate__gte=0) & models.Q(commission_rate__lte=100),
                name='franchisee_commission_rate_range',
            ),
        ]
        ordering = ['name']

    def __str__(self):
        return self.name


class Establishment(ExternalLinkageModel):
    """Merchant location where cards are recharged and used."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    franchisee = models.ForeignKey(
        Franchisee,
        on_delete=models.PROTECT,
        related_name='establishments',
    )
    name = models.CharField(max_length=200)
    cnpj = models.CharField(max_length=18, unique=True)
    email = models.EmailField(max_length=255)
    phone = models.CharField(max_length=20, blank=True)
    address = models.CharField(max_length=255, blank=True)
    category = models.CharField(max_length=100, blank=True)
    status = models.CharField(
        max_length=10,
        choices=OrganisationStatus.choices,
        default=OrganisationStatus.ACTIVE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'establishments'
        indexes = [
            models.Index(fields=['franchisee', 'status'], name='establishme_franchi_3e7b91_idx'),
        ]
        ordering = ['name']

    def __str__(self):
        return self.name
