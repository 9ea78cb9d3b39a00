from django.db import models
from django.conf import settings


class StatusChoices(models.TextChoices):
    """
    Standard status choices for entities across the dashboard.

    Pages and other catalog entries use this instead of a boolean flag so the
    value stored matches what the admin screens display.
    """
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'


class AuditMixin(models.Model):
    """
    Adds audit fields to track creation and modification metadata.

    Fields:
        - created_at: Timestamp when record was created
        - updated_at: Timestamp when record was last modified
        - created_by: User who created the record (optional)
        - updated_by: User who last modified the record (optional)

    Usage:
        class Role(AuditMixin):
            name = models.CharField(max_length=100)

    Note: created_by and updated_by should be set manually in views/serializers.
    """
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Timestamp when record was created"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when record was last modified"
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(app_label)s_%(class)s_created',
        help_text="User who created this record"
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(app_label)s_%(class)s_updated',
        help_text="User who last updated this record"
    )

    class Meta:
        abstract = True


class SoftDeleteMixin(models.Model):
    """
    Mixin for models that support soft deletion.

    Instead of permanently deleting records, they are marked as inactive.
    Inactive pages stay assigned to their roles but are hidden from the
    resolved navigation.

    Fields:
        - status: StatusChoices (ACTIVE/INACTIVE)

    Methods:
        - deactivate(): Marks record as inactive (soft delete)
    """
    status = models.CharField(
        max_length=10,
        choices=StatusChoices.choices,
        default=StatusChoices.ACTIVE,
        help_text="Record status. Set to INACTIVE instead of deleting."
    )

    class Meta:
        abstract = True

    @property
    def is_active(self):
        return self.status == StatusChoices.ACTIVE

    def deactivate(self):
        """
        Soft delete: mark as inactive instead of removing from DB.
        """
        self.status = StatusChoices.INACTIVE
        self.save(update_fields=['status'])
