"""
Core Base Module

Provides shared base classes, mixins, and utilities for the dashboard apps.

**Architecture:**
Each feature is a separate mixin that can be composed together.

Exports:
    Basic Utilities:
        - StatusChoices: Standard ACTIVE/INACTIVE status choices

    Individual Feature Mixins:
        - AuditMixin: Adds created_at, updated_at, created_by, updated_by
        - SoftDeleteMixin: Adds status + soft delete behavior

Usage Examples:

    from core.base import AuditMixin, SoftDeleteMixin
    from core.base.managers import PageManager

    class Page(AuditMixin, SoftDeleteMixin, models.Model):
        name = models.CharField(max_length=100)
        objects = PageManager()

Managers live in core.base.managers and are imported from there directly,
since they are only needed where models are declared.
"""

from core.base.models import (
    StatusChoices,
    AuditMixin,
    SoftDeleteMixin,
)

__all__ = [
    'StatusChoices',
    'AuditMixin',
    'SoftDeleteMixin',
]
