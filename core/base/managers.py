"""
Core Base Managers Module

Provides custom managers and querysets for base models.

**Architecture:**
- BaseQuerySet: Generic filtering (name/search)
- SoftDeleteQuerySet: For models with status field

Usage:
    from core.base import SoftDeleteMixin
    from core.base.managers import PageManager

    class Page(SoftDeleteMixin, models.Model):
        objects = PageManager()

    Page.objects.active()
"""

from django.db import models
from django.db.models import Q
from core.base.models import StatusChoices


class BaseQuerySet(models.QuerySet):
    """
    Base QuerySet with common filtering methods.

    Methods:
        - filter_by_search_params: Filter by name/search
    """

    search_fields = ('name',)

    def filter_by_search_params(self, query_params):
        """
        Apply standard name/search filters from query parameters.

        Args:
            query_params: QueryDict or dict with optional keys:
                - name: Contains match (case-insensitive)
                - search: Contains match across the queryset's search_fields

        Returns:
            Filtered QuerySet
        """
        queryset = self

        name = query_params.get('name')
        if name:
            queryset = queryset.filter(name__icontains=name.strip())

        search = query_params.get('search')
        if search and search.strip():
            condition = Q()
            for field in self.search_fields:
                condition |= Q(**{f'{field}__icontains': search.strip()})
            queryset = queryset.filter(condition)

        return queryset


class SoftDeleteQuerySet(BaseQuerySet):
    """
    QuerySet for SoftDeleteMixin models (models with status field).

    Methods:
        - active(): Return status=ACTIVE records
        - filter_by_status(): Filter by a ?status= query parameter
    """

    def active(self):
        """Return only active records (status=ACTIVE)."""
        return self.filter(status=StatusChoices.ACTIVE)

    def filter_by_status(self, status):
        """Filter by a status query parameter ('active', 'inactive' or empty for all)."""
        if not status or not status.strip():
            return self
        return self.filter(status=status.strip().lower())


class PageQuerySet(SoftDeleteQuerySet):
    search_fields = ('name', 'url')


class PageManager(models.Manager.from_queryset(PageQuerySet)):
    """Manager for navigation pages, searchable by name and url."""
    pass
