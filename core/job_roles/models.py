"""
Roles and Navigation Page Models
Manages role-based access control with per-role page hierarchy and ordering,
and the activity log of changes made to them.
"""
from datetime import datetime, time

from django.conf import settings
from django.db import models
from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from core.base.models import AuditMixin, SoftDeleteMixin
from core.base.managers import BaseQuerySet, PageManager


class RoleQuerySet(BaseQuerySet):
    search_fields = ('name', 'description')


class Role(AuditMixin):
    """
    Role model: a named permission bundle assigned to users.
    A role owns an ordered, two-level tree of navigation pages.
    """
    name = models.CharField(max_length=100, unique=True, db_index=True)
    description = models.TextField(blank=True, null=True)

    objects = RoleQuerySet.as_manager()

    class Meta:
        db_table = 'roles'
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'
        ordering = ['name']

    def __str__(self):
        return self.name

    def delete(self, *args, **kwargs):
        """
        Prevent deletion if role is assigned to users.
        """
        if self.user_memberships.exists():
            raise ValidationError(
                f"Cannot delete role '{self.name}' because it is assigned to "
                f"{self.user_memberships.count()} user(s)"
            )
        return super().delete(*args, **kwargs)


class Page(AuditMixin, SoftDeleteMixin):
    """
    Page model representing a navigable destination of the dashboard.
    Either an internal route ('/users') or an absolute external URL.
    Inactive pages stay assigned but are hidden from resolved navigation.
    """
    name = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Human-readable name shown in the navigation"
    )
    url = models.CharField(
        max_length=500,
        unique=True,
        help_text="Route path (e.g. '/users') or absolute external URL"
    )
    icon = models.CharField(max_length=255, blank=True, null=True)
    is_external = models.BooleanField(default=False)

    objects = PageManager()

    class Meta:
        db_table = 'pages'
        verbose_name = 'Page'
        verbose_name_plural = 'Pages'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.url})"

    def delete(self, *args, **kwargs):
        """
        Prevent deletion if page is assigned to roles.
        Maintains referential integrity at the application level.
        """
        if self.role_pages.exists():
            raise ValidationError(
                f"Cannot delete page '{self.name}' because it is assigned to "
                f"{self.role_pages.values('role').distinct().count()} role(s)"
            )
        return super().delete(*args, **kwargs)


class RolePage(models.Model):
    """
    Assignment of a page to a role, with its place in the role's navigation.

    parent_page points at another page assigned to the same role (submenu),
    or is null for a main-menu entry. display_order is contiguous (0..n-1)
    within each (role, parent_page) sibling group once normalized.
    """
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name='role_pages'
    )
    page = models.ForeignKey(
        Page,
        on_delete=models.CASCADE,
        related_name='role_pages'
    )
    parent_page = models.ForeignKey(
        Page,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='child_role_pages',
        help_text="Parent page within the same role, null for a main-menu entry"
    )
    display_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'role_pages'
        verbose_name = 'Role Page'
        verbose_name_plural = 'Role Pages'
        unique_together = ('role', 'page')
        ordering = ['role_id', 'parent_page_id', 'display_order']
        indexes = [
            models.Index(fields=['role', 'parent_page', 'display_order'], name='role_pages_order_idx'),
        ]

    def __str__(self):
        return f"{self.role.name} - {self.page.name} #{self.display_order}"

    def clean(self):
        if self.parent_page_id is not None and self.parent_page_id == self.page_id:
            raise ValidationError({'parent_page': 'A page cannot be its own parent.'})


class UserRole(models.Model):
    """
    Membership of a user in a role.
    The primary role is resolved first when a user's navigation is merged.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='role_memberships'
    )
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name='user_memberships'
    )
    is_primary = models.BooleanField(default=False)
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'user_roles'
        verbose_name = 'User Role'
        verbose_name_plural = 'User Roles'
        unique_together = ('user', 'role')
        ordering = ['user_id', '-is_primary', 'assigned_at', 'id']

    def __str__(self):
        return f"{self.user.email} - {self.role.name}"


class ActivityLogQuerySet(models.QuerySet):

    def filter_by_query_params(self, query_params):
        """
        Filter entries from query parameters.

        Args:
            query_params: QueryDict or dict with optional keys:
                - user_id, action, resource, resource_id: Exact match
                - start_date / end_date: ISO date or datetime bounds on created_at

        Raises:
            ValidationError: an id or date parameter can't be parsed
        """
        queryset = self

        for param in ('action', 'resource'):
            value = (query_params.get(param) or '').strip()
            if value:
                queryset = queryset.filter(**{param: value})

        for param in ('user_id', 'resource_id'):
            value = (query_params.get(param) or '').strip()
            if value:
                if not value.isdigit():
                    raise ValidationError(f"{param} must be an integer")
                queryset = queryset.filter(**{param: int(value)})

        start = _parse_bound(query_params.get('start_date'), 'start_date')
        if start is not None:
            queryset = queryset.filter(created_at__gte=start)

        end = _parse_bound(query_params.get('end_date'), 'end_date', end_of_day=True)
        if end is not None:
            queryset = queryset.filter(created_at__lte=end)

        return queryset


def _parse_bound(value, param, end_of_day=False):
    value = (value or '').strip()
    if not value:
        return None
    try:
        day = parse_date(value)
        if day is not None:
            moment = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            moment = parse_datetime(value)
        if moment is None:
            raise ValueError(value)
    except ValueError:
        raise ValidationError(f"{param} must be an ISO date or datetime")
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment, timezone.get_default_timezone())
    return moment


class ActivityLog(models.Model):
    """
    Audit trail of changes to roles, pages and role memberships.

    username keeps the actor's email so entries stay readable after the
    user is deleted.
    """

    ACTION_CREATE = 'create'
    ACTION_UPDATE = 'update'
    ACTION_DELETE = 'delete'
    ACTION_PAGE_ORDER = 'page_order'
    ACTION_PAGE_ASSIGN = 'page_assign'
    ACTION_PAGE_REMOVE = 'page_remove'
    ACTION_ROLE_ASSIGN = 'role_assign'
    ACTION_CHOICES = [
        (ACTION_CREATE, 'Create'),
        (ACTION_UPDATE, 'Update'),
        (ACTION_DELETE, 'Delete'),
        (ACTION_PAGE_ORDER, 'Page order update'),
        (ACTION_PAGE_ASSIGN, 'Page assign'),
        (ACTION_PAGE_REMOVE, 'Page remove'),
        (ACTION_ROLE_ASSIGN, 'Role assign'),
    ]

    RESOURCE_ROLE = 'role'
    RESOURCE_PAGE = 'page'
    RESOURCE_USER = 'user'
    RESOURCE_CHOICES = [
        (RESOURCE_ROLE, 'Role'),
        (RESOURCE_PAGE, 'Page'),
        (RESOURCE_USER, 'User'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activity_logs'
    )
    username = models.CharField(max_length=255, blank=True, default='')
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    resource = models.CharField(max_length=20, choices=RESOURCE_CHOICES)
    resource_id = models.PositiveBigIntegerField(null=True, blank=True)
    details = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = ActivityLogQuerySet.as_manager()

    class Meta:
        db_table = 'activity_logs'
        verbose_name = 'Activity Log'
        verbose_name_plural = 'Activity Logs'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='activity_user_idx'),
            models.Index(fields=['resource', 'resource_id'], name='activity_resource_idx'),
        ]

    def __str__(self):
        actor = self.username or 'SYSTEM'
        return f"{self.action} {self.resource} #{self.resource_id} by {actor}"
