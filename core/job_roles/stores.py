"""
Database access for the page hierarchy.

The hierarchy code works on PageInfo / Assignment snapshots; these classes are
the only place that reads or writes the Page, RolePage and UserRole tables.
"""
import logging
from typing import Iterable, List, Optional

from django.db import DatabaseError, transaction

from .hierarchy import Assignment, PageInfo
from .models import Page, RolePage, UserRole

logger = logging.getLogger(__name__)


class PageCatalog:
    """All navigation pages, as read-only snapshots."""

    def list_pages(self) -> List[PageInfo]:
        return [PageInfo.from_model(page) for page in Page.objects.all()]

    def list_active_pages(self) -> List[PageInfo]:
        return [PageInfo.from_model(page) for page in Page.objects.active()]

    def get_page(self, page_id) -> Optional[PageInfo]:
        page = Page.objects.filter(pk=page_id).first()
        return PageInfo.from_model(page) if page else None

    def get_pages(self, page_ids: Iterable[int]) -> List[PageInfo]:
        return [PageInfo.from_model(page) for page in Page.objects.filter(pk__in=set(page_ids))]


class AssignmentStore:
    """Persisted role/page rows."""

    def get_by_role(self, role_id) -> List[Assignment]:
        rows = RolePage.objects.filter(role_id=role_id).order_by('display_order', 'id')
        return [
            Assignment(
                role_id=row.role_id,
                page_id=row.page_id,
                parent_page_id=row.parent_page_id,
                display_order=row.display_order,
            )
            for row in rows
        ]

    def replace_for_role(self, role_id, assignments: Iterable[Assignment]) -> None:
        """
        Replace every row of the role in one transaction.
        Either the full new set is stored or nothing changes.
        """
        assignments = list(assignments)
        try:
            with transaction.atomic():
                RolePage.objects.filter(role_id=role_id).delete()
                RolePage.objects.bulk_create([
                    RolePage(
                        role_id=role_id,
                        page_id=assignment.page_id,
                        parent_page_id=assignment.parent_page_id,
                        display_order=assignment.display_order,
                    )
                    for assignment in assignments
                ])
        except DatabaseError:
            logger.exception(f"Failed to save page order for role {role_id}")
            raise
        logger.info(f"Saved {len(assignments)} page assignment(s) for role {role_id}")


class RoleMembership:
    """Which roles a user belongs to, primary role first."""

    def get_roles_for_user(self, user_id) -> List[int]:
        return list(
            UserRole.objects.filter(user_id=user_id)
            .order_by('-is_primary', 'assigned_at', 'id')
            .values_list('role_id', flat=True)
        )

    @transaction.atomic
    def replace_for_user(self, user_id, role_ids: Iterable[int], primary_role_id=None) -> None:
        role_ids = list(dict.fromkeys(role_ids))
        if primary_role_id is None and role_ids:
            primary_role_id = role_ids[0]

        UserRole.objects.filter(user_id=user_id).exclude(role_id__in=role_ids).delete()
        existing = set(UserRole.objects.filter(user_id=user_id).values_list('role_id', flat=True))
        UserRole.objects.bulk_create([
            UserRole(user_id=user_id, role_id=role_id)
            for role_id in role_ids
            if role_id not in existing
        ])
        UserRole.objects.filter(user_id=user_id).update(is_primary=False)
        if primary_role_id is not None:
            UserRole.objects.filter(user_id=user_id, role_id=primary_role_id).update(is_primary=True)
