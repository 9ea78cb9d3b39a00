"""
Service layer for role navigation.
Contains the business logic for resolving and editing role page hierarchies.
"""
import logging
from typing import Iterable, List

from django.conf import settings

from .editor import HierarchyEditor
from .hierarchy import (
    Assignment,
    PageTreeNode,
    build_tree,
    index_pages,
    iter_nodes,
    normalize,
    prune,
    validate_assignments,
)
from .stores import AssignmentStore, PageCatalog, RoleMembership

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 2

# max_depth default: read RBAC_PAGE_HIERARCHY. An explicit None means no limit.
FROM_SETTINGS = object()


def get_max_depth():
    """
    Nesting limit for role menus, from settings.RBAC_PAGE_HIERARCHY['MAX_DEPTH'].
    None disables the limit.
    """
    config = getattr(settings, 'RBAC_PAGE_HIERARCHY', {})
    return config.get('MAX_DEPTH', DEFAULT_MAX_DEPTH)


class ResolutionService:
    """
    Resolves the navigation tree shown to a role or a user.

    Reads are stateless: every call takes a fresh snapshot of the assignments
    and pages. Rows pointing at deleted pages are dropped and orphaned
    children promoted to the root, as build_tree() does.
    """

    def __init__(self, catalog=None, store=None, membership=None):
        self.catalog = catalog or PageCatalog()
        self.store = store or AssignmentStore()
        self.membership = membership or RoleMembership()

    def resolve_for_role(self, role_id) -> List[PageTreeNode]:
        """
        Navigation tree of a role without inactive pages.
        An inactive page hides its whole subtree.
        """
        assignments = self.store.get_by_role(role_id)
        pages = self.catalog.get_pages(assignment.page_id for assignment in assignments)
        tree = build_tree(assignments, pages)
        return prune(tree, lambda node: node.page.active)

    def resolve_for_user(self, user_id) -> List[PageTreeNode]:
        """
        Merge the trees of all the user's roles, primary role first.

        A page assigned to several roles is taken from the first role that
        has it, keeping its parent and display_order from that role. Equal
        display_order values coming from different roles keep role order.
        """
        merged = []
        pages = {}
        for role_id in self.membership.get_roles_for_user(user_id):
            for node in iter_nodes(self.resolve_for_role(role_id)):
                if node.page_id in pages:
                    continue
                pages[node.page_id] = node.page
                merged.append(Assignment(
                    role_id=role_id,
                    page_id=node.page_id,
                    parent_page_id=node.parent_page_id,
                    display_order=node.display_order,
                ))
        return build_tree(merged, pages)

    def has_page_access(self, user_id, url) -> bool:
        """True if the url is reachable from the user's navigation."""
        url = (url or '').strip()
        if not url:
            return False
        return any(node.page.url == url for node in iter_nodes(self.resolve_for_user(user_id)))


class RolePageOrderService:
    """
    Edits and saves the page order of one role.

    Every change goes through a HierarchyEditor loaded from the stored rows,
    and is saved with AssignmentStore.replace_for_role(), which swaps the
    role's rows in a single transaction.
    """

    def __init__(self, role, catalog=None, store=None, max_depth=FROM_SETTINGS):
        self.role = role
        self.catalog = catalog or PageCatalog()
        self.store = store or AssignmentStore()
        self.max_depth = get_max_depth() if max_depth is FROM_SETTINGS else max_depth

    def create_editor(self) -> HierarchyEditor:
        editor = HierarchyEditor(self.role.pk, self.catalog.list_pages(), max_depth=self.max_depth)
        editor.load(self.store.get_by_role(self.role.pk))
        return editor

    def get_page_order(self) -> List[Assignment]:
        """Normalized rows of the role, inactive pages included."""
        return self.create_editor().get_working_list()

    def save_page_order(self, assignments: Iterable[Assignment]) -> List[Assignment]:
        """
        Replace the role's pages with client supplied rows.
        The rows are validated strictly, then renumbered so every sibling
        group is contiguous.
        """
        pages = index_pages(self.catalog.list_pages())
        assignments = [
            Assignment(
                role_id=self.role.pk,
                page_id=assignment.page_id,
                parent_page_id=assignment.parent_page_id,
                display_order=assignment.display_order,
            )
            for assignment in assignments
        ]
        validate_assignments(assignments, pages, max_depth=self.max_depth)
        rows = normalize(assignments, pages, self.role.pk)
        self.store.replace_for_role(self.role.pk, rows)
        return rows

    def assign_page(self, page_id, parent_page_id=None) -> List[Assignment]:
        editor = self.create_editor()
        editor.add_page(page_id, parent_page_id)
        return self._persist(editor)

    def remove_page(self, page_id) -> List[Assignment]:
        editor = self.create_editor()
        editor.remove_page(page_id)
        return self._persist(editor)

    def apply_operations(self, operations, commit=False) -> List[Assignment]:
        """
        Run a batch of editor operations. Nothing is saved unless commit is
        true, which lets the role screen preview a change.
        """
        operations = list(operations)
        editor = self.create_editor()
        rows = editor.apply(operations)
        logger.debug(f"Applied {len(operations)} operation(s) to role {self.role.pk}, commit={commit}")
        if commit:
            return self._persist(editor)
        return rows

    def _persist(self, editor: HierarchyEditor) -> List[Assignment]:
        rows = editor.commit()
        self.store.replace_for_role(self.role.pk, rows)
        return rows
