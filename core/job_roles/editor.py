"""
Edit session over one role's page hierarchy.

The editor keeps a working copy of the role's assignments as flat rows indexed
by page id. Every operation leaves the rows normalized (each sibling group
ordered 0..n-1, no cycles, every parent assigned to the role) and returns the
resulting working list, ready to be shown or persisted.

Usage:
    editor = HierarchyEditor(role.pk, PageCatalog().list_pages(), max_depth=2)
    editor.load(AssignmentStore().get_by_role(role.pk))
    editor.add_page(reports.pk)
    editor.set_parent(reports.pk, dashboard.pk)
    rows = editor.commit()
"""
import logging
from dataclasses import replace
from enum import Enum
from typing import Iterable, List, Optional

from .exceptions import (
    DuplicateAssignment,
    HierarchyError,
    InvalidParent,
    NotLoaded,
    UnknownPage,
)
from .hierarchy import (
    Assignment,
    PageInfo,
    PageTreeNode,
    build_tree,
    flatten,
    index_pages,
    normalize,
)

logger = logging.getLogger(__name__)


class EditorState(Enum):
    EMPTY = 'empty'
    LOADED = 'loaded'
    COMMITTED = 'committed'


class HierarchyEditor:
    """
    States:
        EMPTY: nothing loaded, mutating operations raise NotLoaded
        LOADED: working copy present and possibly modified
        COMMITTED: commit() produced the rows to persist; the working copy is
            kept so it can still be displayed, and commit() can be repeated
            if saving failed. Any further edit moves back to LOADED.
    """

    OPERATIONS = ('add_page', 'remove_page', 'move_up', 'move_down', 'set_parent', 'to_root')

    def __init__(self, role_id, pages, max_depth: Optional[int] = None):
        self.role_id = role_id
        self.catalog = index_pages(pages)
        self.max_depth = max_depth
        self.state = EditorState.EMPTY
        self._rows = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self, assignments: Iterable[Assignment] = ()) -> List[Assignment]:
        """Start a session from persisted rows (or from nothing)."""
        rows = normalize(assignments, self.catalog, self.role_id)
        self._rows = {row.page_id: row for row in rows}
        self.state = EditorState.LOADED
        return self.get_working_list()

    def commit(self) -> List[Assignment]:
        self._require_loaded()
        rows = self.get_working_list()
        self.state = EditorState.COMMITTED
        logger.debug(f"Committed {len(rows)} page assignment(s) for role {self.role_id}")
        return rows

    @property
    def is_loaded(self) -> bool:
        return self.state is not EditorState.EMPTY

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_working_tree(self) -> List[PageTreeNode]:
        if not self.is_loaded:
            return []
        return build_tree(self._rows.values(), self.catalog)

    def get_working_list(self) -> List[Assignment]:
        return flatten(self.get_working_tree(), self.role_id)

    def available_pages(self) -> List[PageInfo]:
        """Active catalog pages not yet assigned to the role."""
        pages = [
            page for page in self.catalog.values()
            if page.active and page.id not in self._rows
        ]
        return sorted(pages, key=lambda page: (page.name.lower(), page.id))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_page(self, page_id, parent_page_id=None) -> List[Assignment]:
        self._require_loaded()
        if page_id not in self.catalog:
            raise UnknownPage(f"Page {page_id} does not exist.")
        if page_id in self._rows:
            raise DuplicateAssignment(f"Page {page_id} is already assigned to this role.")
        if parent_page_id is not None:
            self._check_parent(page_id, parent_page_id, subtree_height=1)

        self._rows[page_id] = Assignment(
            role_id=self.role_id,
            page_id=page_id,
            parent_page_id=parent_page_id,
            display_order=len(self._siblings(parent_page_id)),
        )
        return self._changed()

    def remove_page(self, page_id) -> List[Assignment]:
        """Remove a page together with its whole subtree."""
        self._require_loaded()
        self._require_assigned(page_id)

        parent_id = self._rows[page_id].parent_page_id
        for doomed in {page_id} | self._descendants(page_id):
            del self._rows[doomed]
        self._renumber(parent_id)
        return self._changed()

    def move_up(self, page_id) -> List[Assignment]:
        return self._move(page_id, -1)

    def move_down(self, page_id) -> List[Assignment]:
        return self._move(page_id, 1)

    def set_parent(self, page_id, new_parent_page_id=None) -> List[Assignment]:
        """Re-nest a page (and its subtree) as the last child of new_parent_page_id."""
        self._require_loaded()
        self._require_assigned(page_id)

        row = self._rows[page_id]
        if new_parent_page_id == row.parent_page_id:
            return self.get_working_list()
        if new_parent_page_id is not None:
            self._check_parent(page_id, new_parent_page_id, subtree_height=self._height(page_id))

        old_parent_id = row.parent_page_id
        self._rows[page_id] = replace(
            row,
            parent_page_id=new_parent_page_id,
            display_order=len(self._siblings(new_parent_page_id)),
        )
        self._renumber(old_parent_id)
        self._renumber(new_parent_page_id)
        return self._changed()

    def to_root(self, page_id) -> List[Assignment]:
        return self.set_parent(page_id, None)

    def apply(self, operations: Iterable[dict]) -> List[Assignment]:
        """
        Apply a batch of operations, e.g.
            [{'op': 'add_page', 'page_id': 4}, {'op': 'move_up', 'page_id': 4}]

        All or nothing: if one operation fails the working copy is restored
        and the error is raised.
        """
        self._require_loaded()
        snapshot, state = dict(self._rows), self.state
        try:
            for operation in operations:
                self._dispatch(operation)
        except HierarchyError:
            self._rows, self.state = snapshot, state
            raise
        return self.get_working_list()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _dispatch(self, operation):
        name = operation.get('op')
        page_id = operation.get('page_id')
        if name not in self.OPERATIONS:
            raise HierarchyError(f"Unknown operation '{name}'.", code='unknown_operation')
        if name == 'add_page':
            return self.add_page(page_id, operation.get('parent_page_id'))
        if name == 'set_parent':
            return self.set_parent(page_id, operation.get('parent_page_id'))
        return getattr(self, name)(page_id)

    def _changed(self):
        self.state = EditorState.LOADED
        return self.get_working_list()

    def _require_loaded(self):
        if not self.is_loaded:
            raise NotLoaded()

    def _require_assigned(self, page_id):
        if page_id not in self._rows:
            raise UnknownPage(f"Page {page_id} is not assigned to this role.")

    def _move(self, page_id, step):
        self._require_loaded()
        self._require_assigned(page_id)

        row = self._rows[page_id]
        siblings = self._siblings(row.parent_page_id)
        target = [sibling.page_id for sibling in siblings].index(page_id) + step
        if target < 0 or target >= len(siblings):
            return self.get_working_list()

        other = siblings[target]
        self._rows[page_id] = replace(row, display_order=other.display_order)
        self._rows[other.page_id] = replace(other, display_order=row.display_order)
        self._renumber(row.parent_page_id)
        return self._changed()

    def _check_parent(self, page_id, parent_id, subtree_height):
        if parent_id == page_id:
            raise InvalidParent(f"Page {page_id} cannot be its own parent.")
        if parent_id not in self.catalog:
            raise UnknownPage(f"Parent page {parent_id} does not exist.")
        if parent_id not in self._rows:
            raise InvalidParent(f"Parent page {parent_id} is not assigned to this role.")
        if page_id in self._rows and parent_id in self._descendants(page_id):
            raise InvalidParent(
                f"Page {parent_id} is nested under page {page_id} and cannot become its parent."
            )
        if self.max_depth is not None and self._depth(parent_id) + subtree_height > self.max_depth:
            raise InvalidParent(
                f"Menus can only be nested {self.max_depth} level(s) deep."
            )

    def _siblings(self, parent_id):
        siblings = [row for row in self._rows.values() if row.parent_page_id == parent_id]
        return sorted(siblings, key=lambda row: row.display_order)

    def _renumber(self, parent_id):
        for position, row in enumerate(self._siblings(parent_id)):
            if row.display_order != position:
                self._rows[row.page_id] = replace(row, display_order=position)

    def _children_ids(self, page_id):
        return [row.page_id for row in self._rows.values() if row.parent_page_id == page_id]

    def _descendants(self, page_id):
        found = set()
        pending = self._children_ids(page_id)
        while pending:
            current = pending.pop()
            if current in found:
                continue
            found.add(current)
            pending.extend(self._children_ids(current))
        return found

    def _depth(self, page_id):
        """1 for a root, 2 for its children, and so on."""
        depth = 1
        current = self._rows[page_id].parent_page_id
        while current is not None and depth <= len(self._rows):
            depth += 1
            current = self._rows[current].parent_page_id
        return depth

    def _height(self, page_id):
        """Number of levels in the subtree rooted at page_id, 1 for a leaf."""
        height = 0
        pending = [(page_id, 1)]
        while pending:
            current, level = pending.pop()
            height = max(height, level)
            pending.extend((child, level + 1) for child in self._children_ids(current))
        return height
