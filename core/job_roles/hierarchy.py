"""
Page hierarchy building for role navigation.

Assignments are stored flat (one row per role/page with a parent pointer and a
display order). This module turns such a flat list into the nested tree the
navigation renders, and flattens an edited tree back into normalized rows.

build_tree() is lenient: it is used on every read and self-heals drift caused
by upstream deletions. validate_assignments() is strict: it is used on rows
arriving from a client before they are persisted.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Union

from .exceptions import DuplicateAssignment, InvalidParent, UnknownPage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageInfo:
    """Read-only snapshot of a catalog page."""
    id: int
    name: str
    url: str
    is_external: bool = False
    active: bool = True
    icon: Optional[str] = None

    @classmethod
    def from_model(cls, page) -> 'PageInfo':
        return cls(
            id=page.pk,
            name=page.name,
            url=page.url,
            is_external=page.is_external,
            active=page.is_active,
            icon=page.icon,
        )


@dataclass(frozen=True)
class Assignment:
    """One role/page row: where the page sits in the role's navigation."""
    role_id: Optional[int]
    page_id: int
    parent_page_id: Optional[int] = None
    display_order: int = 0

    def to_wire(self) -> dict:
        return {
            'page_id': self.page_id,
            'parent_page_id': self.parent_page_id,
            'display_order': self.display_order,
        }


@dataclass
class PageTreeNode:
    page: PageInfo
    parent_page_id: Optional[int]
    display_order: int
    children: List['PageTreeNode'] = field(default_factory=list)

    @property
    def page_id(self) -> int:
        return self.page.id


Pages = Union[Mapping[int, PageInfo], Iterable[PageInfo]]


def index_pages(pages: Pages) -> Dict[int, PageInfo]:
    """Accept either a {page_id: PageInfo} mapping or an iterable of PageInfo."""
    if isinstance(pages, Mapping):
        return dict(pages)
    return {page.id: page for page in pages}


def build_tree(assignments: Iterable[Assignment], pages: Pages) -> List[PageTreeNode]:
    """
    Build the navigation tree of one role from its flat assignment rows.

    - Rows whose page is missing from `pages` are dropped.
    - Rows whose parent is not assigned to the role (or is the page itself)
      are promoted to the root level.
    - Roots and each children list are sorted by display_order; rows with an
      equal display_order keep their input order.
    - Each row is visited at most once. Rows that can't be reached from a
      root (they form a parent cycle) are dropped.
    """
    page_map = index_pages(pages)

    rows: Dict[int, Assignment] = {}
    for assignment in assignments:
        if assignment.page_id not in page_map:
            logger.debug(f"Dropping assignment of missing page {assignment.page_id}")
            continue
        if assignment.page_id in rows:
            logger.debug(f"Ignoring duplicate assignment of page {assignment.page_id}")
            continue
        rows[assignment.page_id] = assignment

    children_of = defaultdict(list)
    for assignment in rows.values():
        parent_id = assignment.parent_page_id
        if parent_id is not None and (parent_id == assignment.page_id or parent_id not in rows):
            logger.debug(
                f"Promoting page {assignment.page_id} to root, parent {parent_id} is not assigned"
            )
            parent_id = None
        children_of[parent_id].append(assignment)

    def _pending(parent_id, siblings):
        # reversed so that popping yields display order
        ordered = sorted(children_of.get(parent_id, []), key=lambda row: row.display_order or 0)
        return [(row, parent_id, siblings) for row in reversed(ordered)]

    # Explicit stack: drifted data can nest deeper than the recursion limit
    tree = []
    visited = set()
    stack = _pending(None, tree)
    while stack:
        row, parent_id, siblings = stack.pop()
        if row.page_id in visited:
            continue
        visited.add(row.page_id)
        node = PageTreeNode(
            page=page_map[row.page_id],
            parent_page_id=parent_id,
            display_order=row.display_order or 0,
        )
        siblings.append(node)
        stack.extend(_pending(row.page_id, node.children))

    unreachable = set(rows) - visited
    if unreachable:
        logger.warning(f"Dropping pages caught in a parent cycle: {sorted(unreachable)}")

    return tree


def flatten(tree: Iterable[PageTreeNode], role_id) -> List[Assignment]:
    """
    Walk the tree and emit one assignment per node.

    display_order is recomputed from each node's position among its siblings,
    so every sibling group comes out as 0..n-1.
    """
    result = []
    stack = [(node, None, position) for position, node in reversed(list(enumerate(tree)))]
    while stack:
        node, parent_id, position = stack.pop()
        result.append(Assignment(
            role_id=role_id,
            page_id=node.page.id,
            parent_page_id=parent_id,
            display_order=position,
        ))
        stack.extend(
            (child, node.page.id, index)
            for index, child in reversed(list(enumerate(node.children)))
        )
    return result


def normalize(assignments: Iterable[Assignment], pages: Pages, role_id) -> List[Assignment]:
    return flatten(build_tree(assignments, pages), role_id)


def iter_nodes(tree: Iterable[PageTreeNode]) -> Iterator[PageTreeNode]:
    """Depth-first, parents before their children."""
    stack = list(reversed(list(tree)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def prune(tree: Iterable[PageTreeNode], keep) -> List[PageTreeNode]:
    """Return a copy of the tree without the nodes rejected by keep(), subtrees included."""
    result = []
    stack = [(node, result) for node in reversed(list(tree))]
    while stack:
        node, siblings = stack.pop()
        if not keep(node):
            continue
        kept = replace(node, children=[])
        siblings.append(kept)
        stack.extend((child, kept.children) for child in reversed(node.children))
    return result


def validate_assignments(assignments: Iterable[Assignment], pages: Pages, max_depth: Optional[int] = None) -> None:
    """
    Check rows coming from a client before they are normalized and saved.

    Raises:
        DuplicateAssignment: a page appears twice
        UnknownPage: a page or parent is not in the catalog
        InvalidParent: self parent, parent not assigned to the role, a cycle,
            or nesting deeper than max_depth levels
    """
    page_map = index_pages(pages)
    assignments = list(assignments)

    parents = {}
    for assignment in assignments:
        if assignment.page_id in parents:
            raise DuplicateAssignment(f"Page {assignment.page_id} is assigned more than once.")
        if assignment.page_id not in page_map:
            raise UnknownPage(f"Page {assignment.page_id} does not exist.")
        parents[assignment.page_id] = assignment.parent_page_id

    for page_id, parent_id in parents.items():
        if parent_id is None:
            continue
        if parent_id == page_id:
            raise InvalidParent(f"Page {page_id} cannot be its own parent.")
        if parent_id not in page_map:
            raise UnknownPage(f"Parent page {parent_id} does not exist.")
        if parent_id not in parents:
            raise InvalidParent(
                f"Parent page {parent_id} of page {page_id} is not assigned to this role."
            )

    for page_id in parents:
        seen = {page_id}
        current = parents[page_id]
        while current is not None:
            if current in seen:
                raise InvalidParent(f"Page {page_id} is part of a parent cycle.")
            seen.add(current)
            current = parents[current]
        if max_depth is not None and len(seen) > max_depth:
            raise InvalidParent(f"Menus can only be nested {max_depth} level(s) deep.")
