"""
Tests for the HierarchyEditor edit session.

Covers the session lifecycle, the editing operations, the invariants every
operation must keep, and batch application.
"""
from django.test import SimpleTestCase

from ..editor import EditorState, HierarchyEditor
from ..exceptions import (
    DuplicateAssignment,
    HierarchyError,
    InvalidParent,
    NotLoaded,
    UnknownPage,
)
from ..hierarchy import Assignment, PageInfo

ROLE_ID = 3
P1, P2, P3, P4, P5 = 1, 2, 3, 4, 5


def make_pages(inactive=()):
    return [
        PageInfo(id=page_id, name=name, url=f'/{name.lower()}', active=page_id not in inactive)
        for page_id, name in [(P1, 'Dashboard'), (P2, 'Users'), (P3, 'Roles'), (P4, 'Pages'), (P5, 'Activity')]
    ]


def row(page_id, parent=None, order=0):
    return Assignment(role_id=ROLE_ID, page_id=page_id, parent_page_id=parent, display_order=order)


def triples(rows):
    return [(r.page_id, r.parent_page_id, r.display_order) for r in rows]


class EditorTestCase(SimpleTestCase):

    def setUp(self):
        self.editor = HierarchyEditor(ROLE_ID, make_pages())
        # P1 (root 0) > P3 (child 0); P2 (root 1)
        self.editor.load([row(P1, order=0), row(P2, order=1), row(P3, parent=P1, order=0)])

    def assertContiguous(self, rows):
        groups = {}
        for r in rows:
            groups.setdefault(r.parent_page_id, []).append(r.display_order)
        for orders in groups.values():
            self.assertEqual(sorted(orders), list(range(len(orders))))


class ScenarioTests(EditorTestCase):
    """Worked examples of a role with P1, P2 and P3 (child of P1)"""

    def test_move_down_swaps_roots(self):
        rows = self.editor.move_down(P1)
        self.assertEqual(triples(rows), [(P2, None, 0), (P1, None, 1), (P3, P1, 0)])

    def test_add_page_appends_root(self):
        self.editor.move_down(P1)
        rows = self.editor.add_page(P4)
        self.assertIn((P4, None, 2), triples(rows))
        self.assertEqual(
            [node.page_id for node in self.editor.get_working_tree()],
            [P2, P1, P4]
        )

    def test_set_parent_appends_after_existing_children(self):
        self.editor.move_down(P1)
        rows = self.editor.set_parent(P2, P1)
        self.assertEqual(triples(rows), [(P1, None, 0), (P3, P1, 0), (P2, P1, 1)])

    def test_remove_page_cascades_to_children(self):
        rows = self.editor.remove_page(P1)
        self.assertEqual(triples(rows), [(P2, None, 0)])
        page_ids = [r.page_id for r in rows]
        self.assertNotIn(P3, page_ids)


class LifecycleTests(SimpleTestCase):
    """Test EMPTY -> LOADED -> COMMITTED transitions"""

    def setUp(self):
        self.editor = HierarchyEditor(ROLE_ID, make_pages())

    def test_mutations_before_load_raise_not_loaded(self):
        for call in (
            lambda: self.editor.add_page(P1),
            lambda: self.editor.remove_page(P1),
            lambda: self.editor.move_up(P1),
            lambda: self.editor.move_down(P1),
            lambda: self.editor.set_parent(P1, P2),
            lambda: self.editor.to_root(P1),
            lambda: self.editor.commit(),
            lambda: self.editor.apply([]),
        ):
            with self.assertRaises(NotLoaded):
                call()

    def test_working_tree_is_empty_before_load(self):
        self.assertEqual(self.editor.state, EditorState.EMPTY)
        self.assertEqual(self.editor.get_working_tree(), [])

    def test_load_normalizes_rows(self):
        rows = self.editor.load([row(P2, order=4), row(P1, order=9)])
        self.assertEqual(triples(rows), [(P2, None, 0), (P1, None, 1)])
        self.assertEqual(self.editor.state, EditorState.LOADED)

    def test_load_without_rows_starts_empty_session(self):
        self.editor.load()
        self.assertEqual(self.editor.add_page(P1), [row(P1)])

    def test_commit_keeps_tree_and_can_be_repeated(self):
        self.editor.load([row(P1)])
        first = self.editor.commit()
        self.assertEqual(self.editor.state, EditorState.COMMITTED)
        self.assertEqual(self.editor.commit(), first)
        self.assertEqual(len(self.editor.get_working_tree()), 1)

    def test_edit_after_commit_goes_back_to_loaded(self):
        self.editor.load([row(P1)])
        self.editor.commit()
        self.editor.add_page(P2)
        self.assertEqual(self.editor.state, EditorState.LOADED)

    def test_reload_replaces_working_copy(self):
        self.editor.load([row(P1)])
        self.editor.load([row(P2)])
        self.assertEqual(triples(self.editor.get_working_list()), [(P2, None, 0)])


class AddPageTests(EditorTestCase):

    def test_add_as_child(self):
        rows = self.editor.add_page(P4, P1)
        self.assertIn((P4, P1, 1), triples(rows))

    def test_duplicate_assignment(self):
        with self.assertRaises(DuplicateAssignment):
            self.editor.add_page(P3)

    def test_unknown_page(self):
        with self.assertRaises(UnknownPage):
            self.editor.add_page(99)

    def test_parent_not_in_working_tree(self):
        with self.assertRaises(InvalidParent):
            self.editor.add_page(P4, P5)

    def test_parent_must_exist(self):
        with self.assertRaises(UnknownPage):
            self.editor.add_page(P4, 99)


class RemovePageTests(EditorTestCase):

    def test_remaining_siblings_renumber(self):
        self.editor.add_page(P4)
        rows = self.editor.remove_page(P2)
        self.assertEqual(triples(rows), [(P1, None, 0), (P3, P1, 0), (P4, None, 1)])

    def test_remove_child_only(self):
        rows = self.editor.remove_page(P3)
        self.assertEqual(triples(rows), [(P1, None, 0), (P2, None, 1)])

    def test_remove_unassigned_page(self):
        with self.assertRaises(UnknownPage):
            self.editor.remove_page(P5)


class MoveTests(EditorTestCase):

    def test_move_up_first_sibling_is_noop(self):
        before = self.editor.get_working_list()
        self.assertEqual(self.editor.move_up(P1), before)

    def test_move_down_last_sibling_is_noop(self):
        before = self.editor.get_working_list()
        self.assertEqual(self.editor.move_down(P2), before)

    def test_move_within_child_group(self):
        self.editor.add_page(P4, P1)
        rows = self.editor.move_up(P4)
        self.assertEqual(triples(rows), [(P1, None, 0), (P4, P1, 0), (P3, P1, 1), (P2, None, 1)])

    def test_move_keeps_other_groups(self):
        rows = self.editor.move_down(P1)
        self.assertIn((P3, P1, 0), triples(rows))

    def test_move_unassigned_page(self):
        with self.assertRaises(UnknownPage):
            self.editor.move_up(P5)


class SetParentTests(EditorTestCase):

    def test_cycle_is_rejected_and_tree_unchanged(self):
        before = self.editor.get_working_list()
        with self.assertRaises(InvalidParent):
            self.editor.set_parent(P1, P3)
        self.assertEqual(self.editor.get_working_list(), before)

    def test_self_parent_is_rejected(self):
        with self.assertRaises(InvalidParent):
            self.editor.set_parent(P1, P1)

    def test_same_parent_is_noop(self):
        before = self.editor.get_working_list()
        self.assertEqual(self.editor.set_parent(P3, P1), before)

    def test_to_root(self):
        rows = self.editor.to_root(P3)
        self.assertEqual(triples(rows), [(P1, None, 0), (P2, None, 1), (P3, None, 2)])

    def test_old_group_renumbers(self):
        self.editor.add_page(P4, P1)
        rows = self.editor.to_root(P3)
        self.assertIn((P4, P1, 0), triples(rows))
        self.assertContiguous(rows)

    def test_subtree_moves_with_page(self):
        editor = HierarchyEditor(ROLE_ID, make_pages())
        editor.load([row(P1), row(P2, order=1), row(P3, parent=P1)])
        rows = editor.set_parent(P1, P2)
        self.assertEqual(triples(rows), [(P2, None, 0), (P1, P2, 0), (P3, P1, 0)])


class MaxDepthTests(SimpleTestCase):

    def setUp(self):
        self.editor = HierarchyEditor(ROLE_ID, make_pages(), max_depth=2)
        self.editor.load([row(P1), row(P2, order=1), row(P3, parent=P1)])

    def test_third_level_is_rejected(self):
        with self.assertRaises(InvalidParent):
            self.editor.add_page(P4, P3)

    def test_moving_a_subtree_under_a_child_is_rejected(self):
        with self.assertRaises(InvalidParent):
            self.editor.set_parent(P1, P2)

    def test_second_level_is_allowed(self):
        rows = self.editor.set_parent(P2, P1)
        self.assertIn((P2, P1, 1), triples(rows))


class InvariantTests(EditorTestCase):

    def test_orders_stay_contiguous_across_operations(self):
        steps = [
            lambda: self.editor.add_page(P4),
            lambda: self.editor.add_page(P5, P1),
            lambda: self.editor.move_up(P5),
            lambda: self.editor.set_parent(P2, P1),
            lambda: self.editor.move_down(P1),
            lambda: self.editor.to_root(P3),
            lambda: self.editor.remove_page(P4),
        ]
        for step in steps:
            rows = step()
            self.assertContiguous(rows)
            self.assertEqual(len({r.page_id for r in rows}), len(rows))

    def test_available_pages_excludes_assigned_and_inactive(self):
        editor = HierarchyEditor(ROLE_ID, make_pages(inactive=(P5,)))
        editor.load([row(P1)])
        self.assertEqual([page.name for page in editor.available_pages()], ['Pages', 'Roles', 'Users'])


class ApplyTests(EditorTestCase):
    """Test batch application"""

    def test_applies_operations_in_order(self):
        rows = self.editor.apply([
            {'op': 'add_page', 'page_id': P4, 'parent_page_id': P1},
            {'op': 'move_up', 'page_id': P4},
            {'op': 'to_root', 'page_id': P3},
        ])
        self.assertEqual(triples(rows), [(P1, None, 0), (P4, P1, 0), (P2, None, 1), (P3, None, 2)])

    def test_failure_restores_working_copy(self):
        before = self.editor.get_working_list()
        with self.assertRaises(InvalidParent):
            self.editor.apply([
                {'op': 'add_page', 'page_id': P4},
                {'op': 'set_parent', 'page_id': P1, 'parent_page_id': P3},
            ])
        self.assertEqual(self.editor.get_working_list(), before)

    def test_unknown_operation(self):
        with self.assertRaises(HierarchyError) as ctx:
            self.editor.apply([{'op': 'explode', 'page_id': P1}])
        self.assertEqual(ctx.exception.code, 'unknown_operation')
