"""Tests for tree editing: pure insert/remove and the SequenceEditor session."""

from looptimer.sequence.editor import (
    SequenceEditor, insert, remove, find_unit, find_loop, contains,
)

from helpers import SignalCollector, step, loop


def _tree():
    return (
        step("a", 30),
        loop("L", 2, step("b", 10), loop("M", 3, step("c", 5))),
        step("d", 15),
    )


# ═══════════════════════════════════════════════════════════════════════════
#  PURE FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════


class TestLookup:

    def test_find_nested(self):
        assert find_unit(_tree(), "c").time == 5

    def test_find_missing(self):
        assert find_unit(_tree(), "zzz") is None

    def test_find_loop_ignores_steps(self):
        assert find_loop(_tree(), "a") is None
        assert find_loop(_tree(), "M").repetitions == 3

    def test_contains(self):
        assert contains(_tree(), "M")
        assert not contains(_tree(), "nope")


class TestInsert:

    def test_no_parent_appends_top_level(self):
        out = insert(_tree(), None, step("n", 1))
        assert [u.id for u in out] == ["a", "L", "d", "n"]

    def test_into_top_level_loop(self):
        out = insert(_tree(), "L", step("n", 1))
        assert [u.id for u in find_loop(out, "L").children] == ["b", "M", "n"]

    def test_into_nested_loop(self):
        out = insert(_tree(), "M", step("n", 1))
        assert [u.id for u in find_loop(out, "M").children] == ["c", "n"]
        # siblings and ancestors untouched
        assert [u.id for u in out] == ["a", "L", "d"]
        assert [u.id for u in find_loop(out, "L").children] == ["b", "M"]

    def test_missing_parent_same_as_top_level(self):
        unit = step("n", 1)
        assert insert(_tree(), "ghost", unit) == insert(_tree(), None, unit)

    def test_step_id_as_parent_falls_back(self):
        out = insert(_tree(), "a", step("n", 1))
        assert out[-1].id == "n"

    def test_source_not_mutated(self):
        tree = _tree()
        insert(tree, "M", step("n", 1))
        assert tree == _tree()


class TestRemove:

    def test_remove_top_level(self):
        assert [u.id for u in remove(_tree(), "a")] == ["L", "d"]

    def test_remove_nested(self):
        out = remove(_tree(), "c")
        assert find_loop(out, "M").children == ()

    def test_remove_loop_discards_subtree(self):
        out = remove(_tree(), "L")
        assert not contains(out, "b")
        assert not contains(out, "c")
        assert [u.id for u in out] == ["a", "d"]

    def test_missing_id_is_noop(self):
        assert remove(_tree(), "ghost") == _tree()

    def test_idempotent(self):
        once = remove(_tree(), "M")
        assert remove(once, "M") == once


# ═══════════════════════════════════════════════════════════════════════════
#  EDITOR SESSION
# ═══════════════════════════════════════════════════════════════════════════


class TestSequenceEditor:

    def test_add_step_top_level(self, qapp):
        ed = SequenceEditor()
        s = ed.add_step("1", "0")
        assert ed.units == (s,)

    def test_zero_step_leaves_tree_alone(self, qapp):
        ed = SequenceEditor()
        c = SignalCollector()
        ed.units_changed.connect(c)
        assert ed.add_step("0", "0") is None
        assert ed.units == ()
        assert len(c) == 0

    def test_add_into_selected_loop(self, qapp):
        ed = SequenceEditor()
        lp = ed.add_loop("2")
        ed.select_parent(lp.id)
        s = ed.add_step("", "10")
        assert ed.units[0].children == (s,)

    def test_nested_loop_into_loop(self, qapp):
        ed = SequenceEditor()
        outer = ed.add_loop(2)
        ed.select_parent(outer.id)
        inner = ed.add_loop(3)
        ed.select_parent(inner.id)
        s = ed.add_step(0, 5)
        assert find_loop(ed.units, inner.id).children == (s,)

    def test_stale_selection_falls_back_to_top_level(self, qapp):
        ed = SequenceEditor(units=_tree())
        ed.select_parent("ghost")
        s = ed.add_step(0, 5)
        assert ed.units[-1] == s

    def test_removing_selected_loop_resets_selection(self, qapp):
        ed = SequenceEditor(units=_tree())
        ed.select_parent("L")
        ed.remove_unit("L")
        assert ed.current_parent_id is None

    def test_removing_ancestor_of_selection_resets_it(self, qapp):
        ed = SequenceEditor(units=_tree())
        ed.select_parent("M")
        c = SignalCollector()
        ed.parent_changed.connect(c)
        ed.remove_unit("L")
        assert ed.current_parent_id is None
        assert c.last is None

    def test_removing_unrelated_unit_keeps_selection(self, qapp):
        ed = SequenceEditor(units=_tree())
        ed.select_parent("M")
        ed.remove_unit("a")
        assert ed.current_parent_id == "M"

    def test_remove_missing_is_silent(self, qapp):
        ed = SequenceEditor(units=_tree())
        c = SignalCollector()
        ed.units_changed.connect(c)
        ed.remove_unit("ghost")
        assert ed.units == _tree()
        assert len(c) == 0

    def test_remove_twice(self, qapp):
        ed = SequenceEditor(units=_tree())
        ed.remove_unit("b")
        after_first = ed.units
        ed.remove_unit("b")
        assert ed.units == after_first

    def test_units_changed_carries_new_tree(self, qapp):
        ed = SequenceEditor()
        c = SignalCollector()
        ed.units_changed.connect(c)
        s = ed.add_step(0, 8)
        assert c.last == (s,)

    def test_replace_clears_selection(self, qapp):
        ed = SequenceEditor(units=_tree())
        ed.select_parent("L")
        ed.replace((step("z", 1),))
        assert ed.current_parent_id is None
        assert [u.id for u in ed.units] == ["z"]

    def test_clear(self, qapp):
        ed = SequenceEditor(units=_tree())
        ed.clear()
        assert ed.is_empty
