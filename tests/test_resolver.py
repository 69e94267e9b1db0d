"""Tests for placing new sites in the forest from their sub-site hints."""

from __future__ import annotations

import pytest

from polis.index import (
    AdoptionRule,
    AlreadyHasParent,
    CycleWouldForm,
    HierarchyResolver,
    NodeRegistry,
    SiteIndex,
)
from polis.index.resolver import is_ancestor, normalize_hints


# ── Basic placement ──────────────────────────────────────────────────


def test_single_site_without_hints_is_root(index):
    index.insert("A")
    assert index.roots() == ("A",)
    assert index.parent("A") is None


def test_new_site_adopts_existing_root(index):
    """B declares A as a sub-site after A is already a root."""
    index.insert("A")
    index.insert("B", {"A"})
    assert index.roots() == ("B",)
    assert index.children("B") == ("A",)
    assert index.parent("A") == "B"


def test_new_site_is_adopted_by_existing_declarer(index):
    """A declared B before B existed; B attaches under A on arrival."""
    index.insert("A", {"B"})
    index.insert("B")
    assert index.parent("B") == "A"
    assert index.roots() == ("A",)


def test_three_level_chain_built_out_of_order(index):
    index.insert("A", {"B"})
    index.insert("B")
    assert index.parent("B") == "A"

    index.insert("C", {"A"})
    assert index.parent("A") == "C"
    assert index.roots() == ("C",)
    assert index.id_path("B") == ("C", "A", "B")


def test_top_down_chain(index):
    """Parents first, each naming the next level down."""
    index.insert("root-1")
    index.insert("root-2", ["child"])
    index.insert("child", ["grandchild"])
    index.insert("grandchild")
    assert index.roots() == ("root-1", "root-2")
    assert index.parent("child") == "root-2"
    assert index.parent("grandchild") == "child"


def test_hints_to_unknown_sites_are_ignored(index):
    node = index.insert("A", {"ghost"})
    assert node.is_root
    assert node.hints == {"ghost"}
    assert "ghost" not in index


def test_rule_b_site_stays_root_itself(index):
    """Adopting an existing root does not give the adopter a parent."""
    index.insert("A")
    node = index.insert("B", ["A"])
    assert node.parent is None
    assert node.children == ("A",)


# ── First-match tie-break ────────────────────────────────────────────


def test_first_registered_declarer_wins(index):
    """Two existing sites both claim N; only the earlier one gets it."""
    index.insert("P1", ["N"])
    index.insert("P2", ["N"])
    index.insert("N")
    assert index.parent("N") == "P1"
    assert index.children("P2") == ()


def test_only_first_claimed_root_is_adopted(index):
    """N claims two roots; only the earlier-registered one is adopted."""
    index.insert("R1")
    index.insert("R2")
    index.insert("N", ["R2", "R1"])
    assert index.children("N") == ("R1",)
    assert index.parent("R2") is None
    assert index.roots() == ("R2", "N")


def test_scan_order_beats_rule_order(index):
    """An earlier Rule B match wins over a later Rule A match."""
    index.insert("X")
    index.insert("P", ["N"])
    index.insert("N", ["X"])
    assert index.parent("X") == "N"
    assert index.parent("N") is None
    assert index.children("P") == ()


def test_rule_a_checked_before_rule_b_on_same_site(index):
    """Mutual claims: the existing site's hint is honoured."""
    index.insert("A", ["B"])
    index.insert("B", ["A"])
    assert index.parent("B") == "A"
    assert index.parent("A") is None


def test_non_root_sites_are_scanned(index):
    """A declarer deep in the tree still adopts the newcomer."""
    index.insert("top", ["mid"])
    index.insert("mid", ["leaf"])
    index.insert("leaf")
    assert index.id_path("leaf") == ("top", "mid", "leaf")


def test_same_sequence_gives_same_forest():
    steps = [("A", ["B"]), ("C", []), ("B", ["D"]), ("E", ["C", "A"]), ("D", [])]
    first, second = SiteIndex(), SiteIndex()
    for site_id, hints in steps:
        first.insert(site_id, hints)
        second.insert(site_id, hints)
    assert first.links() == second.links()
    assert first.roots() == second.roots()


# ── Rejections ───────────────────────────────────────────────────────


def test_self_reference_rejected(index):
    with pytest.raises(CycleWouldForm) as exc_info:
        index.insert("A", {"A"})
    assert exc_info.value.site_id == "A"
    assert len(index) == 0
    assert index.roots() == ()


def test_self_reference_does_not_disturb_existing_sites(index):
    index.insert("B", ["A"])
    with pytest.raises(CycleWouldForm):
        index.insert("A", ["A", "B"])
    assert index.links()[0].child_ids == ()
    assert index.roots() == ("B",)
    assert index.verify_forest_matches_registry() == []


def test_reparenting_rejected(index):
    """B already sits under A; X claiming B is refused, nothing changes."""
    index.insert("A", ["B"])
    index.insert("B")
    before = index.links()

    with pytest.raises(AlreadyHasParent) as exc_info:
        index.insert("X", ["B"])

    err = exc_info.value
    assert err.site_id == "B"
    assert err.current_parent == "A"
    assert err.claimed_by == "X"
    assert "X" not in index
    assert index.links() == before
    assert index.children("A") == ("B",)
    assert index.roots() == ("A",)


def test_rejected_site_can_be_retried_as_root(index):
    index.insert("A", ["B"])
    index.insert("B")
    with pytest.raises(AlreadyHasParent):
        index.insert("X", ["B"])
    node = index.insert("X")
    assert node.is_root
    assert index.roots() == ("A", "X")


# ── Resolver in isolation ────────────────────────────────────────────


def _registry(*links: tuple[str, str | None, tuple[str, ...]]) -> NodeRegistry:
    registry = NodeRegistry()
    for site_id, parent, hints in links:
        record = registry.register(site_id)
        record.parent = parent
        record.hints = frozenset(hints)
        if parent is not None:
            registry.register(parent).children.append(site_id)
    return registry


def test_plan_returns_none_for_new_root():
    registry = _registry(("A", None, ()))
    assert HierarchyResolver(registry).plan("B", frozenset()) is None


def test_plan_does_not_mutate_registry():
    registry = _registry(("A", None, ("B",)))
    adoption = HierarchyResolver(registry).plan("B", frozenset())
    assert adoption.rule is AdoptionRule.adopted_by_existing
    assert adoption.parent_id == "A"
    assert adoption.child_id == "B"
    assert "B" not in registry
    assert registry.get("A").children == []


def test_plan_adopts_existing():
    registry = _registry(("A", None, ()))
    adoption = HierarchyResolver(registry).plan("B", frozenset({"A"}))
    assert adoption.rule is AdoptionRule.adopts_existing
    assert (adoption.parent_id, adoption.child_id) == ("B", "A")


def test_plan_refuses_link_that_closes_a_loop():
    """A registered site re-planned under its own descendant."""
    registry = _registry(("A", None, ()), ("B", "A", ()), ("C", "B", ("A",)))
    with pytest.raises(CycleWouldForm):
        HierarchyResolver(registry).plan("A", frozenset())


def test_is_ancestor():
    registry = _registry(("A", None, ()), ("B", "A", ()), ("C", "B", ()))
    assert is_ancestor(registry, "A", "C")
    assert is_ancestor(registry, "C", "C")
    assert not is_ancestor(registry, "C", "A")
    assert not is_ancestor(registry, "A", "unregistered")


def test_normalize_hints():
    assert normalize_hints(None) == frozenset()
    assert normalize_hints(["a", "a", "b"]) == frozenset({"a", "b"})


def test_normalize_hints_keeps_string_whole():
    assert normalize_hints("site-1") == frozenset({"site-1"})
