import pytest
from applife.core.registry import DeclarationRegistry
from applife.runtime.resolver import Resolver
from applife.utils.diagnostics import CyclicDependencyError, UnknownIdentityError


def _registry(*entries):
    reg = DeclarationRegistry()
    for identity, load_order, deps in entries:
        reg.declare(identity, load_order, deps)
    return reg


def test_traversal_order_sorts_by_load_order_with_stable_ties():
    reg = _registry(("a", 2, []), ("b", 0, []), ("c", 1, []), ("d", 0, []))

    assert Resolver(reg).traversal_order() == ["b", "d", "c", "a"]


def test_construction_order_for_independent_components_matches_load_order():
    reg = _registry(("late", 5, []), ("early", -1, []), ("mid", 0, []), ("mid2", 0, []))

    assert Resolver(reg).construction_order() == ["early", "mid", "mid2", "late"]


def test_dependency_edge_dominates_load_order():
    # B has the lower load order but depends on A
    reg = _registry(("A", 2, []), ("B", 1, ["A"]))

    assert Resolver(reg).construction_order() == ["A", "B"]


def test_plan_is_depth_first_in_declared_dependency_order():
    reg = _registry(
        ("app", 0, ["api", "db"]),
        ("api", 0, ["auth"]),
        ("auth", 0, ["db"]),
        ("db", 0, []),
    )

    assert Resolver(reg).plan("app") == ["db", "auth", "api", "app"]


def test_plan_skips_settled_identities():
    reg = _registry(("app", 0, ["api", "db"]), ("api", 0, ["db"]), ("db", 0, []))

    assert Resolver(reg).plan("app", settled={"db"}) == ["api", "app"]
    assert Resolver(reg).plan("db", settled={"db"}) == []


def test_diamond_dependency_is_planned_once():
    reg = _registry(
        ("top", 0, ["left", "right"]),
        ("left", 0, ["base"]),
        ("right", 0, ["base"]),
        ("base", 0, []),
    )

    assert Resolver(reg).plan("top") == ["base", "left", "right", "top"]


def test_self_cycle_is_detected():
    reg = _registry(("A", 0, ["A"]))

    with pytest.raises(CyclicDependencyError) as exc_info:
        Resolver(reg).plan("A")

    assert exc_info.value.cycle == ["A", "A"]


def test_mutual_cycle_names_members_in_order():
    reg = _registry(("A", 0, ["B"]), ("B", 0, ["A"]))

    with pytest.raises(CyclicDependencyError, match="A -> B -> A") as exc_info:
        Resolver(reg).plan("A")

    assert exc_info.value.cycle == ["A", "B", "A"]


def test_cycle_below_the_root_reports_only_the_cycle():
    reg = _registry(("root", 0, ["x"]), ("x", 0, ["y"]), ("y", 0, ["z"]), ("z", 0, ["x"]))

    with pytest.raises(CyclicDependencyError) as exc_info:
        Resolver(reg).construction_order()

    assert exc_info.value.cycle == ["x", "y", "z", "x"]


def test_unknown_dependency_names_missing_identity_and_dependent():
    reg = _registry(("A", 0, ["ghost"]))

    with pytest.raises(UnknownIdentityError) as exc_info:
        Resolver(reg).plan("A")

    assert exc_info.value.identity == "ghost"
    assert exc_info.value.required_by == "A"
    assert "ghost" in str(exc_info.value)


def test_unknown_root_identity():
    with pytest.raises(UnknownIdentityError):
        Resolver(DeclarationRegistry()).plan("nope")
