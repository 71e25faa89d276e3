from __future__ import annotations

import pytest

from factories import make_node
from storagecluster.config.models import LabelSelector, NodeSpec, SelectorRequirement
from storagecluster.eligibility import list_eligible_nodes, matches, validate_selector
from storagecluster.errors import SelectorInvalidError


def test_default_selector_uses_storage_label() -> None:
    nodes = [make_node("n2"), NodeSpec(name="plain", labels={"app": "web"}), make_node("n1")]
    assert [n.name for n in list_eligible_nodes(nodes)] == ["n1", "n2"]


def test_match_labels() -> None:
    selector = LabelSelector(match_labels={"tier": "storage"})
    assert matches(selector, {"tier": "storage", "x": "y"})
    assert not matches(selector, {"tier": "compute"})
    assert not matches(selector, {})


@pytest.mark.parametrize(
    ("operator", "values", "labels", "expected"),
    [
        ("In", ("a", "b"), {"zone": "a"}, True),
        ("In", ("a", "b"), {"zone": "c"}, False),
        ("In", ("a",), {}, False),
        ("NotIn", ("a",), {"zone": "b"}, True),
        ("NotIn", ("a",), {}, True),
        ("NotIn", ("a",), {"zone": "a"}, False),
        ("Exists", (), {"zone": ""}, True),
        ("Exists", (), {}, False),
        ("DoesNotExist", (), {}, True),
        ("DoesNotExist", (), {"zone": "a"}, False),
    ],
)
def test_match_expressions(operator, values, labels, expected) -> None:
    selector = LabelSelector(match_expressions=(SelectorRequirement(key="zone", operator=operator, values=values),))
    assert matches(selector, labels) is expected


def test_empty_selector_matches_everything() -> None:
    nodes = [NodeSpec(name="b"), NodeSpec(name="a", labels={"x": "y"})]
    assert [n.name for n in list_eligible_nodes(nodes, LabelSelector())] == ["a", "b"]


@pytest.mark.parametrize(
    "selector",
    [
        LabelSelector(match_expressions=(SelectorRequirement(key="zone", operator="Near", values=("a",)),)),
        LabelSelector(match_expressions=(SelectorRequirement(key="zone", operator="In"),)),
        LabelSelector(match_expressions=(SelectorRequirement(key="zone", operator="Exists", values=("a",)),)),
        LabelSelector(match_labels={"": "a"}),
        LabelSelector(match_labels={"bad key!": "a"}),
        LabelSelector(match_labels={"/name": "a"}),
        LabelSelector(match_labels={"zone": "not valid"}),
    ],
)
def test_invalid_selectors(selector) -> None:
    with pytest.raises(SelectorInvalidError):
        validate_selector(selector)
    with pytest.raises(SelectorInvalidError):
        list_eligible_nodes([make_node("n1")], selector)


def test_valid_prefixed_keys() -> None:
    validate_selector(
        LabelSelector(
            match_labels={"cluster.ocs.openshift.io/openshift-storage": "", "tier": "storage_1"},
            match_expressions=(SelectorRequirement(key="topology.kubernetes.io/zone", operator="In", values=("us-east-1a",)),),
        )
    )
