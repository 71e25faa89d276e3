import re
from typing import Sequence

from .config.models import LabelSelector, NodeSpec, SelectorRequirement
from .constants import NODE_AFFINITY_KEY
from .errors import SelectorInvalidError


DEFAULT_SELECTOR = LabelSelector(match_labels={NODE_AFFINITY_KEY: ""})

_NAME = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_PREFIX = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
_VALUE = re.compile(r"^(([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?$")

_OPERATORS_WITH_VALUES = ("In", "NotIn")
_OPERATORS_WITHOUT_VALUES = ("Exists", "DoesNotExist")


def _check_key(key: str) -> None:
    prefix, _, name = key.rpartition("/")
    if not name or len(name) > 63 or not _NAME.match(name):
        raise SelectorInvalidError(f"Invalid label key {key!r}")
    if "/" in key and (not prefix or len(prefix) > 253 or not _PREFIX.match(prefix)):
        raise SelectorInvalidError(f"Invalid label key prefix in {key!r}")


def _check_value(key: str, value: str) -> None:
    if len(value) > 63 or not _VALUE.match(value):
        raise SelectorInvalidError(f"Invalid label value {value!r} for key {key!r}")


def validate_selector(selector: LabelSelector) -> None:
    for key, value in selector.match_labels.items():
        _check_key(key)
        _check_value(key, value)

    for req in selector.match_expressions:
        _check_key(req.key)
        if req.operator in _OPERATORS_WITH_VALUES:
            if not req.values:
                raise SelectorInvalidError(f"Operator {req.operator} on {req.key!r} needs at least one value")
            for value in req.values:
                _check_value(req.key, value)
        elif req.operator in _OPERATORS_WITHOUT_VALUES:
            if req.values:
                raise SelectorInvalidError(f"Operator {req.operator} on {req.key!r} takes no values")
        else:
            raise SelectorInvalidError(
                f"Unknown operator {req.operator!r} on {req.key!r}. "
                f"Must be one of {sorted(_OPERATORS_WITH_VALUES + _OPERATORS_WITHOUT_VALUES)}"
            )


def _requirement_matches(req: SelectorRequirement, labels: dict[str, str]) -> bool:
    if req.operator == "In":
        return req.key in labels and labels[req.key] in req.values
    if req.operator == "NotIn":
        return req.key not in labels or labels[req.key] not in req.values
    if req.operator == "Exists":
        return req.key in labels
    return req.key not in labels


def matches(selector: LabelSelector, labels: dict[str, str]) -> bool:
    for key, value in selector.match_labels.items():
        if labels.get(key) != value:
            return False
    return all(_requirement_matches(req, labels) for req in selector.match_expressions)


def list_eligible_nodes(nodes: Sequence[NodeSpec], selector: LabelSelector | None = None) -> list[NodeSpec]:
    """
    Nodes matching `selector` (or the default storage node label), sorted by
    name. Raises SelectorInvalidError for a malformed selector.
    """
    selector = selector or DEFAULT_SELECTOR
    validate_selector(selector)
    return sorted((n for n in nodes if matches(selector, n.labels)), key=lambda n: n.name)
