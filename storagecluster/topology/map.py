"""Topology label bookkeeping persisted in the storage cluster status."""

from __future__ import annotations

from typing import Any, Iterator


class TopologyMap:
    """
    Label key -> label value -> node names carrying that value.

    Iteration order of the underlying dicts is never relied upon: every
    lookup that picks "the first" key walks the keys sorted.
    """

    def __init__(self, labels: dict[str, dict[str, set[str]]] | None = None) -> None:
        self.labels: dict[str, dict[str, set[str]]] = {}
        for key, values in (labels or {}).items():
            for value, nodes in values.items():
                self.add(key, value)
                for node in nodes:
                    self.add(key, value, node)

    def contains(self, key: str, value: str, node: str | None = None) -> bool:
        values = self.labels.get(key)
        if values is None or value not in values:
            return False
        if node is None:
            return True
        return node in values[value]

    def add(self, key: str, value: str, node: str | None = None) -> None:
        nodes = self.labels.setdefault(key, {}).setdefault(value, set())
        if node is not None:
            nodes.add(node)

    def remove(self, key: str) -> None:
        self.labels.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self.labels)

    def values(self, key: str) -> list[str]:
        return sorted(self.labels.get(key, {}))

    def nodes(self, key: str, value: str) -> set[str]:
        return set(self.labels.get(key, {}).get(value, set()))

    def get_key_values(self, domain_type: str) -> tuple[str, list[str]]:
        """
        Return the first label key (in sorted order) whose name contains
        `domain_type`, with its values sorted. ("", []) when nothing matches.
        """
        for key in self.keys():
            if domain_type in key:
                return key, self.values(key)
        return "", []

    def to_dict(self) -> dict[str, dict[str, list[str]]]:
        return {
            key: {value: sorted(self.labels[key][value]) for value in self.values(key)}
            for key in self.keys()
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> TopologyMap:
        topology = cls()
        for key, values in (raw or {}).items():
            # A plain list of values is accepted too (no node names recorded).
            if isinstance(values, list):
                for value in values:
                    topology.add(key, value)
                continue
            for value, nodes in values.items():
                topology.add(key, value)
                for node in nodes or []:
                    topology.add(key, value, node)
        return topology

    def copy(self) -> TopologyMap:
        return TopologyMap(self.labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.labels)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TopologyMap):
            return NotImplemented
        return self.labels == other.labels

    def __repr__(self) -> str:
        return f"TopologyMap({self.to_dict()!r})"
