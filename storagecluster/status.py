"""Persisted status of the storage cluster, kept as a JSON file between runs."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field

from .topology.map import TopologyMap


@dataclass
class StorageClusterStatus:
    node_topologies: TopologyMap | None = None
    failure_domain: str = ""
    failure_domain_key: str = ""
    failure_domain_values: list[str] = field(default_factory=list)
    # Eligible nodes seen by the last topology discovery
    node_count: int = 0

    def to_dict(self) -> dict:
        return {
            "nodeTopologies": None if self.node_topologies is None else self.node_topologies.to_dict(),
            "failureDomain": self.failure_domain,
            "failureDomainKey": self.failure_domain_key,
            "failureDomainValues": list(self.failure_domain_values),
            "nodeCount": self.node_count,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> StorageClusterStatus:
        topologies = raw.get("nodeTopologies")
        return cls(
            node_topologies=None if topologies is None else TopologyMap.from_dict(topologies),
            failure_domain=raw.get("failureDomain") or "",
            failure_domain_key=raw.get("failureDomainKey") or "",
            failure_domain_values=list(raw.get("failureDomainValues") or []),
            node_count=int(raw.get("nodeCount") or 0),
        )

    @classmethod
    def load(cls, path: str) -> StorageClusterStatus:
        """Missing file -> empty status (first reconciliation)."""
        expanded = os.path.expanduser(path)
        if not os.path.isfile(expanded):
            return cls()

        with open(expanded, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"Status file {expanded} must hold a JSON object")
        return cls.from_dict(raw)

    def save(self, path: str) -> None:
        expanded = os.path.expanduser(path)
        tmp = f"{expanded}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, sort_keys=True)
            f.write("\n")
        os.replace(tmp, expanded)
