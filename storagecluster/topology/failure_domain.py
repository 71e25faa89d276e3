from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import pulumi

from .discovery import reconcile_node_topology_map
from .lineage import filter_deprecated_labels
from .map import TopologyMap
from .racks import PatchNode, ensure_node_racks
from ..config.models import NodeSpec, StorageClusterSpec
from ..constants import DOMAIN_HOST, DOMAIN_RACK, DOMAIN_ZONE, MIN_ZONES, MIN_ZONES_ARBITER
from ..status import StorageClusterStatus


@dataclass(frozen=True)
class FailureDomain:
    type: str
    key: str
    values: tuple[str, ...]

    @classmethod
    def lookup(cls, domain_type: str, topology_map: TopologyMap, key: str = "") -> FailureDomain:
        """Domain read from `key` when the map has it, else from the first key matching the type."""
        if key and key in topology_map.labels:
            return cls(type=domain_type, key=key, values=tuple(topology_map.values(key)))
        key, values = topology_map.get_key_values(domain_type)
        return cls(type=domain_type, key=key, values=tuple(values))


def _eligible_zone_key(topology_map: TopologyMap, spec: StorageClusterSpec) -> str:
    """First zone key (sorted) with enough distinct values, "" when none qualifies."""
    min_zones = MIN_ZONES_ARBITER if spec.arbiter_enabled else MIN_ZONES
    for key in topology_map.keys():
        if "zone" in key and len(topology_map.values(key)) >= min_zones:
            return key
    return ""


def determine_failure_domain(
    *,
    status: StorageClusterStatus,
    spec: StorageClusterSpec,
    nodes: Sequence[NodeSpec],
    patch_node: PatchNode,
) -> FailureDomain:
    """
    Choose the failure domain for the cluster, in priority order:

      1. the type and key already recorded in the status (never change once chosen)
      2. host, when flexible scaling is enabled
      3. zone, when some zone label has enough distinct values
         (2 with an arbiter, 3 otherwise)
      4. rack, labelling every node without a rack first

    The status topology map is built from `nodes` when it is still empty and is
    always stripped of redundant deprecated labels before it is read. The node
    count seen by that discovery is kept in status.node_count.
    """
    if not status.node_topologies:
        status.node_topologies = TopologyMap()
        status.node_count = reconcile_node_topology_map(
            nodes=nodes,
            min_nodes=spec.minimum_nodes,
            topology_map=status.node_topologies,
        )

    topology_map = status.node_topologies
    filter_deprecated_labels(topology_map)

    if status.failure_domain:
        return FailureDomain.lookup(status.failure_domain, topology_map, key=status.failure_domain_key)

    if spec.flexible_scaling:
        return FailureDomain.lookup(DOMAIN_HOST, topology_map)

    zone_key = _eligible_zone_key(topology_map, spec)
    if zone_key:
        return FailureDomain.lookup(DOMAIN_ZONE, topology_map, key=zone_key)

    ensure_node_racks(
        nodes=nodes,
        min_racks=spec.minimum_rack_count,
        topology_map=topology_map,
        patch_node=patch_node,
    )
    return FailureDomain.lookup(DOMAIN_RACK, topology_map)


def reconcile_failure_domain(
    *,
    status: StorageClusterStatus,
    spec: StorageClusterSpec,
    nodes: Sequence[NodeSpec],
    patch_node: PatchNode,
) -> FailureDomain:
    """determine_failure_domain, then record the result in `status`."""
    failure_domain = determine_failure_domain(status=status, spec=spec, nodes=nodes, patch_node=patch_node)

    if status.failure_domain != failure_domain.type:
        pulumi.log.info(f"Failure domain set to {failure_domain.type} ({failure_domain.key or 'no key'})")
    status.failure_domain = failure_domain.type
    status.failure_domain_key = failure_domain.key
    status.failure_domain_values = list(failure_domain.values)
    return failure_domain
