from typing import Sequence

import pulumi

from .map import TopologyMap
from ..config.models import NodeSpec
from ..constants import VALID_TOPOLOGY_LABEL_KEYS
from ..errors import InsufficientNodesError


def is_topology_label(label: str) -> bool:
    return any(key in label for key in VALID_TOPOLOGY_LABEL_KEYS)


def reconcile_node_topology_map(
    *,
    nodes: Sequence[NodeSpec],
    min_nodes: int,
    topology_map: TopologyMap,
) -> int:
    """
    Record every recognized topology label found on `nodes` into `topology_map`.

    Only the existence of each (label, value) pair is tracked here, not which
    node carries it. Returns the number of nodes seen.
    """
    node_count = len(nodes)
    if node_count < min_nodes:
        raise InsufficientNodesError(expected=min_nodes, found=node_count)

    for node in sorted(nodes, key=lambda n: n.name):
        for label in sorted(node.labels):
            value = node.labels[label]
            if not is_topology_label(label) or topology_map.contains(label, value):
                continue
            pulumi.log.info(f"Adding topology label from node {node.name}: {label}={value}")
            topology_map.add(label, value)

    return node_count
