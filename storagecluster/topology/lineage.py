from .map import TopologyMap
from ..constants import DEPRECATED_LABEL_LINEAGE


def filter_deprecated_labels(topology_map: TopologyMap) -> None:
    """
    Drop deprecated zone/region keys whose values exactly match the canonical
    topology.kubernetes.io key. A deprecated key stays while it still carries
    information the canonical key does not.
    """
    for canonical, deprecated_keys in DEPRECATED_LABEL_LINEAGE.items():
        if canonical not in topology_map.labels:
            continue
        canonical_values = topology_map.values(canonical)
        for deprecated in deprecated_keys:
            if deprecated not in topology_map.labels:
                continue
            # values() is deduplicated and sorted, so this is set equality.
            if topology_map.values(deprecated) == canonical_values:
                topology_map.remove(deprecated)
