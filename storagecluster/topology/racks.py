from __future__ import annotations

from dataclasses import dataclass
from itertools import zip_longest
from typing import Callable, Mapping, Sequence

import pulumi

from .map import TopologyMap
from ..config.models import NodeSpec
from ..constants import RACK_TOPOLOGY_KEY, VALID_TOPOLOGY_LABEL_KEYS
from ..errors import PatchFailureError


@dataclass(frozen=True)
class LabelPatch:
    """Intended label change for one node: old label set -> new label set."""
    node: str
    old_labels: dict[str, str]
    new_labels: dict[str, str]


PatchNode = Callable[[LabelPatch], object]


def node_zone(node: NodeSpec) -> str:
    """Zone value read from the node's own labels, "" when it has none."""
    for key in VALID_TOPOLOGY_LABEL_KEYS:
        for label in sorted(node.labels):
            if key in label and "zone" in label:
                return node.labels[label]
    return ""


def _next_rack_name(racks: Mapping[str, set[str]]) -> str:
    i = 0
    while f"rack{i}" in racks:
        i += 1
    return f"rack{i}"


def determine_placement_rack(
    *,
    node: NodeSpec,
    min_racks: int,
    racks: dict[str, set[str]],
    node_zones: Mapping[str, str],
) -> str:
    """
    Pick the rack for `node`: the least populated valid rack, ties going to
    the alphabetically first name.

    Racks rack0, rack1, ... are synthesized until at least `min_racks` exist.
    A rack is valid for a zoned node only if it is empty or already holds a
    node from the same zone. `racks` is updated with any synthesized rack but
    not with the node itself.
    """
    while len(racks) < min_racks:
        racks[_next_rack_name(racks)] = set()

    target_zone = node_zones.get(node.name) or node_zone(node)

    if target_zone:
        candidates = [
            rack
            for rack, members in racks.items()
            if not members or any(node_zones.get(m) == target_zone for m in members)
        ]
        if not candidates:
            # Every rack already belongs to another zone.
            rack = _next_rack_name(racks)
            pulumi.log.warn(f"No rack available for zone {target_zone!r}; creating {rack} for node {node.name}")
            racks[rack] = set()
            return rack
    else:
        candidates = list(racks)

    candidates.sort()
    chosen = candidates[0]
    for rack in candidates:
        if len(racks[rack]) < len(racks[chosen]):
            chosen = rack
    return chosen


def _placement_order(nodes: Sequence[NodeSpec], node_zones: Mapping[str, str]) -> list[NodeSpec]:
    # Round-robin across zones so one zone cannot claim every empty rack first.
    by_zone: dict[str, list[NodeSpec]] = {}
    for node in sorted(nodes, key=lambda n: n.name):
        by_zone.setdefault(node_zones[node.name], []).append(node)

    zoned = [by_zone[zone] for zone in sorted(by_zone) if zone]
    ordered = [n for group in zip_longest(*zoned) for n in group if n is not None]
    return ordered + by_zone.get("", [])


def ensure_node_racks(
    *,
    nodes: Sequence[NodeSpec],
    min_racks: int,
    topology_map: TopologyMap,
    patch_node: PatchNode,
) -> list[LabelPatch]:
    """
    Make sure every node carries a rack label.

    Nodes that already have a rack label, or whose rack an earlier pass
    recorded in `topology_map`, keep it. Each remaining node is placed with
    determine_placement_rack, the (rack, node) pair is recorded in
    `topology_map`, and `patch_node` is called with the node's label change
    right away. The first failing patch aborts the pass; patches already
    applied stay applied.
    """
    node_zones = {node.name: node_zone(node) for node in nodes}

    membership = TopologyMap()
    for node in nodes:
        for label, value in node.labels.items():
            if "rack" in label:
                membership.add(RACK_TOPOLOGY_KEY, value, node.name)
        recorded = recorded_rack(topology_map, node.name)
        if recorded:
            membership.add(RACK_TOPOLOGY_KEY, recorded, node.name)

    racks: dict[str, set[str]] = membership.labels.setdefault(RACK_TOPOLOGY_KEY, {})
    labelled = {name for members in racks.values() for name in members}

    patches: list[LabelPatch] = []
    for node in _placement_order([n for n in nodes if n.name not in labelled], node_zones):
        rack = determine_placement_rack(
            node=node,
            min_racks=min_racks,
            racks=racks,
            node_zones=node_zones,
        )
        membership.add(RACK_TOPOLOGY_KEY, rack, node.name)

        if not topology_map.contains(RACK_TOPOLOGY_KEY, rack):
            pulumi.log.info(f"Adding rack label from node {node.name}: {RACK_TOPOLOGY_KEY}={rack}")
            topology_map.add(RACK_TOPOLOGY_KEY, rack)
        topology_map.add(RACK_TOPOLOGY_KEY, rack, node.name)

        pulumi.log.info(f"Labeling node {node.name} with rack label {RACK_TOPOLOGY_KEY}={rack}")
        patch = LabelPatch(
            node=node.name,
            old_labels=dict(node.labels),
            new_labels={**node.labels, RACK_TOPOLOGY_KEY: rack},
        )
        try:
            patch_node(patch)
        except PatchFailureError:
            raise
        except Exception as e:
            raise PatchFailureError(node.name, str(e)) from e
        patches.append(patch)

    return patches


def recorded_rack(topology_map: TopologyMap, node: str) -> str:
    """Rack an earlier pass assigned to `node`, "" when none is recorded."""
    for rack in topology_map.values(RACK_TOPOLOGY_KEY):
        if topology_map.contains(RACK_TOPOLOGY_KEY, rack, node):
            return rack
    return ""


def rack_label_patches(nodes: Sequence[NodeSpec], topology_map: TopologyMap) -> list[LabelPatch]:
    """
    Label patches for every node with a recorded rack assignment.

    These are declared on every run, not only on the pass that made the
    assignment; a patch missing from a later run would take its label away.
    """
    patches: list[LabelPatch] = []
    for node in sorted(nodes, key=lambda n: n.name):
        rack = recorded_rack(topology_map, node.name)
        if rack:
            patches.append(
                LabelPatch(
                    node=node.name,
                    old_labels=dict(node.labels),
                    new_labels={**node.labels, RACK_TOPOLOGY_KEY: rack},
                )
            )
    return patches
