#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config.load import parse_label_selector, parse_nodes
from .config.models import StorageClusterSpec
from .constants import DEFAULT_MINIMUM_NODES, DEFAULT_MINIMUM_RACK_COUNT, DEFAULT_STATUS_PATH
from .components.node_labels import label_diff
from .eligibility import list_eligible_nodes
from .errors import TopologyError
from .status import StorageClusterStatus
from .topology.failure_domain import reconcile_failure_domain
from .topology.racks import LabelPatch


def read_json(path: Path) -> object:
    if not path.exists():
        raise SystemExit(f"File does not exist: {path}")
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Plan the storage cluster failure domain from a node snapshot (prints rack label patches, applies nothing)."
    )
    parser.add_argument("--nodes", required=True, help='JSON file with a list of {"name": ..., "labels": {...}}')
    parser.add_argument("--status", default=DEFAULT_STATUS_PATH, help="Persisted status JSON file")
    parser.add_argument("--selector", default="", help='Label selector as JSON, e.g. \'{"matchLabels": {"storage": "yes"}}\'')
    parser.add_argument("--flexible-scaling", action="store_true", help="Force the host failure domain")
    parser.add_argument("--arbiter", action="store_true", help="Arbiter mode (2 zones are enough for zone failure domain)")
    parser.add_argument("--min-nodes", type=int, default=DEFAULT_MINIMUM_NODES)
    parser.add_argument("--min-racks", type=int, default=DEFAULT_MINIMUM_RACK_COUNT)
    parser.add_argument("--write", action="store_true", help="Write the updated status back to --status")
    args = parser.parse_args(argv)

    try:
        nodes = parse_nodes(read_json(Path(args.nodes).expanduser()))
        selector = parse_label_selector(json.loads(args.selector)) if args.selector else None
    except ValueError as e:
        raise SystemExit(f"Invalid input: {e}")

    spec = StorageClusterSpec(
        flexible_scaling=args.flexible_scaling,
        arbiter_enabled=args.arbiter,
        label_selector=selector,
        minimum_nodes=args.min_nodes,
        minimum_rack_count=args.min_racks,
    )
    status = StorageClusterStatus.load(args.status)

    planned: list[LabelPatch] = []
    try:
        eligible = list_eligible_nodes(nodes, spec.label_selector)
        print(f"+ {len(eligible)} eligible node(s) out of {len(nodes)}")
        failure_domain = reconcile_failure_domain(
            status=status,
            spec=spec,
            nodes=eligible,
            patch_node=planned.append,
        )
    except TopologyError as e:
        raise SystemExit(f"Failure domain selection failed: {e}")

    for patch in planned:
        changes = ", ".join(f"{k}={v}" for k, v in sorted(label_diff(patch.old_labels, patch.new_labels).items()))
        print(f"+ label node {patch.node}: {changes}")

    print(f"\nFailure domain: {failure_domain.type}")
    print(f"   Key: {failure_domain.key or '-'}")
    print(f"   Values: {', '.join(failure_domain.values) or '-'}")

    if args.write:
        status.save(args.status)
        print(f"   Status written to {args.status}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
