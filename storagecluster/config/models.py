from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

import pulumi

from ..constants import DEFAULT_MINIMUM_NODES, DEFAULT_MINIMUM_RACK_COUNT, DEFAULT_STATUS_PATH


SelectorOperator = Literal["In", "NotIn", "Exists", "DoesNotExist"]


@dataclass(frozen=True)
class NodeSpec:
    name: str
    labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SelectorRequirement:
    key: str
    operator: SelectorOperator
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class LabelSelector:
    """
    Kubernetes-style label selector.

    Notes:
      - All matchLabels and all matchExpressions must hold (logical AND).
      - An empty selector matches every node.
    """
    match_labels: dict[str, str] = field(default_factory=dict)
    match_expressions: tuple[SelectorRequirement, ...] = ()


@dataclass(frozen=True)
class StorageClusterSpec:
    flexible_scaling: bool = False
    arbiter_enabled: bool = False
    label_selector: LabelSelector | None = None
    minimum_nodes: int = DEFAULT_MINIMUM_NODES
    minimum_rack_count: int = DEFAULT_MINIMUM_RACK_COUNT


@dataclass(frozen=True)
class KubernetesSpec:
    kubeconfig_path: str | None = None
    k3s_server_ip: str | None = None
    ssh_user: str = "ubuntu"
    ssh_private_key: pulumi.Output[str] | None = None


@dataclass(frozen=True)
class Config:
    """
    In-memory config for the Pulumi program.

    Notes:
      - nodes is the node snapshot the program reconciles against; eligibility
        is decided later by the cluster's label selector.
      - status_path points at the JSON file holding the persisted status.
    """
    stack: str
    nodes: list[NodeSpec]
    cluster: StorageClusterSpec
    kubernetes: KubernetesSpec
    status_path: str = DEFAULT_STATUS_PATH
