import os
from typing import Any

import pulumi

from .models import Config, KubernetesSpec, LabelSelector, NodeSpec, SelectorRequirement, StorageClusterSpec
from ..constants import DEFAULT_MINIMUM_NODES, DEFAULT_MINIMUM_RACK_COUNT, DEFAULT_STATUS_PATH


def read_secret_file(path: str, config_key: str) -> pulumi.Output[str]:
    """Contents of a local file named by `config_key`, wrapped as a Pulumi secret."""
    expanded = os.path.expanduser(path)
    if not os.path.isfile(expanded):
        raise FileNotFoundError(f"{config_key} points at a missing file: {expanded}")

    with open(expanded, "r", encoding="utf-8") as f:
        return pulumi.Output.secret(f.read())


def parse_nodes(raw: Any) -> list[NodeSpec]:
    if not isinstance(raw, list):
        raise ValueError(f"Config key 'nodes' must be a list. Got: {type(raw).__name__}")

    nodes: list[NodeSpec] = []
    seen: set[str] = set()
    for item in raw:
        if not isinstance(item, dict) or not item.get("name"):
            raise ValueError(f"Every node needs a 'name'. Got: {item!r}")
        name = str(item["name"])
        if name in seen:
            raise ValueError(f"Duplicate node name {name!r} in config key 'nodes'")
        seen.add(name)

        labels = item.get("labels") or {}
        if not isinstance(labels, dict):
            raise ValueError(f"Labels of node {name!r} must be a mapping. Got: {labels!r}")
        nodes.append(NodeSpec(name=name, labels={str(k): str(v) for k, v in labels.items()}))
    return nodes


def parse_label_selector(raw: Any) -> LabelSelector | None:
    """
    Turn a `labelSelector` config object into a LabelSelector.

    Only the shape is checked here; operator/value rules are enforced by
    eligibility.validate_selector when nodes are selected.
    """
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"Config key 'labelSelector' must be an object. Got: {raw!r}")

    match_labels = raw.get("matchLabels") or {}
    if not isinstance(match_labels, dict):
        raise ValueError(f"labelSelector.matchLabels must be a mapping. Got: {match_labels!r}")

    expressions = []
    for expr in raw.get("matchExpressions") or []:
        if not isinstance(expr, dict):
            raise ValueError(f"labelSelector.matchExpressions entries must be objects. Got: {expr!r}")
        expressions.append(
            SelectorRequirement(
                key=str(expr.get("key", "")),
                operator=expr.get("operator", ""),
                values=tuple(str(v) for v in expr.get("values") or []),
            )
        )

    return LabelSelector(
        match_labels={str(k): str(v) for k, v in match_labels.items()},
        match_expressions=tuple(expressions),
    )


def load_config() -> Config:
    """
    Reads stack config from Pulumi.<stack>.yaml + Pulumi secrets.

    Kubernetes access:
      - Prefer kubeconfigPath (read at deploy time)
      - Otherwise fetch the kubeconfig from k3sServerIp over SSH
        (sshPrivateKeyPath, falling back to the sshPrivateKey secret)
      - Neither set: the provider uses the ambient kubeconfig

    Required keys:
      - nodes (list of {name, labels})
    """
    c = pulumi.Config()
    stack = pulumi.get_stack()

    nodes = parse_nodes(c.require_object("nodes"))

    cluster = StorageClusterSpec(
        flexible_scaling=bool(c.get_bool("flexibleScaling") or False),
        arbiter_enabled=bool(c.get_bool("arbiterEnabled") or False),
        label_selector=parse_label_selector(c.get_object("labelSelector")),
        minimum_nodes=int(c.get_int("minimumNodes") or DEFAULT_MINIMUM_NODES),
        minimum_rack_count=int(c.get_int("minimumRackCount") or DEFAULT_MINIMUM_RACK_COUNT),
    )
    if cluster.minimum_nodes < 1:
        raise ValueError(f"minimumNodes must be positive. Got: {cluster.minimum_nodes}")
    if cluster.minimum_rack_count < 1:
        raise ValueError(f"minimumRackCount must be positive. Got: {cluster.minimum_rack_count}")

    k3s_server_ip = c.get("k3sServerIp")
    ssh_private_key = None
    if k3s_server_ip:
        ssh_private_key_path = c.get("sshPrivateKeyPath")
        if ssh_private_key_path:
            ssh_private_key = read_secret_file(ssh_private_key_path, "sshPrivateKeyPath")
        else:
            ssh_private_key = c.require_secret("sshPrivateKey")

    kubernetes = KubernetesSpec(
        kubeconfig_path=c.get("kubeconfigPath"),
        k3s_server_ip=k3s_server_ip,
        ssh_user=c.get("sshUser") or "ubuntu",
        ssh_private_key=ssh_private_key,
    )

    return Config(
        stack=stack,
        nodes=nodes,
        cluster=cluster,
        kubernetes=kubernetes,
        status_path=c.get("statusPath") or DEFAULT_STATUS_PATH,
    )
