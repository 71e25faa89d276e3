from typing import Sequence

import pulumi
import pulumi_kubernetes as k8s

from ..errors import PatchFailureError
from ..topology.racks import LabelPatch


def label_diff(old: dict[str, str], new: dict[str, str]) -> dict[str, str | None]:
    """Minimal label change: added/changed keys with their new value, removed keys as None."""
    diff: dict[str, str | None] = {k: v for k, v in new.items() if old.get(k) != v}
    diff.update({k: None for k in old if k not in new})
    return diff


def apply_label_patch(
    patch: LabelPatch,
    *,
    provider: k8s.Provider | None = None,
) -> k8s.core.v1.NodePatch | None:
    """
    Patch the live node so its labels go from patch.old_labels to patch.new_labels.

    Only the changed labels are sent; returns None when there is nothing to change.
    """
    if not patch.node:
        raise PatchFailureError(patch.node, "node name is empty")

    diff = label_diff(patch.old_labels, patch.new_labels)
    if not diff:
        return None

    try:
        return k8s.core.v1.NodePatch(
            f"label-{patch.node}-topology",
            metadata={
                "name": patch.node,
                "labels": diff,
            },
            opts=pulumi.ResourceOptions(provider=provider),
        )
    except Exception as e:
        raise PatchFailureError(patch.node, str(e)) from e


def apply_label_patches(
    patches: Sequence[LabelPatch],
    *,
    provider: k8s.Provider | None = None,
) -> list[k8s.core.v1.NodePatch]:
    """Declare every patch in `patches`; the first failure aborts the rest."""
    resources = []
    for patch in patches:
        resource = apply_label_patch(patch, provider=provider)
        if resource is not None:
            resources.append(resource)
    return resources
