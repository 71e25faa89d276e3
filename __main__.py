import pulumi

from storagecluster.config.load import load_config
from storagecluster.constants import RACK_TOPOLOGY_KEY
from storagecluster.eligibility import list_eligible_nodes
from storagecluster.status import StorageClusterStatus
from storagecluster.providers.kubernetes import make_k8s_provider
from storagecluster.components.node_labels import apply_label_patches
from storagecluster.topology.failure_domain import reconcile_failure_domain
from storagecluster.topology.racks import rack_label_patches

# 1) load config + persisted status
cfg = load_config()
status = StorageClusterStatus.load(cfg.status_path)

# 2) select storage nodes
nodes = list_eligible_nodes(cfg.nodes, cfg.cluster.label_selector)

# 3) create k8s provider
k8s_provider = make_k8s_provider(cfg.kubernetes)

# 4) choose the failure domain; new rack assignments land in the status map
failure_domain = reconcile_failure_domain(
    status=status,
    spec=cfg.cluster,
    nodes=nodes,
    patch_node=lambda patch: None,
)

# 5) declare rack labels for every recorded assignment, on every run
rack_patches = rack_label_patches(nodes, status.node_topologies)
apply_label_patches(rack_patches, provider=k8s_provider)

# 6) persist status (never during preview)
if not pulumi.runtime.is_dry_run():
    status.save(cfg.status_path)

# 7) export outputs
pulumi.export("stack", cfg.stack)
pulumi.export("nodeCount", status.node_count)
pulumi.export("failureDomain", failure_domain.type)
pulumi.export("failureDomainKey", failure_domain.key)
pulumi.export("failureDomainValues", list(failure_domain.values))
pulumi.export("nodeRacks", {p.node: p.new_labels[RACK_TOPOLOGY_KEY] for p in rack_patches})
pulumi.export("nodeTopologies", status.node_topologies.to_dict() if status.node_topologies else {})
