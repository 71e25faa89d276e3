# storagecluster/constants.py

# Default node eligibility label (matched with an empty value)
NODE_AFFINITY_KEY = "cluster.ocs.openshift.io/openshift-storage"

# Label written on nodes by rack synthesis
RACK_TOPOLOGY_KEY = "topology.rook.io/rack"

# Recognized topology label key substrings, most preferred first
VALID_TOPOLOGY_LABEL_KEYS = (
    # Kubernetes recommends zone and region labels under this prefix.
    "topology.kubernetes.io",
    # Deprecated by kubernetes, kept for backward compatibility.
    "failure-domain.beta.kubernetes.io",
    "failure-domain.kubernetes.io",
    "kubernetes.io/hostname",
    "topology.rook.io",
)

# Canonical key -> deprecated aliases, oldest first
DEPRECATED_LABEL_LINEAGE = {
    "topology.kubernetes.io/zone": (
        "failure-domain.beta.kubernetes.io/zone",
        "failure-domain.kubernetes.io/zone",
    ),
    "topology.kubernetes.io/region": (
        "failure-domain.beta.kubernetes.io/region",
        "failure-domain.kubernetes.io/region",
    ),
}

# Failure domain types
DOMAIN_HOST = "host"
DOMAIN_RACK = "rack"
DOMAIN_ZONE = "zone"
DOMAIN_TYPES = (DOMAIN_HOST, DOMAIN_RACK, DOMAIN_ZONE)

# Distinct zones needed before zone becomes the failure domain
MIN_ZONES = 3
MIN_ZONES_ARBITER = 2

DEFAULT_MINIMUM_NODES = 3
DEFAULT_MINIMUM_RACK_COUNT = 3
DEFAULT_STATUS_PATH = "storagecluster-status.json"
