from typing import Dict, Any

# Label carried by clusters whose webhooks are managed by the platform
MANAGED_CLUSTER_LABEL = "api.openshift.com/managed"


def default_label_selector() -> Dict[str, Any]:
    """Label selector used when rendering registration artifacts for managed clusters"""
    return {"matchLabels": {MANAGED_CLUSTER_LABEL: "true"}}
