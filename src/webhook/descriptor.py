import copy
from typing import Dict, List, Any, Optional
from ..admission.models import PolicyConfig, DEFAULT_POLICY
from .utils import default_label_selector

WEBHOOK_NAME = "scc-validation"
DOC_STRING = "Managed OpenShift Customers may not modify the following default SCCs: {}"
TIMEOUT_SECONDS = 2


class WebhookDescriptor:
    """
    Static description of how the SCC webhook is registered and invoked.

    Every value is computed once here; accessors hand out copies so callers
    cannot change what gets registered.
    """

    def __init__(self, config: PolicyConfig = DEFAULT_POLICY, name: str = WEBHOOK_NAME):
        self._name = name
        self._uri = "/" + name
        self._rules = [
            {
                "operations": ["CREATE", "UPDATE", "DELETE"],
                "apiGroups": ["security.openshift.io"],
                "apiVersions": ["*"],
                "resources": ["securitycontextconstraints"],
                "scope": "Cluster",
            }
        ]
        self._doc = DOC_STRING.format("[" + " ".join(config.default_names) + "]")
        self._label_selector = default_label_selector()

    @property
    def name(self) -> str:
        return self._name

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def rules(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._rules)

    @property
    def failure_policy(self) -> str:
        # Fail open: the API server ignores this webhook when it can't be reached
        return "Ignore"

    @property
    def match_policy(self) -> str:
        return "Equivalent"

    @property
    def side_effects(self) -> str:
        return "None"

    @property
    def timeout_seconds(self) -> int:
        return TIMEOUT_SECONDS

    @property
    def object_selector(self) -> Optional[Dict[str, Any]]:
        return None

    @property
    def doc(self) -> str:
        return self._doc

    @property
    def syncset_label_selector(self) -> Dict[str, Any]:
        return copy.deepcopy(self._label_selector)

    def to_dict(self) -> Dict[str, Any]:
        """Summary of the descriptor"""
        return {
            "name": self.name,
            "uri": self.uri,
            "rules": self.rules,
            "failurePolicy": self.failure_policy,
            "matchPolicy": self.match_policy,
            "sideEffects": self.side_effects,
            "timeoutSeconds": self.timeout_seconds,
            "objectSelector": self.object_selector,
            "doc": self.doc,
            "syncSetLabelSelector": self.syncset_label_selector,
        }

    def to_webhook_config(self, service_name: str, namespace: str,
                          ca_bundle: Optional[str] = None) -> Dict[str, Any]:
        """
        Render the ValidatingWebhookConfiguration registering this webhook

        Args:
            service_name: Service fronting the webhook server
            namespace: Namespace of that service
            ca_bundle: Base64 encoded CA bundle for the serving certificate

        Returns:
            Dict: ValidatingWebhookConfiguration manifest
        """
        client_config: Dict[str, Any] = {
            "service": {
                "name": service_name,
                "namespace": namespace,
                "path": self.uri,
            }
        }
        if ca_bundle:
            client_config["caBundle"] = ca_bundle

        webhook: Dict[str, Any] = {
            "name": f"{self.name}.managed.openshift.io",
            "admissionReviewVersions": ["v1"],
            "clientConfig": client_config,
            "rules": self.rules,
            "failurePolicy": self.failure_policy,
            "matchPolicy": self.match_policy,
            "sideEffects": self.side_effects,
            "timeoutSeconds": self.timeout_seconds,
        }
        if self.object_selector is not None:
            webhook["objectSelector"] = self.object_selector

        return {
            "apiVersion": "admissionregistration.k8s.io/v1",
            "kind": "ValidatingWebhookConfiguration",
            "metadata": {
                "name": f"sre-{self.name}",
                "annotations": {"managed.openshift.io/doc": self.doc},
            },
            "webhooks": [webhook],
        }
