import os
from typing import Dict, List, Any, Optional
from loguru import logger
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from openshift.dynamic import DynamicClient
from openshift.dynamic.exceptions import ResourceNotFoundError, NotFoundError

class OpenShiftClient:
    """Client for registering the webhook with, and inspecting, an OpenShift cluster"""

    def __init__(self, kubeconfig_path: Optional[str] = None):
        """
        Initialize OpenShift client

        Args:
            kubeconfig_path: Path to kubeconfig file, defaults to $KUBECONFIG or ~/.kube/config
        """
        self.kubeconfig_path = kubeconfig_path or os.getenv("KUBECONFIG") or os.path.expanduser("~/.kube/config")
        self.k8s_client = None
        self.dynamic_client = None
        self.connected = False

    def connect(self) -> bool:
        """
        Connect to OpenShift cluster, falling back to the in-cluster service account

        Returns:
            bool: True if connection successful
        """
        try:
            if os.path.exists(self.kubeconfig_path):
                config.load_kube_config(config_file=self.kubeconfig_path)
            else:
                config.load_incluster_config()

            self.k8s_client = client.ApiClient()
            self.dynamic_client = DynamicClient(self.k8s_client)
            self.connected = True

            logger.info(f"Successfully connected to OpenShift cluster: {self.k8s_client.configuration.host}")
            return True

        except (ConfigException, ApiException) as e:
            logger.error(f"Failed to connect to OpenShift cluster: {str(e)}")
            self.connected = False
            return False

    def disconnect(self):
        """Disconnect from cluster"""
        self.k8s_client = None
        self.dynamic_client = None
        self.connected = False
        logger.info("Disconnected from OpenShift cluster")

    def _webhook_configurations(self):
        return self.dynamic_client.resources.get(
            api_version="admissionregistration.k8s.io/v1",
            kind="ValidatingWebhookConfiguration"
        )

    def apply_webhook_configuration(self, manifest: Dict[str, Any]) -> bool:
        """
        Create a ValidatingWebhookConfiguration, replacing it if it already exists

        Args:
            manifest: ValidatingWebhookConfiguration manifest as dictionary

        Returns:
            bool: True if the configuration is in place
        """
        if not self.connected:
            logger.error("Not connected to cluster")
            return False

        name = manifest['metadata']['name']
        try:
            resource = self._webhook_configurations()
        except ResourceNotFoundError as e:
            logger.error(f"Cluster does not serve ValidatingWebhookConfiguration: {str(e)}")
            return False

        try:
            result = resource.create(body=manifest)
            logger.info(f"Created ValidatingWebhookConfiguration: {result.metadata.name}")
            return True

        except ApiException as e:
            if e.status != 409:  # Anything but already exists
                logger.error(f"Failed to create ValidatingWebhookConfiguration {name}: {str(e)}")
                return False

        try:
            existing = resource.get(name=name)
            manifest['metadata']['resourceVersion'] = existing.metadata.resourceVersion
            result = resource.replace(body=manifest)
            logger.info(f"Updated ValidatingWebhookConfiguration: {result.metadata.name}")
            return True

        except ApiException as e:
            logger.error(f"Failed to update ValidatingWebhookConfiguration {name}: {str(e)}")
            return False

    def delete_webhook_configuration(self, name: str) -> bool:
        """
        Delete a ValidatingWebhookConfiguration

        Args:
            name: Name of the configuration

        Returns:
            bool: True if deletion successful or it did not exist
        """
        if not self.connected:
            logger.error("Not connected to cluster")
            return False

        try:
            self._webhook_configurations().delete(name=name)
            logger.info(f"Deleted ValidatingWebhookConfiguration: {name}")
            return True

        except (ResourceNotFoundError, NotFoundError):
            logger.info(f"ValidatingWebhookConfiguration {name} not found")
            return True
        except ApiException as e:
            logger.error(f"Error deleting ValidatingWebhookConfiguration: {str(e)}")
            return False

    def list_sccs(self) -> List[Dict[str, Any]]:
        """
        List all Security Context Constraints

        Returns:
            List[Dict]: List of SCC manifests
        """
        if not self.connected:
            logger.error("Not connected to cluster")
            return []

        try:
            scc_resource = self.dynamic_client.resources.get(
                api_version="security.openshift.io/v1",
                kind="SecurityContextConstraints"
            )

            sccs = scc_resource.get()
            return [scc.to_dict() for scc in sccs.items]

        except (ApiException, ResourceNotFoundError) as e:
            logger.error(f"Error listing SCCs: {str(e)}")
            return []
