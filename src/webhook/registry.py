from typing import Dict, List, Optional, Iterator
from loguru import logger
from ..admission.models import PolicyConfig, DEFAULT_POLICY
from .scc_webhook import SCCWebhook


class WebhookRegistry:
    """Webhooks served by this process, keyed by name"""

    def __init__(self):
        self._webhooks: Dict[str, SCCWebhook] = {}

    def register(self, webhook: SCCWebhook):
        if webhook.name in self._webhooks:
            raise ValueError(f"Webhook {webhook.name} is already registered")
        self._webhooks[webhook.name] = webhook
        logger.debug(f"Registered webhook {webhook.name} at {webhook.uri}")

    def get(self, name: str) -> Optional[SCCWebhook]:
        return self._webhooks.get(name)

    def get_by_uri(self, uri: str) -> Optional[SCCWebhook]:
        for webhook in self._webhooks.values():
            if webhook.uri == uri:
                return webhook
        return None

    def names(self) -> List[str]:
        return sorted(self._webhooks)

    def __iter__(self) -> Iterator[SCCWebhook]:
        return iter(self._webhooks.values())

    def __len__(self) -> int:
        return len(self._webhooks)


def build_registry(config: PolicyConfig = DEFAULT_POLICY) -> WebhookRegistry:
    """Registry with every webhook this project provides"""
    registry = WebhookRegistry()
    registry.register(SCCWebhook(config))
    return registry
