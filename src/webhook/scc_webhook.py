from typing import Dict, List, Any, Optional
from loguru import logger
from ..admission.decoder import render_scc
from ..admission.errors import DecodeError
from ..admission.evaluator import PolicyEvaluator, is_valid_request
from ..admission.models import AdmissionRequest, Decision, PolicyConfig, DEFAULT_POLICY
from .descriptor import WebhookDescriptor


class SCCWebhook:
    """SCC validation webhook: policy evaluator plus its registration descriptor"""

    def __init__(self, config: PolicyConfig = DEFAULT_POLICY,
                 evaluator: Optional[PolicyEvaluator] = None,
                 descriptor: Optional[WebhookDescriptor] = None):
        self.config = config
        self.evaluator = evaluator or PolicyEvaluator(config)
        self.descriptor = descriptor or WebhookDescriptor(config)

    def authorized(self, request: AdmissionRequest) -> Decision:
        """Decode the request's SCCs and decide on the mutation"""
        try:
            old_scc, new_scc = render_scc(request)
        except DecodeError as e:
            logger.error(f"Couldn't render a SCC from the incoming request {request.uid}: {e}")
            return Decision.errored(request.uid, str(e), 400)

        return self.evaluator.evaluate(request, old_scc, new_scc)

    def validate(self, request: AdmissionRequest) -> bool:
        return is_valid_request(request)

    def handle(self, request: AdmissionRequest) -> Decision:
        """Validate the request and, if eligible, decide on it"""
        if not self.validate(request):
            logger.warning(f"Request {request.uid} is not valid for {self.name}")
            return Decision.errored(request.uid, "Not a valid webhook request")
        return self.authorized(request)

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def uri(self) -> str:
        return self.descriptor.uri

    @property
    def rules(self) -> List[Dict[str, Any]]:
        return self.descriptor.rules

    @property
    def failure_policy(self) -> str:
        return self.descriptor.failure_policy

    @property
    def match_policy(self) -> str:
        return self.descriptor.match_policy

    @property
    def side_effects(self) -> str:
        return self.descriptor.side_effects

    @property
    def timeout_seconds(self) -> int:
        return self.descriptor.timeout_seconds

    @property
    def object_selector(self) -> Optional[Dict[str, Any]]:
        return self.descriptor.object_selector

    @property
    def doc(self) -> str:
        return self.descriptor.doc

    @property
    def syncset_label_selector(self) -> Dict[str, Any]:
        return self.descriptor.syncset_label_selector
