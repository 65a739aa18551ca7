from loguru import logger
from .models import (
    AdmissionRequest, SCCRecord, Decision, Operation, PolicyConfig,
    DEFAULT_POLICY, EXPECTED_KIND,
)


def is_default_scc(scc: SCCRecord, config: PolicyConfig = DEFAULT_POLICY) -> bool:
    """Checks if the SCC is one of the protected default SCCs"""
    if scc.is_empty:
        return False
    return config.is_default_name(scc.name)


def has_priority_above_ceiling(scc: SCCRecord, config: PolicyConfig = DEFAULT_POLICY) -> bool:
    """Checks if the SCC sets a priority higher than the ceiling (anyuid by default)"""
    return scc.priority is not None and scc.priority > config.priority_ceiling


def is_valid_request(request: AdmissionRequest) -> bool:
    """Whether the request is eligible for evaluation by the SCC webhook"""
    valid = True
    valid = valid and request.username != ""
    valid = valid and request.kind == EXPECTED_KIND
    return valid


class PolicyEvaluator:
    """Decides whether an SCC mutation is allowed"""

    def __init__(self, config: PolicyConfig = DEFAULT_POLICY):
        self.config = config

    def evaluate(self, request: AdmissionRequest, old_scc: SCCRecord, new_scc: SCCRecord) -> Decision:
        """
        Evaluate an SCC create/update/delete

        Args:
            request: Originating admission request, its uid is echoed back
            old_scc: SCC before the mutation (zero-value on CREATE)
            new_scc: SCC after the mutation (zero-value on DELETE)

        Returns:
            Decision: allow or deny, never raises
        """
        ceiling = self.config.priority_ceiling
        uid = request.uid

        if request.operation == Operation.DELETE:
            if is_default_scc(old_scc, self.config):
                return self._deny(request, "Deleting default SCCs is not allowed")

        elif request.operation == Operation.CREATE:
            if has_priority_above_ceiling(new_scc, self.config):
                return self._deny(request, f"Creating SCC with priority higher than {ceiling} is not allowed")

        elif request.operation == Operation.UPDATE:
            if is_default_scc(old_scc, self.config):
                return self._deny(request, "Modifying default SCCs is not allowed")
            if has_priority_above_ceiling(new_scc, self.config):
                return self._deny(request, f"Updating SCC with priority higher than {ceiling} is not allowed")

        logger.debug(f"Allowed {request.operation} on SCC for request {uid}")
        return Decision.allow(uid)

    def _deny(self, request: AdmissionRequest, reason: str) -> Decision:
        target = request.resource_name or "<unnamed>"
        if request.namespace:
            target = f"{request.namespace}/{target}"
        logger.info(f"Denied {request.operation.value} of SCC {target} by '{request.username}' (uid={request.uid}): {reason}")
        return Decision.deny(request.uid, reason)
