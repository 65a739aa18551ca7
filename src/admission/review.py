import json
from typing import Dict, Any, Union
from loguru import logger
from .errors import ReviewError
from .models import AdmissionRequest, Decision, Operation

ADMISSION_API_VERSION = "admission.k8s.io/v1"


def _parse_operation(value: Any):
    try:
        return Operation(value)
    except ValueError:
        # Unknown operations are passed through and end up allowed
        logger.warning(f"Unrecognised admission operation: {value!r}")
        return None


def parse_admission_review(body: Union[bytes, str, Dict[str, Any]]) -> AdmissionRequest:
    """
    Parse an AdmissionReview document into an AdmissionRequest

    Args:
        body: AdmissionReview as JSON bytes/str or a parsed mapping

    Returns:
        AdmissionRequest: request fields relevant to the SCC webhook

    Raises:
        ReviewError: if the document is not an AdmissionReview with a request
    """
    if isinstance(body, (bytes, str)):
        try:
            body = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ReviewError(f"AdmissionReview is not valid JSON: {e}") from e

    if not isinstance(body, dict):
        raise ReviewError("AdmissionReview must be a JSON object")

    req = body.get("request")
    if not isinstance(req, dict):
        raise ReviewError("AdmissionReview has no request")

    uid = req.get("uid")
    if not isinstance(uid, str) or not uid:
        raise ReviewError("AdmissionReview request has no uid")

    user_info = req.get("userInfo") if isinstance(req.get("userInfo"), dict) else {}
    kind = req.get("kind") if isinstance(req.get("kind"), dict) else {}

    return AdmissionRequest(
        uid=uid,
        operation=_parse_operation(req.get("operation")),
        username=user_info.get("username") or "",
        kind=kind.get("kind") or "",
        object=req.get("object"),
        old_object=req.get("oldObject"),
        resource_name=req.get("name") or "",
        namespace=req.get("namespace") or "",
    )


def build_admission_review(decision: Decision, api_version: str = ADMISSION_API_VERSION) -> Dict[str, Any]:
    """Render a decision as an AdmissionReview response"""
    status: Dict[str, Any] = {"code": decision.code}
    if decision.is_error:
        status["message"] = decision.reason
    else:
        status["reason"] = decision.reason
        if not decision.allowed:
            status["message"] = decision.reason

    return {
        "apiVersion": api_version,
        "kind": "AdmissionReview",
        "response": {
            "uid": decision.uid,
            "allowed": decision.allowed,
            "status": status,
        },
    }
