import json
from typing import Dict, Any, Tuple
from loguru import logger
from .errors import DecodeError
from .models import AdmissionRequest, SCCRecord, RawPayload


def _load_payload(raw: RawPayload) -> Dict[str, Any]:
    """Parse a raw payload into a mapping"""
    if isinstance(raw, dict):
        return raw

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"payload is not valid UTF-8: {e}") from e

    if not isinstance(raw, str):
        raise DecodeError(f"unsupported payload type: {type(raw).__name__}")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DecodeError(f"couldn't decode SecurityContextConstraints: {e}") from e

    if not isinstance(data, dict):
        raise DecodeError("SecurityContextConstraints payload must be a JSON object")
    return data


def decode_scc(raw: RawPayload) -> SCCRecord:
    """
    Decode a serialized SCC into an SCCRecord

    Args:
        raw: JSON bytes/str or an already parsed mapping

    Returns:
        SCCRecord: zero-value record when the payload is empty

    Raises:
        DecodeError: if a non-empty payload doesn't have the SCC shape
    """
    if raw is None or (isinstance(raw, (bytes, str, dict)) and len(raw) == 0):
        return SCCRecord()

    data = _load_payload(raw)

    metadata = data.get("metadata")
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise DecodeError("metadata must be an object")

    name = metadata.get("name", "")
    if name is None:
        name = ""
    if not isinstance(name, str):
        raise DecodeError(f"metadata.name must be a string, got {type(name).__name__}")

    priority = data.get("priority")
    # bool is an int subclass; JSON true/false is not a priority
    if priority is not None and (isinstance(priority, bool) or not isinstance(priority, int)):
        raise DecodeError(f"priority must be an integer, got {priority!r}")

    return SCCRecord(name=name, priority=priority)


def render_scc(request: AdmissionRequest) -> Tuple[SCCRecord, SCCRecord]:
    """Render the prior and proposed SCC from the request"""
    old_scc = decode_scc(request.old_object)
    new_scc = decode_scc(request.object)
    logger.debug(f"Rendered SCCs for request {request.uid}: old={old_scc}, new={new_scc}")
    return old_scc, new_scc
