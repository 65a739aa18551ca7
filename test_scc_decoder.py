#!/usr/bin/env python3
"""
Tests for decoding SCC payloads out of admission requests
"""

import json
import pytest

from src.admission.decoder import decode_scc, render_scc
from src.admission.errors import DecodeError
from src.admission.models import AdmissionRequest, Operation, SCCRecord


def scc_payload(name, priority=None):
    scc = {
        "apiVersion": "security.openshift.io/v1",
        "kind": "SecurityContextConstraints",
        "metadata": {"name": name},
        "allowPrivilegedContainer": False,
    }
    if priority is not None:
        scc["priority"] = priority
    return scc


@pytest.mark.parametrize("raw", [None, b"", "", {}])
def test_empty_payload_yields_zero_record(raw):
    record = decode_scc(raw)

    assert record == SCCRecord()
    assert record.is_empty


def test_decode_bytes_str_and_mapping():
    payload = scc_payload("custom", 7)

    assert decode_scc(json.dumps(payload).encode()) == SCCRecord("custom", 7)
    assert decode_scc(json.dumps(payload)) == SCCRecord("custom", 7)
    assert decode_scc(payload) == SCCRecord("custom", 7)


def test_null_priority_is_absent():
    payload = scc_payload("custom")
    payload["priority"] = None

    record = decode_scc(payload)
    assert record.priority is None
    assert not record.is_empty


def test_only_name_and_priority_are_inspected():
    payload = scc_payload("custom", 1)
    payload["runAsUser"] = "not-even-an-object"

    assert decode_scc(payload) == SCCRecord("custom", 1)


@pytest.mark.parametrize("raw", [
    b"{not json",
    b"\xff\xfe",
    "[1, 2, 3]",
    '"restricted"',
    5,
    True,
    1.5,
    ["restricted"],
    {"metadata": "restricted"},
    {"metadata": ""},
    {"metadata": 0},
    {"metadata": False},
    {"metadata": {"name": 42}},
    {"metadata": {"name": "x"}, "priority": "11"},
    {"metadata": {"name": "x"}, "priority": 1.5},
    {"metadata": {"name": "x"}, "priority": True},
])
def test_malformed_payload_raises_decode_error(raw):
    with pytest.raises(DecodeError):
        decode_scc(raw)


def test_render_scc_for_create_and_delete():
    create = AdmissionRequest(uid="1", operation=Operation.CREATE, object=scc_payload("new", 3))
    delete = AdmissionRequest(uid="2", operation=Operation.DELETE, old_object=scc_payload("old"))

    assert render_scc(create) == (SCCRecord(), SCCRecord("new", 3))
    assert render_scc(delete) == (SCCRecord("old"), SCCRecord())


def test_render_scc_short_circuits_on_bad_payload():
    request = AdmissionRequest(
        uid="3", operation=Operation.UPDATE,
        old_object=b"garbage", object=scc_payload("fine"),
    )
    with pytest.raises(DecodeError):
        render_scc(request)
