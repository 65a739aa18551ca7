#!/usr/bin/env python3
"""
Tests for the AdmissionReview envelope and the Flask webhook server
"""

import pytest

from src.admission.errors import ReviewError
from src.admission.models import Decision, Operation
from src.admission.review import parse_admission_review, build_admission_review
from src.server.app import create_app


def admission_review(operation, old=None, new=None, uid="0f3b7d2e", username="alice",
                     kind="SecurityContextConstraint"):
    return {
        "apiVersion": "admission.k8s.io/v1",
        "kind": "AdmissionReview",
        "request": {
            "uid": uid,
            "kind": {"group": "security.openshift.io", "version": "v1", "kind": kind},
            "resource": {"group": "security.openshift.io", "version": "v1",
                         "resource": "securitycontextconstraints"},
            "operation": operation,
            "userInfo": {"username": username},
            "object": new,
            "oldObject": old,
        },
    }


def scc(name, priority=None):
    obj = {"metadata": {"name": name}}
    if priority is not None:
        obj["priority"] = priority
    return obj


@pytest.fixture
def client():
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()


def test_parse_admission_review():
    request = parse_admission_review(admission_review("UPDATE", scc("a"), scc("a", 3)))

    assert request.uid == "0f3b7d2e"
    assert request.operation == Operation.UPDATE
    assert request.username == "alice"
    assert request.kind == "SecurityContextConstraint"
    assert request.old_object == {"metadata": {"name": "a"}}


def test_parse_unknown_operation_is_kept_as_none():
    assert parse_admission_review(admission_review("PATCH")).operation is None


@pytest.mark.parametrize("body", [b"not json", b"[]", {"kind": "AdmissionReview"}, {"request": {"uid": ""}}])
def test_parse_malformed_review(body):
    with pytest.raises(ReviewError):
        parse_admission_review(body)


def test_build_admission_review_shapes():
    denied = build_admission_review(Decision.deny("u1", "nope"))["response"]
    allowed = build_admission_review(Decision.allow("u2"))["response"]
    errored = build_admission_review(Decision.errored("u3", "bad payload"))["response"]

    assert denied == {"uid": "u1", "allowed": False,
                      "status": {"code": 403, "reason": "nope", "message": "nope"}}
    assert allowed == {"uid": "u2", "allowed": True,
                       "status": {"code": 200, "reason": "Request is allowed"}}
    assert errored == {"uid": "u3", "allowed": False,
                       "status": {"code": 400, "message": "bad payload"}}


def test_server_denies_update_of_default_scc(client):
    resp = client.post("/scc-validation", json=admission_review("UPDATE", scc("restricted"), scc("restricted", 5)))

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["kind"] == "AdmissionReview"
    assert body["response"]["uid"] == "0f3b7d2e"
    assert body["response"]["allowed"] is False
    assert "Modifying default SCCs" in body["response"]["status"]["reason"]


def test_server_denies_create_above_ceiling(client):
    resp = client.post("/scc-validation", json=admission_review("CREATE", None, scc("custom", 15)))
    body = resp.get_json()["response"]

    assert body["allowed"] is False
    assert "priority higher than 10" in body["status"]["reason"]


def test_server_allows_delete_of_custom_scc(client):
    resp = client.post("/scc-validation", json=admission_review("DELETE", scc("custom"), None, uid="xyz"))
    body = resp.get_json()["response"]

    assert body["allowed"] is True
    assert body["uid"] == "xyz"


def test_server_rejects_invalid_request_without_evaluating(client):
    review = admission_review("DELETE", scc("privileged"), None, kind="SecurityContextConstraints")
    body = client.post("/scc-validation", json=review).get_json()["response"]

    assert body["allowed"] is False
    assert body["status"] == {"code": 400, "message": "Not a valid webhook request"}


def test_server_reports_decode_errors(client):
    review = admission_review("UPDATE", scc("custom"), {"metadata": {"name": "custom"}, "priority": "high"})
    body = client.post("/scc-validation", json=review).get_json()["response"]

    assert body["allowed"] is False
    assert body["status"]["code"] == 400
    assert "priority" in body["status"]["message"]


@pytest.mark.parametrize("payload", [5, True, 1.5])
def test_server_reports_scalar_object_as_decode_error(client, payload):
    resp = client.post("/scc-validation", json=admission_review("CREATE", None, payload))

    assert resp.status_code == 200
    body = resp.get_json()["response"]
    assert body["allowed"] is False
    assert body["status"]["code"] == 400


def test_server_rejects_unparseable_review(client):
    resp = client.post("/scc-validation", data=b"{", content_type="application/json")

    assert resp.status_code == 400
    assert resp.get_json()["response"]["allowed"] is False


def test_healthz(client):
    resp = client.get("/healthz")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "webhooks": ["scc-validation"]}


def test_unknown_path_is_404(client):
    assert client.post("/other", json=admission_review("CREATE")).status_code == 404
