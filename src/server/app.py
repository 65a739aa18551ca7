from typing import Optional
from flask import Flask, request, jsonify
from loguru import logger
from ..admission.errors import ReviewError
from ..admission.models import Decision
from ..admission.review import parse_admission_review, build_admission_review, ADMISSION_API_VERSION
from ..config import ServerConfig
from ..webhook.registry import WebhookRegistry, build_registry
from ..webhook.scc_webhook import SCCWebhook


def _make_handler(webhook: SCCWebhook):
    def handler():
        body = request.get_data()
        try:
            admission_request = parse_admission_review(body)
        except ReviewError as e:
            logger.error(f"Bad AdmissionReview sent to {webhook.uri}: {e}")
            return jsonify(build_admission_review(Decision.errored("", str(e)))), 400

        api_version = (request.get_json(silent=True) or {}).get("apiVersion") or ADMISSION_API_VERSION

        decision = webhook.handle(admission_request)
        return jsonify(build_admission_review(decision, api_version))

    handler.__name__ = f"handle_{webhook.name.replace('-', '_')}"
    return handler


def create_app(registry: Optional[WebhookRegistry] = None) -> Flask:
    """Flask application serving every webhook in the registry"""
    registry = registry or build_registry()
    app = Flask(__name__)

    for webhook in registry:
        app.add_url_rule(webhook.uri, view_func=_make_handler(webhook), methods=["POST"])
        logger.info(f"Serving webhook {webhook.name} at {webhook.uri}")

    @app.route("/healthz", methods=["GET"])
    def healthz():
        return jsonify({"status": "ok", "webhooks": registry.names()})

    return app


def run_server(config: ServerConfig, registry: Optional[WebhookRegistry] = None):
    """Run the webhook server, with TLS when a certificate is configured"""
    app = create_app(registry)
    ssl_context = None
    if config.tls_enabled:
        ssl_context = (config.tls_cert_file, config.tls_key_file)
    else:
        logger.warning("No TLS certificate configured, serving plain HTTP")

    logger.info(f"Starting webhook server on {config.host}:{config.port}")
    app.run(host=config.host, port=config.port, ssl_context=ssl_context)
