#!/usr/bin/env python3

import sys
import click
import yaml
import json
from typing import Dict, Any, Optional
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from loguru import logger

from ..admission.errors import ReviewError, DecodeError
from ..admission.evaluator import has_priority_above_ceiling, is_default_scc
from ..admission.decoder import decode_scc
from ..admission.models import DEFAULT_POLICY
from ..admission.review import parse_admission_review, build_admission_review
from ..config import load_config, ConfigError, ServerConfig
from ..openshift_client.client import OpenShiftClient
from ..webhook.scc_webhook import SCCWebhook

console = Console()

def setup_logging(verbose: bool = False, log_file: Optional[str] = None, level: str = "INFO"):
    """Setup logging configuration"""
    log_level = "DEBUG" if verbose else level.upper()
    logger.remove()
    logger.add(sys.stderr, level=log_level, format="<green>{time}</green> | <level>{level}</level> | {message}")
    if log_file:
        logger.add(log_file, rotation="1 MB", level="DEBUG")

@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--config', '-c', type=click.Path(exists=True), help='Configuration file path')
@click.pass_context
def cli(ctx, verbose, config):
    """SCC Admission Webhook - protects default SCCs and caps SCC priority"""
    ctx.ensure_object(dict)
    try:
        server_config = load_config(config)
    except ConfigError as e:
        raise click.ClickException(str(e))

    ctx.obj['verbose'] = verbose
    ctx.obj['config'] = server_config
    ctx.obj['webhook'] = SCCWebhook(DEFAULT_POLICY)

    setup_logging(verbose, server_config.log_file, server_config.log_level)

@cli.command()
@click.option('--host', help='Address to bind to')
@click.option('--port', '-p', type=int, help='Port to listen on')
@click.option('--tls-cert', type=click.Path(exists=True), help='TLS certificate file')
@click.option('--tls-key', type=click.Path(exists=True), help='TLS private key file')
@click.pass_context
def serve(ctx, host, port, tls_cert, tls_key):
    """Run the admission webhook server"""
    from ..server.app import run_server
    from ..webhook.registry import WebhookRegistry

    server_config: ServerConfig = ctx.obj['config']
    if host:
        server_config.host = host
    if port:
        server_config.port = port
    if tls_cert:
        server_config.tls_cert_file = tls_cert
    if tls_key:
        server_config.tls_key_file = tls_key

    registry = WebhookRegistry()
    registry.register(ctx.obj['webhook'])

    console.print(f"[bold blue]Serving {', '.join(registry.names())} on {server_config.host}:{server_config.port}[/bold blue]")
    run_server(server_config, registry)

@cli.command()
@click.argument('review_file', type=click.Path(exists=True))
@click.option('--format', '-f', 'output_format', type=click.Choice(['json', 'yaml', 'table']), default='table', help='Output format')
@click.pass_context
def evaluate(ctx, review_file, output_format):
    """Evaluate an AdmissionReview file offline"""
    webhook: SCCWebhook = ctx.obj['webhook']

    with open(review_file, 'r') as f:
        try:
            document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise click.ClickException(f"Failed to parse {review_file}: {e}")

    try:
        admission_request = parse_admission_review(document)
    except ReviewError as e:
        raise click.ClickException(str(e))

    decision = webhook.handle(admission_request)
    response = build_admission_review(decision)

    if output_format == 'json':
        click.echo(json.dumps(response, indent=2))
    elif output_format == 'yaml':
        click.echo(yaml.dump(response, default_flow_style=False))
    else:
        _display_decision_table(admission_request, decision)

    sys.exit(0 if decision.allowed else 1)

@cli.command()
@click.pass_context
def describe(ctx):
    """Show how the webhook is registered"""
    descriptor = ctx.obj['webhook'].descriptor

    table = Table(title=f"Webhook: {descriptor.name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    for key, value in descriptor.to_dict().items():
        if key == "doc":
            continue
        rendered = value if isinstance(value, str) else json.dumps(value)
        table.add_row(key, rendered)

    console.print(table)
    console.print(Panel(descriptor.doc, title="Documentation", expand=False))

@cli.command()
@click.option('--ca-bundle-file', type=click.Path(exists=True), help='File holding the base64 encoded CA bundle')
@click.option('--namespace', '-n', help='Namespace of the webhook service')
@click.option('--service-name', help='Name of the webhook service')
@click.option('--output', '-o', type=click.Path(), help='Write the configuration to this file')
@click.pass_context
def render_config(ctx, ca_bundle_file, namespace, service_name, output):
    """Render the ValidatingWebhookConfiguration"""
    manifest = _build_webhook_config(ctx, ca_bundle_file, namespace, service_name)
    rendered = yaml.dump(manifest, default_flow_style=False, sort_keys=False)

    if output:
        with open(output, 'w') as f:
            f.write(rendered)
        console.print(f"[green]Webhook configuration saved to: {output}[/green]")
    else:
        click.echo(rendered)

@cli.command()
@click.option('--kubeconfig', '-k', type=click.Path(), help='Path to kubeconfig file')
@click.option('--ca-bundle-file', type=click.Path(exists=True), help='File holding the base64 encoded CA bundle')
@click.option('--namespace', '-n', help='Namespace of the webhook service')
@click.option('--service-name', help='Name of the webhook service')
@click.option('--delete', is_flag=True, help='Remove the configuration instead of applying it')
@click.pass_context
def register(ctx, kubeconfig, ca_bundle_file, namespace, service_name, delete):
    """Register the webhook with a cluster"""
    manifest = _build_webhook_config(ctx, ca_bundle_file, namespace, service_name)
    name = manifest['metadata']['name']

    client = OpenShiftClient(kubeconfig)
    if not client.connect():
        console.print("[red]✗ Failed to connect to cluster[/red]")
        sys.exit(1)

    if delete:
        ok = client.delete_webhook_configuration(name)
        action = "removed"
    else:
        ok = client.apply_webhook_configuration(manifest)
        action = "applied"
    client.disconnect()

    if ok:
        console.print(f"[green]✓ ValidatingWebhookConfiguration {name} {action}[/green]")
    else:
        console.print(f"[red]✗ ValidatingWebhookConfiguration {name} could not be {action}[/red]")
        sys.exit(1)

@cli.command()
@click.option('--kubeconfig', '-k', type=click.Path(), help='Path to kubeconfig file')
@click.pass_context
def audit(ctx, kubeconfig):
    """Check the SCCs in a cluster against the policy"""
    client = OpenShiftClient(kubeconfig)
    if not client.connect():
        console.print("[red]✗ Failed to connect to cluster[/red]")
        sys.exit(1)

    rows = _audit_sccs(client.list_sccs())
    client.disconnect()

    table = Table(title="Security Context Constraints")
    table.add_column("Name", style="cyan")
    table.add_column("Priority", style="white")
    table.add_column("Default", style="yellow")
    table.add_column("Status", style="green")

    for row in rows:
        status_color = "green" if row['status'] == "ok" else "red"
        table.add_row(
            row['name'],
            "N/A" if row['priority'] is None else str(row['priority']),
            "Yes" if row['default'] else "No",
            f"[{status_color}]{row['status']}[/{status_color}]"
        )

    console.print(table)

def _audit_sccs(sccs):
    """Classify cluster SCCs against the policy"""
    rows = []
    for scc in sccs:
        try:
            record = decode_scc(scc)
        except DecodeError as e:
            rows.append({'name': scc.get('metadata', {}).get('name', 'Unknown'), 'priority': None,
                         'default': False, 'status': f"undecodable: {e}"})
            continue

        status = "ok"
        if has_priority_above_ceiling(record, DEFAULT_POLICY):
            status = f"priority above {DEFAULT_POLICY.priority_ceiling}"

        rows.append({
            'name': record.name,
            'priority': record.priority,
            'default': is_default_scc(record, DEFAULT_POLICY),
            'status': status,
        })
    return rows

def _build_webhook_config(ctx, ca_bundle_file, namespace, service_name) -> Dict[str, Any]:
    """Render the registration manifest from CLI options and server config"""
    server_config: ServerConfig = ctx.obj['config']
    ca_bundle = None
    if ca_bundle_file:
        with open(ca_bundle_file, 'r') as f:
            ca_bundle = f.read().strip()

    return ctx.obj['webhook'].descriptor.to_webhook_config(
        service_name=service_name or server_config.service_name,
        namespace=namespace or server_config.namespace,
        ca_bundle=ca_bundle
    )

def _display_decision_table(admission_request, decision):
    """Display an admission decision in table format"""
    table = Table(title="Admission Decision")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    color = "green" if decision.allowed else "red"
    operation = admission_request.operation.value if admission_request.operation else "UNKNOWN"

    table.add_row("UID", decision.uid)
    table.add_row("Operation", operation)
    table.add_row("User", admission_request.username or "-")
    table.add_row("Allowed", f"[{color}]{decision.allowed}[/{color}]")
    table.add_row("Code", str(decision.code))
    table.add_row("Reason", decision.reason)

    console.print(table)

if __name__ == '__main__':
    cli()
