import os
from typing import Dict, Any, Optional
from dataclasses import dataclass, fields, replace
import yaml
from loguru import logger


class ConfigError(Exception):
    """Invalid webhook server configuration"""


@dataclass
class ServerConfig:
    """Runtime settings for the webhook server"""
    host: str = "0.0.0.0"
    port: int = 5000
    tls_cert_file: Optional[str] = None
    tls_key_file: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    namespace: str = "openshift-validation-webhook"
    service_name: str = "validation-webhook"

    @property
    def tls_enabled(self) -> bool:
        return bool(self.tls_cert_file and self.tls_key_file)


ENV_OVERRIDES = {
    "WEBHOOK_HOST": "host",
    "WEBHOOK_PORT": "port",
    "WEBHOOK_TLS_CERT": "tls_cert_file",
    "WEBHOOK_TLS_KEY": "tls_key_file",
    "WEBHOOK_LOG_LEVEL": "log_level",
    "WEBHOOK_NAMESPACE": "namespace",
}


def _coerce_port(value: Any) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"port must be an integer, got {value!r}") from e
    if not 0 < port < 65536:
        raise ConfigError(f"port out of range: {port}")
    return port


def load_config(path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> ServerConfig:
    """
    Load server configuration

    Args:
        path: Optional YAML file with ServerConfig fields
        environ: Environment to read overrides from, defaults to os.environ

    Returns:
        ServerConfig: file values overridden by WEBHOOK_* environment variables
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if path:
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        known = {f.name for f in fields(ServerConfig)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        values.update(data)
        logger.debug(f"Loaded config from {path}")

    for env_name, field_name in ENV_OVERRIDES.items():
        if env_name in environ:
            values[field_name] = environ[env_name]

    if "port" in values:
        values["port"] = _coerce_port(values["port"])

    return replace(ServerConfig(), **values)
