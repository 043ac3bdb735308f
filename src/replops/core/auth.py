"""Databricks workspace access for the source catalog.

Builds the WorkspaceClient used for Unity Catalog table lookups and
derives the source catalog endpoint recorded on every replication event.
"""

from databricks.sdk import WorkspaceClient
from databricks.sdk.core import Config


class AuthError(RuntimeError):
    """Raised when a Databricks workspace client cannot be configured."""


def sanitize_host(host: str | None) -> str | None:
    """
    Normalize a workspace host URL.

    Drops query strings (e.g. '?o=123456789') and trailing slashes, which
    the SDK does not accept and which would make the endpoint recorded on
    events differ between otherwise identical hosts.
    """
    if not host:
        return host
    return host.split("?", 1)[0].rstrip("/")


def get_client(profile: str | None = None) -> WorkspaceClient:
    """
    Create a WorkspaceClient from Databricks unified authentication.

    The profile is resolved from ~/.databrickscfg or environment variables.
    """
    try:
        cfg = Config(profile=profile) if profile else Config()
    except ValueError as exc:
        where = f" (profile '{profile}')" if profile else ""
        raise AuthError(f"Databricks authentication failed{where}: {exc}") from exc
    cfg.host = sanitize_host(cfg.host)
    return WorkspaceClient(config=cfg)


def source_catalog_uri(client: WorkspaceClient, override: str | None = None) -> str:
    """Return the configured source catalog URI, defaulting to the workspace host."""
    uri = sanitize_host(override) or sanitize_host(
        getattr(getattr(client, "config", None), "host", None)
    )
    if not uri:
        raise AuthError("Could not determine the source catalog URI (workspace host is empty).")
    return uri
