import os
import ssl
from typing import Any, Dict, Optional, Tuple

CA_FILE_VARIABLES = ("SSL_CERT_FILE", "REQUESTS_CA_BUNDLE")
CA_DIR_VARIABLE = "SSL_CERT_DIR"


def _env_path(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if not value:
        return None
    return os.path.expanduser(os.path.expandvars(value))


def ca_locations() -> Tuple[Optional[str], Optional[str]]:
    """CA file and directory configured through the usual environment variables."""
    ca_file = next(
        (path for path in map(_env_path, CA_FILE_VARIABLES) if path), None
    )
    return ca_file, _env_path(CA_DIR_VARIABLE)


def create_ssl_context() -> ssl.SSLContext:
    # system trust store when available
    try:
        import truststore

        return truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    except ImportError:
        import certifi

        ca_file, ca_dir = ca_locations()
        return ssl.create_default_context(
            cafile=ca_file or certifi.where(), capath=ca_dir
        )


def get_httpx_client_kwargs(
    timeout: Optional[float], with_ssl: bool = True
) -> Dict[str, Any]:
    """Keyword arguments shared by every ``httpx.AsyncClient`` of a service."""
    kwargs: Dict[str, Any] = {
        "timeout": timeout,
        "follow_redirects": True,
    }
    if with_ssl:
        kwargs["verify"] = create_ssl_context()
    return kwargs
