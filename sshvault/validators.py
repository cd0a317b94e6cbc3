"""
Host field validation for user-entered data.

Each ``validate_*`` function returns an error message, or ``None`` when the
value is acceptable. ``validate_host`` collects them into a field → message
map suitable for a form.
"""
import re
from typing import Optional

from .models import Host, KeyPathAuth

MAX_NAME_LENGTH = 100

_HOSTNAME_PATTERN = re.compile(
    r"[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?"
    r"(\.[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*"
)


def validate_name(name: str) -> Optional[str]:
    if not name.strip():
        return "Name is required"
    if len(name) > MAX_NAME_LENGTH:
        return f"Name must be at most {MAX_NAME_LENGTH} characters"
    return None


def validate_hostname(hostname: str) -> Optional[str]:
    if not hostname.strip():
        return "Hostname is required"
    if not _HOSTNAME_PATTERN.fullmatch(hostname):
        return "Invalid hostname format"
    return None


def validate_port(port: int) -> Optional[str]:
    if port < 1 or port > 65535:
        return "Port must be between 1 and 65535"
    return None


def validate_key_path(key_path: str) -> Optional[str]:
    # Whether the file exists is only known when ssh actually runs.
    if not key_path.strip():
        return "Key path is required when using key authentication"
    return None


def validate_host(host: Host) -> dict[str, str]:
    """Validate user-facing fields of a host.

    Args:
        host: Host to check.

    Returns:
        Mapping of field name to error message; empty when the host is valid.
    """
    errors: dict[str, str] = {}
    checks = (
        ("name", validate_name(host.name)),
        ("hostname", validate_hostname(host.hostname)),
        ("port", validate_port(host.port)),
    )
    for field, error in checks:
        if error:
            errors[field] = error
    if isinstance(host.auth, KeyPathAuth):
        error = validate_key_path(host.auth.key_path)
        if error:
            errors["key_path"] = error
    return errors
