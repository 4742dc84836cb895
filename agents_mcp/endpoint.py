"""Checks a caller-supplied completion endpoint before any request is sent."""

from urllib.parse import urlsplit

from .errors import InvalidEndpointError, PolicyDeniedError

ALLOWED_SCHEMES = ("http", "https")


def validate_base_url(url: str, allow_custom: bool, default_url: str) -> str:
    """Return ``url`` if it may be used as a completion endpoint.

    Any URL must be absolute http(s) with a host, whatever the policy. With
    ``allow_custom`` off, only ``default_url`` is accepted on top of that.
    """
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a bad port
    except ValueError:
        raise InvalidEndpointError("base_url is not a valid URL") from None

    if parts.scheme not in ALLOWED_SCHEMES:
        raise InvalidEndpointError("base_url must use http or https")
    if not parts.hostname:
        raise InvalidEndpointError("base_url is not a valid URL")

    if not allow_custom and url != default_url:
        raise PolicyDeniedError(
            "Custom base_url is disabled. Set AGENT_ALLOW_CUSTOM_BASE_URL=true to enable."
        )
    return url
