"""Error types raised by the preset store, resolver and invoker.

Every tool call catches ``AgentsError`` at its boundary and reports it as an
``ERROR: <message>`` string, so the messages here are written for the calling
agent to read.
"""


class AgentsError(Exception):
    """Base class for all agents-mcp failures."""


class InvalidArgumentError(AgentsError):
    """A tool argument is missing or outside its allowed values."""


class PresetNotFoundError(AgentsError):
    """No preset file exists for the requested slug."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = available or []
        if self.available:
            hint = f"Available: {', '.join(self.available)}"
        else:
            hint = "No presets yet. Use save_preset to create one."
        super().__init__(f"Preset '{name}' not found. {hint}")


class PresetExistsError(AgentsError):
    """save_preset targeted an existing slug without overwrite."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Preset '{slug}' already exists. Pass overwrite=true to update it.")


class PresetFormatError(AgentsError):
    """A preset file exists but cannot be used (bad encoding, empty prompt)."""


class PresetIOError(AgentsError):
    """Unexpected filesystem failure inside the preset store."""


class PolicyDeniedError(AgentsError):
    """A custom endpoint was requested while custom endpoints are disabled."""


class InvalidEndpointError(AgentsError):
    """The endpoint URL is malformed or uses a scheme other than http/https."""


class AgentTimeoutError(AgentsError):
    """The completion request did not finish within the configured timeout."""


class UpstreamError(AgentsError):
    """The completion endpoint failed (transport, auth, bad response)."""
