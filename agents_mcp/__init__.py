"""agents-mcp — run one-shot AI agents and manage agent presets over MCP."""

from importlib.metadata import version as _pkg_version

from .config import Settings
from .tools import AgentTools

__version__ = _pkg_version("agents-mcp")
__all__ = ["AgentTools", "Settings", "__version__"]
