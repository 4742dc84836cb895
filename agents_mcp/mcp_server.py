"""MCP (Model Context Protocol) transport: registers the agent tools with FastMCP."""

from typing import Annotated, Literal

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from .errors import AgentsError
from .tools import AgentTools, error_text, not_found_text

SERVER_NAME = "agents-mcp"
PRESET_URI = "agents://presets/{name}"
MAX_STR = 128_000

Effort = Literal["low", "medium", "high", "xhigh"]

Query = Annotated[str, Field(min_length=1, max_length=MAX_STR, description="The user's request / task.")]
SystemPrompt = Annotated[
    str,
    Field(
        min_length=1,
        max_length=MAX_STR,
        description="Full system prompt defining the agent's identity and rules.",
    ),
]


def build_mcp_server(tools: AgentTools) -> FastMCP:
    """Create a FastMCP server whose tools delegate to ``tools``."""
    mcp = FastMCP(SERVER_NAME)

    @mcp.tool(
        name="run_agent",
        description=(
            "Invoke any AI agent fully inline, no preset needed. "
            "Provide a system_prompt defining the agent and a query for it to answer."
        ),
    )
    async def run_agent(
        query: Query,
        system_prompt: SystemPrompt,
        model: Annotated[
            str | None, Field(max_length=256, description="Model name. Defaults to AGENT_MODEL env var.")
        ] = None,
        base_url: Annotated[
            str | None, Field(max_length=2048, description="API base URL. Defaults to AGENT_API_BASE env var.")
        ] = None,
        effort: Annotated[
            Effort | None, Field(description="Reasoning effort level. Leave empty for model default.")
        ] = None,
    ) -> str:
        return await tools.run_agent(query, system_prompt, model=model, base_url=base_url, effort=effort)

    @mcp.tool(
        name="run_preset",
        description=(
            "Invoke a saved agent preset by name. Use list_presets to see available presets, "
            "their required/optional inputs, and recommended model/effort."
        ),
    )
    async def run_preset(
        query: Query,
        preset: Annotated[
            str,
            Field(
                min_length=1,
                max_length=256,
                description="Preset name (filename without .md). Use list_presets to browse.",
            ),
        ],
        model: Annotated[
            str | None,
            Field(max_length=256, description="Model override. Falls back to the preset's recommended model."),
        ] = None,
        base_url: Annotated[str | None, Field(max_length=2048, description="API base URL override.")] = None,
        effort: Annotated[
            Effort | None,
            Field(description="Reasoning effort override. Falls back to the preset's recommended effort."),
        ] = None,
    ) -> str:
        return await tools.run_preset(query, preset, model=model, base_url=base_url, effort=effort)

    @mcp.tool(
        name="save_preset",
        description=(
            "Save or update an agent preset as a .md file. "
            "The preset can later be invoked by name with run_preset."
        ),
    )
    async def save_preset(
        name: Annotated[
            str, Field(min_length=1, max_length=256, description='Preset name, e.g. "oracle" or "code-reviewer".')
        ],
        system_prompt: SystemPrompt,
        description: Annotated[
            str | None, Field(max_length=512, description="Short one-line description of the agent.")
        ] = None,
        model: Annotated[
            str | None, Field(max_length=256, description="Recommended model for this preset.")
        ] = None,
        effort: Annotated[
            Effort | None, Field(description="Recommended reasoning effort (low/medium/high/xhigh).")
        ] = None,
        inputs_required: Annotated[
            str | None,
            Field(max_length=1024, description='Comma-separated required input names, e.g. "query".'),
        ] = None,
        inputs_optional: Annotated[
            str | None,
            Field(max_length=1024, description='Comma-separated optional input names, e.g. "model, effort".'),
        ] = None,
        outputs: Annotated[
            str | None, Field(max_length=512, description="Short description of the preset's output format.")
        ] = None,
        overwrite: Annotated[
            bool, Field(description="Set true to overwrite an existing preset.")
        ] = False,
    ) -> str:
        return await tools.save_preset(
            name,
            system_prompt,
            description=description,
            model=model,
            effort=effort,
            inputs_required=inputs_required,
            inputs_optional=inputs_optional,
            outputs=outputs,
            overwrite=overwrite,
        )

    @mcp.tool(
        name="list_presets",
        description=(
            "List all saved agent presets. Returns name, description, recommended model/effort, "
            "and input/output schema for each preset."
        ),
    )
    async def list_presets() -> str:
        return await tools.list_presets()

    @mcp.tool(name="delete_preset", description="Delete a saved preset by name.")
    async def delete_preset(
        name: Annotated[str, Field(min_length=1, max_length=256, description="Preset name (without .md extension).")],
    ) -> str:
        return await tools.delete_preset(name)

    @mcp.resource(
        PRESET_URI,
        name="preset-content",
        description="Returns the full content of a saved agent preset file.",
        mime_type="text/markdown",
    )
    async def preset_content(name: str) -> str:
        try:
            content = tools.preset_content(name)
        except AgentsError as exc:
            return error_text(str(exc))
        return not_found_text(name) if content is None else content

    return mcp
