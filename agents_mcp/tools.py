"""The agent tool surface shared by the MCP and HTTP transports.

Every public method returns text. Failures never escape: they come back as
``ERROR: <message>`` so the calling agent can read them and react.
"""

import json
import logging

from .config import Settings
from .errors import AgentsError, InvalidArgumentError, PresetNotFoundError
from .invoker import AgentInvoker
from .presets import EFFORT_LEVELS, PresetRecord, render_preset, slugify
from .resolver import resolve_invocation
from .store import PresetStore

logger = logging.getLogger("agents_mcp.tools")

ERROR_PREFIX = "ERROR: "


def error_text(message: str) -> str:
    return f"{ERROR_PREFIX}{message}"


def _require(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidArgumentError(f"{field} is required")
    return value


def _check_effort(effort: str | None) -> str | None:
    if effort is None or effort == "":
        return None
    if effort not in EFFORT_LEVELS:
        raise InvalidArgumentError(f"effort must be one of {', '.join(EFFORT_LEVELS)}")
    return effort


class AgentTools:
    """run_agent, run_preset, save_preset, list_presets, delete_preset and
    the preset-content resource."""

    def __init__(self, settings: Settings, store: PresetStore, invoker: AgentInvoker):
        self.settings = settings
        self.store = store
        self.invoker = invoker

    async def _guard(self, operation: str, coro) -> str:
        try:
            return await coro
        except AgentsError as exc:
            logger.info("%s failed: %s", operation, exc)
            return error_text(str(exc))
        except Exception as exc:
            logger.exception("%s failed unexpectedly", operation)
            return error_text(str(exc) or type(exc).__name__)

    # ------------------------------------------------------------------
    # Running agents
    # ------------------------------------------------------------------

    async def run_agent(
        self,
        query: str,
        system_prompt: str,
        model: str | None = None,
        base_url: str | None = None,
        effort: str | None = None,
    ) -> str:
        return await self._guard(
            "run_agent", self._run_agent(query, system_prompt, model, base_url, effort)
        )

    async def _run_agent(self, query, system_prompt, model, base_url, effort) -> str:
        config = resolve_invocation(
            _require(query, "query"),
            self.settings,
            system_prompt=_require(system_prompt, "system_prompt"),
            model=model,
            effort=_check_effort(effort),
            base_url=base_url,
        )
        return await self.invoker.invoke(config)

    async def run_preset(
        self,
        query: str,
        preset: str,
        model: str | None = None,
        base_url: str | None = None,
        effort: str | None = None,
    ) -> str:
        return await self._guard(
            "run_preset", self._run_preset(query, preset, model, base_url, effort)
        )

    async def _run_preset(self, query, preset, model, base_url, effort) -> str:
        _require(query, "query")
        effort = _check_effort(effort)
        record = self.store.read(slugify(_require(preset, "preset")))
        config = resolve_invocation(
            query,
            self.settings,
            model=model,
            effort=effort,
            base_url=base_url,
            preset=record,
        )
        return await self.invoker.invoke(config)

    # ------------------------------------------------------------------
    # Preset management
    # ------------------------------------------------------------------

    async def save_preset(
        self,
        name: str,
        system_prompt: str,
        description: str | None = None,
        model: str | None = None,
        effort: str | None = None,
        inputs_required: str | None = None,
        inputs_optional: str | None = None,
        outputs: str | None = None,
        overwrite: bool = False,
    ) -> str:
        record = PresetRecord(
            name=name,
            system_prompt=system_prompt,
            description=description or "",
            model=model or None,
            effort=effort or None,
            inputs_required=inputs_required or None,
            inputs_optional=inputs_optional or None,
            outputs=outputs or None,
        )
        return await self._guard("save_preset", self._save_preset(record, overwrite is True))

    async def _save_preset(self, record: PresetRecord, overwrite: bool) -> str:
        record.name = _require(record.name, "name").strip()
        _require(record.system_prompt, "system_prompt")
        _check_effort(record.effort)
        slug = record.slug
        replaced = self.store.write(slug, render_preset(record), overwrite=overwrite)
        verb = "Updated" if replaced else "Saved"
        return f"{verb} preset '{slug}' -> {self.store.path_for(slug)}"

    async def list_presets(self) -> str:
        """JSON array with one object per preset (slug as ``name``)."""
        return await self._guard("list_presets", self._list_presets())

    async def _list_presets(self) -> str:
        return json.dumps([s.to_dict() for s in self.store.list()], indent=2)

    async def delete_preset(self, name: str) -> str:
        return await self._guard("delete_preset", self._delete_preset(name))

    async def _delete_preset(self, name: str) -> str:
        self.store.delete(slugify(_require(name, "name")))
        return f"Deleted preset '{name}'."

    # ------------------------------------------------------------------
    # Resource
    # ------------------------------------------------------------------

    def preset_content(self, name: str) -> str | None:
        """Raw file text of a preset, None when it does not exist."""
        try:
            return self.store.read_text(slugify(name))
        except PresetNotFoundError:
            return None


def not_found_text(name: str) -> str:
    return f"Preset '{name}' not found."
