"""Works out the effective parameters of one agent call.

Precedence per field: call argument, then preset, then settings. Pure: no
file or network access, so it can be tested on plain values.
"""

from dataclasses import dataclass

from .config import Settings
from .endpoint import validate_base_url
from .presets import PresetRecord


@dataclass(frozen=True)
class InvocationConfig:
    system_prompt: str
    query: str
    model: str
    base_url: str
    effort: str | None = None


def first_set(*values: str | None) -> str | None:
    """First value that is neither None nor blank."""
    for value in values:
        if value is not None and value.strip():
            return value
    return None


def resolve_invocation(
    query: str,
    settings: Settings,
    *,
    system_prompt: str | None = None,
    model: str | None = None,
    effort: str | None = None,
    base_url: str | None = None,
    preset: PresetRecord | None = None,
) -> InvocationConfig:
    """Merge call arguments, an optional preset and settings into one config.

    ``effort`` stays None when nobody sets it so the request omits it. The
    chosen ``base_url`` goes through ``validate_base_url``.
    """
    preset = preset or PresetRecord(name="", system_prompt="")
    resolved_url = first_set(base_url, settings.base_url)
    return InvocationConfig(
        system_prompt=first_set(system_prompt, preset.system_prompt) or "",
        query=query,
        model=first_set(model, preset.model, settings.model) or "",
        effort=first_set(effort, preset.effort, settings.effort),
        base_url=validate_base_url(
            resolved_url or "", settings.allow_custom_base_url, settings.base_url
        ),
    )
