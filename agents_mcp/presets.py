"""Preset file format: optional ``---`` header, ``# name`` heading, prompt body.

A rendered preset looks like::

    ---
    description: One-line description
    model: gpt-5.3-codex
    effort: xhigh
    inputs_required: query
    inputs_optional: model, effort, base_url
    outputs: Short description of what the agent returns
    ---

    # oracle

    <system prompt>

Older files without a header are still read: a ``> text`` line right after
the heading is taken as the description.
"""

import re
from dataclasses import dataclass

EFFORT_LEVELS = ("low", "medium", "high", "xhigh")

# Header keys in render order
HEADER_FIELDS = (
    "description",
    "model",
    "effort",
    "inputs_required",
    "inputs_optional",
    "outputs",
)

_DELIMITER = "---"
_UNSAFE_SLUG_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_HEADING_MARKER = re.compile(r"^#\s*")
_QUOTE_MARKER = re.compile(r"^>\s*")


@dataclass
class PresetRecord:
    name: str
    system_prompt: str
    description: str = ""
    model: str | None = None
    effort: str | None = None
    inputs_required: str | None = None
    inputs_optional: str | None = None
    outputs: str | None = None

    @property
    def slug(self) -> str:
        return slugify(self.name)

    def metadata(self) -> dict:
        """Header fields that are set, description always included."""
        meta = {"description": self.description}
        for key in HEADER_FIELDS[1:]:
            value = getattr(self, key)
            if value:
                meta[key] = value
        return meta


def slugify(name: str) -> str:
    """Filesystem-safe lookup key: trimmed, lowercased, ``[a-z0-9_-]`` only.

    Never returns an empty string; blank input maps to ``_``.
    """
    slug = _UNSAFE_SLUG_CHARS.sub("_", name.strip().lower())
    return slug or "_"


def _split_header(lines: list[str]) -> tuple[dict[str, str], list[str]]:
    if not lines or lines[0] != _DELIMITER:
        return {}, lines
    for end in range(1, len(lines)):
        if lines[end] == _DELIMITER:
            break
    else:
        # Unterminated header: treat the whole text as body
        return {}, lines

    meta: dict[str, str] = {}
    for line in lines[1:end]:
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key, value = key.strip(), value.strip()
        if key in HEADER_FIELDS and value:
            meta[key] = value
    if meta.get("effort", "").lower() not in EFFORT_LEVELS:
        meta.pop("effort", None)
    else:
        meta["effort"] = meta["effort"].lower()
    return meta, lines[end + 1:]


def parse_preset(text: str) -> PresetRecord:
    """Parse preset file text. Never raises; missing parts come back empty."""
    lines = text.replace("\r\n", "\n").split("\n")
    meta, rest = _split_header(lines)

    # Renderer puts a blank line between the header and the heading
    while rest and not rest[0].strip():
        rest = rest[1:]

    name = _HEADING_MARKER.sub("", rest[0]).strip() if rest else ""
    body_start = 1
    description = meta.pop("description", "")
    if not description and len(rest) > 1 and rest[1].startswith(">"):
        description = _QUOTE_MARKER.sub("", rest[1]).strip()
        body_start = 2

    system_prompt = "\n".join(rest[body_start:]).strip()
    return PresetRecord(name=name, system_prompt=system_prompt, description=description, **meta)


def _one_line(value: str) -> str:
    return " ".join(value.split())


def render_preset(record: PresetRecord) -> str:
    """Render a record to file text; the header is left out when it would be empty."""
    header = []
    for key in HEADER_FIELDS:
        value = getattr(record, key)
        if value and value.strip():
            header.append(f"{key}: {_one_line(value)}")

    parts = []
    if header:
        parts.append("\n".join([_DELIMITER, *header, _DELIMITER]) + "\n\n")
    parts.append(f"# {_one_line(record.name)}\n\n")
    parts.append(record.system_prompt.strip() + "\n")
    return "".join(parts)
