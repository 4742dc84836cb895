"""Preset files on disk: one ``<slug>.md`` per preset, no in-memory cache."""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from .errors import PresetExistsError, PresetFormatError, PresetIOError, PresetNotFoundError
from .presets import PresetRecord, parse_preset

logger = logging.getLogger("agents_mcp.store")

BUNDLED_PRESETS_DIR = Path(__file__).parent / "bundled_presets"
PRESET_SUFFIX = ".md"


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


@dataclass
class PresetSummary:
    """One entry of list_presets: slug, heading and header metadata."""

    slug: str
    display_name: str
    metadata: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"name": self.slug, "display_name": self.display_name, **self.metadata}


class PresetStore:
    """Reads and writes preset files under ``root``.

    Every call goes back to disk. Writes are atomic (temp file + rename) so a
    concurrent reader sees either the old or the new file, never a partial one.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, slug: str) -> Path:
        return self.root / f"{slug}{PRESET_SUFFIX}"

    def ensure_dir(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def seed_bundled(self, bundled_dir: Path | None = None) -> list[str]:
        """Copy bundled presets whose slug is missing. Never overwrites.

        Failures are logged and swallowed; startup goes on without them.
        """
        source = Path(bundled_dir) if bundled_dir else BUNDLED_PRESETS_DIR
        seeded: list[str] = []
        if not source.is_dir():
            logger.warning("Could not seed bundled presets: %s is not a directory", source)
            return seeded
        try:
            for src in sorted(source.glob(f"*{PRESET_SUFFIX}")):
                data = src.read_bytes()
                try:
                    with open(self.path_for(src.stem), "xb") as fh:
                        fh.write(data)
                except FileExistsError:
                    continue
                seeded.append(src.stem)
        except OSError as exc:
            logger.warning("Could not seed bundled presets: %s", exc)
        if seeded:
            logger.info("Seeded %d bundled preset(s): %s", len(seeded), ", ".join(seeded))
        return seeded

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def available(self) -> list[str]:
        """Sorted slugs of every preset file."""
        try:
            return sorted(p.stem for p in self.root.glob(f"*{PRESET_SUFFIX}") if p.is_file())
        except OSError as exc:
            raise PresetIOError(f"Could not list presets in {self.root}: {exc}") from exc

    def read_text(self, slug: str) -> str:
        path = self.path_for(slug)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise PresetNotFoundError(slug, self.available()) from None
        except UnicodeDecodeError as exc:
            raise PresetFormatError(f"Preset '{slug}' is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise PresetIOError(f"Could not read preset '{slug}': {exc}") from exc

    def read(self, slug: str) -> PresetRecord:
        record = parse_preset(self.read_text(slug))
        if not record.system_prompt:
            raise PresetFormatError(f"Preset '{slug}' has an empty system prompt")
        return record

    def list(self) -> list[PresetSummary]:
        """Summaries of all presets, sorted by slug.

        Files that cannot be read or have no prompt are skipped with a warning.
        """
        summaries = []
        for slug in self.available():
            try:
                record = self.read(slug)
            except PresetNotFoundError:
                # Deleted between listing and reading
                continue
            except (PresetFormatError, PresetIOError) as exc:
                logger.warning("Skipping preset '%s': %s", slug, exc)
                continue
            summaries.append(PresetSummary(slug=slug, display_name=record.name, metadata=record.metadata()))
        return summaries

    # ------------------------------------------------------------------
    # Write / delete
    # ------------------------------------------------------------------

    def exists(self, slug: str) -> bool:
        return self.path_for(slug).is_file()

    def write(self, slug: str, text: str, overwrite: bool = False) -> bool:
        """Atomically write ``text`` as preset ``slug``.

        Returns True when an existing preset was replaced. Raises
        ``PresetExistsError`` if the preset exists and ``overwrite`` is false.
        """
        dest = self.path_for(slug)
        existed = dest.exists()
        if existed and not overwrite:
            raise PresetExistsError(slug)

        try:
            fd, tmp = tempfile.mkstemp(dir=self.root, prefix=f".{slug}.", suffix=".tmp")
        except OSError as exc:
            raise PresetIOError(f"Could not write preset '{slug}': {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            # mkstemp creates 0600; keep the old file's mode or follow the umask
            os.chmod(tmp, dest.stat().st_mode & 0o777 if existed else 0o666 & ~_current_umask())
            os.replace(tmp, dest)
        except BaseException as exc:
            Path(tmp).unlink(missing_ok=True)
            if isinstance(exc, OSError):
                raise PresetIOError(f"Could not write preset '{slug}': {exc}") from exc
            raise
        logger.debug("Wrote preset %s -> %s", slug, dest)
        return existed

    def delete(self, slug: str) -> None:
        try:
            self.path_for(slug).unlink()
        except FileNotFoundError:
            raise PresetNotFoundError(slug, self.available()) from None
        except OSError as exc:
            raise PresetIOError(f"Could not delete preset '{slug}': {exc}") from exc
        logger.debug("Deleted preset %s", slug)
