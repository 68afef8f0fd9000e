"""Mapping between session ids and log file paths."""

from dataclasses import dataclass
from pathlib import Path

from ..formats import LogFormat


@dataclass(frozen=True)
class PathResolver:
    """Resolves `<base_dir>/<session_id><extension>` for one format.

    Session ids are used verbatim: no sanitization is applied, so an
    id containing path separators resolves outside a flat layout.
    """

    base_dir: Path
    format: LogFormat

    @property
    def extension(self) -> str:
        return self.format.file_extension

    def path_for(self, session_id: str) -> Path:
        """Path of the log file backing a session."""
        return self.base_dir / f"{session_id}{self.extension}"

    def session_id_for(self, path: Path) -> str | None:
        """Session id encoded in a file name, or None for other files."""
        name = path.name
        if not name.endswith(self.extension):
            return None
        return name[: -len(self.extension)]
