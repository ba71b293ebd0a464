"""
Ready-made read callbacks for ``compile_with_callback``.

``FileReader`` resolves imported sources from disk the way the ``solc``
command line does (base path, include paths, allowed directories).
``MappingReader`` serves them from memory.

Example:
    >>> reader = FileReader(base_path="contracts", include_paths=["node_modules"])
    >>> output = solc.compile_with_callback(input_json, reader)
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from ._logging import scoped_logger
from .types import ReadResult

__all__ = ["FileReader", "MappingReader"]

log = scoped_logger("callback")

SOURCE_KIND = "source"


def _unsupported(kind: str) -> ReadResult:
    return ReadResult.failure(f"Unsupported callback kind: {kind}")


class FileReader:
    """Resolve ``source`` requests against the filesystem.

    Args:
        base_path: Directory relative imports are resolved against first.
            Defaults to the current working directory.
        include_paths: Further directories searched, in order, when the file
            is not found under ``base_path``.
        allowed_paths: Extra directories files may be read from. The base
            path and include paths are always allowed. Resolved paths
            (symlinks followed) outside all of them are refused.
    """

    def __init__(
        self,
        base_path: str | os.PathLike[str] | None = None,
        include_paths: Iterable[str | os.PathLike[str]] = (),
        allowed_paths: Iterable[str | os.PathLike[str]] | None = None,
    ) -> None:
        self.base_path = Path(base_path) if base_path is not None else Path.cwd()
        self.include_paths = [Path(p) for p in include_paths]
        roots = [self.base_path, *self.include_paths, *(allowed_paths or ())]
        self.allowed_paths = [Path(p).resolve() for p in roots]

    def _candidates(self, source_unit: str) -> list[Path]:
        path = Path(source_unit)
        if path.is_absolute():
            return [path]
        return [root / path for root in (self.base_path, *self.include_paths)]

    def _is_allowed(self, path: Path) -> bool:
        return any(path == root or root in path.parents for root in self.allowed_paths)

    def __call__(self, kind: str, data: str) -> ReadResult:
        if kind != SOURCE_KIND:
            return _unsupported(kind)

        searched: list[str] = []
        for candidate in self._candidates(data):
            resolved = candidate.resolve()
            searched.append(str(resolved))
            if not resolved.exists():
                continue
            if not self._is_allowed(resolved):
                log.warning("Refused import outside allowed paths", extra={"path": str(resolved)})
                return ReadResult.failure("File outside of allowed directories.")
            if not resolved.is_file():
                return ReadResult.failure("Not a valid file.")
            try:
                content = resolved.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                return ReadResult.failure(f"Could not read file: {e}")
            log.debug("Resolved import", extra={"path": str(resolved)})
            return ReadResult.success(content)

        locations = ", ".join(f'"{p}"' for p in searched)
        return ReadResult.failure(f"File not found. Searched the following locations: {locations}.")


class MappingReader:
    """Serve ``source`` requests from an in-memory mapping of path to content."""

    def __init__(self, sources: Mapping[str, str]) -> None:
        self.sources = dict(sources)
        self.requested: list[str] = []

    def __call__(self, kind: str, data: str) -> ReadResult:
        if kind != SOURCE_KIND:
            return _unsupported(kind)
        self.requested.append(data)
        if data in self.sources:
            return ReadResult.success(self.sources[data])
        return ReadResult.failure(f"File not found: {data}")
