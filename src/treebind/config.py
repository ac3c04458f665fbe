"""
Configuration management for treebind.

Configuration via environment variables:

Parsing:
- TREEBIND_MODE: Default language mode, `c` or `cpp` (default: c)
- TREEBIND_INCLUDE_DIRS: Directories searched for headers given by name
  (separated by os.pathsep)

Output:
- TREEBIND_DYNLIB: Shared library loaded by generated modules
  (default: symbols of the current process)

Header acquisition:
- TREEBIND_CACHE_DIR: Download cache (default: ~/.cache/treebind)
- TREEBIND_FETCH_TIMEOUT: HTTP timeout in seconds (default: 30)
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Mode(str, Enum):
    """Language mode, selects the tree-sitter grammar."""

    C = "c"
    CPP = "cpp"


_CPP_EXTENSIONS = {".hxx", ".hpp", ".hh", ".H", ".h++", ".cpp", ".cxx", ".cc", ".C", ".c++"}
_C_EXTENSIONS = {".h", ".c"}


def _parse_mode(value: str | None) -> Mode:
    """Parse language mode from environment variable."""
    if value is None:
        return Mode.C
    try:
        return Mode(value.lower())
    except ValueError:
        return Mode.C


def _parse_dirs(value: str | None) -> list[str]:
    if not value:
        return []
    return [str(Path(p).expanduser()) for p in value.split(os.pathsep) if p.strip()]


def _default_cache_dir() -> str:
    base = os.getenv("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return str(Path(base) / "treebind")


@dataclass
class Config:
    """Configuration loaded from environment variables."""

    mode: Mode = field(default_factory=lambda: _parse_mode(os.getenv("TREEBIND_MODE")))

    include_dirs: list[str] = field(
        default_factory=lambda: _parse_dirs(os.getenv("TREEBIND_INCLUDE_DIRS"))
    )

    dynlib: str | None = field(default_factory=lambda: os.getenv("TREEBIND_DYNLIB") or None)

    cache_dir: str = field(
        default_factory=lambda: os.getenv("TREEBIND_CACHE_DIR") or _default_cache_dir()
    )
    fetch_timeout: float = field(
        default_factory=lambda: float(os.getenv("TREEBIND_FETCH_TIMEOUT", "30"))
    )

    def add_include_dir(self, path: str | Path) -> None:
        """Add a header search directory."""
        path_str = str(Path(path).resolve())
        if path_str not in self.include_dirs:
            self.include_dirs.append(path_str)

    def mode_for(self, path: str | Path) -> Mode:
        """Language mode for a file, from its extension when recognised."""
        suffix = Path(path).suffix
        if suffix in _CPP_EXTENSIONS:
            return Mode.CPP
        if suffix in _C_EXTENSIONS:
            return Mode.C
        return self.mode

    def find_header(self, header: str | Path) -> Path | None:
        """
        Locate a header by path or by name in the include directories.

        A direct hit in an include directory wins; otherwise the shortest
        path found by a recursive search is returned.
        """
        path = Path(header).expanduser()
        if path.is_file():
            return path

        for base in self.include_dirs:
            candidate = Path(base) / header
            if candidate.is_file():
                return candidate

        matches: list[Path] = []
        for base in self.include_dirs:
            root = Path(base)
            if root.is_dir():
                matches.extend(p for p in root.rglob(path.name) if p.is_file())
        if not matches:
            return None
        return min(matches, key=lambda p: (len(str(p)), str(p)))


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    global _config
    _config = None
