"""
Native library loading and pointer helpers.

Resolution order for the shared library:

1. ``SOLC_LIB_PATH`` - full path to the library file
2. ``SOLC_LIB_DIR`` - directory containing the library file
3. The library bundled next to this module by the build hook
4. ``ctypes.util.find_library("solc")`` (system install)

The handle is loaded once per process. Signatures are applied by
``_native.setup_signatures`` before the handle is handed out.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import os
import sys
import threading
from pathlib import Path
from typing import Any

from ._logging import scoped_logger
from ._native import setup_signatures
from .exceptions import LibraryNotFoundError

__all__ = ["get_lib", "lib_name", "cast_to_void_p"]

log = scoped_logger("loader")

_lib: Any = None
_load_lock = threading.Lock()

_PACKAGE_DIR = Path(__file__).parent


def lib_name() -> str:
    """Get platform-specific library file name."""
    if sys.platform == "win32":
        return "solc.dll"
    if sys.platform == "darwin":
        return "libsolc.dylib"
    return "libsolc.so"


def _candidate_paths() -> list[str]:
    """Return library locations in resolution order."""
    candidates: list[str] = []

    env_path = os.environ.get("SOLC_LIB_PATH")
    if env_path:
        candidates.append(env_path)

    env_dir = os.environ.get("SOLC_LIB_DIR")
    if env_dir:
        candidates.append(str(Path(env_dir) / lib_name()))

    bundled = _PACKAGE_DIR / lib_name()
    if bundled.exists():
        candidates.append(str(bundled))

    system = ctypes.util.find_library("solc")
    if system:
        candidates.append(system)

    return candidates


def _load() -> ctypes.CDLL:
    tried: list[str] = []
    errors: list[str] = []
    for path in _candidate_paths():
        tried.append(path)
        try:
            lib = ctypes.CDLL(path)
        except OSError as e:
            errors.append(f"{path}: {e}")
            continue
        try:
            setup_signatures(lib)
        except AttributeError as e:
            errors.append(f"{path}: missing symbol ({e})")
            continue
        log.debug("Loaded native library", extra={"lib_path": path})
        return lib

    raise LibraryNotFoundError(
        "Could not load the native Solidity library. "
        "Set SOLC_LIB_PATH or SOLC_LIB_DIR, or build the package from a Solidity checkout.",
        details={"tried": tried, "errors": errors},
    )


def get_lib() -> Any:
    """Get the process-wide library handle, loading it on first use.

    Raises
    ------
    LibraryNotFoundError
        If no candidate location yields a loadable library.
    """
    global _lib
    if _lib is None:
        with _load_lock:
            if _lib is None:
                _lib = _load()
    return _lib


def cast_to_void_p(func: Any) -> ctypes.c_void_p:
    """Cast a ctypes function object to a void pointer."""
    return ctypes.cast(func, ctypes.c_void_p)
