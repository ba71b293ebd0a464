"""
Global pytest fixtures for the solc binding tests.

This module provides:
- Fault handling for native crashes
- ``fake_lib``: an instrumented in-process libsolc (no native build needed)
- ``native_lib``: the real libsolc, skipping when it cannot be loaded

=============================================================================
Skip Policy
=============================================================================

pytest.skip(): infrastructure/environmental issues, NOT test failures:
  - libsolc not built and SOLC_LIB_PATH / SOLC_LIB_DIR not set
  - The library found does not export the Standard JSON C API

Everything the binding itself guarantees (locking, buffer ownership, callback
lifetime) is tested against ``fake_lib`` and always runs.
"""

import faulthandler

import pytest

import solc._bindings
import solc.compiler
from solc._gate import InvocationGate
from solc.exceptions import LibraryNotFoundError
from tests.fixtures.native import FakeSolidityLibrary

# Enable faulthandler to trace native crashes (segfaults)
faulthandler.enable()

# Timeout in seconds for thread joins - prevents CI hangs
THREAD_TIMEOUT = 30


def join_threads_with_timeout(threads: list, timeout: float = THREAD_TIMEOUT) -> list:
    """Join threads with timeout, returning list of threads that didn't complete."""
    stuck = []
    for t in threads:
        t.join(timeout=timeout)  # DEADLOCK_GUARD
        if t.is_alive():
            stuck.append(t)
    return stuck


# =============================================================================
# Library Fixtures
# =============================================================================


@pytest.fixture
def fake_lib(monkeypatch):
    """Install an instrumented fake libsolc and a fresh invocation gate.

    The fresh gate keeps a test that poisons it from affecting later tests.
    """
    lib = FakeSolidityLibrary()
    monkeypatch.setattr(solc._bindings, "_lib", lib)
    monkeypatch.setattr(solc.compiler, "_gate", InvocationGate())
    return lib


@pytest.fixture(scope="session")
def native_lib():
    """Return the real libsolc handle, or skip."""
    try:
        return solc._bindings.get_lib()
    except LibraryNotFoundError as e:
        pytest.skip(f"libsolc not available: {e}")


@pytest.fixture
def real_compiler(native_lib, monkeypatch):
    """Route the façade to the real library with a fresh gate."""
    monkeypatch.setattr(solc._bindings, "_lib", native_lib)
    monkeypatch.setattr(solc.compiler, "_gate", InvocationGate())
    return native_lib


# =============================================================================
# Markers
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "requires_native: marks tests requiring the real libsolc library"
    )
    config.addinivalue_line("markers", "memory: marks memory/leak detection tests")
