"""
solc exceptions.

This module defines the exception hierarchy for the binding:

    SolcError (base)
    ├── InvalidInputError - Text cannot cross the boundary (embedded NUL)
    ├── LibraryNotFoundError - Native libsolc could not be located or loaded
    ├── StateError - Binding used in an invalid state
    │   ├── PoisonedLockError - A prior native call terminated abnormally
    │   └── ReentrantCallError - Compile invoked from inside a read callback
    └── CallbackError - The read callback raised instead of returning
"""

from .exceptions import (
    CallbackError,
    InvalidInputError,
    LibraryNotFoundError,
    PoisonedLockError,
    ReentrantCallError,
    SolcError,
    StateError,
)

# =============================================================================
# Public API - See solc/__init__.py for documentation mapping guidelines
# =============================================================================
__all__ = [
    # Base
    "SolcError",
    # Input
    "InvalidInputError",
    # Loading
    "LibraryNotFoundError",
    # State
    "StateError",
    "PoisonedLockError",
    "ReentrantCallError",
    # Callback
    "CallbackError",
]
