"""
solc - Python bindings for the Solidity compiler.

Calls the native compiler library (libsolc) through its Standard JSON C API.
The library keeps process-global state and is not thread-safe, so every
compile is serialized behind one process-wide lock; any number of threads may
call in.

Quick Start
-----------

    >>> import json
    >>> import solc
    >>>
    >>> output = solc.compile(json.dumps({
    ...     "language": "Solidity",
    ...     "sources": {"c.sol": {"content": "contract C { function f() public {} }"}},
    ...     "settings": {"outputSelection": {"*": {"*": ["evm.bytecode"]}}},
    ... }))
    >>> json.loads(output)["contracts"]["c.sol"]["C"]["evm"]["bytecode"]["object"][:8]
    '60806040'

Resolving imports:

    >>> def read(kind, data):
    ...     if data == "d.sol":
    ...         return solc.ReadResult.success("contract D {}")
    ...     return solc.ReadResult.failure(f"{data} is not available")
    >>> output = solc.compile_with_callback(input_json, read)

or from disk:

    >>> output = solc.compile_with_callback(input_json, solc.FileReader("contracts"))


Errors
------

Compiler diagnostics (syntax errors, missing imports, type errors) are
returned inside the output JSON ``errors`` array with ``"severity": "error"``.
Only failures of the binding itself raise, all as ``solc.SolcError``:

- ``InvalidInputError`` - input contains a NUL byte
- ``LibraryNotFoundError`` - libsolc could not be loaded
- ``CallbackError`` - the read callback raised
- ``ReentrantCallError`` - a read callback tried to start another compile
- ``PoisonedLockError`` - a previous native call terminated abnormally


Configuration
-------------

- ``SOLC_LIB_PATH`` / ``SOLC_LIB_DIR`` - location of the shared library
- ``SOLC_LOG_LEVEL`` / ``SOLC_LOG_FORMAT`` - logging (see ``setup_logging``)
"""

from solc._logging import setup_logging
from solc._version import __version__ as __version__

# Compiler
from solc.compiler import (
    compile,
    compile_standard,
    compile_with_callback,
    license,
    version,
)

# Exceptions (all via solc.exceptions)
from solc.exceptions import (
    CallbackError,
    InvalidInputError,
    LibraryNotFoundError,
    PoisonedLockError,
    ReentrantCallError,
    SolcError,
    StateError,
)

# Read callbacks
from solc.readers import FileReader, MappingReader
from solc.types import ReadCallback, ReadResult

__all__ = [
    # Compiler
    "version",
    "license",
    "compile",
    "compile_with_callback",
    "compile_standard",
    # Read callbacks
    "ReadResult",
    "ReadCallback",
    "FileReader",
    "MappingReader",
    # Logging
    "setup_logging",
    # Exceptions
    "SolcError",
    "InvalidInputError",
    "LibraryNotFoundError",
    "StateError",
    "PoisonedLockError",
    "ReentrantCallError",
    "CallbackError",
]
