"""
In-process stand-in for libsolc.

Implements the six C API functions on top of real ctypes memory so the
binding's pointer handling runs unchanged, and records what happened:

- every allocation and free (balance, double-free, unknown-pointer free)
- buffers handed over by the read callback, reclaimed on ``solidity_reset``
- how many threads were inside ``solidity_compile`` at once
- the order of native calls

The "compiler" only understands enough Standard JSON to resolve imports and
emit one bytecode entry per ``contract`` declaration.
"""

from __future__ import annotations

import ctypes
import hashlib
import json
import re
import threading
import time
from typing import Any

from solc._native import ReadFileCallback

_IMPORT_RE = re.compile(r'import\s+"([^"]+)"\s*;')
_CONTRACT_RE = re.compile(r"\bcontract\s+(\w+)")

_OPCODES = (
    "PUSH1 0x80 PUSH1 0x40 MSTORE CALLVALUE DUP1 ISZERO PUSH1 0xE JUMPI PUSH0 DUP1 "
    "REVERT JUMPDEST POP PUSH1 0x3E DUP1 PUSH1 0x1A PUSH0 CODECOPY PUSH0 RETURN INVALID "
)


def _address(value: Any) -> int | None:
    if isinstance(value, ctypes.c_void_p):
        return value.value
    return value


def _error(error_type: str, message: str) -> dict[str, Any]:
    return {
        "component": "general",
        "formattedMessage": f"{error_type}: {message}\n",
        "message": message,
        "severity": "error",
        "type": error_type,
    }


class FakeSolidityLibrary:
    """Drop-in replacement for the loaded libsolc handle."""

    VERSION = b"0.8.26+commit.8a97fa7a.Linux.g++"
    LICENSE = b"Most of the code is licensed under GPLv3 (see below)."

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.allocs = 0
        self.frees = 0
        self.compile_calls = 0
        self.reset_calls = 0
        self.max_active = 0
        self.events: list[str] = []
        self.read_requests: list[tuple[str, str]] = []
        # Raised from inside solidity_compile, once
        self.fail_next: BaseException | None = None
        # Make solidity_compile return NULL, once
        self.return_null = False

        self._buffers: dict[int, ctypes.Array] = {}
        self._owned: list[int] = []
        self._active = 0
        self._bookkeeping = threading.Lock()

    # -------------------------------------------------------------------------
    # Instrumentation
    # -------------------------------------------------------------------------

    @property
    def live(self) -> int:
        """Buffers allocated and not yet freed."""
        return len(self._buffers)

    @property
    def balance(self) -> int:
        """Positive = leaks, negative = double-frees."""
        return self.allocs - self.frees

    def assert_balanced(self) -> None:
        assert self.balance == 0, (
            f"Allocation imbalance: {self.allocs} allocs, {self.frees} frees"
        )

    # -------------------------------------------------------------------------
    # C API
    # -------------------------------------------------------------------------

    def solidity_version(self) -> bytes:
        return self.VERSION

    def solidity_license(self) -> bytes:
        return self.LICENSE

    def solidity_alloc(self, size: int) -> int:
        buf = ctypes.create_string_buffer(size)
        address = ctypes.addressof(buf)
        with self._bookkeeping:
            self._buffers[address] = buf
            self.allocs += 1
        return address

    def solidity_free(self, address: Any) -> None:
        address = _address(address)
        with self._bookkeeping:
            if address not in self._buffers:
                raise AssertionError(f"free of unknown or already freed buffer {address!r}")
            del self._buffers[address]
            self.frees += 1
        self.events.append("free")

    def solidity_reset(self) -> None:
        owned, self._owned = self._owned, []
        for address in owned:
            self.solidity_free(address)
        self.reset_calls += 1
        self.events.append("reset")

    def solidity_compile(self, input: bytes, callback: Any, context: Any) -> int | None:
        self.events.append("compile")
        with self._bookkeeping:
            self.compile_calls += 1
            self._active += 1
            self.max_active = max(self.max_active, self._active)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.fail_next is not None:
                error, self.fail_next = self.fail_next, None
                raise error
            if self.return_null:
                self.return_null = False
                return None

            read = None
            callback_address = _address(callback)
            if callback_address:
                read = ReadFileCallback(callback_address)
            output = self._compile(input.decode("utf-8"), read, context)
            return self._store(json.dumps(output, separators=(",", ":")))
        finally:
            with self._bookkeeping:
                self._active -= 1

    # -------------------------------------------------------------------------
    # "Compiler"
    # -------------------------------------------------------------------------

    def _store(self, text: str) -> int:
        data = text.encode("utf-8") + b"\0"
        address = self.solidity_alloc(len(data))
        ctypes.memmove(address, data, len(data))
        return address

    def _read(self, read: Any, context: Any, path: str) -> tuple[str | None, str | None]:
        out_content = ctypes.c_void_p()
        out_error = ctypes.c_void_p()
        self.read_requests.append(("source", path))
        read(context, b"source", path.encode("utf-8"), ctypes.byref(out_content), ctypes.byref(out_error))

        content = error = None
        # Buffers written by the callback now belong to the library until reset
        if out_content.value:
            self._owned.append(out_content.value)
            content = ctypes.string_at(out_content.value).decode("utf-8")
        if out_error.value:
            self._owned.append(out_error.value)
            error = ctypes.string_at(out_error.value).decode("utf-8")
        return content, error

    def _compile(self, text: str, read: Any, context: Any) -> dict[str, Any]:
        try:
            request = json.loads(text)
        except ValueError:
            return {
                "errors": [
                    _error("JSONError", "Line 1, Column 1\n  Syntax error: value, object or array expected.")
                ]
            }

        sources = request.get("sources") if isinstance(request, dict) else None
        if not sources:
            return {"errors": [_error("JSONError", "No input sources specified.")]}

        units = {name: unit.get("content", "") for name, unit in sources.items()}
        errors = []
        pending = list(units)
        while pending:
            name = pending.pop(0)
            for imported in _IMPORT_RE.findall(units[name]):
                if imported in units:
                    continue
                if read is None:
                    errors.append(
                        _error(
                            "ParserError",
                            f'Source "{imported}" not found: File import callback not supported',
                        )
                    )
                    continue
                content, error = self._read(read, context, imported)
                if content is None:
                    errors.append(
                        _error("ParserError", f'Source "{imported}" not found: {error or "File not found."}')
                    )
                    continue
                units[imported] = content
                pending.append(imported)

        if errors:
            return {"errors": errors, "sources": {}}

        contracts: dict[str, Any] = {}
        for name, content in units.items():
            for contract in _CONTRACT_RE.findall(content):
                digest = hashlib.sha256(f"{name}:{contract}".encode()).hexdigest()
                contracts.setdefault(name, {})[contract] = {
                    "evm": {
                        "bytecode": {
                            "object": "6080604052348015600e575f80fd5b50" + digest,
                            "opcodes": _OPCODES,
                        },
                        "gasEstimates": {"creation": {"codeDepositCost": "12400"}},
                    }
                }

        return {
            "contracts": contracts,
            "sources": {name: {"id": i} for i, name in enumerate(units)},
        }
