"""
End-to-end tests against the real libsolc.

Skipped when the library cannot be loaded (see ``native_lib`` in conftest).
"""

import json

import pytest

import solc
from solc.types import ReadResult
from tests.conftest import join_threads_with_timeout
from tests.fixtures.inputs import (
    IMPORTING_SOURCE,
    SINGLE_SOURCE,
    bytecode_objects,
    error_entries,
    standard_input,
)

pytestmark = pytest.mark.requires_native


def opcodes(output: str, source: str, contract: str) -> str:
    return json.loads(output)["contracts"][source][contract]["evm"]["bytecode"]["opcodes"]


class TestQueries:
    def test_version_not_empty(self, real_compiler):
        assert solc.version()

    def test_license_not_empty(self, real_compiler):
        assert solc.license()


class TestCompile:
    def test_compile_smoke(self, real_compiler):
        assert solc.compile("")

    def test_compile_single(self, real_compiler):
        output = solc.compile(standard_input({"c.sol": SINGLE_SOURCE}))

        assert not error_entries(output)
        assert bytecode_objects(output)["c.sol:C"]
        assert " CODECOPY " in opcodes(output, "c.sol", "C")

    def test_compile_multi_missing(self, real_compiler):
        output = solc.compile(standard_input({"c.sol": IMPORTING_SOURCE}))

        errors = error_entries(output)
        assert errors
        assert any(" not found: " in e["message"] for e in errors)


class TestCompileWithCallback:
    def test_compile_multi_with_callback(self, real_compiler):
        requests = []

        def read(kind, data):
            requests.append((kind, data))
            return ReadResult.success("contract D {}")

        output = solc.compile_with_callback(standard_input({"c.sol": IMPORTING_SOURCE}), read)

        assert requests == [("source", "d.sol")]
        assert not error_entries(output)
        assert " CODECOPY " in opcodes(output, "c.sol", "C")

    def test_compile_multi_with_failing_callback(self, real_compiler):
        output = solc.compile_with_callback(
            standard_input({"c.sol": IMPORTING_SOURCE}),
            lambda kind, data: ReadResult.failure("Our apologies"),
        )

        errors = error_entries(output)
        assert errors
        assert any("apologies" in e["message"] for e in errors)

    def test_repeated_calls_are_independent(self, real_compiler):
        first = solc.compile(standard_input({"c.sol": SINGLE_SOURCE}))
        solc.compile_with_callback(
            standard_input({"c.sol": IMPORTING_SOURCE}), lambda kind, data: "contract D {}"
        )
        again = solc.compile(standard_input({"c.sol": SINGLE_SOURCE}))

        assert bytecode_objects(first) == bytecode_objects(again)


@pytest.mark.slow
class TestConcurrency:
    def test_parallel_compiles(self, real_compiler):
        import threading

        expected = bytecode_objects(solc.compile(standard_input({"c.sol": SINGLE_SOURCE})))
        results = []
        errors = []

        def worker():
            try:
                for _ in range(3):
                    output = solc.compile_with_callback(
                        standard_input({"c.sol": IMPORTING_SOURCE}),
                        lambda kind, data: "contract D {}",
                    )
                    results.append(not error_entries(output))
                    results.append(
                        bytecode_objects(solc.compile(standard_input({"c.sol": SINGLE_SOURCE})))
                        == expected
                    )
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()

        assert not join_threads_with_timeout(threads, timeout=300)
        assert not errors
        assert all(results)
        assert len(results) == 24
