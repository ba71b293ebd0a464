"""
Memory safety tests for the FFI boundary.

Tests native buffer ownership and lifecycle:
- Memory bridge primitives (allocate, copy, release, reset)
- Allocation balance across repeated compiles (leak prevention)
- Error path cleanup (leak-on-failure prevention)
"""
