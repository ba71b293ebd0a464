"""
C API declarations for libsolc.

Mirrors ``libsolc/libsolc.h`` from the Solidity sources. Function signatures
(argtypes/restype) are applied once by ``setup_signatures`` when the library is
first loaded (see ``_bindings.get_lib``).

Pointers returned by the library that must later be passed back to
``solidity_free`` are declared as ``c_void_p`` rather than ``c_char_p``.
``c_char_p`` auto-converts to ``bytes`` on access, which loses the original
address; the allocator would then be handed a pointer it never returned.
"""

import ctypes

# void (*CStyleReadFileCallback)(void* context, char const* kind, char const* data,
#                                char** o_contents, char** o_error)
ReadFileCallback = ctypes.CFUNCTYPE(
    None,  # return: void
    ctypes.c_void_p,  # context
    ctypes.c_char_p,  # kind
    ctypes.c_char_p,  # data
    ctypes.POINTER(ctypes.c_void_p),  # o_contents
    ctypes.POINTER(ctypes.c_void_p),  # o_error
)

# name -> (argtypes, restype)
SIGNATURES: dict[str, tuple[list, object]] = {
    "solidity_version": ([], ctypes.c_char_p),
    "solidity_license": ([], ctypes.c_char_p),
    # The callback slot is c_void_p so that NULL can be passed
    # (a CFUNCTYPE argtype does not accept None).
    "solidity_compile": ([ctypes.c_char_p, ctypes.c_void_p, ctypes.c_void_p], ctypes.c_void_p),
    "solidity_free": ([ctypes.c_void_p], None),
    "solidity_alloc": ([ctypes.c_uint64], ctypes.c_void_p),
    "solidity_reset": ([], None),
}


def setup_signatures(lib: ctypes.CDLL) -> None:
    """Apply argtypes/restype for every exported function.

    Raises AttributeError if the library does not export one of them.
    """
    for name, (argtypes, restype) in SIGNATURES.items():
        func = getattr(lib, name)
        func.argtypes = argtypes
        func.restype = restype
