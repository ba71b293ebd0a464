"""Hatch build hook for compiling the native Solidity library (libsolc)."""

import os
import platform
import shutil
import subprocess
import sys
from pathlib import Path

from hatchling.builders.hooks.plugin.interface import BuildHookInterface

# Static libraries produced by the Solidity CMake build, in link order.
SOLIDITY_LIBS = ["solc", "solidity", "yul", "langutil", "evmasm", "solutil", "smtutil"]
BOOST_LIBS = ["boost_system", "boost_filesystem", "boost_regex"]
SYSTEM_LIB_DIRS = ["/usr/lib", "/usr/lib64", "/usr/lib/x86_64-linux-gnu", "/usr/local/lib"]


class SolidityBuildHook(BuildHookInterface):
    """Build hook that compiles libsolc into a shared library before packaging."""

    PLUGIN_NAME = "solidity-build"

    def initialize(self, version: str, build_data: dict) -> None:
        """Build libsolc and bundle it into the wheel."""
        package_root = Path(self.root)

        self._sync_version(package_root)

        if self.target_name == "sdist":
            # Don't build for sdist - just include source
            return

        if os.environ.get("SOLC_SKIP_NATIVE_BUILD"):
            self._log("SOLC_SKIP_NATIVE_BUILD is set, not building libsolc")
            return

        lib_name = self._get_lib_name()
        target_lib = package_root / "solc" / lib_name

        # Pre-built in CI
        if target_lib.exists():
            self._log(f"Using existing {lib_name}")
            self._bundle(build_data, target_lib)
            return

        source_root = self._resolve_source_root(package_root)
        if source_root is None:
            self._log(
                "No Solidity sources found, skipping native build. "
                "Point SOLC_LIB_PATH at a libsolc shared library at runtime."
            )
            return

        self._log(f"Building libsolc from {source_root}...")
        build_dir = self._run_build(source_root)
        self._link_shared(build_dir, target_lib)
        self._log(f"Linked {lib_name} into solc/")
        self._bundle(build_data, target_lib)

    def _get_lib_name(self) -> str:
        """Get platform-specific library name."""
        system = platform.system()
        if system == "Darwin":
            return "libsolc.dylib"
        elif system == "Windows":
            return "solc.dll"
        else:
            return "libsolc.so"

    def _bundle(self, build_data: dict, lib_path: Path) -> None:
        """Ship the library inside the package and mark the wheel platform-specific."""
        build_data["force_include"][str(lib_path)] = f"solc/{lib_path.name}"
        build_data["pure_python"] = False
        build_data["infer_tag"] = True

    def _resolve_source_root(self, package_root: Path) -> Path | None:
        """Find a Solidity checkout (the directory with libsolc/libsolc.h)."""
        env_root = os.environ.get("SOLC_SOURCE_DIR")
        candidates = [Path(env_root)] if env_root else []
        candidates += [package_root / "solidity", package_root / "vendor" / "solidity"]

        for candidate in candidates:
            if (candidate / "CMakeLists.txt").exists() and (
                candidate / "libsolc" / "libsolc.h"
            ).exists():
                return candidate
        return None

    def _run_build(self, source_root: Path) -> Path:
        """Configure and build the static libraries with CMake."""
        if not shutil.which("cmake"):
            raise RuntimeError("CMake not found. Install cmake to build libsolc from source.")

        build_dir = source_root / "build"
        configure = [
            "cmake",
            "-S",
            str(source_root),
            "-B",
            str(build_dir),
            "-DCMAKE_BUILD_TYPE=Release",
            "-DCMAKE_POSITION_INDEPENDENT_CODE=ON",
            "-DTESTS=OFF",
            "-DTOOLS=OFF",
            "-DUSE_Z3=OFF",
            "-DUSE_CVC4=OFF",
            "-DBoost_USE_STATIC_LIBS=ON",
            "-DCMAKE_CXX_FLAGS=-Wno-range-loop-analysis",
        ]
        if shutil.which("sccache"):
            self._log("Using sccache")
            configure += [
                "-DCMAKE_CXX_COMPILER_LAUNCHER=sccache",
                "-DCMAKE_C_COMPILER_LAUNCHER=sccache",
            ]

        subprocess.run(configure, check=True)
        subprocess.run(
            ["cmake", "--build", str(build_dir), "--target", "libsolc", "--parallel"],
            check=True,
        )
        return build_dir

    def _link_shared(self, build_dir: Path, target: Path) -> None:
        """Link the static archives into one shared library exporting the C API."""
        if platform.system() == "Windows":
            raise RuntimeError("Building libsolc as a DLL is not supported; set SOLC_LIB_PATH.")

        archives = []
        for name in SOLIDITY_LIBS:
            archive = build_dir / f"lib{name}" / f"lib{name}.a"
            if not archive.exists():
                raise RuntimeError(f"Build failed: {archive} not found")
            archives.append(archive)

        # Keep every libsolc symbol, the rest only as needed
        is_macos = platform.system() == "Darwin"
        if is_macos:
            head = ["-Wl,-force_load," + str(archives[0])]
        else:
            head = ["-Wl,--whole-archive", str(archives[0]), "-Wl,--no-whole-archive"]

        # jsoncpp is vendored by older Solidity releases only
        extra = []
        jsoncpp_dir = build_dir / "deps" / "lib"
        if (jsoncpp_dir / "libjsoncpp.a").exists():
            extra += [f"-L{jsoncpp_dir}", "-ljsoncpp"]
        extra += [f"-L{d}" for d in SYSTEM_LIB_DIRS if Path(d).is_dir()]
        extra += [f"-l{lib}" for lib in BOOST_LIBS]

        # The C++ driver links the matching standard library (libc++ / libstdc++)
        cxx = os.environ.get("CXX", "c++")
        subprocess.run(
            [cxx, "-shared", "-o", str(target), *head, *map(str, archives[1:]), *extra],
            check=True,
        )

        if shutil.which("strip"):
            # macOS strip needs -x for dylibs
            strip_cmd = ["strip", "-x", str(target)] if is_macos else ["strip", str(target)]
            subprocess.run(strip_cmd, check=False)

    def _sync_version(self, package_root: Path) -> None:
        """Sync VERSION file to _version.py."""
        version_file = package_root / "VERSION"
        if not version_file.exists():
            raise RuntimeError(
                "Cannot determine package version: no VERSION file found at the repo root."
            )
        version = version_file.read_text().strip()

        version_py = package_root / "solc" / "_version.py"
        content = f'"""Version from VERSION file."""\n__version__ = "{version}"\n'
        if not version_py.exists() or version_py.read_text() != content:
            version_py.write_text(content)
            self._log(f"Synced version {version} to _version.py")

    def _log(self, msg: str) -> None:
        """Log build progress."""
        print(f"[solidity-build] {msg}", file=sys.stderr)
