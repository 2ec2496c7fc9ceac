"""
Installers that place generated code and runtime files into a project tree.

Each installer generates one module per registry and copies the runtime
support library of its language next to it. Files are written atomically;
when generation fails nothing is written.
"""

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from ..formats import Registry
from ..logging_config import get_logger
from ..runtime import runtime_source
from .core.config import GeneratorConfig, load_config
from .core.generator import generate_code
from .languages.rust.naming import validate_rust_module_name
from .registry import GeneratorRegistryError, get_generator, get_registry

logger = get_logger(__name__)


class InstallerError(Exception):
    """Exception raised when generated code or runtimes cannot be installed."""

    pass


def write_atomic(path: Path, content: str) -> None:
    """
    Write a text file through a temporary file in the same directory.

    Raises:
        InstallerError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.replace(temp_name, path)
    except OSError as e:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise InstallerError(f"Failed to write {path}: {e}") from e
    logger.debug("Wrote %s", path)


class SourceInstaller(ABC):
    """Copies generated modules and the runtime into an install directory."""

    def __init__(
        self,
        install_dir: Union[str, Path],
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            install_dir: Root of the target project tree
            config: Generator configuration overrides applied to every module
        """
        self.install_dir = Path(install_dir)
        self.config_overrides = dict(config or {})

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Registry name of the backend used by this installer."""
        pass

    @abstractmethod
    def module_path(self, name: str) -> Path:
        """Path of the generated source file for a module name."""
        pass

    @abstractmethod
    def runtime_path(self) -> Path:
        """Path where the runtime support library is installed."""
        pass

    def validate_module_name(self, name: str) -> List[str]:
        """Return problems with a module name (empty if valid)."""
        if not name.isidentifier():
            return [f"'{name}' is not a valid module name"]
        return []

    def module_config(self, name: str) -> GeneratorConfig:
        """Build the generator configuration for one module."""
        overrides = dict(self.config_overrides)
        overrides["module_name"] = name
        return load_config(self.language_name, custom_config=overrides)

    def install_module(self, name: str, registry: Registry) -> Path:
        """
        Generate a module exposing the types of a registry.

        Args:
            name: Module (or namespace) name
            registry: Registry to generate code for

        Returns:
            Path of the written source file

        Raises:
            InstallerError: If the name is invalid or generation fails.
        """
        errors = self.validate_module_name(name)
        if errors:
            raise InstallerError("; ".join(errors))

        generator = get_generator(self.language_name, self.module_config(name))
        result = generate_code(generator, registry)
        if not result.success:
            raise InstallerError(
                f"Cannot install module '{name}': {result.error_message}"
            ) from result.exception

        for warning in result.warnings:
            logger.warning("%s: %s", name, warning)

        path = self.module_path(name)
        write_atomic(path, result.code)
        self.after_module_installed(name)
        logger.info("Installed %s module %s at %s", self.language_name, name, path)
        return path

    def after_module_installed(self, name: str) -> None:
        """Hook for project files that list installed modules."""
        return None

    def install_serde_runtime(self) -> Path:
        """
        Install the runtime support library, unless it is already present.

        Returns:
            Path of the runtime file
        """
        path = self.runtime_path()
        source = runtime_source(self.language_name)
        if path.exists() and path.read_text(encoding="utf-8") == source:
            logger.debug("Runtime already installed at %s", path)
            return path

        write_atomic(path, source)
        self.after_runtime_installed()
        logger.info("Installed %s runtime at %s", self.language_name, path)
        return path

    def after_runtime_installed(self) -> None:
        """Hook for project files that must reference the runtime."""
        return None

    # Both encodings share one primitive library; the variant is baked into
    # the generated code.

    def install_bincode_runtime(self) -> Path:
        """Install the runtime used by bincode-encoded modules."""
        return self.install_serde_runtime()

    def install_canonical_runtime(self) -> Path:
        """Install the runtime used by canonically encoded modules."""
        return self.install_serde_runtime()


class PythonInstaller(SourceInstaller):
    """Installs generated Python packages next to ``serde_runtime.py``."""

    @property
    def language_name(self) -> str:
        return "python"

    def module_path(self, name: str) -> Path:
        return self.install_dir / name / "__init__.py"

    def runtime_path(self) -> Path:
        return self.install_dir / "serde_runtime.py"


class CppInstaller(SourceInstaller):
    """Installs generated C++ headers next to ``serde_runtime.hpp``."""

    @property
    def language_name(self) -> str:
        return "cpp"

    def validate_module_name(self, name: str) -> List[str]:
        if not all(part.isidentifier() for part in name.split("::")):
            return [f"'{name}' is not a valid C++ namespace"]
        return []

    def module_path(self, name: str) -> Path:
        return self.install_dir / f"{name.replace('::', '_')}.hpp"

    def runtime_path(self) -> Path:
        return self.install_dir / "serde_runtime.hpp"


CARGO_TOML = """[package]
name = "{name}"
version = "0.1.0"
edition = "2021"

[dependencies]
"""


class RustInstaller(SourceInstaller):
    """
    Installs generated Rust modules into a library crate.

    Modules live under ``src/`` and are declared in ``src/lib.rs``; a
    minimal ``Cargo.toml`` is created when the directory has none.
    """

    @property
    def language_name(self) -> str:
        return "rust"

    @property
    def lib_path(self) -> Path:
        return self.install_dir / "src" / "lib.rs"

    def validate_module_name(self, name: str) -> List[str]:
        return validate_rust_module_name(name)

    def module_path(self, name: str) -> Path:
        return self.install_dir / "src" / f"{name}.rs"

    def runtime_path(self) -> Path:
        return self.install_dir / "src" / "serde_runtime.rs"

    def after_module_installed(self, name: str) -> None:
        self._ensure_manifest()
        self._declare_module(name)

    def after_runtime_installed(self) -> None:
        self._ensure_manifest()
        self._declare_module("serde_runtime")

    def _ensure_manifest(self):
        manifest = self.install_dir / "Cargo.toml"
        if manifest.exists():
            return
        crate_name = self.install_dir.resolve().name.replace("-", "_") or "generated"
        if not crate_name.isidentifier():
            crate_name = "generated"
        write_atomic(manifest, CARGO_TOML.format(name=crate_name))

    def _declare_module(self, name: str):
        declaration = f"pub mod {name};"
        lines = []
        if self.lib_path.exists():
            lines = self.lib_path.read_text(encoding="utf-8").splitlines()
        if declaration in (line.strip() for line in lines):
            return
        lines.append(declaration)
        write_atomic(self.lib_path, "\n".join(lines) + "\n")


_INSTALLERS: Dict[str, Type[SourceInstaller]] = {
    "python": PythonInstaller,
    "cpp": CppInstaller,
    "rust": RustInstaller,
}


def create_installer(
    language: str,
    install_dir: Union[str, Path],
    config: Optional[Dict[str, Any]] = None,
) -> SourceInstaller:
    """
    Create the installer of a target language.

    Args:
        language: Language name or alias
        install_dir: Root of the target project tree
        config: Generator configuration overrides

    Raises:
        InstallerError: If the language has no installer.
    """
    try:
        primary = get_registry().resolve(language)
    except GeneratorRegistryError as e:
        raise InstallerError(str(e)) from e
    if primary not in _INSTALLERS:
        raise InstallerError(f"No installer for language: {language}")
    return _INSTALLERS[primary](install_dir, config)
