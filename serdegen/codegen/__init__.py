"""
serdegen Code Generation Module

Generates type definitions and binary (de)serialization code in various
languages from a format registry.
"""

from .core.config import ConfigManager, GeneratorConfig, load_config
from .core.generator import (
    CodeGenerator,
    GenerationResult,
    GeneratorError,
    UnsupportedConstructError,
    generate_code,
)
from .core.mapper import Encoding, EncodingContract, TypeMapper
from .installer import (
    CppInstaller,
    InstallerError,
    PythonInstaller,
    RustInstaller,
    SourceInstaller,
    create_installer,
)
from .registry import (
    GeneratorRegistry,
    GeneratorRegistryError,
    get_generator,
    get_language_info,
    get_registry,
    list_all_language_info,
    list_supported_languages,
)


# Convenience functions
def generate_from_registry(registry, language="python", config=None):
    """
    Generate code for a registry.

    Args:
        registry: Validated Registry
        language: Target language name or alias
        config: Generator configuration (GeneratorConfig, dict or path)

    Returns:
        GenerationResult with generated code
    """
    generator = get_generator(language, config)
    return generate_code(generator, registry)


def quick_generate(registry_data, language="python", **options):
    """
    Quick code generation from a registry document.

    Args:
        registry_data: Registry document (dict) or Registry
        language: Target language
        **options: Generator options

    Returns:
        Generated code string
    """
    from ..formats import Registry, registry_from_dict

    if not isinstance(registry_data, Registry):
        registry_data = registry_from_dict(registry_data)

    result = generate_from_registry(registry_data, language, options)

    if result.success:
        return result.code
    else:
        raise GeneratorError(f"Code generation failed: {result.error_message}")


# Export main interfaces
__all__ = [
    "GeneratorRegistry",
    "GeneratorRegistryError",
    "CodeGenerator",
    "GenerationResult",
    "GeneratorError",
    "UnsupportedConstructError",
    "Encoding",
    "EncodingContract",
    "TypeMapper",
    "GeneratorConfig",
    "ConfigManager",
    "load_config",
    "generate_code",
    "generate_from_registry",
    "quick_generate",
    "get_generator",
    "get_registry",
    "get_language_info",
    "list_all_language_info",
    "list_supported_languages",
    "SourceInstaller",
    "PythonInstaller",
    "CppInstaller",
    "RustInstaller",
    "InstallerError",
    "create_installer",
]
