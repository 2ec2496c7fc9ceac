"""
serdegen: binary serialization code generation from format registries.

A registry describes named data types; serdegen orders them by dependency,
marks recursive references for indirection and emits Python, C++ or Rust
declarations with bincode or canonical encoders and decoders.
"""

from .analyzer import EmissionPlan, compute_emission_plan
from .codegen import (
    GenerationResult,
    GeneratorConfig,
    generate_code,
    generate_from_registry,
    get_generator,
    list_supported_languages,
    load_config,
    quick_generate,
)
from .formats import (
    FormatError,
    InvalidRegistryError,
    Registry,
    UnresolvedReferenceError,
    registry_from_dict,
    registry_to_dict,
)
from .utils import RegistryLoaderError, load_registry

__version__ = "0.1.0"

__all__ = [
    "EmissionPlan",
    "compute_emission_plan",
    "Registry",
    "FormatError",
    "InvalidRegistryError",
    "UnresolvedReferenceError",
    "registry_from_dict",
    "registry_to_dict",
    "load_registry",
    "RegistryLoaderError",
    "GeneratorConfig",
    "GenerationResult",
    "generate_code",
    "generate_from_registry",
    "get_generator",
    "list_supported_languages",
    "load_config",
    "quick_generate",
]
