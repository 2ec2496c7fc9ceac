"""
Base generator interface for all code generation targets.

Defines the contract that all language backends must implement: a pure
function from (registry, emission plan, type mapper) to source text.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...analyzer import EmissionPlan, compute_emission_plan
from ...formats import FormatError, Registry
from ...logging_config import get_logger
from .config import ConfigError, GeneratorConfig
from .mapper import EncodingContract, TypeMapper
from .templates import TemplateEngine, TemplateError, create_template_engine

logger = get_logger(__name__)


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class UnsupportedConstructError(GeneratorError):
    """Raised when a backend cannot represent a format in its target language."""

    def __init__(self, language: str, type_name: str, detail: str):
        self.language = language
        self.type_name = type_name
        self.detail = detail
        super().__init__(f"{language} backend cannot represent '{type_name}': {detail}")


class CodeGenerator(ABC):
    """Abstract base class for all code generators."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize generator with optional configuration."""
        self.config = config or GeneratorConfig()
        self._template_engine = None
        self._setup_templates()

    def _setup_templates(self):
        """Setup template engine for this generator."""
        template_dir = self.get_template_directory()
        if template_dir:
            self._template_engine = create_template_engine(template_dir)
        else:
            # Fallback to in-memory templates
            self._template_engine = create_template_engine()

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'python', 'rust')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.py', '.rs')."""
        pass

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing templates for this generator.

        Subclasses should override this to provide their template directory.
        Return None to use in-memory templates only.
        """
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    @abstractmethod
    def generate(self, registry: Registry, plan: EmissionPlan, mapper: TypeMapper) -> str:
        """
        Generate the source file for a whole registry.

        Args:
            registry: Validated registry
            plan: Emission plan computed for the registry
            mapper: Shared type mapping decisions

        Returns:
            Generated code as a string
        """
        pass

    @abstractmethod
    def generate_declaration(self, name: str, mapper: TypeMapper) -> str:
        """
        Generate the declaration and serialization code of one type.

        Args:
            name: Registry name of the type
            mapper: Shared type mapping decisions

        Returns:
            Generated code for this type only
        """
        pass

    def check_supported(self, registry: Registry, mapper: TypeMapper) -> None:
        """
        Reject formats the target language cannot represent.

        Raises:
            UnsupportedConstructError: For the first offending type.
        """
        return None

    def validate_registry(self, registry: Registry, mapper: TypeMapper) -> List[str]:
        """
        Collect non-fatal warnings about the registry.

        Args:
            registry: Registry being generated
            mapper: Shared type mapping decisions

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []

        for name in mapper.plan.forced_indirect:
            if name not in registry:
                warnings.append(f"Forced indirection names unknown type '{name}'")

        for group in mapper.groups:
            if group.cyclic:
                warnings.append(
                    f"Recursive types {', '.join(group.names)} use indirection"
                )

        return warnings

    def format_code(self, code: str) -> str:
        """
        Apply language-specific formatting to generated code.

        Args:
            code: Raw generated code

        Returns:
            Formatted code
        """
        # Basic cleanup - remove excessive blank lines
        lines = code.split("\n")
        formatted_lines = []
        blank_count = 0

        for line in lines:
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 2:  # Allow max 2 consecutive blank lines
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        return "\n".join(formatted_lines).strip("\n") + "\n"

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a template with context."""
        return self.template_engine.render_template(template_name, context)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        code: str,
        warnings: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize generation result.

        Args:
            code: Generated code
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.code = code
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message: Optional[str] = None
        self.exception: Optional[Exception] = None

    @classmethod
    def error(cls, message: str, exception: Optional[Exception] = None) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="")
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


def prepare_generation(registry: Registry, config: GeneratorConfig) -> TypeMapper:
    """
    Validate a registry and compute the shared decisions for one run.

    Raises:
        FormatError: If the registry is invalid or not closed.
        ConfigError: If the encoding is unknown.
    """
    contract = EncodingContract.from_config(config)
    plan = compute_emission_plan(registry, config.force_indirect)
    return TypeMapper(registry, plan, contract)


def generate_code(generator: CodeGenerator, registry: Registry) -> GenerationResult:
    """
    Generate code using the specified generator with error handling.

    Failures are reported in the returned result; no partial code is
    ever returned.

    Args:
        generator: Code generator instance
        registry: Registry to generate code for

    Returns:
        GenerationResult with code, warnings, and metadata
    """
    language = generator.language_name
    logger.info("Generating %s code for %d types", language, len(registry))

    try:
        mapper = prepare_generation(registry, generator.config)
        generator.check_supported(registry, mapper)
        warnings = generator.validate_registry(registry, mapper)

        code = generator.generate(registry, mapper.plan, mapper)
        formatted_code = generator.format_code(code)

        metadata = {
            "language": language,
            "file_extension": generator.file_extension,
            "module_name": generator.config.module_name,
            "encoding": mapper.contract.encoding.value,
            "type_count": len(registry),
            "group_count": len(mapper.groups),
            "cyclic_types": [
                name for group in mapper.groups if group.cyclic for name in group.names
            ],
        }

        logger.info("Generated %s code (%d lines)", language, formatted_code.count("\n"))
        return GenerationResult(formatted_code, warnings, metadata)

    except (FormatError, GeneratorError, ConfigError, TemplateError) as e:
        logger.error("%s code generation failed: %s", language, e)
        return GenerationResult.error(f"Code generation failed: {e}", exception=e)
