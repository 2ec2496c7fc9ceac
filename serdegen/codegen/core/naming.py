"""
Naming utilities for safe code generation.

Handles name sanitization, case conversions and keyword conflicts.
Every sanitized name is cleaned of leading underscores, which leaves the
underscore-prefixed namespace free for runtime aliases and locals in
generated code.
"""

import re
from enum import Enum
from typing import Dict, Optional, Set

from ...logging_config import get_logger

logger = get_logger(__name__)

GLOBAL_SCOPE = ""


class NamingCase(Enum):
    """Different naming case styles."""

    SNAKE_CASE = "snake"  # user_name
    CAMEL_CASE = "camel"  # userName
    PASCAL_CASE = "pascal"  # UserName
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME
    PRESERVE = "original"  # userName stays userName


class NameSanitizer:
    """Handles name sanitization and case conversion."""

    def __init__(
        self,
        reserved_words: Optional[Set[str]] = None,
        builtin_types: Optional[Set[str]] = None,
    ):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin or runtime names that might conflict
        """
        self.reserved_words = reserved_words or set()
        self.builtin_types = builtin_types or set()
        self._name_cache: Dict[str, str] = {}
        self._used_names: Dict[str, Set[str]] = {}

    def sanitize_name(
        self,
        name: str,
        target_case: NamingCase = NamingCase.SNAKE_CASE,
        suffix_on_conflict: str = "_",
        scope: str = GLOBAL_SCOPE,
    ) -> str:
        """
        Sanitize a name for safe use in target language.

        The same (name, case, scope) always maps to the same result, and
        two different names of one scope never map to the same result.

        Args:
            name: Original name to sanitize
            target_case: Desired case style
            suffix_on_conflict: Suffix to add for conflicts
            scope: Namespace the name lives in (e.g. the enclosing type)

        Returns:
            Sanitized name safe for use
        """
        cache_key = f"{scope}\x00{name}\x00{target_case.value}\x00{suffix_on_conflict}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        cleaned = self._clean_basic(name)
        converted = self._convert_case(cleaned, target_case)
        final_name = self._resolve_conflicts(converted, suffix_on_conflict, scope)

        if final_name != name:
            logger.debug("Renamed %r to %r (scope %r)", name, final_name, scope)

        self._name_cache[cache_key] = final_name
        self._used_names.setdefault(scope, set()).add(final_name)

        return final_name

    def _clean_basic(self, name: str) -> str:
        """Basic name cleanup - remove invalid characters."""
        cleaned = re.sub(r"[^a-zA-Z0-9_-]", "_", name)

        cleaned = cleaned.strip("_-")

        # Ensure doesn't start with number
        if cleaned and cleaned[0].isdigit():
            cleaned = f"n{cleaned}"

        if not cleaned:
            cleaned = "field"

        return cleaned

    def _convert_case(self, name: str, target_case: NamingCase) -> str:
        """Convert name to target case style."""
        if target_case == NamingCase.SNAKE_CASE:
            return self._to_snake_case(name)
        elif target_case == NamingCase.CAMEL_CASE:
            return self._to_camel_case(name)
        elif target_case == NamingCase.PASCAL_CASE:
            return self._to_pascal_case(name)
        elif target_case == NamingCase.SCREAMING_SNAKE:
            return self._to_snake_case(name).upper()
        else:
            return name.replace("-", "_")

    def _to_snake_case(self, name: str) -> str:
        """Convert to snake_case."""
        name = name.replace("-", "_")

        # Insert underscore before uppercase letters
        name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
        name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)

        name = name.lower()
        name = re.sub(r"_+", "_", name)

        return name.strip("_")

    def _to_camel_case(self, name: str) -> str:
        """Convert to camelCase."""
        snake = self._to_snake_case(name)
        parts = snake.split("_")

        if not parts:
            return name

        return parts[0].lower() + "".join(part.capitalize() for part in parts[1:])

    def _to_pascal_case(self, name: str) -> str:
        """Convert to PascalCase."""
        snake = self._to_snake_case(name)
        parts = snake.split("_")

        # Keep digits-only parts readable: Vec_2 -> Vec2
        return "".join(part[:1].upper() + part[1:] for part in parts if part)

    def _is_reserved(self, name: str) -> bool:
        # Target languages are case-sensitive: "List" does not shadow "list".
        return name in self.reserved_words or name in self.builtin_types

    def _resolve_conflicts(self, name: str, suffix: str, scope: str) -> str:
        """Resolve naming conflicts with reserved words and existing names."""
        if self._is_reserved(name):
            name = f"{name}{suffix}"
        original_name = name

        used = self._used_names.setdefault(scope, set())
        counter = 1
        while name in used:
            if suffix == "_":
                name = f"{original_name}{suffix}{counter}"
            else:
                name = f"{original_name}{counter}"
            counter += 1

        return name

    def reset_used_names(self):
        """Reset the tracking of used names."""
        self._used_names.clear()
        self._name_cache.clear()

    def add_used_name(self, name: str, scope: str = GLOBAL_SCOPE):
        """Manually add a name to the used names of a scope."""
        self._used_names.setdefault(scope, set()).add(name)
