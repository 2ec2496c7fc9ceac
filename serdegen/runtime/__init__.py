"""
Runtime support libraries for generated code.

Each target language ships one self-contained source file that generated
code links against. The files are package data; installers copy them next
to the generated sources.
"""

from pathlib import Path

RUNTIME_DIR = Path(__file__).parent

RUNTIME_FILES = {
    "python": RUNTIME_DIR / "python" / "serde_runtime.py",
    "cpp": RUNTIME_DIR / "cpp" / "serde_runtime.hpp",
    "rust": RUNTIME_DIR / "rust" / "serde_runtime.rs",
}


def runtime_path(language: str) -> Path:
    """
    Return the runtime source file of a target language.

    Raises:
        KeyError: If the language has no runtime.
    """
    try:
        return RUNTIME_FILES[language]
    except KeyError:
        raise KeyError(
            f"No runtime for language '{language}'. "
            f"Available: {', '.join(sorted(RUNTIME_FILES))}"
        ) from None


def runtime_source(language: str) -> str:
    """Return the runtime source text of a target language."""
    return runtime_path(language).read_text(encoding="utf-8")
