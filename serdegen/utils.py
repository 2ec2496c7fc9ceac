"""Utility functions for loading registry documents.

This module loads format registries written as JSON or YAML from local
files and URLs, and validates them into :class:`~serdegen.formats.Registry`
values.
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests
import yaml

from .formats import InvalidRegistryError, Registry, registry_from_dict
from .logging_config import get_logger

logger = get_logger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


class RegistryLoaderError(Exception):
    """Custom exception for registry loading errors."""

    pass


def parse_registry_text(text: str, source: str, yaml_hint: bool = False) -> Any:
    """Parse a registry document as JSON, falling back to YAML.

    Args:
        text: Document text.
        source: Description of where the text came from, for messages.
        yaml_hint: Parse as YAML directly (e.g. the file is ``.yaml``).

    Returns:
        Parsed document.

    Raises:
        RegistryLoaderError: If the text is neither valid JSON nor YAML.
    """
    if not yaml_hint:
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.debug("%s is not JSON, trying YAML", source)

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.error("Invalid registry document in %s: %s", source, e)
        raise RegistryLoaderError(f"Invalid registry document in {source}: {e}") from e


def load_registry_from_file(file_path: str | Path) -> tuple[str, Any]:
    """Load a registry document from a local file.

    Args:
        file_path: Path to a JSON or YAML file.

    Returns:
        Tuple of (source description, parsed document).

    Raises:
        FileNotFoundError: If file doesn't exist.
        RegistryLoaderError: If file cannot be read or parsed.
    """
    file_path = Path(file_path)
    logger.debug("Attempting to load registry from file: %s", file_path)

    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() not in YAML_SUFFIXES + (".json",):
        logger.warning("File has neither a JSON nor a YAML extension: %s", file_path)

    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error("Error reading file %s: %s", file_path, e, exc_info=True)
        raise RegistryLoaderError(f"Error reading file {file_path}: {e}") from e

    data = parse_registry_text(
        text, str(file_path), yaml_hint=file_path.suffix.lower() in YAML_SUFFIXES
    )
    logger.info("Loaded registry document from %s", file_path)
    return f"📄 {file_path}", data


def load_registry_from_url(url: str, timeout: int = 30) -> tuple[str, Any]:
    """Load a registry document from a URL.

    Args:
        url: URL to fetch the document from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (source description, parsed document).

    Raises:
        RegistryLoaderError: If URL is invalid, request fails, or the
            response is not a valid document.
    """
    logger.debug("Attempting to load registry from URL: %s", url)

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        logger.error("Invalid URL format: %s", url)
        raise RegistryLoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout:
        logger.error("Request timeout for URL: %s", url)
        raise RegistryLoaderError(f"Request timeout for URL: {url}")
    except requests.exceptions.ConnectionError as e:
        logger.error("Connection error for URL %s: %s", url, e)
        raise RegistryLoaderError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error("HTTP error %s for URL: %s", e.response.status_code, url)
        raise RegistryLoaderError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.RequestException as e:
        logger.error("Request error for URL %s: %s", url, e, exc_info=True)
        raise RegistryLoaderError(f"Request error for URL {url}: {e}") from e

    content_type = response.headers.get("content-type", "").lower()
    yaml_hint = "yaml" in content_type or parsed_url.path.lower().endswith(YAML_SUFFIXES)
    data = parse_registry_text(response.text, url, yaml_hint=yaml_hint)
    logger.info("Loaded registry document from %s", url)
    return f"🌐 {url}", data


def load_registry(path_or_url: str | Path, timeout: int = 30) -> tuple[str, Registry]:
    """Load and validate a registry from a file path or an HTTP(S) URL.

    Args:
        path_or_url: Local path, or URL starting with ``http://``/``https://``.
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, validated Registry).

    Raises:
        RegistryLoaderError: If loading fails or the document is not a
            valid registry.
        FileNotFoundError: If a local file doesn't exist.
    """
    target = str(path_or_url)
    if urlparse(target).scheme in ("http", "https"):
        source, data = load_registry_from_url(target, timeout)
    else:
        source, data = load_registry_from_file(target)

    try:
        registry = registry_from_dict(data)
    except InvalidRegistryError as e:
        logger.error("Invalid registry in %s: %s", target, e)
        raise RegistryLoaderError(f"Invalid registry in {target}: {e}") from e

    logger.debug("Registry from %s holds %d types", target, len(registry))
    return source, registry
