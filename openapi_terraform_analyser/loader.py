import logging
from typing import Any, Dict

import requests
import yaml

from .config import is_url
from .errors import DocumentLoadError

logger = logging.getLogger(__name__)

SUPPORTED_SWAGGER_VERSION = "2.0"
DOWNLOAD_TIMEOUT = 30


def parse_document(content: str, location: str) -> Dict[str, Any]:
    """
    Parses the text of an OpenAPI document. JSON is valid YAML, so both formats
    go through the YAML parser.

    Raises:
        DocumentLoadError: If the content is not a Swagger 2.0 document.
    """
    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise DocumentLoadError(
            f"failed to parse the OpenAPI document from '{location}' - error = {e}"
        ) from e
    if not isinstance(document, dict):
        raise DocumentLoadError(
            f"the OpenAPI document from '{location}' is not a mapping"
        )
    version = str(document.get("swagger", ""))
    if version != SUPPORTED_SWAGGER_VERSION:
        raise DocumentLoadError(
            f"the OpenAPI document from '{location}' declares swagger version "
            f"'{version}', only '{SUPPORTED_SWAGGER_VERSION}' is supported"
        )
    return document


def load_document(location: str, insecure_skip_verify: bool = False) -> Dict[str, Any]:
    """
    Loads an OpenAPI document from an http(s) URL or a file on disk.

    Args:
        location: URL or filesystem path of the document.
        insecure_skip_verify: Skip TLS certificate verification for URLs.

    Returns:
        The parsed document.

    Raises:
        DocumentLoadError: If the document cannot be retrieved or parsed.
    """
    if not location:
        raise DocumentLoadError(
            "open api document filename argument empty, please provide the url of the OpenAPI document"
        )
    if is_url(location):
        logger.info("downloading OpenAPI document from %s", location)
        try:
            response = requests.get(
                location, verify=not insecure_skip_verify, timeout=DOWNLOAD_TIMEOUT
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise DocumentLoadError(
                f"failed to retrieve the OpenAPI document from '{location}' - error = {e}"
            ) from e
        return parse_document(response.text, location)

    try:
        with open(location, "r") as f:
            content = f.read()
    except IOError as e:
        raise DocumentLoadError(
            f"failed to retrieve the OpenAPI document from '{location}' - error = {e}"
        ) from e
    return parse_document(content, location)
