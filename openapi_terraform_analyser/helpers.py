"""Shared helper functions and constants."""

import re
import sys

# Semantic property types produced by the schema type resolver.
TYPE_STRING = "string"
TYPE_INTEGER = "integer"
TYPE_FLOAT = "float"
TYPE_BOOLEAN = "boolean"
TYPE_LIST = "list"
TYPE_OBJECT = "object"

# Mapping from OpenAPI primitive types to the semantic property types.
OPENAPI_TO_PROPERTY_TYPE_MAP = {
    "string": TYPE_STRING,
    "integer": TYPE_INTEGER,
    "number": TYPE_FLOAT,
    "boolean": TYPE_BOOLEAN,
}

PRIMITIVE_TYPES = frozenset(OPENAPI_TO_PROPERTY_TYPE_MAP.values())

# Operations considered when building a resource.
RESOURCE_OPERATIONS = ("post", "get", "put", "delete")

# Name of the property that identifies a resource unless overridden by extension.
DEFAULT_IDENTIFIER = "id"

# Name of the property holding the resource status unless overridden by extension.
DEFAULT_STATUS_IDENTIFIER = "status"

# Prefix used by local definition references, e.g. '#/definitions/User'.
DEFINITIONS_REF_PREFIX = "#/definitions/"

VERSION_TOKEN_REGEX = re.compile(r"^v\d+$")
PATH_PARAM_REGEX = re.compile(r"^\{[^{}/]+\}$")
PATH_PARAM_PLACEHOLDER_REGEX = re.compile(r"\{[^{}/]+\}")

# Matches resource instance paths such as '/users/{id}'. Group 1 holds the root
# part including its trailing slash, e.g. '/users/'.
RESOURCE_INSTANCE_REGEX = re.compile(r"^(/(?:[^/]+/)+)\{[^{}/]+\}$")


def to_snake_case(name):
    """Converts CamelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def is_version_token(segment: str) -> bool:
    """Returns True for bare version path segments such as 'v1' or 'v12'."""
    return bool(VERSION_TOKEN_REGEX.match(segment))


def is_path_param(segment: str) -> bool:
    """Returns True for bracketed path parameter segments such as '{id}'."""
    return bool(PATH_PARAM_REGEX.match(segment))


def split_comma_separated(value: str) -> list[str]:
    """Splits a comma separated string, dropping any whitespace and empty items."""
    value = re.sub(r"\s+", "", value or "")
    return [item for item in value.split(",") if item]


class ValidationErrorCollector:
    """A simple class to collect and report validation errors."""

    def __init__(self):
        self.errors = []

    def add_error(self, message: str):
        self.errors.append(message)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def report(self):
        """Prints all collected errors to stderr and exits if any exist."""
        if self.has_errors:
            print(
                "\nAnalysis failed with the following resource errors:",
                file=sys.stderr,
            )
            for i, error in enumerate(self.errors, 1):
                print(f"  {i}. {error}", file=sys.stderr)
            sys.exit(1)
