"""
Turns raw OpenAPI property schemas into normalised PropertyDescriptor objects.

The optional/required/computed/readOnly rules are expressed as a small decision
table (`classify_optional_computed`) so every accepted and rejected combination
can be checked on its own, independently of how the error is worded.
"""

import logging
import re
from typing import Any, Dict, Iterable, Optional

from .errors import PropertyValidationError, SchemaTypeError
from .extensions import EXT_COMPUTED, PropertyExtensions
from .helpers import TYPE_LIST, TYPE_OBJECT, TYPE_STRING, to_snake_case
from .models import PropertyDescriptor, SchemaDefinition
from .schema_types import SchemaTypeResolver, is_array_type, is_object_type

logger = logging.getLogger(__name__)

DEFAULT_MAX_SCHEMA_DEPTH = 10

# Outcomes of the optional-computed decision table.
NOT_COMPUTED = "not_computed"
COMPUTED_READ_ONLY = "computed_read_only"
COMPUTED_WITH_DEFAULT = "computed_with_default"
COMPUTED_UNKNOWN = "computed_unknown"
CONFLICT_REQUIRED_READ_ONLY = "conflict_required_read_only"
CONFLICT_COMPUTED_WITH_DEFAULT = "conflict_computed_with_default"
CONFLICT_COMPUTED_READ_ONLY = "conflict_computed_read_only"

CONFLICTS = frozenset(
    [
        CONFLICT_REQUIRED_READ_ONLY,
        CONFLICT_COMPUTED_WITH_DEFAULT,
        CONFLICT_COMPUTED_READ_ONLY,
    ]
)

COMPUTED_OUTCOMES = frozenset(
    [COMPUTED_READ_ONLY, COMPUTED_WITH_DEFAULT, COMPUTED_UNKNOWN]
)


def classify_optional_computed(
    required: bool, read_only: bool, has_default: bool, computed_extension: bool
) -> str:
    """
    Decides how a property is computed from its four relevant flags.

    Args:
        required: The property is listed in the schema's required list.
        read_only: The property is marked readOnly.
        has_default: The property declares a default value.
        computed_extension: The property carries 'x-terraform-computed: true'.

    Returns:
        One of the outcome constants defined in this module. Outcomes listed in
        CONFLICTS describe an invalid combination.
    """
    if required and read_only:
        return CONFLICT_REQUIRED_READ_ONLY
    if required:
        # Required properties are provided by the user, so they are never computed.
        return NOT_COMPUTED
    if computed_extension:
        if read_only:
            return CONFLICT_COMPUTED_READ_ONLY
        if has_default:
            return CONFLICT_COMPUTED_WITH_DEFAULT
        return COMPUTED_UNKNOWN
    if has_default and not read_only:
        return COMPUTED_WITH_DEFAULT
    if read_only:
        return COMPUTED_READ_ONLY
    return NOT_COMPUTED


def is_optional_computed_property(
    required: bool, read_only: bool, has_default: bool, computed_extension: bool
) -> bool:
    """True for optional properties whose value the server determines without them being readOnly."""
    outcome = classify_optional_computed(
        required, read_only, has_default, computed_extension
    )
    return outcome in (COMPUTED_WITH_DEFAULT, COMPUTED_UNKNOWN)


def to_terraform_field_name(name: str) -> str:
    """Converts a property name into a terraform compliant snake_case field name."""
    return re.sub("_+", "_", to_snake_case(name))


class PropertyBuilder:
    """Builds PropertyDescriptor and SchemaDefinition objects from raw schemas."""

    def __init__(
        self,
        resolver: SchemaTypeResolver,
        max_depth: int = DEFAULT_MAX_SCHEMA_DEPTH,
    ):
        self.resolver = resolver
        self.max_depth = max_depth

    def build_schema_definition(
        self, schema: Dict[str, Any], depth: int = 0
    ) -> SchemaDefinition:
        """
        Builds the ordered property sequence of an object schema.

        Properties keep their declaration order. The schema's own `required` list
        decides which of them are required.

        Raises:
            SchemaTypeError: If the schema nests deeper than `max_depth`.
            SpecAnalyserError: If any of the properties fails to build.
        """
        if depth > self.max_depth:
            raise SchemaTypeError(
                f"schema nesting exceeds the maximum depth of {self.max_depth}, "
                "the definitions may contain a reference cycle"
            )
        required_names = schema.get("required") or []
        properties = []
        for name, property_schema in (schema.get("properties") or {}).items():
            properties.append(
                self.build_property(name, property_schema, required_names, depth)
            )
        return SchemaDefinition(properties=tuple(properties))

    def build_property(
        self,
        name: str,
        schema: Dict[str, Any],
        required_names: Optional[Iterable[str]] = None,
        depth: int = 0,
    ) -> PropertyDescriptor:
        """
        Converts one raw property schema into a PropertyDescriptor.

        Args:
            name: The property name as declared in the document.
            schema: The raw property schema.
            required_names: The `required` list of the schema containing the property.
            depth: Current nesting level, used to guard against reference cycles.

        Raises:
            SchemaTypeError: If the property type cannot be resolved.
            PropertyValidationError: If the flags violate the computed/readOnly rules.
            ExtensionError: If an extension carries a value of the wrong type.
        """
        if schema is None:
            raise SchemaTypeError(
                f"failed to process property '{name}': schema argument must not be nil"
            )
        try:
            schema_type = self.resolver.resolve(schema)
        except SchemaTypeError as e:
            if is_object_type(schema):
                raise SchemaTypeError(
                    f"failed to process object type property '{name}': {e}"
                ) from e
            if is_array_type(schema):
                raise SchemaTypeError(
                    f"failed to process array type property '{name}': {e}"
                ) from e
            raise

        extensions = PropertyExtensions.from_node(schema)
        required = name in set(required_names or [])
        read_only = bool(schema.get("readOnly", False))
        default = schema.get("default")

        outcome = classify_optional_computed(
            required, read_only, default is not None, extensions.computed
        )
        self._raise_for_conflict(name, outcome)

        nested_schema = None
        if schema_type.type == TYPE_OBJECT or (
            schema_type.type == TYPE_LIST and schema_type.item_type == TYPE_OBJECT
        ):
            nested_schema = self.build_schema_definition(
                schema_type.nested_schema, depth + 1
            )

        return PropertyDescriptor(
            name=name,
            preferred_name=to_terraform_field_name(extensions.field_name or name),
            type=schema_type.type,
            item_type=schema_type.item_type,
            nested_schema=nested_schema,
            required=required,
            read_only=read_only,
            computed=outcome in COMPUTED_OUTCOMES,
            force_new=extensions.force_new,
            sensitive=extensions.sensitive,
            immutable=extensions.immutable,
            is_identifier=extensions.is_identifier,
            is_status_identifier=extensions.is_status_identifier,
            default=None if outcome == COMPUTED_UNKNOWN else default,
        )

    def build_parent_property(self, name: str) -> PropertyDescriptor:
        """Builds the synthesised property holding the id of a parent resource."""
        return PropertyDescriptor(
            name=name,
            preferred_name=name,
            type=TYPE_STRING,
            required=False,
            read_only=True,
            computed=True,
        )

    def _raise_for_conflict(self, name: str, outcome: str):
        if outcome == CONFLICT_REQUIRED_READ_ONLY:
            raise PropertyValidationError(
                f"failed to process property '{name}': a required property cannot be readOnly too"
            )
        if outcome == CONFLICT_COMPUTED_WITH_DEFAULT:
            raise PropertyValidationError(
                f"optional computed property validation failed for property '{name}': "
                "optional computed properties with default attributes should not have "
                f"'{EXT_COMPUTED}' extension too"
            )
        if outcome == CONFLICT_COMPUTED_READ_ONLY:
            raise PropertyValidationError(
                f"optional computed property validation failed for property '{name}': "
                f"optional computed properties marked with '{EXT_COMPUTED}' can not be readOnly"
            )
        logger.debug("property '%s' classified as %s", name, outcome)
