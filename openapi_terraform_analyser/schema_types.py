from typing import Any, Dict, List, Optional

from .errors import SchemaTypeError
from .helpers import (
    DEFINITIONS_REF_PREFIX,
    OPENAPI_TO_PROPERTY_TYPE_MAP,
    TYPE_LIST,
    TYPE_OBJECT,
)
from .models import SchemaType


def get_schema_types(schema: Dict[str, Any]) -> List[str]:
    """Returns the 'type' of a schema node as a list, since OpenAPI allows both forms."""
    types = schema.get("type")
    if types is None:
        return []
    if isinstance(types, str):
        return [types]
    return list(types)


def is_of_type(schema: Dict[str, Any], type_name: str) -> bool:
    return type_name in get_schema_types(schema)


def is_object_type(schema: Dict[str, Any]) -> bool:
    """An object is either explicitly typed or an untyped node carrying a $ref."""
    if is_of_type(schema, "object"):
        return True
    return not get_schema_types(schema) and bool(schema.get("$ref"))


def is_array_type(schema: Dict[str, Any]) -> bool:
    return is_of_type(schema, "array")


class SchemaTypeResolver:
    """
    Classifies raw schema nodes into semantic property types, resolving local
    `$ref` pointers against the document's definitions table.
    """

    def __init__(self, definitions: Optional[Dict[str, Any]] = None):
        """
        Args:
            definitions: The `definitions` section of the OpenAPI document.
        """
        self.definitions = definitions or {}

    def get_payload_def_name(self, ref: str) -> str:
        """
        Extracts the definition name out of a local reference.

        Args:
            ref: A reference such as '#/definitions/ContentDeliveryNetworkV1'.

        Returns:
            The definition name, e.g. 'ContentDeliveryNetworkV1'.

        Raises:
            SchemaTypeError: If the reference does not point into the local definitions.
        """
        if not ref or not ref.startswith(DEFINITIONS_REF_PREFIX):
            raise SchemaTypeError(
                f"ref '{ref}' is not a local definition reference, only refs with the "
                f"format '{DEFINITIONS_REF_PREFIX}<name>' are supported"
            )
        name = ref[len(DEFINITIONS_REF_PREFIX) :]
        if not name or "/" in name:
            raise SchemaTypeError(f"ref '{ref}' does not name a single definition")
        return name

    def get_schema_by_ref(self, ref: str) -> Dict[str, Any]:
        """
        Resolves a local `$ref` to its schema definition.

        Raises:
            SchemaTypeError: If the reference is malformed or its target does not exist.
        """
        name = self.get_payload_def_name(ref)
        schema = self.definitions.get(name)
        if schema is None:
            raise SchemaTypeError(
                f"missing schema definition in the swagger file with the supplied ref '{ref}'"
            )
        return schema

    def get_schema_definition(self, schema: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Returns the schema itself, or the definition it references."""
        if schema is None:
            raise SchemaTypeError("schema argument must not be nil")
        ref = schema.get("$ref")
        if ref:
            return self.get_schema_by_ref(ref)
        return schema

    def resolve(self, schema: Dict[str, Any]) -> SchemaType:
        """
        Classifies a raw schema node.

        Returns:
            A SchemaType. Objects and lists of objects carry the resolved nested
            raw schema so callers can build nested properties from it.

        Raises:
            SchemaTypeError: If the type is unsupported or a nested schema cannot be
                resolved.
        """
        if is_object_type(schema):
            return SchemaType(
                type=TYPE_OBJECT, nested_schema=self._resolve_object_schema(schema)
            )
        if is_array_type(schema):
            return self._resolve_array(schema)
        for type_name in get_schema_types(schema):
            if type_name in OPENAPI_TO_PROPERTY_TYPE_MAP:
                return SchemaType(type=OPENAPI_TO_PROPERTY_TYPE_MAP[type_name])
        raise SchemaTypeError(
            f"non supported '[{' '.join(get_schema_types(schema))}]' type"
        )

    def _resolve_object_schema(self, schema: Dict[str, Any]) -> Dict[str, Any]:
        ref = schema.get("$ref")
        if ref:
            try:
                return self.get_schema_by_ref(ref)
            except SchemaTypeError as e:
                raise SchemaTypeError(
                    f"object ref is pointing to a non existing schema definition: {e}"
                ) from e
        if schema.get("properties"):
            return schema
        raise SchemaTypeError(
            "object is missing the nested schema definition or the ref is pointing "
            "to a non existing schema definition"
        )

    def _resolve_array(self, schema: Dict[str, Any]) -> SchemaType:
        items = schema.get("items")
        if isinstance(items, list):
            # Tuple style items are only accepted when they describe a single schema.
            items = items[0] if len(items) == 1 else None
        if not items:
            raise SchemaTypeError("array property is missing items schema definition")
        if is_array_type(items):
            raise SchemaTypeError("array property can not have items of type 'array'")
        if is_object_type(items):
            return SchemaType(
                type=TYPE_LIST,
                item_type=TYPE_OBJECT,
                nested_schema=self._resolve_object_schema(items),
            )
        for type_name in get_schema_types(items):
            if type_name in OPENAPI_TO_PROPERTY_TYPE_MAP:
                return SchemaType(
                    type=TYPE_LIST, item_type=OPENAPI_TO_PROPERTY_TYPE_MAP[type_name]
                )
        raise SchemaTypeError(
            f"non supported array items '[{' '.join(get_schema_types(items))}]' type"
        )
