import logging
from typing import Any, Dict, Optional, Tuple

from .errors import ResourceComplianceError, SchemaTypeError
from .extensions import EXT_ID, PropertyExtensions
from .helpers import DEFAULT_IDENTIFIER, DEFINITIONS_REF_PREFIX, RESOURCE_INSTANCE_REGEX
from .schema_types import SchemaTypeResolver

logger = logging.getLogger(__name__)


class PathClassifier:
    """
    Decides whether the paths of an OpenAPI document follow the CRUD resource
    convention: a root path exposing POST (e.g. '/users') paired with an
    instance path exposing GET (e.g. '/users/{id}').
    """

    def __init__(
        self,
        paths: Dict[str, Any],
        resolver: SchemaTypeResolver,
        parameters: Optional[Dict[str, Any]] = None,
    ):
        """
        Initializes the classifier.

        Args:
            paths: The `paths` section of the OpenAPI document.
            resolver: Resolver used to follow body schema references.
            parameters: The root level `parameters` section, used to resolve
                parameter references.
        """
        self.paths = paths or {}
        self.resolver = resolver
        self.parameters = parameters or {}

    def is_resource_instance_endpoint(self, path: str) -> bool:
        """Checks if the given path is of form /resource/{id}."""
        return bool(RESOURCE_INSTANCE_REGEX.match(path or ""))

    def path_exists(self, path: str) -> Tuple[bool, Dict[str, Any]]:
        """Looks a path up, falling back to the same path with a trailing slash."""
        if path in self.paths:
            return True, self.paths[path]
        logger.debug(
            "path %s not found, falling back to checking if the path with trailing slash %s/ exists",
            path,
            path,
        )
        if path + "/" in self.paths:
            return True, self.paths[path + "/"]
        return False, {}

    def post_defined(self, root_path: str) -> bool:
        path_item = self.paths.get(root_path)
        return bool(path_item) and path_item.get("post") is not None

    def find_matching_resource_root_path(self, instance_path: str) -> str:
        """
        Returns the root path matching an instance path.

        Given '/users/{id}', the result is '/users/' or '/users' depending on how
        the root is declared in the document. The trailing slash variant is
        probed first.

        Raises:
            ResourceComplianceError: If neither variant is declared.
        """
        match = RESOURCE_INSTANCE_REGEX.match(instance_path or "")
        if not match:
            raise ResourceComplianceError(
                f"resource instance path '{instance_path}' missing valid resource root path"
            )
        root_path = match.group(1)
        if root_path in self.paths:
            logger.debug("found resource root path with trailing '/' - %s", root_path)
            return root_path
        root_path = root_path.rstrip("/")
        if root_path in self.paths:
            logger.debug("found resource root path without trailing '/' - %s", root_path)
            return root_path
        raise ResourceComplianceError(
            f"resource instance path '{instance_path}' missing resource root path"
        )

    def validate_instance_path(self, path: str):
        if not self.is_resource_instance_endpoint(path):
            raise ResourceComplianceError(
                f"path '{path}' is not a resource instance path"
            )
        if (self.paths.get(path) or {}).get("get") is None:
            raise ResourceComplianceError(
                f"resource instance path '{path}' missing required GET operation"
            )

    def validate_root_path(
        self, instance_path: str
    ) -> Tuple[str, Dict[str, Any], Dict[str, Any]]:
        """
        Finds and validates the root path of an instance path.

        Returns:
            A tuple of (root path, root path item, POST payload schema).

        Raises:
            ResourceComplianceError: If the root is missing, has no POST, or the POST
                body does not resolve to a schema with properties.
        """
        root_path = self.find_matching_resource_root_path(instance_path)
        if not self.post_defined(root_path):
            raise ResourceComplianceError(
                f"resource root path '{root_path}' missing required POST operation"
            )
        root_path_item = self.paths[root_path]
        try:
            payload_schema = self.get_body_parameter_schema(root_path_item["post"])
        except (ResourceComplianceError, SchemaTypeError) as e:
            raise ResourceComplianceError(
                f"resource root path '{root_path}' POST operation validation error: {e}"
            ) from e
        return root_path, root_path_item, payload_schema

    def get_body_parameter_schema(self, post_operation: Dict[str, Any]) -> Dict[str, Any]:
        """
        Returns the schema of the single 'body' parameter of a POST operation.

        Local '#/definitions/...' references are resolved. Any other reference is
        expected to have been expanded by the document loader already.
        """
        if post_operation is None:
            raise ResourceComplianceError(
                "resource root operation does not have a POST operation"
            )
        body_parameters = [
            parameter
            for parameter in self._get_parameters(post_operation)
            if parameter.get("in") == "body"
        ]
        if not body_parameters:
            raise ResourceComplianceError(
                "resource root operation missing the body parameter"
            )
        if len(body_parameters) > 1:
            raise ResourceComplianceError(
                "resource root operation contains multiple 'body' parameters"
            )

        schema = body_parameters[0].get("schema")
        if schema is None:
            raise ResourceComplianceError(
                "resource root operation missing the schema for the POST operation body parameter"
            )
        ref = schema.get("$ref")
        if ref:
            if not ref.startswith(DEFINITIONS_REF_PREFIX):
                raise ResourceComplianceError(
                    "the operation ref was not expanded properly, check that the ref "
                    "is valid (no cycles, bogus, etc)"
                )
            schema = self.resolver.get_schema_by_ref(ref)

        if schema.get("properties"):
            return schema
        raise ResourceComplianceError(
            "POST operation contains a schema with no properties"
        )

    def validate_resource_schema_definition(self, schema: Dict[str, Any]):
        """Checks the payload schema has a property that uniquely identifies the resource."""
        for name, property_schema in (schema.get("properties") or {}).items():
            if name == DEFAULT_IDENTIFIER:
                return
            if PropertyExtensions.from_node(property_schema).is_identifier:
                return
        raise ResourceComplianceError(
            "resource schema is missing a property that uniquely identifies the resource, "
            f"either a property named '{DEFAULT_IDENTIFIER}' or a property with the "
            f"extension '{EXT_ID}' set to true"
        )

    def is_endpoint_fully_resource_compliant(
        self, path: str
    ) -> Tuple[str, Dict[str, Any], Dict[str, Any]]:
        """
        Runs all compliance checks on a candidate instance path.

        The path must be an instance path exposing GET, its root path must expose
        POST with a single body parameter referencing a schema with properties,
        and that schema must contain an identifier property.

        Returns:
            A tuple of (root path, root path item, POST payload schema).

        Raises:
            SpecAnalyserError: The first check that fails.
        """
        self.validate_instance_path(path)
        root_path, root_path_item, payload_schema = self.validate_root_path(path)
        self.validate_resource_schema_definition(payload_schema)
        return root_path, root_path_item, payload_schema

    def _get_parameters(self, operation: Dict[str, Any]):
        for parameter in operation.get("parameters") or []:
            # Parameters can be defined directly or via a $ref.
            ref = parameter.get("$ref")
            if ref:
                parameter = self.parameters.get(ref.split("/")[-1])
                if parameter is None:
                    logger.debug("skipping unresolvable parameter ref %s", ref)
                    continue
            yield parameter
