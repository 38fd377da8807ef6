import logging
from typing import Any, Dict, Optional, Sequence

from .extensions import OperationExtensions
from .models import ResourceDescriptor, ResourceOperations, SchemaDefinition
from .naming import (
    get_parent_properties_names,
    get_parent_resource_info,
    get_resource_full_name,
)
from .polling import get_polling_config
from .property_builder import PropertyBuilder
from .timeouts import get_timeouts

logger = logging.getLogger(__name__)


def should_ignore_resource(root_path_item: Dict[str, Any]) -> bool:
    """True when the create operation carries 'x-terraform-exclude-resource: true'."""
    post = (root_path_item or {}).get("post")
    if post is None:
        return False
    return OperationExtensions.from_node(post).exclude_resource


def get_resource_override_host(post_operation: Optional[Dict[str, Any]]) -> str:
    """Returns the 'x-terraform-resource-host' of the create operation, or ''."""
    return OperationExtensions.from_node(post_operation).resource_host or ""


class ResourceBuilder:
    """Assembles a ResourceDescriptor from a compliant root/instance path pair."""

    def __init__(
        self,
        property_builder: PropertyBuilder,
        append_version_to_override: bool = False,
    ):
        self.property_builder = property_builder
        self.append_version_to_override = append_version_to_override

    def build(
        self,
        root_path: str,
        root_path_item: Dict[str, Any],
        instance_path: str,
        instance_path_item: Dict[str, Any],
        payload_schema: Dict[str, Any],
        region: Optional[str] = None,
        regions: Sequence[str] = (),
        host: Optional[str] = None,
    ) -> ResourceDescriptor:
        """
        Builds the descriptor of one resource.

        Args:
            root_path: The collection path, e.g. '/v1/cdns'.
            root_path_item: The raw path item of the root path.
            instance_path: The instance path, e.g. '/v1/cdns/{id}'.
            instance_path_item: The raw path item of the instance path.
            payload_schema: The resolved POST body schema.
            region: Region name for multi-region resources. It is appended to the name.
            regions: All the regions of a multi-region resource.
            host: Host to use instead of the POST host override, e.g. the region
                specific host of a multi-region resource.

        Returns:
            The assembled ResourceDescriptor.

        Raises:
            SpecAnalyserError: If the name, schema, polling or timeouts cannot be built.
        """
        post_extensions = OperationExtensions.from_node(root_path_item.get("post"))
        name = get_resource_full_name(
            root_path,
            post_extensions.resource_name,
            self.append_version_to_override,
        )
        if region:
            name = f"{name}_{region}"

        schema = self.build_resource_schema(root_path, payload_schema)
        operations = ResourceOperations(
            post=root_path_item.get("post"),
            get=instance_path_item.get("get"),
            put=instance_path_item.get("put"),
            delete=instance_path_item.get("delete"),
        )
        return ResourceDescriptor(
            name=name,
            root_path=root_path,
            instance_path=instance_path,
            schema=schema,
            operations=operations,
            polling=get_polling_config(operations),
            timeouts=get_timeouts(operations),
            parent_info=get_parent_resource_info(root_path),
            region=region,
            regions=tuple(regions),
            host=host or post_extensions.resource_host or None,
        )

    def build_resource_schema(
        self, root_path: str, payload_schema: Dict[str, Any]
    ) -> SchemaDefinition:
        """
        Builds the resource schema. Sub-resources get one '<parent>_id' property
        per ancestor appended after the declared properties.
        """
        schema = self.property_builder.build_schema_definition(payload_schema)
        parent_properties = [
            self.property_builder.build_parent_property(name)
            for name in get_parent_properties_names(root_path)
        ]
        if parent_properties:
            logger.debug(
                "adding parent properties %s to sub-resource '%s'",
                [prop.name for prop in parent_properties],
                root_path,
            )
        return SchemaDefinition(properties=schema.properties + tuple(parent_properties))
