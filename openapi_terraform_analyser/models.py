"""
This module defines the core data structures produced by the analyser.

Descriptors are frozen dataclasses: a resource model is built once per analysis
pass over a loaded document and is never mutated afterwards. Operations are kept
as references to the raw operation dictionaries of the loaded document rather
than copies.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from .helpers import DEFAULT_IDENTIFIER, DEFAULT_STATUS_IDENTIFIER


@dataclass(frozen=True)
class SchemaType:
    """
    The semantic type of a raw schema node, as classified by the SchemaTypeResolver.
    """

    type: str  # One of the TYPE_* constants in helpers
    item_type: Optional[str] = None  # Only set for lists
    # Resolved raw schema for objects and lists of objects
    nested_schema: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class PropertyDescriptor:
    """Normalised description of a single resource property."""

    name: str
    type: str
    preferred_name: str = ""
    item_type: Optional[str] = None
    nested_schema: Optional["SchemaDefinition"] = None
    required: bool = False
    read_only: bool = False
    computed: bool = False
    force_new: bool = False
    sensitive: bool = False
    immutable: bool = False
    is_identifier: bool = False
    is_status_identifier: bool = False
    default: Any = None

    @property
    def terraform_name(self) -> str:
        return self.preferred_name or self.name

    @property
    def is_optional(self) -> bool:
        return not self.required


@dataclass(frozen=True)
class SchemaDefinition:
    """An ordered sequence of properties describing a resource or nested object."""

    properties: Tuple[PropertyDescriptor, ...] = ()

    def __iter__(self):
        return iter(self.properties)

    def __len__(self):
        return len(self.properties)

    def get_property(self, name: str) -> Optional[PropertyDescriptor]:
        """Looks a property up by its original or preferred name."""
        for prop in self.properties:
            if prop.name == name or prop.terraform_name == name:
                return prop
        return None

    def get_identifier(self) -> Optional[PropertyDescriptor]:
        """
        Returns the property that uniquely identifies the resource.

        A property flagged with the identifier extension wins over a property
        literally named 'id'.
        """
        fallback = None
        for prop in self.properties:
            if prop.is_identifier:
                return prop
            if prop.name == DEFAULT_IDENTIFIER:
                fallback = prop
        return fallback

    def get_status_identifier(self) -> Optional[PropertyDescriptor]:
        """
        Returns the property holding the resource status.

        A property flagged with the status extension wins over a property
        literally named 'status'.
        """
        fallback = None
        for prop in self.properties:
            if prop.is_status_identifier:
                return prop
            if prop.name == DEFAULT_STATUS_IDENTIFIER:
                fallback = prop
        return fallback

    def get_immutable_properties(self) -> List[str]:
        # The identifier never changes anyway, so it is never reported.
        return [
            prop.name
            for prop in self.properties
            if prop.immutable and prop.name != DEFAULT_IDENTIFIER
        ]


@dataclass(frozen=True)
class PollingConfig:
    """Polling behaviour declared on a single operation response code."""

    enabled: bool = False
    target_statuses: Tuple[str, ...] = ()
    pending_statuses: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Timeouts:
    """Per operation timeouts; None means the extension was not declared."""

    post: Optional[timedelta] = None
    get: Optional[timedelta] = None
    put: Optional[timedelta] = None
    delete: Optional[timedelta] = None


@dataclass(frozen=True)
class ResourceOperations:
    """References to the raw operations backing a resource's lifecycle."""

    post: Optional[Dict[str, Any]] = None
    get: Optional[Dict[str, Any]] = None
    put: Optional[Dict[str, Any]] = None
    delete: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class ParentResourceInfo:
    """
    Nesting information for a sub-resource. All lists are ordered from the
    outermost ancestor to the nearest one.
    """

    parent_resource_names: Tuple[str, ...]
    full_parent_resource_name: str
    parent_uris: Tuple[str, ...]  # e.g. ('/v1/cdns',)
    parent_instance_uris: Tuple[str, ...]  # e.g. ('/v1/cdns/{id}',)


@dataclass(frozen=True)
class ResourceDescriptor:
    """A terraform compliant resource discovered in the OpenAPI document."""

    name: str
    root_path: str
    instance_path: str
    schema: SchemaDefinition
    operations: ResourceOperations = field(default_factory=ResourceOperations)
    # Operation name ('post', 'put', ...) -> response status code -> polling config
    polling: Dict[str, Dict[str, PollingConfig]] = field(default_factory=dict)
    timeouts: Timeouts = field(default_factory=Timeouts)
    parent_info: Optional[ParentResourceInfo] = None
    # Only set for multi-region resources
    region: Optional[str] = None
    # Every region the resource is deployed to, shared by all its per-region descriptors
    regions: Tuple[str, ...] = ()
    host: Optional[str] = None

    @property
    def parent_resource_names(self) -> List[str]:
        if self.parent_info is None:
            return []
        return list(self.parent_info.parent_resource_names)

    @property
    def is_sub_resource(self) -> bool:
        return self.parent_info is not None

    @property
    def is_multi_region(self) -> bool:
        return self.region is not None

    def get_immutable_properties(self) -> List[str]:
        return self.schema.get_immutable_properties()

    def get_polling_config(self, operation: str, status_code) -> PollingConfig:
        """Returns the polling config for a response, disabled when not declared."""
        return self.polling.get(operation, {}).get(str(status_code), PollingConfig())
