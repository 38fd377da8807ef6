"""
Typed views over the `x-terraform-*` vendor extensions.

Each OpenAPI node that may carry extensions (a property schema, an operation or a
response) is parsed once into one of the Pydantic models below, so the rest of
the analyser reads attributes instead of probing raw dictionaries by key.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, StrictBool, ValidationError, field_validator

from .errors import ExtensionError
from .helpers import split_comma_separated

EXTENSION_PREFIX = "x-terraform-"

EXT_FIELD_NAME = "x-terraform-field-name"
EXT_FORCE_NEW = "x-terraform-force-new"
EXT_SENSITIVE = "x-terraform-sensitive"
EXT_ID = "x-terraform-id"
EXT_IMMUTABLE = "x-terraform-immutable"
EXT_FIELD_STATUS = "x-terraform-field-status"
EXT_COMPUTED = "x-terraform-computed"

EXT_EXCLUDE_RESOURCE = "x-terraform-exclude-resource"
EXT_RESOURCE_NAME = "x-terraform-resource-name"
EXT_RESOURCE_HOST = "x-terraform-resource-host"
EXT_RESOURCE_TIMEOUT = "x-terraform-resource-timeout"

EXT_POLL_ENABLED = "x-terraform-resource-poll-enabled"
EXT_POLL_COMPLETED_STATUSES = "x-terraform-resource-poll-completed-statuses"
EXT_POLL_PENDING_STATUSES = "x-terraform-resource-poll-pending-statuses"

# Root level extension listing the regions for a given host keyword.
EXT_RESOURCE_REGIONS_FMT = "x-terraform-resource-regions-%s"


class _ExtensionModel(BaseModel):
    """Base model that knows how to pick its extensions out of a raw node."""

    class Config:
        populate_by_name = True
        frozen = True

    @classmethod
    def from_node(cls, node: Optional[Dict[str, Any]]):
        """
        Builds the model from the vendor extensions found on a raw OpenAPI node.

        Keys outside the `x-terraform-` namespace and extensions explicitly set to
        null are ignored.

        Raises:
            ExtensionError: If an extension holds a value of an unexpected type.
        """
        raw = {
            key: value
            for key, value in (node or {}).items()
            if isinstance(key, str)
            and key.startswith(EXTENSION_PREFIX)
            and value is not None
        }
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise ExtensionError(f"invalid vendor extension value: {e}") from e


class PropertyExtensions(_ExtensionModel):
    """Extensions recognised on a property schema."""

    # Preferred terraform field name for the property.
    field_name: Optional[str] = Field(default=None, alias=EXT_FIELD_NAME)
    force_new: StrictBool = Field(default=False, alias=EXT_FORCE_NEW)
    sensitive: StrictBool = Field(default=False, alias=EXT_SENSITIVE)
    # Marks the property as the resource identifier, taking precedence over 'id'.
    is_identifier: StrictBool = Field(default=False, alias=EXT_ID)
    immutable: StrictBool = Field(default=False, alias=EXT_IMMUTABLE)
    # Marks the property holding the resource status used while polling.
    is_status_identifier: StrictBool = Field(default=False, alias=EXT_FIELD_STATUS)
    # Optional property whose value is only known once the resource is created.
    computed: StrictBool = Field(default=False, alias=EXT_COMPUTED)


class OperationExtensions(_ExtensionModel):
    """Extensions recognised on an operation (post, get, put, delete)."""

    exclude_resource: StrictBool = Field(default=False, alias=EXT_EXCLUDE_RESOURCE)
    resource_name: Optional[str] = Field(default=None, alias=EXT_RESOURCE_NAME)
    resource_host: Optional[str] = Field(default=None, alias=EXT_RESOURCE_HOST)
    resource_timeout: Optional[str] = Field(default=None, alias=EXT_RESOURCE_TIMEOUT)


class ResponseExtensions(_ExtensionModel):
    """Extensions recognised on an operation response."""

    poll_enabled: StrictBool = Field(default=False, alias=EXT_POLL_ENABLED)
    poll_completed_statuses: List[str] = Field(
        default_factory=list, alias=EXT_POLL_COMPLETED_STATUSES
    )
    poll_pending_statuses: List[str] = Field(
        default_factory=list, alias=EXT_POLL_PENDING_STATUSES
    )

    @field_validator("poll_completed_statuses", "poll_pending_statuses", mode="before")
    def split_statuses(cls, v):
        # Statuses are declared as a comma separated string, e.g. "deployed, done".
        if isinstance(v, str):
            return split_comma_separated(v)
        return v
