from typing import Any, Dict, Optional

from .extensions import ResponseExtensions
from .helpers import RESOURCE_OPERATIONS
from .models import PollingConfig, ResourceOperations


def create_polling_config(response: Optional[Dict[str, Any]]) -> PollingConfig:
    """Reads the polling extensions declared on a single response."""
    extensions = ResponseExtensions.from_node(response)
    return PollingConfig(
        enabled=extensions.poll_enabled,
        target_statuses=tuple(extensions.poll_completed_statuses),
        pending_statuses=tuple(extensions.poll_pending_statuses),
    )


def create_responses(operation: Optional[Dict[str, Any]]) -> Dict[str, PollingConfig]:
    """
    Maps each declared response status code of an operation to its polling config.

    Status codes are normalised to strings since YAML documents may declare them
    as integers. The 'default' response is not a status code and is skipped.
    """
    if operation is None:
        return {}
    responses = {}
    for status_code, response in (operation.get("responses") or {}).items():
        if str(status_code) == "default":
            continue
        responses[str(status_code)] = create_polling_config(response)
    return responses


def get_polling_config(
    operations: ResourceOperations,
) -> Dict[str, Dict[str, PollingConfig]]:
    """Collects the polling configuration of every operation backing a resource."""
    polling = {}
    for name in RESOURCE_OPERATIONS:
        operation = getattr(operations, name)
        if operation is not None:
            polling[name] = create_responses(operation)
    return polling
