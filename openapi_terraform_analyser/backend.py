"""
Backend configuration of an OpenAPI document and the URL builders that combine
it with a resource's paths.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import UrlBuildError
from .models import ResourceDescriptor
from .naming import get_resource_path

DEFAULT_SCHEME = "http"
PREFERRED_SCHEME = "https"


@dataclass(frozen=True)
class BackendConfiguration:
    """The document level host, base path and schemes used to reach the API."""

    host: str = ""
    base_path: str = ""
    http_schemes: List[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "BackendConfiguration":
        return cls(
            host=document.get("host") or "",
            base_path=document.get("basePath") or "",
            http_schemes=list(document.get("schemes") or []),
        )

    def get_http_scheme(self) -> str:
        """Prefers https when declared, otherwise falls back to http."""
        if PREFERRED_SCHEME in self.http_schemes:
            return PREFERRED_SCHEME
        return DEFAULT_SCHEME


def build_url(host: str, base_path: str, path: str, http_schemes: List[str]) -> str:
    """
    Builds an absolute URL.

    A base path of '/' or '' is omitted, and a leading slash is added to the base
    path and the path when missing.

    Raises:
        UrlBuildError: If the host or the path is empty.
    """
    if not host:
        raise UrlBuildError("host must not be empty")
    if not path:
        raise UrlBuildError("path must not be empty")
    scheme = BackendConfiguration(http_schemes=http_schemes).get_http_scheme()
    if base_path and base_path != "/":
        if not base_path.startswith("/"):
            base_path = "/" + base_path
        base_path = base_path.rstrip("/")
    else:
        base_path = ""
    if not path.startswith("/"):
        path = "/" + path
    return f"{scheme}://{host}{base_path}{path}"


def get_resource_url(
    resource: ResourceDescriptor,
    backend: BackendConfiguration,
    parent_ids: Optional[List[str]] = None,
) -> str:
    """
    Returns the collection URL of a resource.

    Sub-resources need the ids of their parents, ordered from the outermost one.
    A resource host override (multi-region resources) replaces the document host.
    """
    path = get_resource_path(resource.root_path, parent_ids)
    host = resource.host or backend.host
    return build_url(host, backend.base_path, path, backend.http_schemes)


def get_resource_instance_url(
    resource: ResourceDescriptor,
    backend: BackendConfiguration,
    resource_id: str,
    parent_ids: Optional[List[str]] = None,
) -> str:
    """Returns the URL of a single resource instance."""
    if not resource_id:
        raise UrlBuildError("resource id must not be empty")
    url = get_resource_url(resource, backend, parent_ids)
    return f"{url.rstrip('/')}/{resource_id}"
