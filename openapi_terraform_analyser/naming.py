"""
Derives resource names and nesting information from resource paths.

Naming rules, illustrated on root paths:

    /cdns                                     -> cdns
    /v1/cdns                                  -> cdns_v1
    /cdns/{id}/v1/firewalls                   -> cdns_firewalls_v1
    /v1/cdns/{id}/v2/firewalls/{id}/v3/rules  -> cdns_v1_firewalls_v2_rules_v3

A name token takes the version of the segment right before it, if that segment
is a bare version token (e.g. 'v2'). Sub-resource ancestors are the name tokens
immediately followed by a path parameter.
"""

import re
from typing import List, Optional, Tuple

from .errors import ResourceNameError, ResourcePathError
from .helpers import (
    PATH_PARAM_PLACEHOLDER_REGEX,
    RESOURCE_INSTANCE_REGEX,
    is_path_param,
    is_version_token,
)
from .models import ParentResourceInfo


def _split_path(path: str) -> List[str]:
    return [segment for segment in (path or "").split("/") if segment]


def _versioned(name: str, segments: List[str], index: int) -> str:
    # Appends the version token found immediately before segments[index], if any.
    if index >= 1 and is_version_token(segments[index - 1]):
        return f"{name}_{segments[index - 1]}"
    return name


def build_resource_name(
    path: str,
    name_override: Optional[str] = None,
    append_version_to_override: bool = False,
) -> str:
    """
    Builds the resource's own (non parent-prefixed) name from its root path.

    Args:
        path: The resource root path, e.g. '/v1/cdns/{id}/v2/firewalls'.
        name_override: Value of the 'x-terraform-resource-name' extension, if any.
        append_version_to_override: Whether the path version should still be
            appended to an overridden name.

    Returns:
        The versioned resource name, e.g. 'firewalls_v2'.

    Raises:
        ResourceNameError: If the path is empty or does not end with a resource name.
    """
    segments = _split_path(path)
    if not segments:
        raise ResourceNameError(
            f"could not build the resource name for path '{path}': path is empty"
        )
    last = segments[-1]
    if is_path_param(last) or is_version_token(last):
        raise ResourceNameError(
            f"could not build the resource name for path '{path}': a resource root "
            "path must end with the resource name"
        )
    if name_override:
        if append_version_to_override:
            return _versioned(name_override, segments, len(segments) - 1)
        return name_override
    return _versioned(last, segments, len(segments) - 1)


def get_parent_resource_info(path: str) -> Optional[ParentResourceInfo]:
    """
    Computes the ancestors of a sub-resource root path.

    Returns:
        A ParentResourceInfo ordered from the outermost ancestor to the nearest
        one, or None if the path is not a sub-resource.
    """
    segments = _split_path(path)
    names, parent_uris, parent_instance_uris = [], [], []
    for index, segment in enumerate(segments[:-1]):
        if not is_path_param(segment) or index == 0:
            continue
        parent = segments[index - 1]
        if is_path_param(parent) or is_version_token(parent):
            continue
        names.append(_versioned(parent, segments, index - 1))
        parent_uris.append("/" + "/".join(segments[:index]))
        parent_instance_uris.append("/" + "/".join(segments[: index + 1]))
    if not names:
        return None
    return ParentResourceInfo(
        parent_resource_names=tuple(names),
        full_parent_resource_name="_".join(names),
        parent_uris=tuple(parent_uris),
        parent_instance_uris=tuple(parent_instance_uris),
    )


def is_sub_resource(path: str) -> Tuple[bool, List[str], str]:
    """
    Checks whether a root path is nested under one or more parent resources.

    Returns:
        A tuple of (is sub-resource, parent resource names, parent names joined
        with '_'). For '/v1/cdns/{id}/v2/firewalls' this is
        (True, ['cdns_v1'], 'cdns_v1').
    """
    info = get_parent_resource_info(path)
    if info is None:
        return False, [], ""
    return True, list(info.parent_resource_names), info.full_parent_resource_name


def get_resource_full_name(
    path: str,
    name_override: Optional[str] = None,
    append_version_to_override: bool = False,
) -> str:
    """Builds the parent-prefixed name used to register the resource."""
    name = build_resource_name(path, name_override, append_version_to_override)
    _, _, full_parent_name = is_sub_resource(path)
    if full_parent_name:
        return f"{full_parent_name}_{name}"
    return name


def get_parent_properties_names(path: str) -> List[str]:
    """Returns the '<parent>_id' property names injected into a sub-resource schema."""
    _, parent_names, _ = is_sub_resource(path)
    return [f"{name}_id" for name in parent_names]


def get_resource_path(path: str, parent_ids: Optional[List[str]] = None) -> str:
    """
    Resolves a sub-resource path template with concrete parent ids.

    Args:
        path: The root path template, e.g. '/v1/cdns/{cdn_id}/v1/firewalls'.
        parent_ids: Parent ids ordered from the outermost ancestor inwards.

    Returns:
        The resolved path, e.g. '/v1/cdns/1234/v1/firewalls'.

    Raises:
        ResourcePathError: If the number of ids does not match the number of
            path parameters.
    """
    ids = list(parent_ids or [])
    placeholders = PATH_PARAM_PLACEHOLDER_REGEX.findall(path)
    if len(ids) < len(placeholders):
        raise ResourcePathError(
            f"could not resolve sub-resource path correctly '{path}' ({placeholders}) "
            f"with the given ids - missing ids to resolve the path params properly: {ids}"
        )
    if len(ids) > len(placeholders):
        raise ResourcePathError(
            f"could not resolve sub-resource path correctly '{path}' ({placeholders}) "
            f"with the given ids - more ids than path params: {ids}"
        )
    # Single pass, so an id that looks like a placeholder is never substituted again.
    remaining = iter(ids)
    return PATH_PARAM_PLACEHOLDER_REGEX.sub(lambda _: str(next(remaining)), path)


def get_resource_name(instance_path: str) -> str:
    """
    Derives a resource name straight from an instance path.

    The name is the last segment of the root part of the path, suffixed with the
    first version token found anywhere in the path. For example
    '/api/v1/nodes/{name}/proxy/{path}' gives 'proxy_v1'.

    Raises:
        ResourceNameError: If the path is not a resource instance path.
    """
    match = RESOURCE_INSTANCE_REGEX.match(instance_path or "")
    if not match:
        raise ResourceNameError(
            f"path '{instance_path}' is not a resource instance path"
        )
    name = _split_path(match.group(1))[-1]
    version = re.search(r"/(v\d+)/", instance_path)
    if version:
        return f"{name}_{version.group(1)}"
    return name
