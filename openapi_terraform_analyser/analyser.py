"""
This is the main orchestrator of the resource analysis.

It walks the path table of a loaded OpenAPI 2.0 document, keeps the paths that
follow the CRUD resource convention, and assembles one ResourceDescriptor per
compliant resource (or one per region for multi-region resources). Errors of a
single path never abort the analysis: they are logged, collected, and the path
is skipped.
"""

import logging
import re
import time
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from .backend import BackendConfiguration
from .config import AnalyserSettings
from .errors import MultiRegionError, ResourceComplianceError, SpecAnalyserError
from .extensions import EXT_RESOURCE_REGIONS_FMT
from .helpers import ValidationErrorCollector, split_comma_separated
from .loader import load_document
from .models import ResourceDescriptor
from .path_classifier import PathClassifier
from .property_builder import PropertyBuilder
from .resource import ResourceBuilder, get_resource_override_host, should_ignore_resource
from .schema_types import SchemaTypeResolver

logger = logging.getLogger(__name__)

# Matches parametrized hosts such as 'some.api.${region}.domain.com'.
MULTI_REGION_HOST_REGEX = re.compile(r"^(\S*)(\$\{(\S+?)\})(\S*)$")


class SpecAnalyser:
    """Derives terraform compliant resources from an OpenAPI 2.0 document."""

    def __init__(
        self,
        document: Dict[str, Any],
        settings: Optional[AnalyserSettings] = None,
        collector: Optional[ValidationErrorCollector] = None,
    ):
        """
        Initializes the analyser with an already loaded document.

        Args:
            document: The parsed OpenAPI document.
            settings: Analyser settings, defaults are used when omitted.
            collector: Collects the reasons why classified resources were skipped.
        """
        self.document = document or {}
        self.settings = settings or AnalyserSettings()
        self.collector = collector or ValidationErrorCollector()

        self.resolver = SchemaTypeResolver(self.document.get("definitions"))
        self.classifier = PathClassifier(
            self.paths, self.resolver, self.document.get("parameters")
        )
        self.resource_builder = ResourceBuilder(
            PropertyBuilder(self.resolver, self.settings.max_schema_depth),
            append_version_to_override=self.settings.append_version_to_override,
        )

    @classmethod
    def from_file(
        cls,
        location: str,
        settings: Optional[AnalyserSettings] = None,
        insecure_skip_verify: bool = False,
    ) -> "SpecAnalyser":
        """Creates an analyser for a document stored on disk or served over http(s)."""
        return cls(load_document(location, insecure_skip_verify), settings)

    @property
    def paths(self) -> Dict[str, Any]:
        return self.document.get("paths") or {}

    def get_backend_configuration(self) -> BackendConfiguration:
        return BackendConfiguration.from_document(self.document)

    def get_resources_info(self) -> List[ResourceDescriptor]:
        """
        Returns all terraform compliant resources found in the document.

        The result is sorted by resource name. A document without compliant
        resources yields an empty list.
        """
        start = time.monotonic()
        resources = []
        for path, path_item in self.paths.items():
            try:
                root_path, root_path_item, payload_schema = (
                    self.classifier.is_endpoint_fully_resource_compliant(path)
                )
            except SpecAnalyserError as e:
                logger.debug("resource path '%s' not terraform compliant: %s", path, e)
                continue

            try:
                if should_ignore_resource(root_path_item):
                    logger.info(
                        "resource with root path '%s' is marked to be ignored", root_path
                    )
                    continue
                resources.extend(
                    self._build_resources(
                        root_path, root_path_item, path, path_item, payload_schema
                    )
                )
            except SpecAnalyserError as e:
                logger.warning(
                    "ignoring resource with root path '%s' due to an error: %s",
                    root_path,
                    e,
                )
                self.collector.add_error(f"resource path '{root_path}': {e}")

        resources.sort(key=lambda r: r.name)
        logger.info(
            "found %d terraform compliant resources (time: %s)",
            len(resources),
            timedelta(seconds=time.monotonic() - start),
        )
        return resources

    def _build_resources(
        self,
        root_path: str,
        root_path_item: Dict[str, Any],
        instance_path: str,
        instance_path_item: Dict[str, Any],
        payload_schema: Dict[str, Any],
    ) -> List[ResourceDescriptor]:
        is_multi_region, regions, host_template = self.is_multi_region_resource(
            root_path_item
        )
        if is_multi_region:
            logger.info(
                "resource '%s' is configured with host override AND multi region; "
                "creating one resource per region",
                root_path,
            )
            return self.create_multi_region_resources(
                regions,
                host_template,
                root_path,
                root_path_item,
                instance_path,
                instance_path_item,
                payload_schema,
            )

        resource = self.resource_builder.build(
            root_path, root_path_item, instance_path, instance_path_item, payload_schema
        )
        self.validate_sub_resource_compliance(resource)
        logger.info(
            "found terraform compliant resource [name='%s', rootPath='%s', instancePath='%s']",
            resource.name,
            root_path,
            instance_path,
        )
        return [resource]

    def create_multi_region_resources(
        self,
        regions: List[str],
        host_template: str,
        root_path: str,
        root_path_item: Dict[str, Any],
        instance_path: str,
        instance_path_item: Dict[str, Any],
        payload_schema: Dict[str, Any],
    ) -> List[ResourceDescriptor]:
        """Builds one resource per region, each with its region specific host."""
        resources = []
        keyword = MULTI_REGION_HOST_REGEX.match(host_template).group(2)
        for region in regions:
            resource = self.resource_builder.build(
                root_path,
                root_path_item,
                instance_path,
                instance_path_item,
                payload_schema,
                region=region,
                regions=regions,
                host=host_template.replace(keyword, region),
            )
            self.validate_sub_resource_compliance(resource)
            logger.info(
                "multi region resource name = %s, region = '%s'", resource.name, region
            )
            resources.append(resource)
        return resources

    def is_multi_region_resource(
        self, root_path_item: Dict[str, Any]
    ) -> Tuple[bool, List[str], str]:
        """
        Checks whether a resource must be created once per region.

        That is the case when the create operation's host override is parametrized
        (e.g. 'some.api.${region}.domain.com') and the document declares the
        matching root level 'x-terraform-resource-regions-region' extension.

        Returns:
            A tuple of (is multi-region, region names, host template).

        Raises:
            MultiRegionError: If the host is parametrized but the regions extension
                is missing or lists no region.
        """
        override_host = get_resource_override_host(root_path_item.get("post"))
        if not override_host:
            return False, [], ""
        match = MULTI_REGION_HOST_REGEX.match(override_host)
        if not match:
            return False, [], ""

        keyword = match.group(3)
        extension_name = EXT_RESOURCE_REGIONS_FMT % keyword
        if extension_name not in self.document:
            raise MultiRegionError(
                f"missing matching '{keyword}' root level region extension '{extension_name}'"
            )
        raw_regions = self.document.get(extension_name)
        regions = split_comma_separated(raw_regions if isinstance(raw_regions, str) else "")
        if not regions:
            raise MultiRegionError(
                f"could not find any region for '{keyword}' matching region extension "
                f"{extension_name}: '{raw_regions}'"
            )
        return True, regions, override_host

    def validate_sub_resource_compliance(self, resource: ResourceDescriptor):
        """
        Checks the ancestors of a sub-resource are themselves valid resources.

        Every parent instance path and parent root path must be declared, and no
        parent may be excluded.

        Raises:
            ResourceComplianceError: If one of the checks fails.
        """
        if resource.parent_info is None:
            return
        for parent_instance_uri in resource.parent_info.parent_instance_uris:
            exists, _ = self.classifier.path_exists(parent_instance_uri)
            if not exists:
                raise ResourceComplianceError(
                    f"subresource with path '{resource.root_path}' is missing parent "
                    f"path instance definition '{parent_instance_uri}'"
                )
        for parent_uri in resource.parent_info.parent_uris:
            exists, parent_path_item = self.classifier.path_exists(parent_uri)
            if not exists:
                raise ResourceComplianceError(
                    f"subresource with path '{resource.root_path}' is missing parent "
                    f"root path definition '{parent_uri}'"
                )
            if should_ignore_resource(parent_path_item):
                raise ResourceComplianceError(
                    f"subresource with path '{resource.root_path}' contains a parent "
                    f"{parent_uri} that is marked as ignored, therefore ignoring the "
                    "subresource too"
                )
