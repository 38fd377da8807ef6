"""Renders a human readable summary of the analysed resources."""

import os
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader

from .backend import BackendConfiguration
from .models import PropertyDescriptor, ResourceDescriptor

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")
REPORT_TEMPLATE = "resources.md.j2"

PROPERTY_FLAGS = (
    "required",
    "read_only",
    "computed",
    "force_new",
    "sensitive",
    "immutable",
    "is_identifier",
    "is_status_identifier",
)


def property_flags(prop: PropertyDescriptor) -> List[str]:
    """Returns the names of the flags set on a property, plus its default if any."""
    flags = [flag for flag in PROPERTY_FLAGS if getattr(prop, flag)]
    if prop.default is not None:
        flags.append(f"default={prop.default}")
    return flags


def declared_timeouts(resource: ResourceDescriptor) -> Dict[str, str]:
    return {
        operation: str(value)
        for operation, value in vars(resource.timeouts).items()
        if value is not None
    }


class ReportRenderer:
    """Renders resource descriptors through a Jinja2 template."""

    def __init__(self, template_dir: str = TEMPLATE_DIR):
        self.jinja_env = Environment(
            loader=FileSystemLoader(template_dir), trim_blocks=True, lstrip_blocks=True
        )

    def render(
        self,
        resources: List[ResourceDescriptor],
        backend: BackendConfiguration,
        source: str = "",
    ) -> str:
        return self.jinja_env.get_template(REPORT_TEMPLATE).render(
            resources=resources,
            backend=backend,
            source=source or "<document>",
            timeouts={r.name: declared_timeouts(r) for r in resources},
            flags=property_flags,
        )
