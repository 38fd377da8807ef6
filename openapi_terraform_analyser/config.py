"""
Plugin configuration: which OpenAPI documents to analyse and how.

Example configuration file:

    version: '1'
    services:
      cdn:
        swagger-url: https://cdn-api.com/swagger.json
        insecure_skip_verify: true
      vm:
        swagger-url: ./specs/vm.yaml
    analyser:
      append_version_to_override: false
      max_schema_depth: 10
"""

import os
from typing import Dict
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .property_builder import DEFAULT_MAX_SCHEMA_DEPTH

CURRENT_CONFIG_VERSION = "1"


def is_url(value: str) -> bool:
    parsed = urlparse(value or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class ServiceConfigV1(BaseModel):
    """Location of a single service's OpenAPI document."""

    # Either an http(s) URL or a path to a document stored on disk.
    swagger_url: str = Field(alias="swagger-url")

    # Skip TLS certificate verification when downloading the document.
    insecure_skip_verify: bool = False

    class Config:
        populate_by_name = True


class AnalyserSettings(BaseModel):
    """Knobs that change how resources are derived from a document."""

    # When a resource declares 'x-terraform-resource-name', the version found in
    # its path is not appended to the override unless this is enabled.
    append_version_to_override: bool = False

    # Maximum nesting level of object properties before a schema is rejected.
    max_schema_depth: int = Field(default=DEFAULT_MAX_SCHEMA_DEPTH, ge=1)


class PluginConfigSchemaV1(BaseModel):
    """Version 1 of the plugin configuration file."""

    version: str = CURRENT_CONFIG_VERSION
    services: Dict[str, ServiceConfigV1] = Field(default_factory=dict)
    analyser: AnalyserSettings = Field(default_factory=AnalyserSettings)

    @field_validator("version", mode="before")
    def coerce_version(cls, v):
        # YAML reads an unquoted `version: 1` as an integer.
        return str(v) if v is not None else v

    @classmethod
    def from_dict(cls, data: dict) -> "PluginConfigSchemaV1":
        try:
            return cls.model_validate(data or {})
        except ValidationError as e:
            raise ConfigError(f"invalid plugin configuration: {e}") from e

    @classmethod
    def from_file(cls, config_path: str) -> "PluginConfigSchemaV1":
        """Loads and validates a configuration file."""
        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f)
        except (IOError, yaml.YAMLError) as e:
            raise ConfigError(
                f"error reading or parsing config file '{config_path}': {e}"
            ) from e
        config = cls.from_dict(data)
        config.validate_schema()
        return config

    def validate_schema(self):
        """
        Makes sure the configuration content is usable.

        Raises:
            ConfigError: If the version is not supported, or a service location is
                neither a well formed URL nor an existing file.
        """
        if self.version != CURRENT_CONFIG_VERSION:
            raise ConfigError(
                "provider configuration version not matching current implementation, "
                f"please use version '{CURRENT_CONFIG_VERSION}' of provider configuration specification"
            )
        for name, service in self.services.items():
            if is_url(service.swagger_url):
                continue
            # Fall back to a document stored on disk.
            if not os.path.exists(service.swagger_url):
                raise ConfigError(
                    f"service '{name}' found in the provider configuration does not contain "
                    f"a valid SwaggerURL value ('{service.swagger_url}'). URL must be either "
                    "a valid formed URL or a path to an existing swagger file stored in the disk"
                )

    def get_service_config(self, provider_name: str) -> ServiceConfigV1:
        if not provider_name:
            raise ConfigError("providerName not specified")
        service = self.services.get(provider_name)
        if service is None:
            raise ConfigError(
                f"'{provider_name}' not found in provider's services configuration"
            )
        return service

    def get_all_service_configurations(self) -> Dict[str, ServiceConfigV1]:
        return dict(self.services)

    def get_version(self) -> str:
        return self.version

    def marshal(self) -> str:
        """Serializes the configuration into a YAML document."""
        return yaml.safe_dump(
            self.model_dump(by_alias=True), sort_keys=False, default_flow_style=False
        )
