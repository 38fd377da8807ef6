"""
Exception hierarchy raised by the analyser components.

Every error subclasses ValueError. The analyser is the single place where these
errors are downgraded to "log and skip" for an individual path.
"""


class SpecAnalyserError(ValueError):
    """Base class for all analyser errors."""


class SchemaTypeError(SpecAnalyserError):
    """A schema node could not be mapped to a supported property type."""


class PropertyValidationError(SpecAnalyserError):
    """A property violates the required/readOnly/computed rules."""


class ResourceComplianceError(SpecAnalyserError):
    """A path does not follow the CRUD resource convention."""


class ResourceNameError(SpecAnalyserError):
    """A resource name could not be derived from a path."""


class ResourcePathError(SpecAnalyserError):
    """Parent ids could not be substituted into a sub-resource path."""


class MultiRegionError(SpecAnalyserError):
    """A multi-region host override is not backed by a regions extension."""


class DurationFormatError(SpecAnalyserError):
    """A timeout extension value is not a valid duration."""


class ExtensionError(SpecAnalyserError):
    """A vendor extension carries a value of the wrong type."""


class UrlBuildError(SpecAnalyserError):
    """A resource URL could not be built from the backend configuration."""


class ConfigError(SpecAnalyserError):
    """The plugin configuration file is invalid."""


class DocumentLoadError(SpecAnalyserError):
    """The OpenAPI document could not be loaded."""
