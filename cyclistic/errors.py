"""Pipeline exception hierarchy.

Every error subclasses ValueError, so callers that guard the pipeline
with ``except ValueError`` still catch them.
"""


class PipelineError(ValueError):
    """Base exception for all fatal pipeline failures."""


class ConfigError(PipelineError):
    """Raised for invalid run configuration."""


class SchemaError(PipelineError):
    """Raised when a frame does not expose the columns its variant requires."""


class TimestampParseError(PipelineError):
    """Raised when a timestamp column cannot be parsed."""
