"""Custom exceptions for jira-sync."""


class JiraSyncError(Exception):
    """Base exception for jira-sync operations."""


class StructuralParseError(JiraSyncError):
    """Markdown document structure is unusable (frontmatter, required metadata)."""


class MarkerDecodeError(JiraSyncError):
    """A candidate preservation marker block could not be decoded."""


class NodeSerializationError(JiraSyncError):
    """A node could not be serialized for opaque preservation."""


class ConversionError(JiraSyncError):
    """Remote content could not be converted to markdown."""


class ConfigError(JiraSyncError):
    """Connection settings are missing or invalid."""


class APIError(JiraSyncError):
    """The remote service answered with an error status."""

    def __init__(self, service: str, status_code: int, body: str = ""):
        self.service = service
        self.status_code = status_code
        self.body = body
        super().__init__(f"{service} API returned {status_code}: {body}")


class ConflictError(JiraSyncError):
    """The remote item changed since the local file was pulled."""
