class DirectUploadError(ValueError):
    """Base class for every error raised while presigning an upload."""


class ConfigurationError(DirectUploadError):
    """Access key or secret key could not be resolved."""


class InvalidSpecError(DirectUploadError):
    """An upload spec is missing its bucket or filename."""


class EncodingError(DirectUploadError):
    """A policy condition has an unsupported shape or value."""
