"""Error types raised while building TeamCity plugin archives.

All errors derive from `PluginError` so callers (the CLI and the HTTP API)
can handle build failures uniformly. None of them are retried: they are
one-shot build-time failures that stop the current build step.
"""


class PluginError(Exception):
    """Base class for plugin build failures."""


class ValidationError(PluginError):
    """Raised when a descriptor or project configuration is invalid.

    Examples: empty name or version, duplicate parameter names, unknown
    configuration options.
    """


class PackagingError(PluginError):
    """Raised when the plugin archive cannot be written."""


class DeploymentError(PluginError):
    """Raised when archives cannot be deployed to a TeamCity server."""
