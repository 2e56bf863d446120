"""Exception types raised by the infographic editor SDK."""


class InfokitError(Exception):
    """Base class for editor SDK errors."""


class HostError(InfokitError):
    """A host collaborator (filesystem, renderer) failed to complete a command."""


class TemplateError(InfokitError):
    """A template could not be saved, loaded or deleted."""
