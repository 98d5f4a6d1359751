"""Exceptions raised by the fill/export engine and the template store."""


class DocumentParseError(ValueError):
    """The input bytes could not be loaded as a PDF document."""


class TemplateNotFound(KeyError):
    """No template with the requested id exists in the repository."""
