"""Exception hierarchy for oasbuilder.

Every failure aborts the current document build. Callers treat any
:class:`OasBuilderError` as "no document was produced".

Subclass hierarchy::

    OasBuilderError
    +-- ConfigurationError
    |   +-- DuplicateLabelError
    |   +-- UnresolvedReferenceError
    +-- ResolutionError
"""


class OasBuilderError(Exception):
    """Base exception for all oasbuilder errors."""


class ConfigurationError(OasBuilderError):
    """Raised when the route/schema description cannot produce a document."""


class DuplicateLabelError(ConfigurationError):
    """Raised when two different labeled schemas share a component name.

    Args:
        label: The normalized component name that collided.
    """

    def __init__(self, label: str):
        super().__init__(
            f"Duplicate schema label '{label}': two different schemas are "
            "registered under the same component name"
        )
        self.label = label


class UnresolvedReferenceError(ConfigurationError):
    """Raised when an external reference is rendered before its file was resolved.

    Args:
        file: The external file (path or URL) that has no resolved copy.
    """

    def __init__(self, file: str):
        super().__init__(
            f"External file '{file}' has not been resolved; "
            "resolve external files before rendering schemas"
        )
        self.file = file


class ResolutionError(OasBuilderError):
    """Raised when an external file cannot be loaded or dereferenced.

    Args:
        file: The file or URL that failed.
        reason: Human-readable cause, usually the underlying error message.
    """

    def __init__(self, file: str, reason: str):
        super().__init__(f"Failed to resolve '{file}': {reason}")
        self.file = file
        self.reason = reason
