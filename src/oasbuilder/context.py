"""Per-build state shared by schema rendering and external file resolution."""

from dataclasses import dataclass, field

from oasbuilder.config import Representation
from oasbuilder.exceptions import UnresolvedReferenceError


@dataclass
class BuildContext:
    """State for one document build.

    Attributes:
        representation: Whether labeled schemas are inlined or referenced.
        resolved_files: Map from an external file (path or URL) to the path of
            its dereferenced copy in the scratch directory.
    """

    representation: Representation = Representation.FLAT
    resolved_files: dict[str, str] = field(default_factory=dict)

    @property
    def referenced(self) -> bool:
        return self.representation is Representation.REFERENCED

    def record(self, file: str, resolved_path: str) -> None:
        self.resolved_files[file] = resolved_path

    def resolved_path(self, file: str) -> str:
        """Return the scratch copy of *file*.

        Raises:
            UnresolvedReferenceError: If *file* was never resolved in this build.
        """
        try:
            return self.resolved_files[file]
        except KeyError:
            raise UnresolvedReferenceError(file) from None
