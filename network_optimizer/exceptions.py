"""Exception hierarchy for the network optimizer.

Expected domain outcomes (infeasible, unbounded, iteration limit) are reported
through OptimizationResult and never raised. These exceptions cover malformed
network data and missing solver installations.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Sequence


@dataclass(frozen=True)
class UnresolvedReference:
    """A record that points at an entity id that does not exist.

    Attributes:
        entity: Kind of record holding the reference (e.g. "path", "demand")
        record_id: Identifier of that record
        field: Name of the referencing field (e.g. "vehicle_type_id")
        missing_id: The id that could not be resolved
    """
    entity: str
    record_id: str
    field: str
    missing_id: str

    def describe(self) -> str:
        """Human readable one-line description."""
        return (
            f"{self.entity} '{self.record_id}' references unknown "
            f"{self.field} '{self.missing_id}'"
        )

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class NetworkOptimizerError(Exception):
    """Base class for all network optimizer errors."""


class NetworkDataError(NetworkOptimizerError):
    """Network data cannot be turned into a model."""


class UnresolvedReferenceError(NetworkDataError):
    """One or more records reference entities missing from the network data."""

    def __init__(self, references: Sequence[UnresolvedReference]):
        self.references: List[UnresolvedReference] = list(references)
        preview = "; ".join(ref.describe() for ref in self.references[:3])
        more = len(self.references) - 3
        if more > 0:
            preview += f" (and {more} more)"
        super().__init__(
            f"{len(self.references)} unresolved reference(s) in network data: {preview}"
        )


class SolverUnavailableError(NetworkOptimizerError):
    """The requested external solver is not installed or not licensed."""
