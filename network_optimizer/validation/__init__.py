"""Data validation module for pre-flight checks."""

from .references import find_unresolved_references
from .data_validator import NetworkDataValidator, ValidationIssue, ValidationSeverity
from .network_topology_validator import NetworkTopologyValidator, validate_network_topology

__all__ = [
    "find_unresolved_references",
    "NetworkDataValidator",
    "ValidationIssue",
    "ValidationSeverity",
    "NetworkTopologyValidator",
    "validate_network_topology",
]
