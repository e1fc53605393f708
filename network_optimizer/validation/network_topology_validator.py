"""
Network Topology Validation.

Validates the network structure to ensure:
- Every customer with demand can be reached from a supplier or factory
- No included node is disconnected
- No lane starts and ends at the same node
- Transit times are reasonable
"""

from typing import Any, Dict, List, Set, Tuple
import logging

from ..models import NetworkData
from ..network import NetworkGraphBuilder

logger = logging.getLogger(__name__)

#: Transit times above this many days are reported as suspicious
MAX_REASONABLE_TRANSIT_DAYS = 30


class NetworkTopologyValidator:
    """Validates network topology and connectivity."""

    def __init__(self, data: NetworkData):
        """Initialize validator.

        Args:
            data: Network description
        """
        self.data = data
        self.graph_builder = NetworkGraphBuilder(data)
        self.graph = self.graph_builder.build_graph()

    def validate_all(self) -> Dict[str, Any]:
        """Run all network validation checks.

        Returns:
            Dictionary with validation results and warnings
        """
        results = {
            "valid": True,
            "errors": [],
            "warnings": []
        }

        # Check 1: Sources can reach demand
        sources = self.graph_builder.get_source_nodes()
        unreachable = self.find_unreachable_demand()
        if not sources and self.graph_builder.get_demand_nodes():
            results["valid"] = False
            results["errors"].append("No supplier, factory or producing facility is included in the network")
        elif unreachable:
            results["valid"] = False
            results["errors"].append(
                f"Found {len(unreachable)} customers with demand unreachable from any source: {unreachable[:5]}"
            )

        # Check 2: Disconnected nodes (warnings only)
        isolated = self.graph_builder.get_isolated_nodes()
        if isolated:
            results["warnings"].append(
                f"Found {len(isolated)} disconnected nodes (no incoming/outgoing lanes): {isolated[:5]}"
            )

        # Check 3: Self loops
        loops = self.find_self_loops()
        if loops:
            results["warnings"].append(
                f"Found {len(loops)} lanes with the same origin and destination: {loops[:5]}"
            )

        # Check 4: Transit times reasonable
        suspicious = self.check_transit_times()
        if suspicious:
            results["warnings"].append(
                f"Found {len(suspicious)} lanes with suspicious transit times "
                f"(>{MAX_REASONABLE_TRANSIT_DAYS} days)"
            )

        for warning in results["warnings"]:
            logger.info(warning)
        return results

    def find_unreachable_demand(self) -> List[str]:
        """Customers with positive demand that no source can reach.

        Returns:
            Customer IDs, in customer order
        """
        reachable: Set[str] = self.graph_builder.reachable_from_sources()
        return [c for c in self.graph_builder.get_demand_nodes() if c not in reachable]

    def find_self_loops(self) -> List[str]:
        """Included lanes whose origin equals their destination."""
        return [
            path.path_id for path in self.data.paths
            if path.include and path.from_id == path.to_id
        ]

    def check_transit_times(self) -> List[Tuple[str, float]]:
        """Lanes with suspiciously long transit times.

        Returns:
            List of (path_id, transit_days)
        """
        return [
            (path.path_id, path.transit_time_days)
            for path in self.data.paths
            if path.include
            and path.transit_time_days is not None
            and path.transit_time_days > MAX_REASONABLE_TRANSIT_DAYS
        ]

    def get_network_summary(self) -> str:
        """Generate human-readable network summary."""
        nodes = self.graph.number_of_nodes()
        lanes = self.graph.number_of_edges()
        avg = lanes / nodes if nodes else 0.0
        return f"""
Network Topology Summary:
  Total nodes: {nodes}
  Source nodes: {len(self.graph_builder.get_source_nodes())}
  Demand nodes: {len(self.graph_builder.get_demand_nodes())}
  Total lanes: {lanes}
  Avg lanes per node: {avg:.1f}
"""


def validate_network_topology(data: NetworkData) -> Dict[str, Any]:
    """Convenience function to validate network topology.

    Example:
        >>> results = validate_network_topology(data)
        >>> if not results["valid"]:
        ...     print("Errors:", results["errors"])
    """
    validator = NetworkTopologyValidator(data)
    return validator.validate_all()
