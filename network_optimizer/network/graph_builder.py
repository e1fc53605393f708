"""
Network graph builder for logistics network analysis.

This module builds a NetworkX directed graph from NetworkData, enabling
reachability checks and path analysis before a model is built.
"""

import networkx as nx
from typing import List, Dict, Optional, Any

from ..models import NetworkData, NodeType


class NetworkGraphBuilder:
    """
    Builds a NetworkX directed graph from network data.

    Included suppliers, facilities and customers become nodes; included lanes
    between included nodes become edges. Parallel lanes between the same pair
    of nodes share one edge that lists all of their path ids.
    """

    def __init__(self, data: NetworkData):
        """
        Initialize graph builder with network data.

        Args:
            data: Network description
        """
        self.data = data
        self.graph: Optional[nx.DiGraph] = None

    def build_graph(self) -> nx.DiGraph:
        """
        Build the NetworkX directed graph from nodes and lanes.

        Returns:
            NetworkX DiGraph with node ids as nodes and lanes as edges
        """
        graph = nx.DiGraph()

        for supplier in self.data.suppliers:
            if supplier.include:
                graph.add_node(
                    supplier.supplier_id,
                    node_type=NodeType.SUPPLIER.value,
                    name=supplier.name,
                    product_id=supplier.product_id,
                    capacity=supplier.capacity,
                )
        for facility in self.data.facilities:
            if facility.is_included:
                graph.add_node(
                    facility.facility_id,
                    node_type=NodeType.FACILITY.value,
                    name=facility.name,
                    facility_type=str(facility.type),
                )
        for customer in self.data.customers:
            if customer.include:
                graph.add_node(
                    customer.customer_id,
                    node_type=NodeType.CUSTOMER.value,
                    name=customer.name,
                )

        for path in self.data.paths:
            if not path.include:
                continue
            if path.from_id not in graph or path.to_id not in graph:
                continue
            if graph.has_edge(path.from_id, path.to_id):
                graph.edges[path.from_id, path.to_id]['path_ids'].append(path.path_id)
                continue
            graph.add_edge(
                path.from_id,
                path.to_id,
                path_ids=[path.path_id],
                shipping_policy=str(path.shipping_policy),
                transit_time_days=path.transit_time_days,
                distance=path.distance,
            )

        self.graph = graph
        return graph

    def get_graph(self) -> nx.DiGraph:
        """
        Get the built graph, building it first if necessary.

        Returns:
            NetworkX DiGraph
        """
        if self.graph is None:
            return self.build_graph()
        return self.graph

    def get_successors(self, node_id: str) -> List[str]:
        """Direct destinations of a node (empty if the node is not in the graph)."""
        graph = self.get_graph()
        if node_id not in graph:
            return []
        return list(graph.successors(node_id))

    def get_predecessors(self, node_id: str) -> List[str]:
        """Direct origins of a node (empty if the node is not in the graph)."""
        graph = self.get_graph()
        if node_id not in graph:
            return []
        return list(graph.predecessors(node_id))

    def get_source_nodes(self) -> List[str]:
        """
        Get nodes where product can enter the network.

        Suppliers, factories and any facility with an included production
        record are sources.

        Returns:
            List of source node IDs
        """
        graph = self.get_graph()
        producing_sites = {r.site_id for r in self.data.production if r.include}
        sources = []
        for node, attrs in graph.nodes(data=True):
            if attrs.get('node_type') == NodeType.SUPPLIER.value:
                sources.append(node)
            elif attrs.get('facility_type') == 'Factory' or node in producing_sites:
                sources.append(node)
        return sources

    def get_demand_nodes(self) -> List[str]:
        """
        Get included customers with positive demand.

        Returns:
            List of customer IDs, in customer order
        """
        graph = self.get_graph()
        demanded = {d.customer_id for d in self.data.demand if d.demand_qty > 0}
        return [
            c.customer_id for c in self.data.customers
            if c.customer_id in demanded and c.customer_id in graph
        ]

    def get_isolated_nodes(self) -> List[str]:
        """Nodes without any incoming or outgoing lane."""
        return list(nx.isolates(self.get_graph()))

    def is_reachable(self, from_node: str, to_node: str) -> bool:
        """
        Check if there's any path from source to destination.

        Args:
            from_node: Source node ID
            to_node: Destination node ID

        Returns:
            True if path exists, False otherwise
        """
        graph = self.get_graph()
        try:
            return nx.has_path(graph, from_node, to_node)
        except nx.NodeNotFound:
            return False

    def reachable_from_sources(self) -> set:
        """All nodes reachable from at least one source node (sources included)."""
        graph = self.get_graph()
        reachable = set()
        for source in self.get_source_nodes():
            if source in reachable:
                continue
            reachable.add(source)
            reachable.update(nx.descendants(graph, source))
        return reachable

    def get_shortest_path_length(self, from_node: str, to_node: str) -> Optional[int]:
        """
        Get shortest path length (number of hops) between nodes.

        Returns:
            Number of hops in shortest path, or None if no path exists
        """
        graph = self.get_graph()
        try:
            return nx.shortest_path_length(graph, from_node, to_node)
        except (nx.NodeNotFound, nx.NetworkXNoPath):
            return None

    def get_edge_attributes(self, from_node: str, to_node: str) -> Dict[str, Any]:
        """
        Get all attributes for an edge.

        Raises:
            ValueError: If edge doesn't exist in graph
        """
        graph = self.get_graph()
        if not graph.has_edge(from_node, to_node):
            raise ValueError(f"Edge {from_node}->{to_node} not in graph")
        return dict(graph.edges[from_node, to_node])
