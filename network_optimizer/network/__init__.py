"""
Network analysis for the logistics network.

This module provides graph-based network modeling and reachability
checks used by the data validator.
"""

from .graph_builder import NetworkGraphBuilder

__all__ = [
    'NetworkGraphBuilder',
]
