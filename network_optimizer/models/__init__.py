"""Input data models for the network optimizer."""

from .node import Customer, Facility, FacilityStatus, FacilityType, NodeType, Supplier
from .product import Product, BOMLine
from .period import Period
from .path import Path, ShippingPolicy, TransportPricing
from .vehicle import VehicleType
from .demand import Demand
from .production import ProductionRecord
from .flow_rule import FlowRule
from .inventory import InventoryRecord
from .network import NetworkData
from .settings import ObjectiveType, OptimizationRequest, OptimizationSettings

__all__ = [
    # Nodes
    "Customer",
    "Facility",
    "FacilityStatus",
    "FacilityType",
    "NodeType",
    "Supplier",
    # Products
    "Product",
    "BOMLine",
    "Period",
    # Lanes and vehicles
    "Path",
    "ShippingPolicy",
    "TransportPricing",
    "VehicleType",
    # Requirements and capabilities
    "Demand",
    "ProductionRecord",
    "FlowRule",
    "InventoryRecord",
    # Containers
    "NetworkData",
    "ObjectiveType",
    "OptimizationRequest",
    "OptimizationSettings",
]
