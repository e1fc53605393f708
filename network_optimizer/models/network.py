"""Container for a complete network description."""

from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .node import Customer, Facility, Supplier
from .product import Product, BOMLine
from .period import Period
from .path import Path
from .vehicle import VehicleType
from .demand import Demand
from .production import ProductionRecord
from .flow_rule import FlowRule
from .inventory import InventoryRecord


class NetworkData(BaseModel):
    """All entities of one optimization request.

    Accepts both the payload spelling of multi-word collections
    (``vehicleTypes``, ``flowRules``) and the Python spelling
    (``vehicle_types``, ``flow_rules``).
    """
    customers: List[Customer] = Field(default_factory=list)
    facilities: List[Facility] = Field(default_factory=list)
    suppliers: List[Supplier] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)
    paths: List[Path] = Field(default_factory=list)
    demand: List[Demand] = Field(default_factory=list)
    production: List[ProductionRecord] = Field(default_factory=list)
    vehicle_types: List[VehicleType] = Field(default_factory=list, alias="vehicleTypes")
    periods: List[Period] = Field(default_factory=list)
    flow_rules: List[FlowRule] = Field(default_factory=list, alias="flowRules")
    inventory: List[InventoryRecord] = Field(default_factory=list)
    boms: List[BOMLine] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def node_ids(self) -> Dict[str, str]:
        """Map every known node id (included or not) to its node type."""
        nodes: Dict[str, str] = {}
        for supplier in self.suppliers:
            nodes[supplier.supplier_id] = "Supplier"
        for facility in self.facilities:
            nodes[facility.facility_id] = "Facility"
        for customer in self.customers:
            nodes[customer.customer_id] = "Customer"
        return nodes

    def included_node_ids(self) -> List[str]:
        """Ids of included nodes, suppliers first, then facilities, then customers."""
        ids = [s.supplier_id for s in self.suppliers if s.include]
        ids += [f.facility_id for f in self.facilities if f.is_included]
        ids += [c.customer_id for c in self.customers if c.include]
        return ids

    def demand_by_key(self) -> Dict[Tuple[str, str, str], float]:
        """Demand per (customer, product, period); a repeated key keeps its last record."""
        return {(d.customer_id, d.product_id, d.period_id): d.demand_qty for d in self.demand}

    def total_demand(self) -> float:
        return sum(self.demand_by_key().values())

    def summary(self) -> str:
        return (
            f"{len(self.customers)} customers, {len(self.facilities)} facilities, "
            f"{len(self.suppliers)} suppliers, {len(self.products)} products, "
            f"{len(self.paths)} paths, {len(self.periods)} periods, "
            f"{len(self.demand)} demand records"
        )
