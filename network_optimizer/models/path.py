"""Transport lane model.

A path is a directed lane between two nodes. Full-truck-load (FTL) lanes move
product in whole vehicle trips; less-than-truck-load (LTL) lanes are charged
per unit only.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .node import NodeType


class ShippingPolicy(str, Enum):
    """Whether trips are counted on the lane."""
    FTL = "FTL"
    LTL = "LTL"


class TransportPricing(str, Enum):
    """How per-unit transport cost is derived."""
    FIXED = "Fixed"
    PRODUCT_BASED = "ProductBased"
    FIXED_PLUS_PRODUCT = "FixedPlusProduct"


class Path(BaseModel):
    """Directed transport lane between two nodes.

    Attributes:
        path_id: Unique lane identifier (defaults to "{from_id}->{to_id}")
        from_type: Kind of origin node
        from_id: Origin node ID
        to_type: Kind of destination node
        to_id: Destination node ID
        vehicle_type_id: Vehicle used on FTL lanes
        shipping_policy: FTL or LTL
        min_load_ratio: Minimum average fill of each FTL trip (0-1)
        transport_pricing: Fixed, ProductBased or FixedPlusProduct
        fixed_cost: Lane cost charged per trip
        product_cost_per_unit: Cost per unit moved (product-based pricing)
        distance: Lane distance, used for the fallback unit cost and transit time
        transit_time_days: Explicit transit time (used by the min_time objective)
        include: Whether the lane is part of the model
    """
    path_id: Optional[str] = Field(None, description="Unique lane identifier")
    from_type: Optional[NodeType] = Field(None, description="Origin node type")
    from_id: str = Field(..., description="Origin node ID")
    to_type: Optional[NodeType] = Field(None, description="Destination node type")
    to_id: str = Field(..., description="Destination node ID")
    vehicle_type_id: Optional[str] = Field(None, description="Vehicle type for FTL trips")
    shipping_policy: ShippingPolicy = Field(default=ShippingPolicy.LTL, description="FTL or LTL")
    min_load_ratio: float = Field(default=0.0, ge=0, le=1, description="Minimum trip fill ratio")
    transport_pricing: TransportPricing = Field(
        default=TransportPricing.PRODUCT_BASED,
        description="Per-unit cost derivation"
    )
    fixed_cost: float = Field(default=0.0, ge=0, description="Lane cost per trip")
    product_cost_per_unit: Optional[float] = Field(None, ge=0, description="Cost per unit moved")
    distance: Optional[float] = Field(None, ge=0, description="Lane distance")
    distance_unit: str = Field(default="km", description="Distance unit")
    transit_time_days: Optional[float] = Field(None, ge=0, description="Transit time in days")
    include: bool = Field(default=True, description="Include lane in optimization")

    model_config = ConfigDict(use_enum_values=True, validate_default=True, extra="ignore")

    @model_validator(mode="after")
    def default_path_id(self):
        if not self.path_id:
            self.path_id = f"{self.from_id}->{self.to_id}"
        return self

    def is_ftl(self) -> bool:
        """Check if trips are counted on this lane."""
        return self.shipping_policy == ShippingPolicy.FTL

    def uses_product_pricing(self) -> bool:
        """Check if the per-unit cost comes from product_cost_per_unit."""
        return self.transport_pricing in (
            TransportPricing.PRODUCT_BASED,
            TransportPricing.FIXED_PLUS_PRODUCT,
        )

    def __str__(self) -> str:
        return f"{self.path_id}: {self.from_id} → {self.to_id} ({self.shipping_policy})"
