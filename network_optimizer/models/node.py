"""Network node models: customers, facilities and suppliers."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NodeType(str, Enum):
    """Kind of node a lane endpoint refers to."""
    CUSTOMER = "Customer"
    FACILITY = "Facility"
    SUPPLIER = "Supplier"


class FacilityType(str, Enum):
    """Role of a facility in the network."""
    FACTORY = "Factory"
    DC = "DC"


class FacilityStatus(str, Enum):
    """Whether a facility takes part in the optimization."""
    INCLUDE = "Include"
    EXCLUDE = "Exclude"


class Customer(BaseModel):
    """Demand point at the end of the network.

    Attributes:
        customer_id: Unique customer identifier
        name: Display name
        lat: Optional latitude
        lng: Optional longitude
        include: Whether the customer is part of the model
    """
    customer_id: str = Field(..., description="Unique customer identifier")
    name: str = Field(default="", description="Customer name")
    lat: Optional[float] = Field(None, description="Latitude")
    lng: Optional[float] = Field(None, description="Longitude")
    include: bool = Field(default=True, description="Include customer in optimization")

    model_config = ConfigDict(use_enum_values=True, validate_default=True, extra="ignore")

    def __str__(self) -> str:
        return f"Customer {self.customer_id} ({self.name})"


class Facility(BaseModel):
    """Factory or distribution centre.

    Factories may produce; distribution centres only move product unless they
    carry explicit production records.
    """
    facility_id: str = Field(..., description="Unique facility identifier")
    name: str = Field(default="", description="Facility name")
    type: FacilityType = Field(default=FacilityType.DC, description="Factory or DC")
    status: FacilityStatus = Field(
        default=FacilityStatus.INCLUDE,
        description="Include or Exclude from optimization"
    )
    lat: Optional[float] = Field(None, description="Latitude")
    lng: Optional[float] = Field(None, description="Longitude")

    model_config = ConfigDict(use_enum_values=True, validate_default=True, extra="ignore")

    @property
    def is_included(self) -> bool:
        return self.status == FacilityStatus.INCLUDE

    def is_factory(self) -> bool:
        """Check if facility is a factory."""
        return self.type == FacilityType.FACTORY

    def __str__(self) -> str:
        return f"{self.type} {self.facility_id} ({self.name})"


class Supplier(BaseModel):
    """Source of a single product with a per-period capacity.

    Attributes:
        supplier_id: Unique supplier identifier
        name: Display name
        product_id: Product this supplier provides
        capacity: Units available per period (None = only the variable bound)
        capacity_unit: Unit the capacity is expressed in
        include: Whether the supplier is part of the model
    """
    supplier_id: str = Field(..., description="Unique supplier identifier")
    name: str = Field(default="", description="Supplier name")
    product_id: Optional[str] = Field(None, description="Product supplied")
    capacity: Optional[float] = Field(None, ge=0, description="Units available per period")
    capacity_unit: str = Field(default="units", description="Capacity unit of measure")
    include: bool = Field(default=True, description="Include supplier in optimization")

    model_config = ConfigDict(use_enum_values=True, validate_default=True, extra="ignore")

    def __str__(self) -> str:
        cap = "unlimited" if self.capacity is None else f"{self.capacity:,.0f} {self.capacity_unit}"
        return f"Supplier {self.supplier_id} ({self.product_id}, {cap})"
