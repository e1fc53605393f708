"""Customer demand model."""

from pydantic import BaseModel, ConfigDict, Field


class Demand(BaseModel):
    """Quantity a customer requires of a product in a period."""
    demand_id: str = Field(default="", description="Demand record identifier")
    customer_id: str = Field(..., description="Customer ID")
    product_id: str = Field(..., description="Product ID")
    period_id: str = Field(..., description="Period ID")
    demand_qty: float = Field(default=0.0, ge=0, description="Required quantity")

    model_config = ConfigDict(extra="ignore")

    @property
    def record_id(self) -> str:
        return self.demand_id or f"{self.customer_id}/{self.product_id}/{self.period_id}"
