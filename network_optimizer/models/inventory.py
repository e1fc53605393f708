"""On-hand inventory records."""

from pydantic import BaseModel, ConfigDict, Field


class InventoryRecord(BaseModel):
    """Stock held at a facility at the start of a period.

    Stock above min_level may be drawn to serve flows out of the site in the
    same period.
    """
    inventory_id: str = Field(default="", description="Inventory record identifier")
    site_id: str = Field(..., description="Facility holding the stock")
    product_id: str = Field(..., description="Product held")
    period_id: str = Field(..., description="Period")
    initial_level: float = Field(default=0.0, ge=0, description="Stock at start of period")
    min_level: float = Field(default=0.0, ge=0, description="Safety stock that must remain")
    max_level: float = Field(default=0.0, ge=0, description="Storage limit (informational)")

    model_config = ConfigDict(extra="ignore")

    @property
    def record_id(self) -> str:
        return self.inventory_id or f"{self.site_id}/{self.product_id}/{self.period_id}"

    @property
    def available(self) -> float:
        """Quantity that can be drawn without breaching min_level."""
        return max(0.0, self.initial_level - self.min_level)
