"""Production capability records."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ProductionRecord(BaseModel):
    """Ability of a site to produce a product in a period.

    A record without period_id applies to every period. Throughput bounds are
    optional and independent of each other.
    """
    production_id: str = Field(default="", description="Production record identifier")
    site_id: str = Field(..., description="Producing facility ID")
    product_id: str = Field(..., description="Product produced")
    period_id: Optional[str] = Field(None, description="Period (None = all periods)")
    bom_id: Optional[str] = Field(None, description="Bill of materials consumed")
    prod_cost_per_unit: Optional[float] = Field(None, ge=0, description="Cost per unit produced")
    prod_time_per_unit_hr: Optional[float] = Field(None, ge=0, description="Hours per unit produced")
    uom: str = Field(default="units", description="Unit of measure")
    min_throughput: Optional[float] = Field(None, ge=0, description="Minimum quantity per period")
    max_throughput: Optional[float] = Field(None, ge=0, description="Maximum quantity per period")
    include: bool = Field(default=True, description="Include record in optimization")

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def min_not_above_max(self):
        if (
            self.min_throughput is not None
            and self.max_throughput is not None
            and self.min_throughput > self.max_throughput
        ):
            raise ValueError(
                f"Production {self.record_id}: min_throughput ({self.min_throughput}) "
                f"exceeds max_throughput ({self.max_throughput})"
            )
        return self

    @property
    def record_id(self) -> str:
        return self.production_id or f"{self.site_id}/{self.product_id}/{self.period_id or '*'}"

    def applies_to(self, period_id: str) -> bool:
        """Check if the record covers the given period."""
        return self.period_id is None or self.period_id == period_id
