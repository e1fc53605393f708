"""Lane throughput rules."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FlowRule(BaseModel):
    """Minimum and/or maximum product flow on a lane.

    Applies to every included lane from from_id to to_id. A rule without
    period_id applies to every period.
    """
    rule_id: str = Field(default="", description="Rule identifier")
    from_id: str = Field(..., description="Origin node ID")
    to_id: str = Field(..., description="Destination node ID")
    product_id: str = Field(..., description="Product the rule limits")
    period_id: Optional[str] = Field(None, description="Period (None = all periods)")
    min_throughput: Optional[float] = Field(None, ge=0, description="Minimum flow")
    max_throughput: Optional[float] = Field(None, ge=0, description="Maximum flow")
    conditional_minimum: Optional[float] = Field(None, ge=0, description="Informational only")
    vehicle_type_id: Optional[str] = Field(None, description="Informational only")

    model_config = ConfigDict(extra="ignore")

    @property
    def record_id(self) -> str:
        return self.rule_id or f"{self.from_id}->{self.to_id}/{self.product_id}"

    def applies_to(self, period_id: str) -> bool:
        return self.period_id is None or self.period_id == period_id
