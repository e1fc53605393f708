"""Pydantic schemas for optimization results.

This module defines the contract between the solution extractor and callers
of the optimizer. Field names follow Python conventions; aliases carry the
response payload spelling (``from``, ``productFlow``, ``costSummary``).

Design Principles:
1. Fail Fast: Invalid data raises ValidationError at the extractor boundary
2. Open Extension: Extra fields are allowed (extra="allow")
3. Payload Fidelity: ``to_payload()`` produces the response body verbatim
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..costs.cost_breakdown import COST_SUMMARY_ORDER


class ProductFlowResult(BaseModel):
    """Product moved along a lane in a period."""
    from_id: str = Field(..., alias="from", description="Origin node ID")
    to_id: str = Field(..., alias="to", description="Destination node ID")
    product: str = Field(..., description="Product ID")
    quantity: float = Field(..., ge=0, description="Units moved")
    unit: str = Field(default="units", description="Unit of measure")
    period: str = Field(..., description="Period ID")
    cost: float = Field(..., ge=0, description="Per-unit transport cost of the flow")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ProductionResult(BaseModel):
    """Quantity produced at a site in a period."""
    site: str = Field(..., description="Producing facility ID")
    product: str = Field(..., description="Product ID")
    bom: str = Field(default="-", description="Bill of materials ID ('-' when none)")
    quantity: float = Field(..., ge=0, description="Units produced")
    unit: str = Field(default="units", description="Unit of measure")
    cost: float = Field(..., ge=0, description="Production cost")
    period: str = Field(..., description="Period ID")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class VehicleFlowResult(BaseModel):
    """Vehicle trips on an FTL lane in a period."""
    from_id: str = Field(..., alias="from", description="Origin node ID")
    to_id: str = Field(..., alias="to", description="Destination node ID")
    vehicle_type: str = Field(..., description="Vehicle type name")
    trip_count: int = Field(..., ge=0, description="Whole trips")
    period: str = Field(..., description="Period ID")
    cost: float = Field(..., ge=0, description="Trip cost")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class CostSummaryEntry(BaseModel):
    """One category of the cost summary."""
    category: str = Field(..., description="Cost category")
    amount: float = Field(..., description="Amount")

    model_config = ConfigDict(extra="allow")


class UnmetDemandResult(BaseModel):
    """Demand left unserved under the max_service objective."""
    customer: str = Field(..., description="Customer ID")
    product: str = Field(..., description="Product ID")
    period: str = Field(..., description="Period ID")
    quantity: float = Field(..., ge=0, description="Units not delivered")

    model_config = ConfigDict(extra="allow")


class OptimizationSolution(BaseModel):
    """Complete report of a solved network model.

    Example:
        solution = extractor.extract(outcome)
        body = solution.to_payload()
        body["costSummary"][0]  # {"category": "Total Cost", "amount": ...}
    """
    product_flow: List[ProductFlowResult] = Field(default_factory=list, alias="productFlow")
    production: List[ProductionResult] = Field(default_factory=list)
    vehicle_flow: List[VehicleFlowResult] = Field(default_factory=list, alias="vehicleFlow")
    cost_summary: List[CostSummaryEntry] = Field(default_factory=list, alias="costSummary")
    unmet_demand: List[UnmetDemandResult] = Field(default_factory=list, alias="unmetDemand")
    status: str = Field(default="optimal", description="Solve status")
    objective_value: Optional[float] = Field(None, alias="objectiveValue", description="Objective at the solution")
    iterations: int = Field(default=0, ge=0, description="Simplex pivots performed")
    solver: str = Field(default="tableau", description="Solver used")
    warnings: List[str] = Field(default_factory=list, description="Non-fatal issues")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @model_validator(mode="after")
    def cost_summary_in_reporting_order(self):
        categories = tuple(entry.category for entry in self.cost_summary)
        if categories and categories != COST_SUMMARY_ORDER[:len(categories)]:
            raise ValueError(
                f"cost_summary categories {categories} are not in reporting order {COST_SUMMARY_ORDER}"
            )
        return self

    @property
    def total_cost(self) -> float:
        for entry in self.cost_summary:
            if entry.category == COST_SUMMARY_ORDER[0]:
                return entry.amount
        return 0.0

    def cost_of(self, category: str) -> float:
        for entry in self.cost_summary:
            if entry.category == category:
                return entry.amount
        return 0.0

    def to_payload(self) -> dict:
        """Response body with payload field names."""
        return self.model_dump(by_alias=True, mode="json")
