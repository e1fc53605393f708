"""Cost aggregation for network plans.

Key components:
- TransportCostBreakdown: per-unit lane costs
- TripCostBreakdown: FTL vehicle trip costs
- ProductionCostBreakdown: production costs by site
- TotalCostBreakdown: aggregate and fixed-order cost summary
"""

from .cost_breakdown import (
    TransportCostBreakdown,
    TripCostBreakdown,
    ProductionCostBreakdown,
    TotalCostBreakdown,
    COST_SUMMARY_ORDER,
)

__all__ = [
    "COST_SUMMARY_ORDER",
    "TransportCostBreakdown",
    "TripCostBreakdown",
    "ProductionCostBreakdown",
    "TotalCostBreakdown",
]
