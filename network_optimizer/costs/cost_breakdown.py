"""Cost breakdown data models.

Data classes accumulating cost components while a solution is extracted, and
producing the fixed-order cost summary of the response.
"""

from dataclasses import dataclass, field
from typing import Dict, List

#: Cost summary categories, in reporting order
COST_CATEGORY_TOTAL = "Total Cost"
COST_CATEGORY_TRANSPORT_UNITS = "Transport Cost (Units)"
COST_CATEGORY_TRANSPORT_TRIPS = "Transport Cost (Trips)"
COST_CATEGORY_PRODUCTION = "Production Cost"

COST_SUMMARY_ORDER = (
    COST_CATEGORY_TOTAL,
    COST_CATEGORY_TRANSPORT_UNITS,
    COST_CATEGORY_TRANSPORT_TRIPS,
    COST_CATEGORY_PRODUCTION,
)


@dataclass
class TransportCostBreakdown:
    """
    Per-unit transport cost by lane.

    Attributes:
        total_cost: Total per-unit transport cost
        total_units_shipped: Total units moved across all lanes
        cost_by_lane: Cost per path id
    """
    total_cost: float = 0.0
    total_units_shipped: float = 0.0
    cost_by_lane: Dict[str, float] = field(default_factory=dict)

    def add(self, lane: str, quantity: float, cost: float) -> None:
        self.total_cost += cost
        self.total_units_shipped += quantity
        self.cost_by_lane[lane] = self.cost_by_lane.get(lane, 0.0) + cost

    @property
    def average_cost_per_unit(self) -> float:
        if self.total_units_shipped == 0:
            return 0.0
        return self.total_cost / self.total_units_shipped

    def __str__(self) -> str:
        """String representation."""
        return (
            f"Transport Cost: ${self.total_cost:,.2f} "
            f"({self.total_units_shipped:,.0f} units @ ${self.average_cost_per_unit:.4f}/unit)"
        )


@dataclass
class TripCostBreakdown:
    """
    Vehicle trip cost on FTL lanes.

    Attributes:
        total_cost: Total trip cost
        total_trips: Total (rounded) trips
        cost_by_lane: Cost per path id
    """
    total_cost: float = 0.0
    total_trips: int = 0
    cost_by_lane: Dict[str, float] = field(default_factory=dict)

    def add(self, lane: str, trips: int, cost: float) -> None:
        self.total_cost += cost
        self.total_trips += trips
        self.cost_by_lane[lane] = self.cost_by_lane.get(lane, 0.0) + cost

    def __str__(self) -> str:
        """String representation."""
        return f"Trip Cost: ${self.total_cost:,.2f} ({self.total_trips} trips)"


@dataclass
class ProductionCostBreakdown:
    """
    Production cost by site.

    Attributes:
        total_cost: Total production cost
        total_units_produced: Total units produced
        cost_by_site: Cost per facility id
    """
    total_cost: float = 0.0
    total_units_produced: float = 0.0
    cost_by_site: Dict[str, float] = field(default_factory=dict)

    def add(self, site: str, quantity: float, cost: float) -> None:
        self.total_cost += cost
        self.total_units_produced += quantity
        self.cost_by_site[site] = self.cost_by_site.get(site, 0.0) + cost

    def __str__(self) -> str:
        """String representation."""
        return (
            f"Production Cost: ${self.total_cost:,.2f} "
            f"({self.total_units_produced:,.0f} units)"
        )


@dataclass
class TotalCostBreakdown:
    """
    Aggregated cost of a network plan.

    Attributes:
        transport: Per-unit transport costs
        trips: Vehicle trip costs
        production: Production costs
    """
    transport: TransportCostBreakdown = field(default_factory=TransportCostBreakdown)
    trips: TripCostBreakdown = field(default_factory=TripCostBreakdown)
    production: ProductionCostBreakdown = field(default_factory=ProductionCostBreakdown)

    @property
    def total_cost(self) -> float:
        return self.transport.total_cost + self.trips.total_cost + self.production.total_cost

    def to_summary_rows(self, decimals: int = 2) -> List[Dict[str, float]]:
        """Cost summary in reporting order: total, transport (units), transport (trips), production."""
        amounts = [
            (COST_CATEGORY_TOTAL, self.total_cost),
            (COST_CATEGORY_TRANSPORT_UNITS, self.transport.total_cost),
            (COST_CATEGORY_TRANSPORT_TRIPS, self.trips.total_cost),
            (COST_CATEGORY_PRODUCTION, self.production.total_cost),
        ]
        return [
            {'category': category, 'amount': round(amount, decimals)}
            for category, amount in amounts
        ]

    def get_cost_proportions(self) -> Dict[str, float]:
        """
        Get proportion of each cost component.

        Returns:
            Dictionary mapping component name to proportion (0.0 to 1.0)
        """
        total = self.total_cost
        if total == 0:
            return {"transport": 0.0, "trips": 0.0, "production": 0.0}
        return {
            "transport": self.transport.total_cost / total,
            "trips": self.trips.total_cost / total,
            "production": self.production.total_cost / total,
        }

    def __str__(self) -> str:
        """String representation."""
        return (
            f"Total Cost: ${self.total_cost:,.2f}\n"
            f"  {self.transport}\n"
            f"  {self.trips}\n"
            f"  {self.production}"
        )
