"""Semantic types, variable keys and the variable arena.

Every decision variable is registered under a tagged key in a VariableArena
and addressed by integer index. Keys carry the identity of the variable, so
the extractor never parses names back into ids.

Usage Example:
    arena = VariableArena()
    idx = arena.add(
        FlowKey(PathID('F1->DC1'), NodeID('F1'), NodeID('DC1'), ProductID('FG'), PeriodID('P1')),
        cost=1.0,
        upper_bound=100_000,
    )
    arena[idx].key.product_id  # 'FG'
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, NewType, Optional, Union

# ============================================================================
# Semantic ID Types
# ============================================================================

NodeID = NewType('NodeID', str)
"""Customer, facility or supplier identifier."""

ProductID = NewType('ProductID', str)
"""Product identifier."""

PeriodID = NewType('PeriodID', str)
"""Planning period identifier."""

PathID = NewType('PathID', str)
"""Lane identifier (defaults to '{from_id}->{to_id}')."""

VehicleTypeID = NewType('VehicleTypeID', str)
"""Vehicle type identifier."""


class VariableKind(str, Enum):
    """Kind of decision variable."""
    FLOW = "flow"
    PRODUCTION = "production"
    TRIP = "trip"
    SUPPLY = "supply"
    STOCK = "stock"
    SHORTAGE = "shortage"


class SolveStatus(str, Enum):
    """Outcome of a solve, shared by the tableau solver and external solvers."""
    OPTIMAL = "optimal"
    ITERATION_LIMIT = "iteration_limit"
    TIME_LIMIT = "time_limit"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    INVALID_DATA = "invalid_data"
    SOLVER_UNAVAILABLE = "solver_unavailable"
    ERROR = "error"


# ============================================================================
# Variable Keys
# ============================================================================

@dataclass(frozen=True)
class FlowKey:
    """Product flow on a lane in a period (continuous)."""
    path_id: PathID
    from_id: NodeID
    to_id: NodeID
    product_id: ProductID
    period_id: PeriodID
    kind: ClassVar[VariableKind] = VariableKind.FLOW

    def label(self) -> str:
        return f"flow[{self.path_id}|{self.product_id}|{self.period_id}]"


@dataclass(frozen=True)
class ProductionKey:
    """Quantity produced at a site in a period (continuous)."""
    site_id: NodeID
    product_id: ProductID
    period_id: PeriodID
    kind: ClassVar[VariableKind] = VariableKind.PRODUCTION

    def label(self) -> str:
        return f"prod[{self.site_id}|{self.product_id}|{self.period_id}]"


@dataclass(frozen=True)
class TripKey:
    """Vehicle trips on an FTL lane in a period (integer)."""
    path_id: PathID
    from_id: NodeID
    to_id: NodeID
    vehicle_type_id: VehicleTypeID
    period_id: PeriodID
    kind: ClassVar[VariableKind] = VariableKind.TRIP

    def label(self) -> str:
        return f"trips[{self.path_id}|{self.vehicle_type_id}|{self.period_id}]"


@dataclass(frozen=True)
class SupplyKey:
    """Quantity drawn from a supplier in a period (continuous)."""
    supplier_id: NodeID
    product_id: ProductID
    period_id: PeriodID
    kind: ClassVar[VariableKind] = VariableKind.SUPPLY

    def label(self) -> str:
        return f"supply[{self.supplier_id}|{self.product_id}|{self.period_id}]"


@dataclass(frozen=True)
class StockKey:
    """Quantity drawn from on-hand inventory at a site in a period (continuous)."""
    site_id: NodeID
    product_id: ProductID
    period_id: PeriodID
    kind: ClassVar[VariableKind] = VariableKind.STOCK

    def label(self) -> str:
        return f"stock[{self.site_id}|{self.product_id}|{self.period_id}]"


@dataclass(frozen=True)
class ShortageKey:
    """Unmet customer demand in a period (continuous, max_service only)."""
    customer_id: NodeID
    product_id: ProductID
    period_id: PeriodID
    kind: ClassVar[VariableKind] = VariableKind.SHORTAGE

    def label(self) -> str:
        return f"short[{self.customer_id}|{self.product_id}|{self.period_id}]"


VariableKey = Union[FlowKey, ProductionKey, TripKey, SupplyKey, StockKey, ShortageKey]


@dataclass
class Variable:
    """A registered decision variable.

    Attributes:
        index: Position in the arena (column in the LP)
        key: Tagged identity of the variable
        cost: Monetary cost per unit (per trip for trip variables)
        upper_bound: Upper bound (lower bound is always 0)
        is_integer: Whether the variable must take integer values
        lead_time: Lead-time proxy per unit, used by the min_time objective
    """
    index: int
    key: VariableKey
    cost: float
    upper_bound: float
    is_integer: bool = False
    lead_time: float = 0.0

    @property
    def kind(self) -> VariableKind:
        return self.key.kind

    @property
    def name(self) -> str:
        return self.key.label()


class VariableArena:
    """Ordered registry of decision variables addressed by integer index."""

    def __init__(self):
        self._variables: List[Variable] = []
        self._index: Dict[VariableKey, int] = {}

    def add(
        self,
        key: VariableKey,
        cost: float = 0.0,
        upper_bound: float = float("inf"),
        is_integer: bool = False,
        lead_time: float = 0.0,
    ) -> int:
        """Register a variable and return its index.

        Raises:
            ValueError: If the key is already registered
        """
        if key in self._index:
            raise ValueError(f"Duplicate variable key: {key.label()}")
        index = len(self._variables)
        self._variables.append(Variable(
            index=index,
            key=key,
            cost=float(cost),
            upper_bound=float(upper_bound),
            is_integer=is_integer,
            lead_time=float(lead_time),
        ))
        self._index[key] = index
        return index

    def index_of(self, key: VariableKey) -> Optional[int]:
        return self._index.get(key)

    def of_kind(self, kind: VariableKind) -> List[Variable]:
        return [v for v in self._variables if v.kind == kind]

    def count_by_kind(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in VariableKind}
        for variable in self._variables:
            counts[variable.kind.value] += 1
        return counts

    @property
    def costs(self) -> List[float]:
        return [v.cost for v in self._variables]

    @property
    def upper_bounds(self) -> List[float]:
        return [v.upper_bound for v in self._variables]

    @property
    def integer_indices(self) -> List[int]:
        return [v.index for v in self._variables if v.is_integer]

    def __contains__(self, key) -> bool:
        return key in self._index

    def __getitem__(self, index: int) -> Variable:
        return self._variables[index]

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)
