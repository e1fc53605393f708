"""Pluggable objective strategies.

Each strategy turns the variable arena into an objective vector. The model
builder records a monetary cost and a lead-time proxy on every variable;
strategies only decide how to weigh them.

- MinCostObjective: monetary cost.
- MinTimeObjective: lead time (transit days on lanes, production days at
  sites) plus a small cost weight so equal-time plans resolve to the cheaper one.
- MaxServiceObjective: monetary cost plus a penalty per unit of unmet demand.
  Demand may be left unserved through shortage variables.

Example:
    strategy = get_objective_strategy(ObjectiveType.MIN_TIME)
    objective = strategy.coefficients(arena, config)
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Type, Union

from ..models.settings import ObjectiveType
from .config import OptimizerConfig
from .types import VariableArena, VariableKind


class ObjectiveStrategy(ABC):
    """Derives objective coefficients from registered variables."""

    #: Objective this strategy implements
    objective_type: ObjectiveType

    #: Whether the builder should add shortage variables for demand
    allows_shortage: bool = False

    @abstractmethod
    def coefficients(self, arena: VariableArena, config: OptimizerConfig) -> List[float]:
        """Return one objective coefficient per variable, in arena order."""
        raise NotImplementedError("Subclass must implement coefficients()")

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.objective_type.value})"


class MinCostObjective(ObjectiveStrategy):
    """Minimize total transport, trip and production cost."""

    objective_type = ObjectiveType.MIN_COST

    def coefficients(self, arena: VariableArena, config: OptimizerConfig) -> List[float]:
        return [variable.cost for variable in arena]


class MinTimeObjective(ObjectiveStrategy):
    """Minimize unit-weighted lead time, with cost as a tie-break."""

    objective_type = ObjectiveType.MIN_TIME

    def coefficients(self, arena: VariableArena, config: OptimizerConfig) -> List[float]:
        weight = config.time_cost_tiebreak
        return [variable.lead_time + weight * variable.cost for variable in arena]


class MaxServiceObjective(ObjectiveStrategy):
    """Serve as much demand as possible, then minimize cost.

    Unmet demand is penalized per unit, so shortage is only chosen when demand
    cannot be served at all or serving it costs more than the penalty.
    """

    objective_type = ObjectiveType.MAX_SERVICE
    allows_shortage = True

    def coefficients(self, arena: VariableArena, config: OptimizerConfig) -> List[float]:
        penalty = config.shortage_penalty_per_unit
        return [
            variable.cost + (penalty if variable.kind == VariableKind.SHORTAGE else 0.0)
            for variable in arena
        ]


OBJECTIVE_STRATEGIES: Dict[ObjectiveType, Type[ObjectiveStrategy]] = {
    ObjectiveType.MIN_COST: MinCostObjective,
    ObjectiveType.MIN_TIME: MinTimeObjective,
    ObjectiveType.MAX_SERVICE: MaxServiceObjective,
}


def get_objective_strategy(objective: Union[ObjectiveType, str]) -> ObjectiveStrategy:
    """Instantiate the strategy registered for an objective.

    Raises:
        ValueError: If the objective is unknown
    """
    try:
        objective_type = ObjectiveType(objective)
    except ValueError:
        valid = ", ".join(o.value for o in ObjectiveType)
        raise ValueError(f"Unknown objective '{objective}'. Valid objectives: {valid}") from None
    return OBJECTIVE_STRATEGIES[objective_type]()
