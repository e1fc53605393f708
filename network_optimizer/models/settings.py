"""Request-level settings and the request envelope."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .network import NetworkData


class ObjectiveType(str, Enum):
    """Optimization objective."""
    MIN_COST = "min_cost"
    MIN_TIME = "min_time"
    MAX_SERVICE = "max_service"


class OptimizationSettings(BaseModel):
    """Objective and solver selection for one request.

    Attributes:
        objective: min_cost, min_time or max_service
        solver: Solver name ("tableau" for the built-in simplex, or a Pyomo
            solver such as "appsi_highs", "cbc", "glpk", "gurobi")
    """
    objective: ObjectiveType = Field(default=ObjectiveType.MIN_COST, description="Objective")
    solver: str = Field(default="tableau", description="Solver name")

    model_config = ConfigDict(extra="ignore")

    @field_validator("solver", mode="before")
    @classmethod
    def normalize_solver(cls, v):
        if v is None:
            return "tableau"
        return str(v).strip().lower()


class OptimizationRequest(BaseModel):
    """Payload accepted by the optimize entry point."""
    data: NetworkData
    settings: OptimizationSettings = Field(default_factory=OptimizationSettings)

    model_config = ConfigDict(extra="ignore")
