"""Solver-independent linear program representation.

The model builder produces a LinearProgram; the tableau solver and the Pyomo
backend both consume it and return a SolverOutcome.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set

from .types import SolveStatus


class ConstraintSense(str, Enum):
    """Direction of a linear constraint."""
    LE = "<="
    GE = ">="
    EQ = "=="

    def flipped(self) -> "ConstraintSense":
        if self is ConstraintSense.LE:
            return ConstraintSense.GE
        if self is ConstraintSense.GE:
            return ConstraintSense.LE
        return self


@dataclass
class Constraint:
    """Sparse linear constraint: sum(coefficients[j] * x[j]) <sense> rhs."""
    name: str
    coefficients: Dict[int, float]
    sense: ConstraintSense
    rhs: float

    def is_empty(self) -> bool:
        return all(coef == 0 for coef in self.coefficients.values())

    def evaluate(self, values: Sequence[float]) -> float:
        return sum(coef * values[j] for j, coef in self.coefficients.items())

    def violation(self, values: Sequence[float]) -> float:
        """Amount by which the constraint is violated (0 when satisfied)."""
        lhs = self.evaluate(values)
        if self.sense == ConstraintSense.LE:
            return max(0.0, lhs - self.rhs)
        if self.sense == ConstraintSense.GE:
            return max(0.0, self.rhs - lhs)
        return abs(lhs - self.rhs)

    def is_satisfied(self, values: Sequence[float], tolerance: float = 1e-6) -> bool:
        return self.violation(values) <= tolerance


@dataclass
class LinearProgram:
    """Linear program with non-negative variables.

    Attributes:
        objective: Objective coefficient per variable
        constraints: Linear constraints
        upper_bounds: Upper bound per variable (lower bound is always 0)
        integer_variables: Indices of variables that must be integral
        maximize: Maximize instead of minimize
        variable_names: Optional display names, used in logs and Pyomo exports
    """
    objective: List[float]
    constraints: List[Constraint] = field(default_factory=list)
    upper_bounds: Optional[List[float]] = None
    integer_variables: Set[int] = field(default_factory=set)
    maximize: bool = False
    variable_names: Optional[List[str]] = None

    def __post_init__(self):
        if self.upper_bounds is None:
            self.upper_bounds = [float("inf")] * len(self.objective)
        if len(self.upper_bounds) != len(self.objective):
            raise ValueError(
                f"upper_bounds has {len(self.upper_bounds)} entries, "
                f"expected {len(self.objective)}"
            )

    @property
    def num_variables(self) -> int:
        return len(self.objective)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    def add_constraint(
        self,
        name: str,
        coefficients: Dict[int, float],
        sense: ConstraintSense,
        rhs: float,
    ) -> Constraint:
        for j in coefficients:
            if not 0 <= j < self.num_variables:
                raise IndexError(f"Constraint {name} references unknown variable {j}")
        constraint = Constraint(name=name, coefficients=dict(coefficients), sense=sense, rhs=float(rhs))
        self.constraints.append(constraint)
        return constraint

    def objective_value(self, values: Sequence[float]) -> float:
        return sum(c * values[j] for j, c in enumerate(self.objective) if c)

    def max_violation(self, values: Sequence[float]) -> float:
        """Largest constraint violation of a candidate solution."""
        return max((con.violation(values) for con in self.constraints), default=0.0)


@dataclass
class SolverOutcome:
    """Raw result of solving a LinearProgram.

    Attributes:
        status: Solve status
        feasible: True when values satisfy every constraint (optimal, or a
            limit was hit after a feasible point was found)
        values: One value per variable (empty when not feasible)
        objective_value: Objective at values, in the program's own sense
        iterations: Simplex pivots performed (0 for external solvers)
        solver_name: Solver that produced the result
        phase1_objective: Sum of artificial variables after phase 1 (tableau only)
        message: Diagnostic message for non-optimal outcomes
    """
    status: SolveStatus
    feasible: bool
    values: List[float] = field(default_factory=list)
    objective_value: Optional[float] = None
    iterations: int = 0
    solver_name: str = "tableau"
    phase1_objective: Optional[float] = None
    message: Optional[str] = None

    def is_optimal(self) -> bool:
        return self.status == SolveStatus.OPTIMAL
