"""Solve a LinearProgram with an external MILP solver through Pyomo.

Trip variables are declared NonNegativeIntegers, so unlike the tableau
solver the returned trip counts are integral. HiGHS is driven through the
APPSI interface; every other solver goes through SolverFactory with
load_solutions=False so infeasible results can be inspected before loading.
"""

import logging
import math
import time
from typing import List, Optional

from pyomo.environ import (
    ConcreteModel,
    ConstraintList,
    NonNegativeIntegers,
    NonNegativeReals,
    Objective,
    RangeSet,
    Var,
    maximize,
    minimize,
    quicksum,
    value,
)
from pyomo.opt import SolverStatus, TerminationCondition

from ..exceptions import SolverUnavailableError
from . import constants as C
from .linear_program import ConstraintSense, LinearProgram, SolverOutcome
from .solver_config import SolverConfig, SolverType
from .types import SolveStatus

logger = logging.getLogger(__name__)


class PyomoBackend:
    """Pyomo model construction and solve for a LinearProgram.

    Example:
        backend = PyomoBackend(time_limit_seconds=30)
        outcome = backend.solve(program, SolverType.APPSI_HIGHS)
    """

    def __init__(
        self,
        solver_config: Optional[SolverConfig] = None,
        time_limit_seconds: Optional[float] = C.DEFAULT_TIME_LIMIT_SECONDS,
        tee: bool = False,
    ):
        self.solver_config = solver_config or SolverConfig()
        self.time_limit_seconds = time_limit_seconds
        self.tee = tee

    def build_pyomo_model(self, program: LinearProgram) -> ConcreteModel:
        """Translate a LinearProgram into a Pyomo ConcreteModel.

        Constraints without terms are left out; solve() checks them directly.
        """
        model = ConcreteModel(name="network_flow")
        n = program.num_variables
        integers = program.integer_variables
        upper = program.upper_bounds

        model.I = RangeSet(0, n - 1)

        def _domain(m, i):
            return NonNegativeIntegers if i in integers else NonNegativeReals

        def _bounds(m, i):
            return (0.0, upper[i] if math.isfinite(upper[i]) else None)

        model.x = Var(model.I, domain=_domain, bounds=_bounds, initialize=0.0)
        model.obj = Objective(
            expr=quicksum(coef * model.x[i] for i, coef in enumerate(program.objective) if coef),
            sense=maximize if program.maximize else minimize,
        )

        model.constraints = ConstraintList()
        for constraint in program.constraints:
            if constraint.is_empty():
                continue
            expr = quicksum(coef * model.x[j] for j, coef in constraint.coefficients.items() if coef)
            if constraint.sense == ConstraintSense.LE:
                model.constraints.add(expr <= constraint.rhs)
            elif constraint.sense == ConstraintSense.GE:
                model.constraints.add(expr >= constraint.rhs)
            else:
                model.constraints.add(expr == constraint.rhs)
        return model

    def solve(self, program: LinearProgram, solver_type: SolverType) -> SolverOutcome:
        """Solve with an external solver.

        Raises:
            SolverUnavailableError: If the solver is not installed
        """
        if not self.solver_config.is_available(solver_type):
            raise SolverUnavailableError(
                f"Solver '{solver_type.value}' is not available. "
                f"Install it or use the built-in 'tableau' solver."
            )

        empty_violations = [
            c.name for c in program.constraints
            if c.is_empty() and not c.is_satisfied([0.0] * program.num_variables)
        ]
        if empty_violations:
            logger.info(f"{len(empty_violations)} constraint(s) without terms cannot be met")
            return SolverOutcome(
                status=SolveStatus.INFEASIBLE,
                feasible=False,
                solver_name=solver_type.value,
                message=C.INFEASIBLE_MESSAGE,
            )

        model = self.build_pyomo_model(program)
        logger.info(
            f"Solving with {solver_type.value}: {model.nvariables()} variables, "
            f"{model.nconstraints()} constraints"
        )

        solve_start = time.time()
        if solver_type == SolverType.APPSI_HIGHS:
            status, feasible = self._solve_with_appsi_highs(model)
        else:
            status, feasible = self._solve_with_solver_factory(model, solver_type)
        solve_time = time.time() - solve_start
        logger.info(f"{solver_type.value} finished in {solve_time:.2f}s: {status.value}")

        if not feasible:
            message = {
                SolveStatus.INFEASIBLE: C.INFEASIBLE_MESSAGE,
                SolveStatus.UNBOUNDED: C.UNBOUNDED_MESSAGE,
            }.get(status, f"Solver {solver_type.value} returned no solution ({status.value})")
            return SolverOutcome(
                status=status,
                feasible=False,
                solver_name=solver_type.value,
                message=message,
            )

        values = self._read_values(model, program)
        message = None
        if status == SolveStatus.TIME_LIMIT:
            message = (
                f"Time limit of {self.time_limit_seconds or 0:g}s reached; "
                f"the returned plan is feasible but may not be optimal."
            )
        return SolverOutcome(
            status=status,
            feasible=True,
            values=values,
            objective_value=program.objective_value(values),
            solver_name=solver_type.value,
            message=message,
        )

    def _solve_with_appsi_highs(self, model: ConcreteModel):
        """Solve using the APPSI HiGHS interface."""
        from pyomo.contrib.appsi.base import TerminationCondition as AppsiTC
        from pyomo.contrib.appsi.solvers import Highs

        solver = Highs()
        if self.time_limit_seconds:
            solver.config.time_limit = self.time_limit_seconds
        solver.config.load_solution = False
        solver.config.stream_solver = self.tee

        results = solver.solve(model)
        tc = results.termination_condition

        if tc == AppsiTC.optimal:
            status, feasible = SolveStatus.OPTIMAL, True
        elif tc == AppsiTC.maxTimeLimit:
            status = SolveStatus.TIME_LIMIT
            feasible = getattr(results, 'best_feasible_objective', None) is not None
        elif tc in (AppsiTC.infeasible, AppsiTC.infeasibleOrUnbounded):
            status, feasible = SolveStatus.INFEASIBLE, False
        elif tc == AppsiTC.unbounded:
            status, feasible = SolveStatus.UNBOUNDED, False
        else:
            status, feasible = SolveStatus.ERROR, False

        if feasible:
            results.solution_loader.load_vars()
        return status, feasible

    def _solve_with_solver_factory(self, model: ConcreteModel, solver_type: SolverType):
        """Solve using the legacy SolverFactory interface."""
        options = self.solver_config.time_limit_options(solver_type, self.time_limit_seconds)
        solver = self.solver_config.create_solver(solver_type, options)
        results = solver.solve(
            model,
            tee=self.tee,
            symbolic_solver_labels=False,
            load_solutions=False,
        )

        solver_status = results.solver.status
        tc = results.solver.termination_condition

        if tc == TerminationCondition.optimal and solver_status == SolverStatus.ok:
            status, feasible = SolveStatus.OPTIMAL, True
        elif tc in (TerminationCondition.feasible, TerminationCondition.maxTimeLimit):
            status, feasible = SolveStatus.TIME_LIMIT, True
        elif tc in (TerminationCondition.infeasible, TerminationCondition.infeasibleOrUnbounded):
            status, feasible = SolveStatus.INFEASIBLE, False
        elif tc == TerminationCondition.unbounded:
            status, feasible = SolveStatus.UNBOUNDED, False
        else:
            logger.warning(f"Solver status {solver_status}, termination {tc}")
            status, feasible = SolveStatus.ERROR, False

        if feasible:
            try:
                model.solutions.load_from(results)
            except ValueError as e:
                logger.warning(f"No solution to load from {solver_type.value}: {e}")
                return SolveStatus.ERROR, False
        return status, feasible

    @staticmethod
    def _read_values(model: ConcreteModel, program: LinearProgram) -> List[float]:
        values = []
        for i in range(program.num_variables):
            v = value(model.x[i], exception=False)
            v = 0.0 if v is None else float(v)
            values.append(min(max(v, 0.0), program.upper_bounds[i]))
        return values
