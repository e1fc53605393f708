"""Base class for optimization models.

This module provides an abstract base class that optimization models inherit
from, providing the common build → solve → extract workflow and solver
dispatch between the built-in tableau solver and Pyomo solvers.

IMPORTANT: All models must return OptimizationSolution (Pydantic validated) from extract_solution().
This ensures strict interface compliance and fail-fast validation at the model boundary.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..exceptions import SolverUnavailableError
from .config import OptimizerConfig
from .linear_program import SolverOutcome
from .pyomo_backend import PyomoBackend
from .result_schema import OptimizationSolution
from .simplex import TableauSimplexSolver
from .solver_config import SolverConfig, resolve_solver
from .types import SolveStatus

logger = logging.getLogger(__name__)


@dataclass
class OptimizationResult:
    """
    Results from optimization model solve.

    Attributes:
        success: Whether a usable solution was produced
        status: Solve status
        objective_value: Objective function value at the solution
        solve_time_seconds: Time taken to solve (seconds)
        build_time_seconds: Time taken to build the model (seconds)
        solver_name: Name of solver used
        iterations: Simplex pivots (tableau solver only)
        num_variables: Number of decision variables
        num_constraints: Number of constraints
        num_integer_vars: Number of integer variables
        infeasibility_message: Message explaining why no solution was produced
        solution: Extracted solution (None unless feasible)
        issues: Structured data problems (unresolved references)
        warnings: Non-fatal issues
        metadata: Additional result metadata
    """
    success: bool
    status: SolveStatus
    objective_value: Optional[float] = None
    solve_time_seconds: Optional[float] = None
    build_time_seconds: Optional[float] = None
    solver_name: Optional[str] = None
    iterations: int = 0
    num_variables: int = 0
    num_constraints: int = 0
    num_integer_vars: int = 0
    infeasibility_message: Optional[str] = None
    solution: Optional[OptimizationSolution] = None
    issues: List[Dict[str, str]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_optimal(self) -> bool:
        """Check if solution is optimal."""
        return self.success and self.status == SolveStatus.OPTIMAL

    def is_feasible(self) -> bool:
        """Check if solution is feasible (optimal, or a limit was hit after a feasible point)."""
        return self.success and self.status in (
            SolveStatus.OPTIMAL,
            SolveStatus.ITERATION_LIMIT,
            SolveStatus.TIME_LIMIT,
        )

    def is_infeasible(self) -> bool:
        """Check if model is infeasible."""
        return self.status == SolveStatus.INFEASIBLE

    def __str__(self) -> str:
        """String representation."""
        result = f"OptimizationResult: {self.status.value.upper()}"
        if self.objective_value is not None:
            result += f", objective = {self.objective_value:,.2f}"
        if self.solve_time_seconds is not None:
            result += f", time = {self.solve_time_seconds:.2f}s"
        if self.iterations:
            result += f", iterations = {self.iterations}"
        return result


class BaseOptimizationModel(ABC):
    """
    Abstract base class for optimization models.

    All optimization models should inherit from this class and implement:
    - build_model(): Construct the linear model (must expose ``.program``)
    - extract_solution(): Turn a feasible SolverOutcome into an OptimizationSolution

    This base class provides:
    - Solver selection (tableau or Pyomo)
    - Model building and solving workflow
    - Result extraction and validation
    """

    def __init__(
        self,
        config: Optional[OptimizerConfig] = None,
        solver_config: Optional[SolverConfig] = None,
    ):
        """
        Initialize optimization model.

        Args:
            config: OptimizerConfig instance. If None, creates default config.
            solver_config: SolverConfig for Pyomo solvers. If None, creates default.
        """
        self.config = config or OptimizerConfig()
        self.solver_config = solver_config or SolverConfig()
        self.model = None
        self.outcome: Optional[SolverOutcome] = None
        self.result: Optional[OptimizationResult] = None
        self.solution: Optional[OptimizationSolution] = None
        self.solver_warnings: List[str] = []
        self._build_time: Optional[float] = None

    @abstractmethod
    def build_model(self):
        """
        Build and return the linear model.

        This method must be implemented by subclasses. The returned object
        must expose the LinearProgram as ``.program``.
        """
        raise NotImplementedError("Subclass must implement build_model()")

    @abstractmethod
    def extract_solution(self, outcome: SolverOutcome) -> OptimizationSolution:
        """
        Extract solution values from a feasible solver outcome.

        This method must be implemented by subclasses and MUST return
        a validated OptimizationSolution Pydantic model.

        Raises:
            ValidationError: If solution data doesn't conform to schema
        """
        raise NotImplementedError("Subclass must implement extract_solution()")

    def solve(self, solver_name: Optional[str] = None, tee: bool = False) -> OptimizationResult:
        """
        Build and solve the optimization model.

        Args:
            solver_name: Solver to use ("tableau", "appsi_highs", "cbc", ...);
                None or unknown names use the tableau solver
            tee: If True, stream external solver output

        Returns:
            OptimizationResult with solve status, objective value and solution

        Example:
            result = model.solve(solver_name='appsi_highs')
            if result.is_feasible():
                print(result.solution.total_cost)
        """
        build_start = time.time()
        self.model = self.build_model()
        self._build_time = time.time() - build_start
        program = self.model.program

        solver_type, warning = resolve_solver(solver_name)
        self.solver_warnings = [warning] if warning else []

        solve_start = time.time()
        if solver_type.is_builtin:
            outcome = TableauSimplexSolver.from_config(self.config).solve(program)
        else:
            backend = PyomoBackend(
                solver_config=self.solver_config,
                time_limit_seconds=self.config.time_limit_seconds,
                tee=tee,
            )
            try:
                outcome = backend.solve(program, solver_type)
            except SolverUnavailableError as e:
                logger.warning(str(e))
                self.result = OptimizationResult(
                    success=False,
                    status=SolveStatus.SOLVER_UNAVAILABLE,
                    solver_name=solver_type.value,
                    build_time_seconds=self._build_time,
                    infeasibility_message=str(e),
                    warnings=list(self.solver_warnings),
                    **self._counts(),
                )
                return self.result
        solve_time = time.time() - solve_start

        self.outcome = outcome
        result = self._process_outcome(outcome, solve_time)
        self.result = result

        if outcome.feasible:
            try:
                self.solution = self.extract_solution(outcome)
            except ValidationError as ve:
                # A schema violation is a bug in extract_solution(), not a data problem
                logger.error(f"CRITICAL: Model violates OptimizationSolution schema: {ve}")
                raise
            result.solution = self.solution
            result.warnings = list(self.solution.warnings)

        logger.info(str(result))
        return result

    def _counts(self) -> Dict[str, int]:
        program = self.model.program if self.model is not None else None
        if program is None:
            return {'num_variables': 0, 'num_constraints': 0, 'num_integer_vars': 0}
        return {
            'num_variables': program.num_variables,
            'num_constraints': program.num_constraints,
            'num_integer_vars': len(program.integer_variables),
        }

    def _process_outcome(self, outcome: SolverOutcome, solve_time: float) -> OptimizationResult:
        """
        Process a solver outcome into OptimizationResult.

        Args:
            outcome: Solver outcome
            solve_time: Time taken to solve

        Returns:
            OptimizationResult
        """
        warnings = list(self.solver_warnings)
        if not outcome.feasible and outcome.message:
            infeasibility_message = outcome.message
        else:
            infeasibility_message = None

        return OptimizationResult(
            success=outcome.feasible,
            status=outcome.status,
            objective_value=outcome.objective_value,
            solve_time_seconds=solve_time,
            build_time_seconds=self._build_time,
            solver_name=outcome.solver_name,
            iterations=outcome.iterations,
            infeasibility_message=infeasibility_message,
            warnings=warnings,
            metadata={'phase1_objective': outcome.phase1_objective},
            **self._counts(),
        )

    def get_model_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about the model.

        Returns:
            Dictionary with model statistics
        """
        if self.model is None:
            return {
                'built': False,
                'num_variables': 0,
                'num_constraints': 0,
                'num_integer_vars': 0,
            }
        stats = {'built': True, 'build_time_seconds': self._build_time}
        stats.update(self._counts())
        return stats

    def reset(self) -> None:
        """Discard the built model and any results."""
        self.model = None
        self.outcome = None
        self.result = None
        self.solution = None
        self.solver_warnings = []
        self._build_time = None
