"""Tableau-based primal simplex solver.

Solves the continuous relaxation of a LinearProgram with a two-phase primal
simplex on one dense numpy tableau:

- Rows with a negative right-hand side are negated first.
- ``<=`` rows get a +1 slack, ``>=`` rows a -1 surplus and an artificial,
  ``==`` rows an artificial. Finite upper bounds become ``x <= ub`` rows.
- Phase 1 minimizes the sum of artificials. A positive optimum means the
  program is infeasible. Artificials left in the basis at zero are pivoted
  out, or their rows dropped as redundant.
- Phase 2 minimizes the real objective (negated when maximizing).

Entering columns follow Dantzig's rule (most negative reduced cost) and switch
to Bland's rule after a run of degenerate pivots. The iteration cap counts
pivots of both phases.

Integer-marked variables are not branched on; callers round them.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from . import constants as C
from .linear_program import ConstraintSense, LinearProgram, SolverOutcome
from .types import SolveStatus

logger = logging.getLogger(__name__)


@dataclass
class _PivotState:
    """Per-solve counters shared by both phases."""
    iterations: int = 0
    degenerate_streak: int = 0
    use_bland: bool = False
    degenerate_pivots: int = 0


@dataclass
class _StandardRow:
    coefficients: np.ndarray
    sense: ConstraintSense
    rhs: float


class TableauSimplexSolver:
    """Two-phase primal simplex on a dense tableau.

    Example:
        solver = TableauSimplexSolver(max_iterations=500)
        outcome = solver.solve(program)
        if outcome.feasible:
            x = outcome.values
    """

    name = "tableau"

    def __init__(
        self,
        max_iterations: int = C.MAX_ITERATIONS,
        epsilon: float = C.PIVOT_TOLERANCE,
        degenerate_pivot_limit: int = C.DEGENERATE_PIVOT_LIMIT,
    ):
        self.max_iterations = max_iterations
        self.epsilon = epsilon
        self.degenerate_pivot_limit = degenerate_pivot_limit

    @classmethod
    def from_config(cls, config) -> "TableauSimplexSolver":
        return cls(
            max_iterations=config.max_iterations,
            epsilon=config.epsilon,
            degenerate_pivot_limit=config.degenerate_pivot_limit,
        )

    def solve(self, program: LinearProgram) -> SolverOutcome:
        """Solve the continuous relaxation of a linear program.

        Never raises for infeasible or unbounded programs; check
        ``outcome.feasible`` before reading values.

        Args:
            program: Linear program to solve

        Returns:
            SolverOutcome with status, values clipped to bounds and objective
        """
        n = program.num_variables
        rows = self._standard_rows(program)
        tableau, basis, art_start = self._initial_tableau(rows, n)
        m = len(basis)
        width = tableau.shape[1] - 1
        state = _PivotState()

        logger.info(
            f"Tableau simplex: {m} rows x {width} columns "
            f"({n} structural, {art_start - n} slack, {width - art_start} artificial)"
        )

        # Phase 1: drive artificials to zero
        if width > art_start:
            tableau[-1, art_start:width] = 1.0
            for i, b in enumerate(basis):
                if b >= art_start:
                    tableau[-1, :] -= tableau[i, :]

            status = self._iterate(tableau, basis, state, phase=1)
            phase1_objective = max(0.0, float(-tableau[-1, -1]))

            if status == SolveStatus.ITERATION_LIMIT:
                logger.warning(
                    f"Iteration limit ({self.max_iterations}) reached in phase 1, "
                    f"infeasibility remaining {phase1_objective:.6g}"
                )
                return SolverOutcome(
                    status=SolveStatus.ITERATION_LIMIT,
                    feasible=False,
                    iterations=state.iterations,
                    phase1_objective=phase1_objective,
                    message=(
                        f"Iteration limit of {self.max_iterations} reached before a "
                        f"feasible solution was found."
                    ),
                )
            if status != SolveStatus.OPTIMAL or phase1_objective > self.epsilon:
                logger.info(f"Phase 1 ended with infeasibility {phase1_objective:.6g}: infeasible")
                return SolverOutcome(
                    status=SolveStatus.INFEASIBLE,
                    feasible=False,
                    iterations=state.iterations,
                    phase1_objective=phase1_objective,
                    message=C.INFEASIBLE_MESSAGE,
                )

            tableau, basis = self._remove_artificials(tableau, basis, art_start)
        else:
            phase1_objective = 0.0

        # Phase 2: optimize the real objective
        costs = np.zeros(tableau.shape[1] - 1)
        costs[:n] = program.objective
        if program.maximize:
            costs[:n] *= -1.0
        tableau[-1, :] = 0.0
        tableau[-1, :-1] = costs
        for i, b in enumerate(basis):
            if costs[b] != 0.0:
                tableau[-1, :] -= costs[b] * tableau[i, :]

        state.degenerate_streak = 0
        status = self._iterate(tableau, basis, state, phase=2)

        if status == SolveStatus.UNBOUNDED:
            logger.info("Phase 2 found an unbounded direction")
            return SolverOutcome(
                status=SolveStatus.UNBOUNDED,
                feasible=False,
                iterations=state.iterations,
                phase1_objective=phase1_objective,
                message=C.UNBOUNDED_MESSAGE,
            )

        values = self._read_values(tableau, basis, n, program.upper_bounds)
        objective_value = float(np.dot(np.asarray(program.objective, dtype=float), values)) if n else 0.0

        message = None
        if status == SolveStatus.ITERATION_LIMIT:
            message = (
                f"Iteration limit of {self.max_iterations} reached before optimality; "
                f"the returned plan is feasible but may not be optimal."
            )
            logger.warning(message)
        else:
            logger.info(
                f"Optimal after {state.iterations} pivots "
                f"({state.degenerate_pivots} degenerate), objective = {objective_value:,.4f}"
            )

        return SolverOutcome(
            status=status,
            feasible=True,
            values=values.tolist(),
            objective_value=objective_value,
            iterations=state.iterations,
            solver_name=self.name,
            phase1_objective=phase1_objective,
            message=message,
        )

    def _standard_rows(self, program: LinearProgram) -> List[_StandardRow]:
        """Dense rows with non-negative right-hand sides, plus upper-bound rows."""
        n = program.num_variables
        rows = []
        for constraint in program.constraints:
            coefficients = np.zeros(n)
            for j, coef in constraint.coefficients.items():
                coefficients[j] += coef
            sense = ConstraintSense(constraint.sense)
            rhs = float(constraint.rhs)
            if rhs < 0:
                coefficients = -coefficients
                rhs = -rhs
                sense = sense.flipped()
            rows.append(_StandardRow(coefficients, sense, rhs))

        for j, ub in enumerate(program.upper_bounds):
            if np.isfinite(ub):
                coefficients = np.zeros(n)
                coefficients[j] = 1.0
                rows.append(_StandardRow(coefficients, ConstraintSense.LE, max(0.0, float(ub))))
        return rows

    def _initial_tableau(
        self, rows: List[_StandardRow], n: int
    ) -> Tuple[np.ndarray, List[int], int]:
        """Build the tableau and starting basis.

        Returns:
            (tableau, basis, index of the first artificial column)
        """
        m = len(rows)
        slack_rows = [i for i, row in enumerate(rows) if row.sense != ConstraintSense.EQ]
        art_rows = [i for i, row in enumerate(rows) if row.sense != ConstraintSense.LE]
        width = n + len(slack_rows) + len(art_rows)

        tableau = np.zeros((m + 1, width + 1))
        basis = [-1] * m
        for i, row in enumerate(rows):
            tableau[i, :n] = row.coefficients
            tableau[i, -1] = row.rhs

        col = n
        for i in slack_rows:
            if rows[i].sense == ConstraintSense.LE:
                tableau[i, col] = 1.0
                basis[i] = col
            else:
                tableau[i, col] = -1.0
            col += 1

        art_start = col
        for i in art_rows:
            tableau[i, col] = 1.0
            basis[i] = col
            col += 1

        return tableau, basis, art_start

    def _iterate(
        self,
        tableau: np.ndarray,
        basis: List[int],
        state: _PivotState,
        phase: int,
    ) -> SolveStatus:
        """Pivot until no reduced cost is negative or a limit is hit."""
        m = len(basis)
        eps = self.epsilon

        while True:
            reduced = tableau[-1, :-1]
            candidates = np.flatnonzero(reduced < -eps)
            if candidates.size == 0:
                return SolveStatus.OPTIMAL
            if state.iterations >= self.max_iterations:
                return SolveStatus.ITERATION_LIMIT

            if state.use_bland:
                entering = int(candidates[0])
            else:
                entering = int(candidates[np.argmin(reduced[candidates])])

            column = tableau[:m, entering]
            eligible = np.flatnonzero(column > eps)
            if eligible.size == 0:
                return SolveStatus.UNBOUNDED

            ratios = np.maximum(tableau[eligible, -1], 0.0) / column[eligible]
            best = float(ratios.min())
            ties = eligible[ratios <= best + eps]
            leaving = int(min(ties, key=lambda r: basis[r]))

            self._pivot(tableau, basis, leaving, entering)
            state.iterations += 1
            logger.debug(
                f"Phase {phase} pivot {state.iterations}: column {entering} enters, "
                f"row {leaving} leaves, step {best:.6g}"
            )

            if best <= eps:
                state.degenerate_pivots += 1
                state.degenerate_streak += 1
                if not state.use_bland and state.degenerate_streak >= self.degenerate_pivot_limit:
                    state.use_bland = True
                    logger.debug(
                        f"{state.degenerate_streak} consecutive degenerate pivots, "
                        f"switching to Bland's rule"
                    )
            else:
                state.degenerate_streak = 0

    @staticmethod
    def _pivot(tableau: np.ndarray, basis: List[int], row: int, col: int) -> None:
        tableau[row, :] /= tableau[row, col]
        factors = tableau[:, col].copy()
        factors[row] = 0.0
        tableau -= np.outer(factors, tableau[row, :])
        basis[row] = col

    def _remove_artificials(
        self,
        tableau: np.ndarray,
        basis: List[int],
        art_start: int,
    ) -> Tuple[np.ndarray, List[int]]:
        """Pivot zero-valued artificials out of the basis and drop artificial columns."""
        redundant = []
        for i, b in enumerate(basis):
            if b < art_start:
                continue
            nonzero = np.flatnonzero(np.abs(tableau[i, :art_start]) > self.epsilon)
            if nonzero.size:
                self._pivot(tableau, basis, i, int(nonzero[0]))
            else:
                redundant.append(i)

        if redundant:
            logger.debug(f"Dropping {len(redundant)} redundant row(s) after phase 1")
            tableau = np.delete(tableau, redundant, axis=0)
            dropped = set(redundant)
            basis = [b for i, b in enumerate(basis) if i not in dropped]

        width = tableau.shape[1] - 1
        tableau = np.delete(tableau, np.s_[art_start:width], axis=1)
        return tableau, basis

    @staticmethod
    def _read_values(
        tableau: np.ndarray,
        basis: List[int],
        n: int,
        upper_bounds: Optional[List[float]],
    ) -> np.ndarray:
        """Basic variable values for the structural columns, clipped to bounds."""
        x = np.zeros(tableau.shape[1] - 1)
        for i, b in enumerate(basis):
            x[b] = tableau[i, -1]
        upper = np.asarray(upper_bounds if upper_bounds is not None else [np.inf] * n, dtype=float)
        return np.clip(x[:n], 0.0, upper)
