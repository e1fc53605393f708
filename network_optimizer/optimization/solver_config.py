"""Solver selection and configuration.

Maps the solver names accepted in request settings onto the built-in tableau
solver or a Pyomo solver, checks availability and creates Pyomo solver
instances with their time-limit options.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pyomo.environ import SolverFactory

logger = logging.getLogger(__name__)


class SolverType(str, Enum):
    """Supported solvers."""
    TABLEAU = "tableau"
    APPSI_HIGHS = "appsi_highs"
    HIGHS = "highs"
    CBC = "cbc"
    GLPK = "glpk"
    GUROBI = "gurobi"
    CPLEX = "cplex"

    @property
    def is_builtin(self) -> bool:
        return self is SolverType.TABLEAU


#: Alternative spellings accepted in request settings
SOLVER_ALIASES: Dict[str, SolverType] = {
    "": SolverType.TABLEAU,
    "simplex": SolverType.TABLEAU,
    "builtin": SolverType.TABLEAU,
    "default": SolverType.TABLEAU,
    "pulp_cbc": SolverType.CBC,
    "coin_cbc": SolverType.CBC,
    "glpk_mi": SolverType.GLPK,
}


def resolve_solver(name: Optional[str]) -> Tuple[SolverType, Optional[str]]:
    """Map a requested solver name to a SolverType.

    Unknown names fall back to the tableau solver.

    Returns:
        (solver type, warning message or None)
    """
    key = (name or "").strip().lower()
    if key in SOLVER_ALIASES:
        return SOLVER_ALIASES[key], None
    try:
        return SolverType(key), None
    except ValueError:
        warning = f"Unknown solver '{name}'; using the built-in tableau solver"
        logger.warning(warning)
        return SolverType.TABLEAU, warning


class SolverConfig:
    """Availability checks and solver creation for Pyomo solvers.

    Example:
        config = SolverConfig()
        if config.is_available(SolverType.CBC):
            solver = config.create_solver(SolverType.CBC, {'seconds': 60})
    """

    def __init__(self):
        self._availability: Dict[SolverType, bool] = {}

    def is_available(self, solver_type: SolverType) -> bool:
        """Check whether a solver can be used (cached per instance)."""
        if solver_type.is_builtin:
            return True
        if solver_type not in self._availability:
            self._availability[solver_type] = self._check_available(solver_type)
        return self._availability[solver_type]

    @staticmethod
    def _check_available(solver_type: SolverType) -> bool:
        try:
            if solver_type == SolverType.APPSI_HIGHS:
                from pyomo.contrib.appsi.solvers import Highs
                return bool(Highs().available())
            solver = SolverFactory(solver_type.value)
            return bool(solver.available(exception_flag=False))
        except Exception as e:
            logger.debug(f"Solver {solver_type.value} unavailable: {e}")
            return False

    @staticmethod
    def time_limit_options(solver_type: SolverType, time_limit_seconds: Optional[float]) -> Dict[str, Any]:
        """Solver-specific option names for a time limit."""
        if time_limit_seconds is None:
            return {}
        if solver_type == SolverType.CBC:
            return {'seconds': time_limit_seconds}
        if solver_type == SolverType.GLPK:
            return {'tmlim': int(time_limit_seconds)}
        if solver_type == SolverType.GUROBI:
            return {'TimeLimit': time_limit_seconds}
        if solver_type == SolverType.CPLEX:
            return {'timelimit': time_limit_seconds}
        if solver_type == SolverType.HIGHS:
            return {'time_limit': time_limit_seconds}
        return {}

    def create_solver(self, solver_type: SolverType, options: Optional[Dict[str, Any]] = None):
        """Create a legacy-interface Pyomo solver.

        Raises:
            RuntimeError: If the solver is not available
        """
        if solver_type.is_builtin or solver_type == SolverType.APPSI_HIGHS:
            raise ValueError(f"{solver_type.value} is not created through SolverFactory")
        if not self.is_available(solver_type):
            raise RuntimeError(
                f"Solver '{solver_type.value}' is not available. "
                f"Install it or choose another solver."
            )
        solver = SolverFactory(solver_type.value)
        for option, value in (options or {}).items():
            solver.options[option] = value
        return solver
