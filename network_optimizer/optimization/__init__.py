"""Optimization module for network flow planning.

This module turns network data into a linear program, solves it with the
built-in two-phase tableau simplex or an external Pyomo solver, and extracts
product flows, production, vehicle trips and the cost summary.

The primary entry point is NetworkOptimizer, which wraps NetworkFlowModel
and reports data problems as structured results.
"""

from .config import OptimizerConfig
from .solver_config import (
    SolverConfig,
    SolverType,
    resolve_solver,
)
from .types import SolveStatus, VariableArena, VariableKind
from .linear_program import ConstraintSense, LinearProgram, SolverOutcome
from .simplex import TableauSimplexSolver
from .objectives import (
    ObjectiveStrategy,
    MinCostObjective,
    MinTimeObjective,
    MaxServiceObjective,
    get_objective_strategy,
)
from .model_builder import NetworkLinearModel, NetworkModelBuilder
from .result_schema import OptimizationSolution
from .solution_extractor import SolutionExtractor
from .pyomo_backend import PyomoBackend
from .base_model import (
    BaseOptimizationModel,
    OptimizationResult,
)
from .network_model import NetworkFlowModel, NetworkOptimizer

__all__ = [
    # Configuration
    "OptimizerConfig",
    "SolverConfig",
    "SolverType",
    "resolve_solver",
    # Linear programs and solvers
    "SolveStatus",
    "VariableArena",
    "VariableKind",
    "ConstraintSense",
    "LinearProgram",
    "SolverOutcome",
    "TableauSimplexSolver",
    "PyomoBackend",
    # Objectives
    "ObjectiveStrategy",
    "MinCostObjective",
    "MinTimeObjective",
    "MaxServiceObjective",
    "get_objective_strategy",
    # Model building and extraction
    "NetworkLinearModel",
    "NetworkModelBuilder",
    "OptimizationSolution",
    "SolutionExtractor",
    # Base model
    "BaseOptimizationModel",
    "OptimizationResult",
    # Network model (entry point)
    "NetworkFlowModel",
    "NetworkOptimizer",
]
