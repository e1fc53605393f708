"""Network flow optimization engine for multi-echelon supply chains.

Turns a relational description of a logistics network (suppliers, factories,
distribution centres, customers and the lanes between them) into a linear
program, solves it and reports product flows, production, vehicle trips and
costs.
"""

__version__ = "1.0.0"

from .exceptions import (
    NetworkOptimizerError,
    NetworkDataError,
    UnresolvedReferenceError,
    SolverUnavailableError,
)
from .models import NetworkData, OptimizationRequest, OptimizationSettings, ObjectiveType
from .optimization import NetworkOptimizer, OptimizerConfig, OptimizationResult
from .service import handle_optimize_request, ServiceResponse

__all__ = [
    "__version__",
    "NetworkOptimizerError",
    "NetworkDataError",
    "UnresolvedReferenceError",
    "SolverUnavailableError",
    "NetworkData",
    "OptimizationRequest",
    "OptimizationSettings",
    "ObjectiveType",
    "NetworkOptimizer",
    "OptimizerConfig",
    "OptimizationResult",
    "handle_optimize_request",
    "ServiceResponse",
]
