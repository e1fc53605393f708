"""Network flow optimization model and request-level optimizer.

NetworkFlowModel ties the model builder, solver dispatch and solution
extractor together. NetworkOptimizer is the entry point used by the service
layer: it turns data problems into structured results instead of raising.

Example:
    optimizer = NetworkOptimizer()
    result = optimizer.optimize(data, OptimizationSettings(objective="min_cost"))
    if result.is_feasible():
        print(result.solution.total_cost)
"""

import logging
from typing import Dict, List, Optional

from ..exceptions import NetworkDataError, UnresolvedReferenceError
from ..models import NetworkData, OptimizationSettings
from ..validation import NetworkDataValidator, ValidationIssue, ValidationSeverity
from .base_model import BaseOptimizationModel, OptimizationResult
from .config import OptimizerConfig
from .linear_program import SolverOutcome
from .model_builder import NetworkLinearModel, NetworkModelBuilder
from .result_schema import OptimizationSolution
from .solution_extractor import SolutionExtractor
from .solver_config import SolverConfig
from .types import SolveStatus, VariableKey

logger = logging.getLogger(__name__)


class NetworkFlowModel(BaseOptimizationModel):
    """Multi-echelon network flow model for one request."""

    def __init__(
        self,
        data: NetworkData,
        settings: Optional[OptimizationSettings] = None,
        config: Optional[OptimizerConfig] = None,
        solver_config: Optional[SolverConfig] = None,
    ):
        super().__init__(config=config, solver_config=solver_config)
        self.data = data
        self.settings = settings or OptimizationSettings()

    def build_model(self) -> NetworkLinearModel:
        builder = NetworkModelBuilder(self.data, self.settings.objective, self.config)
        return builder.build()

    def extract_solution(self, outcome: SolverOutcome) -> OptimizationSolution:
        extractor = SolutionExtractor(self.model, self.config)
        return extractor.extract(outcome, extra_warnings=self.solver_warnings)

    def values_by_key(self) -> Dict[VariableKey, float]:
        """Solver value of every variable, keyed by its variable key."""
        if self.model is None or self.outcome is None or not self.outcome.feasible:
            return {}
        values = self.outcome.values
        return {v.key: values[v.index] for v in self.model.arena}

    def get_model_statistics(self) -> Dict:
        stats = super().get_model_statistics()
        if self.model is not None:
            stats.update(self.model.statistics())
        return stats

    def solve(self, solver_name: Optional[str] = None, tee: bool = False) -> OptimizationResult:
        """Solve with the requested solver (settings.solver when None)."""
        return super().solve(solver_name if solver_name is not None else self.settings.solver, tee=tee)


class NetworkOptimizer:
    """Optimize network data into an OptimizationResult.

    Unresolved references and other data problems become INVALID_DATA
    results; a missing external solver becomes SOLVER_UNAVAILABLE. Only
    programming errors propagate.
    """

    def __init__(
        self,
        config: Optional[OptimizerConfig] = None,
        solver_config: Optional[SolverConfig] = None,
        validate_data: bool = True,
    ):
        """
        Args:
            config: Optimizer configuration (defaults if None)
            solver_config: Pyomo solver configuration (defaults if None)
            validate_data: Run the pre-flight data validator and attach its
                summary to result metadata
        """
        self.config = config or OptimizerConfig()
        self.solver_config = solver_config or SolverConfig()
        self.validate_data = validate_data
        self.last_model: Optional[NetworkFlowModel] = None
        self.last_issues: List[ValidationIssue] = []

    def _validate(self, data: NetworkData) -> Dict:
        validator = NetworkDataValidator(data)
        self.last_issues = validator.validate_all()
        for issue in self.last_issues:
            if issue.severity in (ValidationSeverity.ERROR, ValidationSeverity.CRITICAL):
                logger.warning(f"[{issue.id}] {issue.title}: {issue.description}")
            else:
                logger.debug(f"[{issue.id}] {issue.title}: {issue.description}")
        return validator.get_summary_stats()

    def optimize(
        self,
        data: NetworkData,
        settings: Optional[OptimizationSettings] = None,
    ) -> OptimizationResult:
        settings = settings or OptimizationSettings()
        logger.info(
            f"Optimizing network ({data.summary()}) with objective "
            f"{settings.objective.value}, solver {settings.solver}"
        )
        validation = self._validate(data) if self.validate_data else None
        model = NetworkFlowModel(data, settings, self.config, self.solver_config)
        self.last_model = model

        try:
            result = model.solve()
        except UnresolvedReferenceError as e:
            logger.warning(str(e))
            result = OptimizationResult(
                success=False,
                status=SolveStatus.INVALID_DATA,
                infeasibility_message=str(e),
                issues=[ref.to_dict() for ref in e.references],
            )
        except NetworkDataError as e:
            logger.warning(str(e))
            result = OptimizationResult(
                success=False,
                status=SolveStatus.INVALID_DATA,
                infeasibility_message=str(e),
            )

        if validation is not None:
            result.metadata['validation'] = validation
        return result
