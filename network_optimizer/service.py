"""Request handler for the optimize endpoint.

Validates the request payload, runs the optimizer and shapes the response
body. Any HTTP framework can mount handle_optimize_request(); it returns a
status code and a JSON-serialisable body.

Status codes:
    200: Solution, or a structured error (infeasible, unbounded, unresolved
         references, solver unavailable, phase-1 iteration limit)
    400: Payload failed validation
    500: Unexpected internal failure
"""

import json
import logging
import traceback
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .models import OptimizationRequest
from .optimization import NetworkOptimizer, OptimizationResult, OptimizerConfig, SolverConfig

logger = logging.getLogger(__name__)


@dataclass
class ServiceResponse:
    """Status code and JSON body of an optimize request."""
    status_code: int
    body: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status_code == 200 and "error" not in self.body


def error_body(result: OptimizationResult) -> Dict[str, Any]:
    """Response body for a result without a usable solution."""
    body: Dict[str, Any] = {
        "error": result.infeasibility_message or f"Optimization failed ({result.status.value})",
        "productFlow": [],
        "production": [],
        "vehicleFlow": [],
        "costSummary": [],
        "status": result.status.value,
    }
    if result.issues:
        body["issues"] = list(result.issues)
    if result.warnings:
        body["warnings"] = list(result.warnings)
    return body


def handle_optimize_request(
    payload: Any,
    config: Optional[OptimizerConfig] = None,
    solver_config: Optional[SolverConfig] = None,
) -> ServiceResponse:
    """Validate, optimize and shape the response for one request.

    Args:
        payload: Decoded JSON request body ``{data, settings}``
        config: Optimizer configuration (defaults if None)
        solver_config: Pyomo solver configuration (defaults if None)

    Returns:
        ServiceResponse
    """
    try:
        request = OptimizationRequest.model_validate(payload)
    except ValidationError as e:
        logger.info(f"Rejected optimize request: {e.error_count()} validation error(s)")
        return ServiceResponse(
            status_code=400,
            body={
                "error": "Invalid request payload",
                "details": json.loads(e.json(include_url=False)),
            },
        )

    try:
        optimizer = NetworkOptimizer(config=config, solver_config=solver_config)
        result = optimizer.optimize(request.data, request.settings)
        if result.solution is None:
            return ServiceResponse(status_code=200, body=error_body(result))
        return ServiceResponse(status_code=200, body=result.solution.to_payload())
    except Exception as e:
        logger.exception("Optimization failed with an internal error")
        return ServiceResponse(
            status_code=500,
            body={"error": str(e) or type(e).__name__, "stack": traceback.format_exc()},
        )
