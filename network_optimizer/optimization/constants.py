"""Centralized constants for the network optimization model.

Defaults for OptimizerConfig live here so model bounds, fallback costs and
solver tolerances are documented in one place.
"""

# ============================================================================
# MODEL BOUNDS
# ============================================================================

#: Upper bound applied to every decision variable (units or trips)
VARIABLE_UPPER_BOUND = 100_000.0


# ============================================================================
# FALLBACK COSTS AND CAPACITIES
# ============================================================================

#: Production cost per unit when a factory has no production record
DEFAULT_PRODUCTION_COST = 50.0

#: Vehicle cost per trip when a lane's vehicle type cannot be resolved
DEFAULT_TRIP_COST = 500.0

#: Units per trip when a lane's vehicle type cannot be resolved
DEFAULT_VEHICLE_CAPACITY = 10_000.0

#: Cost per distance unit for lanes without product-based pricing
COST_PER_DISTANCE_UNIT = 0.5

#: Distance assumed for lanes without product-based pricing or distance
DEFAULT_DISTANCE = 10.0


# ============================================================================
# OBJECTIVE PROXIES
# ============================================================================

#: Transit days assumed when a lane has neither transit time nor speed/distance
DEFAULT_TRANSIT_DAYS = 1.0

#: Weight of cost in the min_time objective so equal-time plans resolve to the cheaper one
TIME_COST_TIEBREAK = 1e-3

#: Penalty per unit of unmet demand under the max_service objective
SHORTAGE_PENALTY_PER_UNIT = 10_000.0


# ============================================================================
# SOLVER SETTINGS
# ============================================================================

#: Maximum simplex pivots across both phases
MAX_ITERATIONS = 100

#: Tolerance for pivot eligibility, degeneracy and feasibility checks
PIVOT_TOLERANCE = 1e-6

#: Consecutive degenerate pivots before switching to Bland's rule
DEGENERATE_PIVOT_LIMIT = 50

#: Time limit for external MILP solvers (seconds)
DEFAULT_TIME_LIMIT_SECONDS = 60.0


# ============================================================================
# REPORTING
# ============================================================================

#: Values at or below this are omitted from reported flows, production and trips
DISPLAY_THRESHOLD = 0.01

#: Decimal places for reported quantities and costs
REPORT_DECIMALS = 2

#: Message returned when no feasible plan exists
INFEASIBLE_MESSAGE = "Optimization problem is infeasible. Check constraints and capacity."

#: Message returned when the objective can decrease without limit
UNBOUNDED_MESSAGE = "Optimization problem is unbounded. Check costs and variable bounds."
