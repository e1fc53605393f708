#!/usr/bin/env python3
"""
Example: Optimizing a Supply Network

This script validates a small network, optimizes it under each objective and
prints the resulting plan. Pass a JSON request file ({"data": ..., "settings": ...})
to optimize your own network instead of the built-in one.
"""

import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from network_optimizer import NetworkData, NetworkOptimizer, ObjectiveType, OptimizationSettings
from network_optimizer.validation import NetworkDataValidator, validate_network_topology


SAMPLE_NETWORK = {
    "suppliers": [
        {"supplier_id": "S1", "name": "Flour Mill", "product_id": "FLOUR", "capacity": 2000},
    ],
    "facilities": [
        {"facility_id": "F1", "name": "Bakery", "type": "Factory"},
        {"facility_id": "DC1", "name": "North DC", "type": "DC"},
        {"facility_id": "DC2", "name": "South DC", "type": "DC", "status": "Exclude"},
    ],
    "customers": [
        {"customer_id": "C1", "name": "Retailer A"},
        {"customer_id": "C2", "name": "Retailer B"},
    ],
    "products": [
        {"product_id": "FLOUR", "name": "Flour", "uom": "kg"},
        {"product_id": "BREAD", "name": "Bread", "uom": "loaves", "bom_id": "B1"},
    ],
    "boms": [
        {"bom_id": "B1", "end_product_id": "BREAD", "end_qty": 2, "raw_product_id": "FLOUR", "raw_qty": 1},
    ],
    "production": [
        {"site_id": "F1", "product_id": "BREAD", "bom_id": "B1", "prod_cost_per_unit": 0.8,
         "prod_time_per_unit_hr": 0.01, "max_throughput": 3000},
    ],
    "vehicleTypes": [
        {"vehicle_type_id": "TRUCK", "name": "Box truck", "capacity": 400, "fixed_cost_per_trip": 120},
    ],
    "paths": [
        {"path_id": "S1-F1", "from_id": "S1", "to_id": "F1", "product_cost_per_unit": 0.05,
         "transit_time_days": 1},
        {"path_id": "F1-DC1", "from_id": "F1", "to_id": "DC1", "shipping_policy": "FTL",
         "vehicle_type_id": "TRUCK", "fixed_cost": 30, "product_cost_per_unit": 0.02,
         "transit_time_days": 1},
        {"path_id": "F1-C2", "from_id": "F1", "to_id": "C2", "product_cost_per_unit": 0.9,
         "transit_time_days": 1},
        {"path_id": "DC1-C1", "from_id": "DC1", "to_id": "C1", "product_cost_per_unit": 0.1,
         "transit_time_days": 1},
        {"path_id": "DC1-C2", "from_id": "DC1", "to_id": "C2", "product_cost_per_unit": 0.15,
         "transit_time_days": 2},
        {"path_id": "DC2-C2", "from_id": "DC2", "to_id": "C2", "product_cost_per_unit": 0.01},
    ],
    "demand": [
        {"customer_id": "C1", "product_id": "BREAD", "period_id": "W1", "demand_qty": 900},
        {"customer_id": "C2", "product_id": "BREAD", "period_id": "W1", "demand_qty": 650},
    ],
    "periods": [{"period_id": "W1", "name": "Week 1"}],
}


def load_request(argv):
    """Return (NetworkData, settings) from a request file, or the sample network."""
    if len(argv) > 1:
        payload = json.loads(Path(argv[1]).read_text())
        data = NetworkData.model_validate(payload["data"])
        settings = OptimizationSettings.model_validate(payload.get("settings", {}))
        return data, settings
    return NetworkData.model_validate(SAMPLE_NETWORK), OptimizationSettings()


def print_plan(result):
    solution = result.solution
    print(f"\n  Flows:")
    for flow in solution.product_flow:
        print(f"    {flow.from_id:>4} -> {flow.to_id:<4} {flow.product:<6} "
              f"{flow.quantity:>10,.2f} {flow.unit:<7} ${flow.cost:>10,.2f}")
    print(f"  Production:")
    for record in solution.production:
        print(f"    {record.site:<4} {record.product:<6} bom={record.bom:<3} "
              f"{record.quantity:>10,.2f} {record.unit:<7} ${record.cost:>10,.2f}")
    if solution.vehicle_flow:
        print(f"  Vehicle trips:")
        for trip in solution.vehicle_flow:
            print(f"    {trip.from_id:>4} -> {trip.to_id:<4} {trip.vehicle_type:<10} "
                  f"{trip.trip_count:>3} trips ${trip.cost:>10,.2f}")
    print(f"  Cost summary:")
    for entry in solution.cost_summary:
        print(f"    {entry.category:<24} ${entry.amount:>12,.2f}")
    for warning in solution.warnings:
        print(f"  ⚠️  {warning}")


def main():
    """Validate and optimize a network under every objective."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 80)
    print("NETWORK OPTIMIZATION EXAMPLE")
    print("=" * 80)

    data, settings = load_request(sys.argv)
    print(f"\nNetwork: {data.summary()}")

    # Pre-flight checks
    print(f"\nValidating data...")
    topology = validate_network_topology(data)
    for error in topology["errors"]:
        print(f"  ✗ {error}")
    for warning in topology["warnings"]:
        print(f"  ⚠️  {warning}")

    validator = NetworkDataValidator(data)
    for issue in validator.validate_all():
        print(f"  [{issue.severity.value.upper()}] {issue.id}: {issue.title}")
    if validator.has_critical_issues():
        print(f"\n✗ Critical data issues found; fix them before optimizing.")
        return 1
    print(f"  ✓ Validation complete")

    optimizer = NetworkOptimizer(validate_data=False)
    exit_code = 0
    for objective in ObjectiveType:
        run_settings = settings.model_copy(update={"objective": objective})
        print(f"\n{'-' * 80}")
        print(f"Objective: {objective.value} (solver: {run_settings.solver})")
        print(f"{'-' * 80}")

        result = optimizer.optimize(data, run_settings)
        print(f"  {result}")
        if result.solution is None:
            print(f"  ✗ {result.infeasibility_message}")
            for issue in result.issues:
                print(f"    {issue}")
            exit_code = 1
            continue
        print_plan(result)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
