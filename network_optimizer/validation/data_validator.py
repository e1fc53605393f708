"""Comprehensive data validation for network optimization.

This module performs pre-flight checks to identify data quality issues,
unresolved references, capacity shortfalls, and topology problems before
a model is built. Provides actionable guidance for fixing detected issues.
"""

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import List, Dict, Any, Optional
import logging

import numpy as np
import pandas as pd

from ..models import NetworkData
from .network_topology_validator import NetworkTopologyValidator
from .references import find_unresolved_references

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ValidationIssue:
    """Represents a single validation issue.

    Attributes:
        id: Unique identifier for the issue type
        category: Category of validation (e.g., "Completeness", "Capacity")
        severity: Severity level (INFO, WARNING, ERROR, CRITICAL)
        title: Short title describing the issue
        description: Detailed description of the issue
        impact: Explanation of how this affects optimization
        fix_guidance: Step-by-step guidance on how to fix the issue
        affected_data: Optional DataFrame showing affected data
        metadata: Additional metadata about the issue
    """
    id: str
    category: str
    severity: ValidationSeverity
    title: str
    description: str
    impact: str
    fix_guidance: str
    affected_data: Optional[pd.DataFrame] = None
    metadata: Optional[Dict[str, Any]] = None


class NetworkDataValidator:
    """Performs comprehensive validation of network data.

    Validates:
    - Completeness: Products, lanes, sources and demand present
    - References: Every id a record points at exists
    - Consistency: Unique ids, no self loops, usable FTL lanes
    - Capacity: Bounded sources can cover demand
    - Topology: Every customer with demand is reachable from a source
    - Data quality: Demand outliers
    """

    #: Demand entries further than this many standard deviations from the mean are outliers
    OUTLIER_Z_SCORE = 3.0

    def __init__(self, data: NetworkData):
        """Initialize validator with data to validate.

        Args:
            data: Network description
        """
        self.data = data
        self.issues: List[ValidationIssue] = []

    def validate_all(self) -> List[ValidationIssue]:
        """Run all validation checks and return list of issues.

        Returns:
            List of ValidationIssue objects found during validation
        """
        self.issues = []

        self.check_completeness()
        self.check_references()
        self.check_consistency()
        self.check_capacity()
        self.check_topology()
        self.check_data_quality()

        stats = self.get_summary_stats()
        logger.info(f"Data validation found {stats['total_issues']} issue(s): {stats['by_severity']}")
        return self.issues

    def check_completeness(self):
        """Validate all required data is present."""
        data = self.data

        if not data.products:
            self.issues.append(ValidationIssue(
                id="COMPL_001",
                category="Completeness",
                severity=ValidationSeverity.CRITICAL,
                title="No products defined",
                description="The network data contains no products.",
                impact="No flow, production or demand can be modeled without products.",
                fix_guidance=(
                    "**How to fix:**\n"
                    "1. Add the products that are moved through the network\n"
                    "2. Make sure demand and production records use the same product IDs"
                )
            ))

        if not any(p.include for p in data.paths):
            self.issues.append(ValidationIssue(
                id="COMPL_002",
                category="Completeness",
                severity=ValidationSeverity.CRITICAL,
                title="No lanes defined",
                description="The network data contains no included paths.",
                impact="Product cannot move between nodes. Any demand makes the model infeasible.",
                fix_guidance=(
                    "**How to fix:**\n"
                    "1. Add paths from suppliers and factories towards customers\n"
                    "2. Check that the paths you need are not marked include=false"
                )
            ))

        has_source = (
            any(s.include for s in data.suppliers)
            or any(f.is_included and f.is_factory() for f in data.facilities)
            or any(r.include for r in data.production)
        )
        if not has_source:
            self.issues.append(ValidationIssue(
                id="COMPL_003",
                category="Completeness",
                severity=ValidationSeverity.CRITICAL,
                title="No supply or production source",
                description="No included supplier, factory or production record exists.",
                impact="Product can never enter the network. Any demand makes the model infeasible.",
                fix_guidance=(
                    "**How to fix:**\n"
                    "1. Add a supplier with a product and capacity\n"
                    "2. OR mark a facility as type 'Factory'\n"
                    "3. OR add production records for a facility"
                )
            ))

        if data.total_demand() <= 0:
            self.issues.append(ValidationIssue(
                id="COMPL_004",
                category="Completeness",
                severity=ValidationSeverity.INFO,
                title="No demand",
                description="Total demand is zero.",
                impact="The optimal plan moves and produces nothing; total cost will be 0.",
                fix_guidance="Add demand records if a plan is expected."
            ))

        if not data.periods and data.demand:
            self.issues.append(ValidationIssue(
                id="COMPL_005",
                category="Completeness",
                severity=ValidationSeverity.INFO,
                title="No periods declared",
                description="Periods will be taken from the demand, production and inventory records.",
                impact="Period references are not checked for typos.",
                fix_guidance="Declare periods explicitly to have period references validated."
            ))

    def check_references(self):
        """Report records pointing at ids that do not exist."""
        refs = find_unresolved_references(self.data)
        if not refs:
            return

        df = pd.DataFrame([ref.to_dict() for ref in refs])
        by_field = df.groupby('field').size().to_dict()

        self.issues.append(ValidationIssue(
            id="REF_001",
            category="References",
            severity=ValidationSeverity.ERROR,
            title="Records reference undefined entities",
            description=f"Found {len(refs)} unresolved references: {by_field}",
            impact=(
                "In strict mode the request is rejected. In lenient mode lanes and records "
                "with missing endpoints are skipped and missing vehicle types use defaults."
            ),
            fix_guidance=(
                "**How to fix:**\n"
                "1. Add the missing entities listed below\n"
                "2. OR correct the ids in the referencing records\n\n"
                "**Common causes:**\n"
                "- Typo in an id\n"
                "- Entity removed but still referenced\n"
                "- Vehicle type missing for an FTL lane"
            ),
            affected_data=df.head(50),
            metadata={'missing_ids': sorted(df['missing_id'].unique().tolist())}
        ))

    def check_consistency(self):
        """Validate identifiers are unique and lanes are well formed."""
        data = self.data

        # Node ids must be unique across customers, facilities and suppliers
        seen: Dict[str, List[str]] = defaultdict(list)
        for s in data.suppliers:
            seen[s.supplier_id].append("Supplier")
        for f in data.facilities:
            seen[f.facility_id].append("Facility")
        for c in data.customers:
            seen[c.customer_id].append("Customer")
        duplicates = [
            {'node_id': node_id, 'types': ", ".join(types), 'count': len(types)}
            for node_id, types in seen.items() if len(types) > 1
        ]
        if duplicates:
            df = pd.DataFrame(duplicates)
            self.issues.append(ValidationIssue(
                id="CONS_001",
                category="Consistency",
                severity=ValidationSeverity.ERROR,
                title="Duplicate node ids",
                description=f"Found {len(duplicates)} node ids used by more than one node",
                impact="Lanes and balance constraints cannot tell these nodes apart.",
                fix_guidance=(
                    "**How to fix:**\n"
                    "1. Give every supplier, facility and customer a unique id"
                ),
                affected_data=df
            ))

        path_counts: Dict[str, int] = defaultdict(int)
        for path in data.paths:
            if path.include:
                path_counts[path.path_id] += 1
        duplicate_paths = [pid for pid, count in path_counts.items() if count > 1]
        if duplicate_paths:
            self.issues.append(ValidationIssue(
                id="CONS_002",
                category="Consistency",
                severity=ValidationSeverity.CRITICAL,
                title="Duplicate path ids",
                description=f"Path ids used by more than one included lane: {duplicate_paths[:5]}",
                impact="The model cannot be built; the request is rejected as invalid data.",
                fix_guidance=(
                    "**How to fix:**\n"
                    "1. Give parallel lanes distinct path_id values\n"
                    "2. OR remove the duplicated lane"
                ),
                metadata={'path_ids': duplicate_paths}
            ))

        loops = [
            {'path_id': p.path_id, 'node_id': p.from_id}
            for p in data.paths if p.include and p.from_id == p.to_id
        ]
        if loops:
            self.issues.append(ValidationIssue(
                id="CONS_003",
                category="Consistency",
                severity=ValidationSeverity.WARNING,
                title="Lanes start and end at the same node",
                description=f"Found {len(loops)} self-loop lanes",
                impact="Self loops carry no product; they only add variables.",
                fix_guidance="Remove the lane or correct its destination.",
                affected_data=pd.DataFrame(loops)
            ))

        vehicles = {v.vehicle_type_id: v for v in data.vehicle_types}
        ftl_no_capacity = [
            {'path_id': p.path_id, 'vehicle_type_id': p.vehicle_type_id}
            for p in data.paths
            if p.include and p.is_ftl() and p.vehicle_type_id not in vehicles
        ]
        if ftl_no_capacity:
            self.issues.append(ValidationIssue(
                id="CONS_004",
                category="Consistency",
                severity=ValidationSeverity.WARNING,
                title="FTL lanes without a known vehicle type",
                description=f"Found {len(ftl_no_capacity)} FTL lanes whose vehicle type is unknown",
                impact="Lenient mode assumes the default vehicle capacity and trip cost.",
                fix_guidance=(
                    "**How to fix:**\n"
                    "1. Add the vehicle type with its capacity and trip cost\n"
                    "2. OR switch the lane to LTL"
                ),
                affected_data=pd.DataFrame(ftl_no_capacity)
            ))

        demand_counts: Dict[tuple, List[float]] = defaultdict(list)
        for d in data.demand:
            demand_counts[(d.customer_id, d.product_id, d.period_id)].append(d.demand_qty)
        repeated_demand = [
            {
                'customer_id': customer_id,
                'product_id': product_id,
                'period_id': period_id,
                'records': len(quantities),
                'quantities': ", ".join(f"{q:g}" for q in quantities),
                'used': quantities[-1],
            }
            for (customer_id, product_id, period_id), quantities in demand_counts.items()
            if len(quantities) > 1
        ]
        if repeated_demand:
            self.issues.append(ValidationIssue(
                id="CONS_005",
                category="Consistency",
                severity=ValidationSeverity.WARNING,
                title="Repeated demand records",
                description=(
                    f"Found {len(repeated_demand)} customer/product/period combinations "
                    f"with more than one demand record"
                ),
                impact="Only the last record of each combination is used; earlier quantities are ignored.",
                fix_guidance=(
                    "**How to fix:**\n"
                    "1. Remove the repeated rows\n"
                    "2. OR combine them into one record with the total quantity"
                ),
                affected_data=pd.DataFrame(repeated_demand)
            ))

        production_counts: Dict[tuple, int] = defaultdict(int)
        for record in data.production:
            if record.include:
                production_counts[(record.site_id, record.product_id, record.period_id or "*")] += 1
        repeated_production = [
            {'site_id': site_id, 'product_id': product_id, 'period_id': period_id, 'records': count}
            for (site_id, product_id, period_id), count in production_counts.items()
            if count > 1
        ]
        if repeated_production:
            self.issues.append(ValidationIssue(
                id="CONS_006",
                category="Consistency",
                severity=ValidationSeverity.WARNING,
                title="Repeated production records",
                description=(
                    f"Found {len(repeated_production)} site/product/period combinations "
                    f"with more than one production record"
                ),
                impact="Only the last record's cost and throughput bounds are used.",
                fix_guidance="Keep one production record per site, product and period.",
                affected_data=pd.DataFrame(repeated_production)
            ))

    def check_capacity(self):
        """Check whether bounded sources can cover demand per product and period."""
        data = self.data
        demand = defaultdict(float)
        for (_, product_id, period_id), qty in data.demand_by_key().items():
            demand[(product_id, period_id)] += qty
        if not demand:
            return

        factories = any(f.is_included and f.is_factory() for f in data.facilities)
        supply_cap: Dict[str, Optional[float]] = {}
        for s in data.suppliers:
            if not s.include or s.product_id is None:
                continue
            if s.capacity is None or supply_cap.get(s.product_id, 0.0) is None:
                supply_cap[s.product_id] = None
            else:
                supply_cap[s.product_id] = supply_cap.get(s.product_id, 0.0) + s.capacity

        stock = defaultdict(float)
        for item in data.inventory:
            stock[(item.product_id, item.period_id)] += max(0.0, item.initial_level - item.min_level)

        no_source = []
        shortfalls = []
        for (product_id, period_id), qty in demand.items():
            if qty <= 0:
                continue
            records = list({
                (r.site_id, r.period_id): r for r in data.production
                if r.include and r.product_id == product_id and r.applies_to(period_id)
            }.values())
            has_stock = stock.get((product_id, period_id), 0.0) > 0
            if product_id not in supply_cap and not records and not factories and not has_stock:
                no_source.append({'product_id': product_id, 'period_id': period_id, 'demand': qty})
                continue
            if factories and not records:
                continue
            if product_id in supply_cap and supply_cap[product_id] is None:
                continue
            if any(r.max_throughput is None for r in records):
                continue
            capacity = (
                (supply_cap.get(product_id) or 0.0)
                + sum(r.max_throughput for r in records)
                + stock.get((product_id, period_id), 0.0)
            )
            if capacity + 1e-9 < qty:
                shortfalls.append({
                    'product_id': product_id,
                    'period_id': period_id,
                    'demand': qty,
                    'capacity': capacity,
                    'shortfall': qty - capacity,
                })

        if no_source:
            self.issues.append(ValidationIssue(
                id="CAP_001",
                category="Capacity",
                severity=ValidationSeverity.ERROR,
                title="Demand for products without any source",
                description=f"Found {len(no_source)} product/period combinations nothing can supply",
                impact="The model is infeasible under min_cost and min_time; max_service leaves it unmet.",
                fix_guidance=(
                    "**How to fix:**\n"
                    "1. Add a supplier or production record for the product\n"
                    "2. OR remove the demand"
                ),
                affected_data=pd.DataFrame(no_source)
            ))

        if shortfalls:
            df = pd.DataFrame(shortfalls).sort_values('shortfall', ascending=False)
            self.issues.append(ValidationIssue(
                id="CAP_002",
                category="Capacity",
                severity=ValidationSeverity.WARNING,
                title="Demand exceeds source capacity",
                description=(
                    f"Found {len(shortfalls)} product/period combinations where supplier, "
                    f"production and stock capacity is below demand "
                    f"(total shortfall {df['shortfall'].sum():,.0f} units)"
                ),
                impact="The model is likely infeasible unless the max_service objective is used.",
                fix_guidance=(
                    "**How to fix:**\n"
                    "1. Increase supplier capacity or production max_throughput\n"
                    "2. OR use the max_service objective to report unmet demand"
                ),
                affected_data=df.head(20)
            ))

    def check_topology(self):
        """Check that demand is reachable and nodes are connected."""
        topology = NetworkTopologyValidator(self.data)

        unreachable = topology.find_unreachable_demand()
        if unreachable:
            self.issues.append(ValidationIssue(
                id="TOPO_001",
                category="Topology",
                severity=ValidationSeverity.ERROR,
                title="Customers unreachable from any source",
                description=f"Found {len(unreachable)} customers with demand and no lane path from a source: {unreachable[:5]}",
                impact="Their demand cannot be served; the model is infeasible unless max_service is used.",
                fix_guidance=(
                    "**How to fix:**\n"
                    "1. Add lanes connecting a supplier, factory or DC to these customers\n"
                    "2. Check that lanes and intermediate facilities are included"
                ),
                affected_data=pd.DataFrame({'customer_id': unreachable})
            ))

        isolated = topology.graph_builder.get_isolated_nodes()
        if isolated:
            self.issues.append(ValidationIssue(
                id="TOPO_002",
                category="Topology",
                severity=ValidationSeverity.WARNING,
                title="Disconnected nodes",
                description=f"Found {len(isolated)} included nodes without any lane: {isolated[:5]}",
                impact="These nodes take no part in the plan.",
                fix_guidance="Add lanes for these nodes or exclude them."
            ))

        slow = topology.check_transit_times()
        if slow:
            self.issues.append(ValidationIssue(
                id="TOPO_003",
                category="Topology",
                severity=ValidationSeverity.INFO,
                title="Long transit times",
                description=f"Found {len(slow)} lanes with unusually long transit times",
                impact="These lanes are avoided under the min_time objective.",
                fix_guidance="Verify transit_time_days is expressed in days.",
                affected_data=pd.DataFrame(slow, columns=['path_id', 'transit_time_days'])
            ))

    def check_data_quality(self):
        """Check demand quantities for outliers."""
        quantities = [d.demand_qty for d in self.data.demand if d.demand_qty > 0]
        if len(quantities) < 3:
            return

        mean_qty = np.mean(quantities)
        std_qty = np.std(quantities)
        median_qty = np.median(quantities)
        if std_qty <= 0:
            return

        outliers = []
        for d in self.data.demand:
            z_score = (d.demand_qty - mean_qty) / std_qty
            if d.demand_qty > 0 and abs(z_score) > self.OUTLIER_Z_SCORE:
                outliers.append({
                    'customer_id': d.customer_id,
                    'product_id': d.product_id,
                    'period_id': d.period_id,
                    'quantity': d.demand_qty,
                    'z_score': z_score,
                })

        if outliers:
            df = pd.DataFrame(outliers).sort_values('z_score', ascending=False, key=abs)
            self.issues.append(ValidationIssue(
                id="QUAL_001",
                category="Data Quality",
                severity=ValidationSeverity.WARNING,
                title="Outlier values detected in demand",
                description=(
                    f"Found {len(outliers)} demand entries >{self.OUTLIER_Z_SCORE:g} standard deviations from mean.\n"
                    f"Mean: {mean_qty:.1f}, Std Dev: {std_qty:.1f}, Median: {median_qty:.1f}"
                ),
                impact="Outliers may indicate data errors or genuine demand spikes. Review for accuracy.",
                fix_guidance=(
                    "**Review these entries carefully:**\n"
                    "1. Verify quantities are correct (not typos)\n"
                    "2. Check for unit mismatches (cases vs. units)\n"
                    "3. Look for duplicate entries"
                ),
                affected_data=df.head(20)
            ))

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics of validation results.

        Returns:
            Dictionary with counts by severity and category
        """
        stats = {
            'total_issues': len(self.issues),
            'by_severity': {
                severity.value: len([i for i in self.issues if i.severity == severity])
                for severity in ValidationSeverity
            },
            'by_category': {}
        }

        for issue in self.issues:
            category = issue.category
            stats['by_category'][category] = stats['by_category'].get(category, 0) + 1

        return stats

    def has_critical_issues(self) -> bool:
        """Check if any critical issues exist."""
        return any(i.severity == ValidationSeverity.CRITICAL for i in self.issues)

    def has_errors_or_critical(self) -> bool:
        """Check if any errors or critical issues exist."""
        return any(i.severity in [ValidationSeverity.ERROR, ValidationSeverity.CRITICAL]
                  for i in self.issues)
