"""Reference resolution for network data.

Finds records that point at entity ids missing from the network data. The
model builder uses this to reject (strict mode) or flag (lenient mode) such
data, and the data validator reports the same findings as validation issues.
"""

from typing import List, Set

from ..exceptions import UnresolvedReference
from ..models import NetworkData


def find_unresolved_references(data: NetworkData) -> List[UnresolvedReference]:
    """Return every reference to a missing customer, facility, supplier,
    product, period, vehicle type or bill of materials.

    Excluded lanes and production records are not checked. Period references
    are only checked when the data declares periods.

    Args:
        data: Network data to check

    Returns:
        List of unresolved references, in record order
    """
    node_ids: Set[str] = set(data.node_ids())
    customer_ids = {c.customer_id for c in data.customers}
    facility_ids = {f.facility_id for f in data.facilities}
    product_ids = {p.product_id for p in data.products}
    period_ids = {p.period_id for p in data.periods}
    vehicle_ids = {v.vehicle_type_id for v in data.vehicle_types}
    bom_ids = {b.bom_id for b in data.boms}

    refs: List[UnresolvedReference] = []

    def check(entity: str, record_id: str, field: str, value, known: Set[str]):
        if value is None or value not in known:
            refs.append(UnresolvedReference(entity, record_id, field, str(value)))

    def check_period(entity: str, record_id: str, value):
        if value is not None and period_ids:
            check(entity, record_id, "period_id", value, period_ids)

    for product in data.products:
        if product.bom_id is not None:
            check("product", product.product_id, "bom_id", product.bom_id, bom_ids)

    for line in data.boms:
        check("bom", line.bom_id, "end_product_id", line.end_product_id, product_ids)
        check("bom", line.bom_id, "raw_product_id", line.raw_product_id, product_ids)

    for supplier in data.suppliers:
        if supplier.include:
            check("supplier", supplier.supplier_id, "product_id", supplier.product_id, product_ids)

    for path in data.paths:
        if not path.include:
            continue
        check("path", path.path_id, "from_id", path.from_id, node_ids)
        check("path", path.path_id, "to_id", path.to_id, node_ids)
        if path.is_ftl():
            check("path", path.path_id, "vehicle_type_id", path.vehicle_type_id, vehicle_ids)

    for demand in data.demand:
        check("demand", demand.record_id, "customer_id", demand.customer_id, customer_ids)
        check("demand", demand.record_id, "product_id", demand.product_id, product_ids)
        check_period("demand", demand.record_id, demand.period_id)

    for record in data.production:
        if not record.include:
            continue
        check("production", record.record_id, "site_id", record.site_id, facility_ids)
        check("production", record.record_id, "product_id", record.product_id, product_ids)
        check_period("production", record.record_id, record.period_id)
        if record.bom_id is not None:
            check("production", record.record_id, "bom_id", record.bom_id, bom_ids)

    for rule in data.flow_rules:
        check("flow_rule", rule.record_id, "from_id", rule.from_id, node_ids)
        check("flow_rule", rule.record_id, "to_id", rule.to_id, node_ids)
        check("flow_rule", rule.record_id, "product_id", rule.product_id, product_ids)
        check_period("flow_rule", rule.record_id, rule.period_id)

    for item in data.inventory:
        check("inventory", item.record_id, "site_id", item.site_id, facility_ids)
        check("inventory", item.record_id, "product_id", item.product_id, product_ids)
        check_period("inventory", item.record_id, item.period_id)

    return refs
