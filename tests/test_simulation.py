"""Tests for the read-only simulation report."""

from __future__ import annotations

import pytest

pytest.importorskip("pandas")

from pricelist.application.use_cases.price_imports import (
    run_price_import_commit,
    simulate_price_import,
    start_price_import_commit,
)
from pricelist.domain.exceptions import ConflictError
from pricelist.infrastructure.repositories import PriceHistoryRepository

MAPPING = {"sku": "A", "cost": "B", "msrp": "C"}
LINES = [
    "SKU,Cost,MSRP",
    "A1,$10.00,$18.00",
    "B2,$18.00,$25.00",
    "C3,$5.00,",
    "NEW-1,$3.00,$4.00",
    ",$1.00,",
    "B2,$20.00,$19.00",
]


def test_simulation_aggregates_validated_rows(session, catalog, stage_import) -> None:
    import_id = stage_import(LINES, MAPPING)

    result = simulate_price_import(session, import_id=import_id)

    assert result.products_affected == 4
    assert result.new_products == 1

    assert result.cost_changes.increases.count == 1
    assert result.cost_changes.increases.total_amount == 200
    assert result.cost_changes.decreases.count == 1
    assert result.cost_changes.decreases.total_amount == -200
    assert result.cost_changes.no_change == 2

    assert result.msrp_changes.increases.count == 1
    assert result.msrp_changes.increases.total_amount == 300
    assert result.msrp_changes.decreases.count == 2
    assert result.msrp_changes.decreases.total_amount == -1600

    # C3 has no MSRP on either side, so it is left out of the margin buckets.
    assert result.margin_impact.improved == 1
    assert result.margin_impact.reduced == 2
    assert result.margin_impact.unchanged == 0

    assert [change.sku for change in result.largest_changes] == ["A1", "B2"]
    assert result.largest_changes[0].percent_change == 25.0
    assert result.largest_changes[0].product_name == "Widget"
    assert result.largest_changes[1].percent_change == -10.0

    assert result.errors_summary == {"SKU is required": 1}
    assert result.warnings_summary == {"MSRP is less than cost": 1}


def test_simulation_never_touches_the_catalog(session, catalog, stage_import) -> None:
    import_id = stage_import(LINES, MAPPING)

    simulate_price_import(session, import_id=import_id)

    assert PriceHistoryRepository(session).count() == 0


def test_simulation_requires_a_preview(session, stage_import) -> None:
    import_id = stage_import(LINES)

    with pytest.raises(ConflictError):
        simulate_price_import(session, import_id=import_id)


def test_simulation_is_stable_after_commit(
    session, session_factory, catalog, stage_import
) -> None:
    import_id = stage_import(LINES, MAPPING)
    before = simulate_price_import(session, import_id=import_id)

    start_price_import_commit(session, import_id=import_id, skip_errors=True)
    run_price_import_commit(session_factory, import_id=import_id, actor_id=42)
    session.expire_all()
    after = simulate_price_import(session, import_id=import_id)

    assert after.status == "completed"
    assert after.products_affected == before.products_affected
    assert after.cost_changes == before.cost_changes
    assert after.largest_changes == before.largest_changes
