"""Read-only what-if report over the validated rows of an import."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from pricelist.domain.entities import (
    ROW_STATUS_IMPORTED,
    ROW_STATUS_SKIPPED,
    ROW_STATUS_VALID,
    ROW_STATUS_WARNING,
    PriceImportRow,
)
from pricelist.infrastructure.repositories import PriceImportRowRepository

from .queries import ensure_reviewable, get_price_import

# Rows that passed validation, including those already applied by a commit.
SIMULATED_ROW_STATUSES = (
    ROW_STATUS_VALID,
    ROW_STATUS_WARNING,
    ROW_STATUS_IMPORTED,
    ROW_STATUS_SKIPPED,
)
LARGEST_CHANGES_LIMIT = 10


@dataclass(frozen=True)
class ChangeBucket:
    count: int = 0
    total_amount: int = 0


@dataclass(frozen=True)
class ChangeSummary:
    increases: ChangeBucket = field(default_factory=ChangeBucket)
    decreases: ChangeBucket = field(default_factory=ChangeBucket)
    no_change: int = 0


@dataclass(frozen=True)
class MarginImpact:
    improved: int = 0
    reduced: int = 0
    unchanged: int = 0


@dataclass(frozen=True)
class LargestChange:
    row_number: int
    sku: str | None
    description: str | None
    product_name: str | None
    current_cost: int | None
    new_cost: int | None
    cost_change: int
    percent_change: float | None


@dataclass
class SimulationResult:
    import_id: int
    status: str
    products_affected: int
    new_products: int
    cost_changes: ChangeSummary
    msrp_changes: ChangeSummary
    margin_impact: MarginImpact
    largest_changes: list[LargestChange]
    warnings_summary: dict[str, int]
    errors_summary: dict[str, int]


def simulate_price_import(session: Session, *, import_id: int) -> SimulationResult:
    """Summarize what committing the import does to the catalog.

    Amounts are integer minor units. Only available from ``preview`` onward.
    """

    price_import = get_price_import(session, import_id=import_id)
    ensure_reviewable(price_import, "Simulation")

    row_repo = PriceImportRowRepository(session)
    totals = row_repo.change_totals(import_id, SIMULATED_ROW_STATUSES)
    warnings, errors = row_repo.message_counts(import_id)

    return SimulationResult(
        import_id=import_id,
        status=price_import.status,
        products_affected=totals["products_affected"],
        new_products=totals["new_products"],
        cost_changes=ChangeSummary(
            increases=ChangeBucket(
                totals["cost_increases_count"], totals["cost_increases_total"]
            ),
            decreases=ChangeBucket(
                totals["cost_decreases_count"], totals["cost_decreases_total"]
            ),
            no_change=totals["cost_no_change"],
        ),
        msrp_changes=ChangeSummary(
            increases=ChangeBucket(
                totals["msrp_increases_count"], totals["msrp_increases_total"]
            ),
            decreases=ChangeBucket(
                totals["msrp_decreases_count"], totals["msrp_decreases_total"]
            ),
            no_change=totals["msrp_no_change"],
        ),
        margin_impact=_margin_impact(
            row_repo.margin_candidates(import_id, SIMULATED_ROW_STATUSES)
        ),
        largest_changes=[
            _largest_change(row)
            for row in row_repo.largest_cost_changes(
                import_id, SIMULATED_ROW_STATUSES, limit=LARGEST_CHANGES_LIMIT
            )
        ],
        warnings_summary=dict(warnings.most_common()),
        errors_summary=dict(errors.most_common()),
    )


def _margin_impact(candidates: list[tuple[int, int, int, int]]) -> MarginImpact:
    improved = reduced = unchanged = 0
    for new_msrp, new_cost, previous_msrp, previous_cost in candidates:
        new_margin = new_msrp - new_cost
        old_margin = previous_msrp - previous_cost
        if new_margin > old_margin:
            improved += 1
        elif new_margin < old_margin:
            reduced += 1
        else:
            unchanged += 1
    return MarginImpact(improved=improved, reduced=reduced, unchanged=unchanged)


def _largest_change(row: PriceImportRow) -> LargestChange:
    percent: float | None = None
    if row.previous_cost:
        ratio = Decimal(row.cost_change) / Decimal(row.previous_cost) * 100
        percent = float(ratio.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    return LargestChange(
        row_number=row.row_number,
        sku=row.parsed_sku,
        description=row.parsed_description,
        product_name=row.matched_product_name,
        current_cost=row.previous_cost,
        new_cost=row.parsed_cost,
        cost_change=row.cost_change or 0,
        percent_change=percent,
    )


__all__ = [
    "ChangeBucket",
    "ChangeSummary",
    "LargestChange",
    "MarginImpact",
    "SimulationResult",
    "simulate_price_import",
]
