"""Tests for the commit engine and its rollback guarantees."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

pytest.importorskip("pandas")

from pricelist.application.use_cases.price_imports import (
    cancel_price_import,
    get_price_import,
    get_price_import_progress,
    run_price_import_commit,
    start_price_import_commit,
)
from pricelist.application.use_cases.price_imports import commit as commit_module
from pricelist.domain.exceptions import (
    ConflictError,
    ErrorRowsPresentError,
    PipelineError,
)
from pricelist.infrastructure.models import ProductModel
from pricelist.infrastructure.repositories import (
    PriceHistoryRepository,
    PriceImportRowRepository,
    ProductRepository,
)

MAPPING = {"sku": "A", "cost": "B", "msrp": "C"}
SCENARIO = ["SKU,Cost,MSRP", "A1,$10.00,", ",$5.00,", "A1,$12.50,$9.00"]
CLEAN = ["SKU,Cost,MSRP", "A1,$10.00,$16.00", "B2,$21.00,", "NEW-1,$3.00,$5.00"]


def _row_statuses(session, import_id: int) -> dict[int, str]:
    session.expire_all()
    rows, _ = PriceImportRowRepository(session).list(import_id)
    return {row.row_number: row.status for row in rows}


def test_error_rows_block_commit_unless_skipped(session, catalog, stage_import) -> None:
    import_id = stage_import(SCENARIO, MAPPING)

    with pytest.raises(ErrorRowsPresentError) as excinfo:
        start_price_import_commit(session, import_id=import_id)

    assert excinfo.value.error_count == 1
    assert get_price_import(session, import_id=import_id).status == "preview"
    assert PriceHistoryRepository(session).count() == 0


def test_duplicate_skus_apply_in_row_order(
    session, session_factory, catalog, stage_import
) -> None:
    import_id = stage_import(SCENARIO, MAPPING)

    start_price_import_commit(session, import_id=import_id, skip_errors=True)
    result = run_price_import_commit(session_factory, import_id=import_id, actor_id=42)

    assert result.status == "completed"
    assert result.rows_updated == 2
    assert result.rows_skipped == 0
    assert result.rows_errored == 1
    assert result.approved_by == 42
    assert result.percent_complete == 100

    session.expire_all()
    product = session.get(ProductModel, catalog["widget_id"])
    assert product.cost == Decimal("12.50")
    assert product.price == Decimal("9.00")
    assert product.cost_updated_by == 42
    assert product.last_price_import_id == import_id

    history = PriceHistoryRepository(session).list_for_product(catalog["widget_id"])
    assert len(history) == 2
    assert (history[0].previous_cost, history[0].new_cost) == (
        Decimal("8.00"),
        Decimal("10.00"),
    )
    assert history[0].new_price is None
    assert (history[1].previous_cost, history[1].new_cost) == (
        Decimal("10.00"),
        Decimal("12.50"),
    )
    assert (history[1].previous_price, history[1].new_price) == (
        Decimal("15.00"),
        Decimal("9.00"),
    )
    assert history[1].cost_cents == 1250
    assert history[1].source == "import"
    assert history[1].source_id == import_id

    assert _row_statuses(session, import_id) == {2: "imported", 3: "error", 4: "imported"}


def test_new_products_are_skipped_with_a_warning(
    session, session_factory, catalog, stage_import
) -> None:
    import_id = stage_import(CLEAN, MAPPING)

    start_price_import_commit(session, import_id=import_id)
    result = run_price_import_commit(session_factory, import_id=import_id, actor_id=42)

    assert result.status == "completed"
    assert result.rows_updated == 2
    assert result.rows_skipped == 1

    session.expire_all()
    rows, _ = PriceImportRowRepository(session).list(import_id, status="skipped")
    assert [row.parsed_sku for row in rows] == ["NEW-1"]
    assert rows[0].validation_warnings == ["New product - manual creation required"]
    assert ProductRepository(session).find_by_sku("NEW-1") is None

    gadget = session.get(ProductModel, catalog["gadget_id"])
    assert gadget.cost == Decimal("21.00")
    assert gadget.price == Decimal("30.00")


def test_effective_date_is_recorded_on_history(
    session, session_factory, catalog, stage_import
) -> None:
    import_id = stage_import(CLEAN, MAPPING, effective_from=date(2026, 3, 1))

    start_price_import_commit(session, import_id=import_id)
    run_price_import_commit(session_factory, import_id=import_id, actor_id=42)

    entries = PriceHistoryRepository(session).list_for_source("import", import_id)
    assert len(entries) == 2
    assert {entry.effective_from.date() for entry in entries} == {date(2026, 3, 1)}


def test_commit_cannot_start_twice(session, catalog, stage_import) -> None:
    import_id = stage_import(CLEAN, MAPPING)

    start_price_import_commit(session, import_id=import_id)

    with pytest.raises(ConflictError):
        start_price_import_commit(session, import_id=import_id)


def test_cancel_request_rolls_back_the_commit(
    session, session_factory, catalog, stage_import
) -> None:
    import_id = stage_import(CLEAN, MAPPING)
    start_price_import_commit(session, import_id=import_id)

    acknowledgement = cancel_price_import(session, import_id=import_id)
    assert acknowledgement.status == "cancelling"
    assert get_price_import_progress(session, import_id=import_id).cancel_requested

    result = run_price_import_commit(session_factory, import_id=import_id, actor_id=42)

    assert result.status == "cancelled"
    assert result.error_message == "Cancelled by user"
    assert result.cancel_requested is False
    assert PriceHistoryRepository(session).count() == 0
    assert _row_statuses(session, import_id) == {2: "valid", 3: "valid", 4: "valid"}


def test_cancellation_mid_pass_discards_applied_rows(
    session, session_factory, catalog, stage_import, monkeypatch
) -> None:
    import_id = stage_import(CLEAN, MAPPING)
    start_price_import_commit(session, import_id=import_id)

    checks = {"count": 0}

    def cancel_on_third_check(imports, current_import_id):
        checks["count"] += 1
        return checks["count"] >= 3

    monkeypatch.setattr(commit_module, "_cancellation_requested", cancel_on_third_check)

    result = run_price_import_commit(session_factory, import_id=import_id, actor_id=42)

    assert result.status == "cancelled"
    session.expire_all()
    assert session.get(ProductModel, catalog["widget_id"]).cost == Decimal("8.00")
    assert session.get(ProductModel, catalog["gadget_id"]).cost == Decimal("20.00")
    assert PriceHistoryRepository(session).count() == 0


def test_failure_mid_pass_leaves_the_catalog_untouched(
    session, session_factory, catalog, stage_import, monkeypatch
) -> None:
    import_id = stage_import(CLEAN, MAPPING)
    start_price_import_commit(session, import_id=import_id)

    original_stage = PriceHistoryRepository.stage
    calls = {"count": 0}

    def failing_stage(self, entry):
        calls["count"] += 1
        if calls["count"] == 2:
            raise RuntimeError("history store unavailable")
        return original_stage(self, entry)

    monkeypatch.setattr(PriceHistoryRepository, "stage", failing_stage)

    with pytest.raises(PipelineError):
        run_price_import_commit(session_factory, import_id=import_id, actor_id=42)

    price_import = get_price_import(session, import_id=import_id)
    assert price_import.status == "failed"
    assert "history store unavailable" in price_import.error_message

    session.expire_all()
    assert session.get(ProductModel, catalog["widget_id"]).cost == Decimal("8.00")
    assert PriceHistoryRepository(session).count() == 0
    assert set(_row_statuses(session, import_id).values()) == {"valid"}


def test_completed_imports_cannot_be_cancelled(
    session, session_factory, catalog, stage_import
) -> None:
    import_id = stage_import(CLEAN, MAPPING)
    start_price_import_commit(session, import_id=import_id)
    run_price_import_commit(session_factory, import_id=import_id, actor_id=42)

    with pytest.raises(ConflictError):
        cancel_price_import(session, import_id=import_id)
    assert get_price_import(session, import_id=import_id).status == "completed"


def test_progress_is_reported_during_the_pass(
    session, session_factory, catalog, stage_import, override_settings, monkeypatch
) -> None:
    override_settings(commit_progress_interval=1)
    import_id = stage_import(CLEAN, MAPPING)
    start_price_import_commit(session, import_id=import_id)

    observed: list[int] = []
    original_update = commit_module.PriceImportRepository.update_counters

    def recording_update(self, current_import_id, **counters):
        observed.append(counters["rows_processed"])
        return original_update(self, current_import_id, **counters)

    monkeypatch.setattr(
        commit_module.PriceImportRepository, "update_counters", recording_update
    )

    run_price_import_commit(session_factory, import_id=import_id, actor_id=42)

    assert observed == [1, 2, 3]
