"""Tests for the import state machine: mapping, validation, cancel, reopen."""

from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("pandas")

from pricelist.application.use_cases.price_imports import (
    cancel_price_import,
    get_price_import,
    get_price_import_detail,
    get_price_import_preview,
    recover_interrupted_imports,
    reopen_price_import,
    run_price_import_validation,
    start_price_import_commit,
    submit_column_mapping,
)
from pricelist.domain.exceptions import (
    ConflictError,
    PipelineError,
    ValidationInputError,
)
from pricelist.infrastructure.repositories import (
    PriceImportRepository,
    PriceImportRowRepository,
)

MAPPING = {"sku": "A", "cost": "B", "msrp": "C"}
SCENARIO = ["SKU,Cost,MSRP", "A1,$10.00,", ",$5.00,", "A1,$12.50,$9.00"]


def _rows_by_number(session, import_id: int) -> dict:
    rows, _ = PriceImportRowRepository(session).list(import_id)
    return {row.row_number: row for row in rows}


def test_validation_classifies_and_matches_rows(session, catalog, stage_import) -> None:
    import_id = stage_import(SCENARIO, MAPPING)

    price_import = get_price_import(session, import_id=import_id)
    assert price_import.status == "preview"
    assert price_import.total_rows == 3
    assert price_import.rows_processed == 3
    assert price_import.rows_updated == 2
    assert price_import.rows_created == 0
    assert price_import.rows_errored == 1

    rows = _rows_by_number(session, import_id)
    assert sorted(rows) == [2, 3, 4]

    first = rows[2]
    assert first.status == "valid"
    assert first.match_type == "exact_sku"
    assert first.matched_product_id == catalog["widget_id"]
    assert first.parsed_cost == 1000
    assert first.previous_cost == 800
    assert first.cost_change == 200
    assert first.raw_data == {"A": "A1", "B": "$10.00", "C": ""}

    assert rows[3].status == "error"
    assert rows[3].validation_errors == ["SKU is required"]
    assert rows[3].matched_product_id is None

    last = rows[4]
    assert last.status == "warning"
    assert last.validation_warnings == ["MSRP is less than cost"]
    assert last.previous_msrp == 1500
    assert last.msrp_change == -600


def test_row_statuses_account_for_every_row(session, catalog, stage_import) -> None:
    import_id = stage_import(SCENARIO, MAPPING)

    detail = get_price_import_detail(session, import_id=import_id)

    assert detail.row_stats == {
        "valid": 1,
        "warning": 1,
        "error": 1,
        "skipped": 0,
        "imported": 0,
    }
    assert sum(detail.row_stats.values()) == detail.price_import.total_rows


def test_cents_convention_and_model_match(session, catalog, stage_import) -> None:
    import_id = stage_import(
        ["Model,Cost", "gad-200,1999", "NEW-1,250"],
        {"sku": "A", "cost": "B"},
        decimal_format="cents",
    )

    rows = _rows_by_number(session, import_id)
    assert rows[2].match_type == "exact_model"
    assert rows[2].matched_product_id == catalog["gadget_id"]
    assert rows[2].parsed_cost == 1999
    assert rows[3].match_type == "new"
    assert rows[3].status == "valid"
    assert get_price_import(session, import_id=import_id).rows_created == 1


def test_skip_rows_drops_leading_data_rows(session, catalog, stage_import) -> None:
    import_id = stage_import(
        ["Acme price list", "SKU,Cost", "A1,9.00"],
        {"sku": "A", "cost": "B"},
        skip_rows=2,
    )

    rows = _rows_by_number(session, import_id)
    assert list(rows) == [3]
    assert get_price_import(session, import_id=import_id).total_rows == 1


def test_overlong_sku_is_a_row_error(session, catalog, stage_import) -> None:
    import_id = stage_import(["SKU,Cost", f"{'X' * 101},5.00", "A1,5.00"], {"sku": "A", "cost": "B"})

    rows = _rows_by_number(session, import_id)
    assert rows[2].status == "error"
    assert rows[2].validation_errors == ["SKU exceeds 100 characters"]
    assert rows[3].status == "valid"
    assert get_price_import(session, import_id=import_id).status == "preview"


@pytest.mark.parametrize("cell", ["1e30", "99999999999999999999"])
def test_oversized_amount_is_a_row_error(session, catalog, stage_import, cell: str) -> None:
    import_id = stage_import(
        ["SKU,Cost", "A1,10.00", f"B2,{cell}", "C3,5.00"], {"sku": "A", "cost": "B"}
    )

    price_import = get_price_import(session, import_id=import_id)
    assert price_import.status == "preview"
    assert price_import.rows_errored == 1

    rows = _rows_by_number(session, import_id)
    assert rows[3].status == "error"
    assert rows[3].validation_errors == ["Cost is out of range"]
    assert rows[3].parsed_cost is None
    assert rows[2].status == "valid"
    assert rows[4].status == "valid"


def test_batches_cover_every_row(session, catalog, stage_import, override_settings) -> None:
    override_settings(validation_batch_size=2)
    lines = ["SKU,Cost"] + [f"S{index},1.00" for index in range(5)]

    import_id = stage_import(lines, {"sku": "A", "cost": "B"})

    price_import = get_price_import(session, import_id=import_id)
    assert price_import.rows_processed == 5
    assert price_import.percent_complete == 100
    assert PriceImportRowRepository(session).list(import_id)[1] == 5


def test_invalid_mapping_is_rejected_synchronously(session, stage_import) -> None:
    import_id = stage_import(SCENARIO)

    with pytest.raises(ValidationInputError):
        submit_column_mapping(session, import_id=import_id, fields={"sku": "A"})
    with pytest.raises(ValidationInputError):
        submit_column_mapping(session, import_id=import_id, fields={"sku": "A", "cost": "Z"})

    assert get_price_import(session, import_id=import_id).status == "pending"


def test_remapping_a_preview_replaces_its_rows(session, catalog, stage_import) -> None:
    import_id = stage_import(SCENARIO, MAPPING)

    submit_column_mapping(session, import_id=import_id, fields={"sku": "A", "cost": "B"})
    run_price_import_validation(session, import_id=import_id)

    rows = _rows_by_number(session, import_id)
    assert len(rows) == 3
    assert rows[4].status == "valid"
    assert rows[4].parsed_msrp is None


def test_unreadable_file_fails_the_import(session, catalog, stage_import) -> None:
    import_id = stage_import(SCENARIO, MAPPING, validate=False)
    Path(get_price_import(session, import_id=import_id).file_path).unlink()

    with pytest.raises(PipelineError):
        run_price_import_validation(session, import_id=import_id)

    price_import = get_price_import(session, import_id=import_id)
    assert price_import.status == "failed"
    assert "not readable" in price_import.error_message
    assert price_import.is_terminal
    with pytest.raises(ConflictError):
        cancel_price_import(session, import_id=import_id)


def test_commit_is_refused_before_preview(session, catalog, stage_import) -> None:
    import_id = stage_import(SCENARIO)
    submit_column_mapping(session, import_id=import_id, fields=MAPPING)

    with pytest.raises(ConflictError):
        start_price_import_commit(session, import_id=import_id, skip_errors=True)

    assert get_price_import(session, import_id=import_id).status == "validating"


def test_preview_requires_validation(session, stage_import) -> None:
    import_id = stage_import(SCENARIO)

    with pytest.raises(ConflictError):
        get_price_import_preview(session, import_id=import_id)


def test_preview_summary_and_filter(session, catalog, stage_import) -> None:
    import_id = stage_import(SCENARIO, MAPPING)

    preview = get_price_import_preview(session, import_id=import_id, status_filter="error")

    assert preview.page.total == 1
    assert [row.row_number for row in preview.rows] == [3]
    assert preview.summary["total_rows"] == 3
    assert preview.summary["valid"] == 1
    assert preview.summary["warnings"] == 1
    assert preview.summary["errors"] == 1
    assert preview.summary["exact_sku"] == 2
    assert preview.summary["price_increases"] == 2


def test_cancel_in_preview_is_immediate(session, catalog, stage_import) -> None:
    import_id = stage_import(SCENARIO, MAPPING)

    result = cancel_price_import(session, import_id=import_id)

    assert result.status == "cancelled"
    price_import = get_price_import(session, import_id=import_id)
    assert price_import.status == "cancelled"
    assert price_import.error_message == "Cancelled by user"
    assert cancel_price_import(session, import_id=import_id).message == (
        "Import is already cancelled"
    )


def test_cancel_stops_a_pending_validation(session, catalog, stage_import) -> None:
    import_id = stage_import(SCENARIO, MAPPING, validate=False)

    cancel_price_import(session, import_id=import_id)
    price_import = run_price_import_validation(session, import_id=import_id)

    assert price_import.status == "cancelled"
    assert PriceImportRowRepository(session).list(import_id)[1] == 0


def test_cancelled_import_can_be_reopened_and_revalidated(
    session, catalog, stage_import
) -> None:
    import_id = stage_import(SCENARIO, MAPPING)
    cancel_price_import(session, import_id=import_id)

    reopened = reopen_price_import(session, import_id=import_id)
    assert reopened.status == "mapping"
    assert reopened.error_message is None

    submit_column_mapping(session, import_id=import_id, fields=MAPPING)
    run_price_import_validation(session, import_id=import_id)
    assert get_price_import(session, import_id=import_id).status == "preview"


def test_only_failed_or_cancelled_imports_reopen(session, catalog, stage_import) -> None:
    import_id = stage_import(SCENARIO, MAPPING)

    with pytest.raises(ConflictError):
        reopen_price_import(session, import_id=import_id)


def test_startup_recovery_closes_interrupted_imports(session, catalog, stage_import) -> None:
    validating_id = stage_import(SCENARIO, MAPPING, validate=False)
    importing_id = stage_import(SCENARIO, MAPPING)
    start_price_import_commit(session, import_id=importing_id, skip_errors=True)
    cancel_price_import(session, import_id=importing_id)
    finished_id = stage_import(SCENARIO, MAPPING)

    assert recover_interrupted_imports(session) == 2

    repository = PriceImportRepository(session)
    interrupted = repository.get(validating_id)
    assert interrupted.status == "failed"
    assert interrupted.error_message == "Interrupted before completion"
    assert repository.get(importing_id).status == "cancelled"
    assert repository.get(finished_id).status == "preview"
