"""Schemas exposed by the price-list import endpoints.

Monetary amounts are integer minor units (cents).
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class VendorSummaryRead(BaseModel):
    id: int
    name: str
    code: str | None

    model_config = ConfigDict(from_attributes=True)


class ColumnMappingRead(BaseModel):
    fields: dict[str, str]
    decimal_format: str
    skip_rows: int

    model_config = ConfigDict(from_attributes=True)


class PriceImportRead(BaseModel):
    id: int
    vendor_id: int | None
    filename: str
    file_size: int
    status: str
    total_rows: int
    column_headers: list[str]
    column_mapping: ColumnMappingRead | None
    rows_processed: int
    rows_updated: int
    rows_created: int
    rows_skipped: int
    rows_errored: int
    percent_complete: int
    effective_from: date | None
    effective_to: date | None
    uploaded_by: int | None
    approved_by: int | None
    cancel_requested: bool
    error_message: str | None
    created_at: datetime | None
    started_at: datetime | None
    completed_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class PriceImportSummaryRead(PriceImportRead):
    vendor: VendorSummaryRead | None = None


class PriceImportDetailRead(PriceImportRead):
    vendor: VendorSummaryRead | None = None
    row_stats: dict[str, int]


class SampleRowRead(BaseModel):
    row_number: int
    data: dict[str, str]


class PriceImportUploadResponse(BaseModel):
    import_id: int
    filename: str
    status: str
    total_rows: int
    columns: list[str]
    headers: list[str]
    sample_rows: list[SampleRowRead]
    vendor_id: int | None
    effective_from: date | None
    effective_to: date | None


class ColumnMappingRequest(BaseModel):
    column_mapping: dict[str, str | None]
    decimal_format: str = "dollars"
    skip_rows: int = 1

    model_config = ConfigDict(extra="forbid")


class ImportStatusResponse(BaseModel):
    import_id: int
    status: str
    message: str


class PaginationRead(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    model_config = ConfigDict(from_attributes=True)


class PriceImportListResponse(BaseModel):
    imports: list[PriceImportSummaryRead]
    pagination: PaginationRead


class PriceImportRowRead(BaseModel):
    id: int
    row_number: int
    raw_data: dict[str, str]
    parsed_sku: str | None
    parsed_description: str | None
    parsed_cost: int | None
    parsed_msrp: int | None
    parsed_promo_price: int | None
    matched_product_id: int | None
    matched_product_name: str | None
    match_type: str
    status: str
    validation_errors: list[str]
    validation_warnings: list[str]
    previous_cost: int | None
    previous_msrp: int | None
    cost_change: int | None
    msrp_change: int | None

    model_config = ConfigDict(from_attributes=True)


class PreviewSummaryRead(BaseModel):
    total_rows: int
    valid: int
    warnings: int
    errors: int
    skipped: int
    imported: int
    exact_sku: int
    exact_model: int
    new_products: int
    price_increases: int
    price_decreases: int
    no_change: int


class PriceImportPreviewResponse(BaseModel):
    import_id: int
    status: str
    filename: str
    vendor: VendorSummaryRead | None
    summary: PreviewSummaryRead
    rows: list[PriceImportRowRead]
    pagination: PaginationRead


class PriceImportRowListResponse(BaseModel):
    rows: list[PriceImportRowRead]
    pagination: PaginationRead


class ChangeBucketRead(BaseModel):
    count: int
    total_amount: int

    model_config = ConfigDict(from_attributes=True)


class ChangeSummaryRead(BaseModel):
    increases: ChangeBucketRead
    decreases: ChangeBucketRead
    no_change: int

    model_config = ConfigDict(from_attributes=True)


class MarginImpactRead(BaseModel):
    improved: int
    reduced: int
    unchanged: int

    model_config = ConfigDict(from_attributes=True)


class LargestChangeRead(BaseModel):
    row_number: int
    sku: str | None
    description: str | None
    product_name: str | None
    current_cost: int | None
    new_cost: int | None
    cost_change: int
    percent_change: float | None

    model_config = ConfigDict(from_attributes=True)


class SimulationRead(BaseModel):
    import_id: int
    status: str
    products_affected: int
    new_products: int
    cost_changes: ChangeSummaryRead
    msrp_changes: ChangeSummaryRead
    margin_impact: MarginImpactRead
    largest_changes: list[LargestChangeRead]
    warnings_summary: dict[str, int]
    errors_summary: dict[str, int]

    model_config = ConfigDict(from_attributes=True)


class ProgressRead(BaseModel):
    import_id: int
    status: str
    total_rows: int
    rows_processed: int
    rows_updated: int
    rows_created: int
    rows_skipped: int
    rows_errored: int
    percent_complete: int
    cancel_requested: bool
    error_message: str | None
    started_at: datetime | None
    completed_at: datetime | None


class CommitRequest(BaseModel):
    skip_errors: bool = False
    apply_to_effective_date: bool = True

    model_config = ConfigDict(extra="forbid")


__all__ = [
    "ChangeBucketRead",
    "ChangeSummaryRead",
    "ColumnMappingRead",
    "ColumnMappingRequest",
    "CommitRequest",
    "ImportStatusResponse",
    "LargestChangeRead",
    "MarginImpactRead",
    "PaginationRead",
    "PreviewSummaryRead",
    "PriceImportDetailRead",
    "PriceImportListResponse",
    "PriceImportPreviewResponse",
    "PriceImportRead",
    "PriceImportRowListResponse",
    "PriceImportRowRead",
    "PriceImportSummaryRead",
    "PriceImportUploadResponse",
    "ProgressRead",
    "SampleRowRead",
    "SimulationRead",
]
