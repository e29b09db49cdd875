from .price_import import (
    ChangeBucketRead,
    ChangeSummaryRead,
    ColumnMappingRead,
    ColumnMappingRequest,
    CommitRequest,
    ImportStatusResponse,
    LargestChangeRead,
    MarginImpactRead,
    PaginationRead,
    PreviewSummaryRead,
    PriceImportDetailRead,
    PriceImportListResponse,
    PriceImportPreviewResponse,
    PriceImportRead,
    PriceImportRowListResponse,
    PriceImportRowRead,
    PriceImportSummaryRead,
    PriceImportUploadResponse,
    ProgressRead,
    SampleRowRead,
    SimulationRead,
    VendorSummaryRead,
)

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
    "VendorSummaryRead",
]
