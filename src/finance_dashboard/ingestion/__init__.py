from finance_dashboard.ingestion.analyzer import (
    AnalysisFailedError,
    AnalyzedTransaction,
    DocumentAnalysisRequest,
    DocumentAnalysisResponse,
    DocumentAnalyzer,
    source_for_mime_type,
)
from finance_dashboard.ingestion.boundary import (
    IngestionResult,
    RejectedRowError,
    build_transaction,
    build_transactions,
    canonical_date,
    validate_amount,
)

__all__ = [
    "AnalysisFailedError",
    "AnalyzedTransaction",
    "DocumentAnalysisRequest",
    "DocumentAnalysisResponse",
    "DocumentAnalyzer",
    "source_for_mime_type",
    "IngestionResult",
    "RejectedRowError",
    "build_transaction",
    "build_transactions",
    "canonical_date",
    "validate_amount",
]
