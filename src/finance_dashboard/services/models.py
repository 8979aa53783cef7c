"""
Service layer models - DTOs for service operations.

These models represent the results of service operations, not domain entities.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from finance_dashboard.domain.models import Transaction

ANALYSIS_FAILED_MESSAGE = (
    "Analysis failed. Please make sure the document is a valid bank statement."
)


@dataclass
class ImportResult:
    """
    Result of importing a batch of transactions.

    Provides feedback about what happened during import:
    - How many rows were extracted
    - Which transactions were added, which were duplicates
    - Which rows were rejected at the ingestion boundary
    - A user-facing error when the whole import failed
    """
    source: str = ""
    total_parsed: int = 0
    imported: List[Transaction] = field(default_factory=list)
    duplicates: List[Transaction] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)
    detected_currency: Optional[str] = None
    error: Optional[str] = None
    dry_run: bool = False

    @property
    def new_transactions(self) -> int:
        return len(self.imported)

    @property
    def duplicates_skipped(self) -> int:
        return len(self.duplicates)

    @property
    def success(self) -> bool:
        """Import is successful if nothing failed outright"""
        return self.error is None

    @property
    def partial_success(self) -> bool:
        """Some transactions imported but some rows were rejected"""
        return self.new_transactions > 0 and len(self.rejected) > 0

    def __str__(self) -> str:
        "Human-readable summary"
        if self.error:
            return f"Import from {self.source} failed: {self.error}"

        lines = [
            f"Import summary for {self.source}:",
            f"  New transactions: {self.new_transactions}",
            f"  Duplicates skipped: {self.duplicates_skipped}",
        ]
        if self.rejected:
            lines.append(f"  Rejected rows: {len(self.rejected)}")
        if self.detected_currency:
            lines.append(f"  Detected currency: {self.detected_currency}")
        return "\n".join(lines)
