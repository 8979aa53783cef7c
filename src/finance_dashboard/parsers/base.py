from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from finance_dashboard.domain.enums import TransactionSource
from finance_dashboard.ingestion.analyzer import DocumentAnalysisResponse


class StatementParseError(ValueError):
    """Raised when a statement file cannot be read."""
    pass


class StatementParser(ABC):
    """
    Abstract base class for all local statement parsers.

    This implements the Strategy pattern - each file format gets its own
    concrete parser. Parsers produce the same shape the document analyzer
    returns, so every import goes through one ingestion boundary.
    """

    source: TransactionSource = TransactionSource.MANUAL

    @abstractmethod
    def parse(self, filepath: Union[str, Path]) -> DocumentAnalysisResponse:
        """
        Parse a statement file into extracted rows.

        Raises:
            FileNotFoundError: If file doesn't exist
            StatementParseError: If file format is invalid
        """
        pass

    @abstractmethod
    def validate_file(self, filepath: Union[str, Path]) -> None:
        """
        Validate that the file matches the expected format.

        Raises:
            FileNotFoundError: If file doesn't exist
            StatementParseError: If file format is invalid
        """
        pass

    def _check_path(self, filepath: Union[str, Path], suffixes: tuple) -> Path:
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"File does not exist on path {path}")
        if path.suffix.lower() not in suffixes:
            raise StatementParseError(
                f"File must be one of {', '.join(suffixes)}, got {path.suffix}"
            )
        return path
