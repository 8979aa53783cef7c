import json
from pathlib import Path
from typing import Union

from finance_dashboard.domain.enums import TransactionSource
from finance_dashboard.ingestion.analyzer import DocumentAnalysisResponse
from finance_dashboard.parsers.base import StatementParseError, StatementParser


class JsonStatementParser(StatementParser):
    """
    Parser for saved document analyzer output.

    Accepts either the full response object
    ({"transactions": [...], "detectedCurrencyCode": "USD"}) or a bare list
    of transaction rows.
    """

    source = TransactionSource.SCAN

    def validate_file(self, filepath):
        self._load(filepath)

    def parse(self, filepath: Union[str, Path]) -> DocumentAnalysisResponse:
        data = self._load(filepath)
        if isinstance(data, list):
            data = {"transactions": data}
        return DocumentAnalysisResponse.from_dict(data)

    def _load(self, filepath: Union[str, Path]):
        path = self._check_path(filepath, (".json",))
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StatementParseError(f"Invalid JSON in {path.name}: {e}") from e

        if not isinstance(data, (list, dict)):
            raise StatementParseError("Expected a JSON object or list of transactions")
        rows = data.get("transactions", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise StatementParseError("'transactions' must be a list")
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                raise StatementParseError(f"Transaction {index} is not an object: {row!r}")
        return data
