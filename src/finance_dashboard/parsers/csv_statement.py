from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from finance_dashboard.domain.enums import TransactionSource, TransactionType
from finance_dashboard.ingestion.analyzer import AnalyzedTransaction, DocumentAnalysisResponse
from finance_dashboard.logging_setup import get_logger
from finance_dashboard.parsers.base import StatementParseError, StatementParser

logger = get_logger(__name__)


class CsvStatementParser(StatementParser):
    """
    Parser for CSV transaction exports.

    Expected columns (case-insensitive):
    - date, merchant (or description), amount: required
    - type: optional; INCOME / EXPENSE. When absent, the sign of the amount
      decides (negative = expense) and the magnitude is kept.
    - category, sub_category, currency: optional
    """

    DATE_COL = "date"
    MERCHANT_COL = "merchant"
    AMOUNT_COL = "amount"
    TYPE_COL = "type"
    CATEGORY_COL = "category"
    SUB_CATEGORY_COL = "sub_category"
    CURRENCY_COL = "currency"

    MERCHANT_ALIASES = ("merchant", "description", "payee")

    source = TransactionSource.CSV

    def validate_file(self, filepath):
        path = self._check_path(filepath, (".csv", ".txt"))
        df = self._read(path)
        self._validate_columns(df)

    def parse(self, filepath: Union[str, Path]) -> DocumentAnalysisResponse:
        """
        Parse a CSV export.

        Rows with a blank amount are skipped here; everything else is left
        to the ingestion boundary to validate.
        """
        path = self._check_path(filepath, (".csv", ".txt"))
        df = self._read(path)
        self._validate_columns(df)

        rows: List[AnalyzedTransaction] = []
        for index, row in df.iterrows():
            if pd.isna(row[self.AMOUNT_COL]):
                logger.warning("Skipping row %s of %s: no amount", index, path.name)
                continue
            rows.append(self._parse_row(row))

        return DocumentAnalysisResponse(
            transactions=rows,
            detected_currency_code=self._detect_currency(df),
        )

    def _read(self, path: Path) -> pd.DataFrame:
        try:
            df = pd.read_csv(path, dtype=str, skipinitialspace=True)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise StatementParseError(f"Failed to read CSV file: {e}") from e

        df.columns = [str(col).strip().lower() for col in df.columns]
        if self.MERCHANT_COL not in df.columns:
            for alias in self.MERCHANT_ALIASES:
                if alias in df.columns:
                    df = df.rename(columns={alias: self.MERCHANT_COL})
                    break
        return df

    def _validate_columns(self, df: pd.DataFrame) -> None:
        required_columns = [self.DATE_COL, self.MERCHANT_COL, self.AMOUNT_COL]
        missing = [col for col in required_columns if col not in df.columns]
        if missing:
            raise StatementParseError(
                f"Missing required columns: {missing}. "
                f"Available columns: {list(df.columns)}"
            )

    def _cell(self, row: pd.Series, column: str) -> Optional[str]:
        value = row.get(column)
        if value is None or pd.isna(value):
            return None
        return str(value).strip()

    def _parse_row(self, row: pd.Series) -> AnalyzedTransaction:
        amount = self._cell(row, self.AMOUNT_COL).replace("$", "")
        txn_type = self._cell(row, self.TYPE_COL)

        if txn_type is None:
            if amount.startswith("-"):
                txn_type = TransactionType.EXPENSE.value
                amount = amount[1:]
            else:
                txn_type = TransactionType.INCOME.value

        return AnalyzedTransaction(
            merchant=self._cell(row, self.MERCHANT_COL),
            date=self._cell(row, self.DATE_COL),
            amount=amount,
            category=self._cell(row, self.CATEGORY_COL),
            type=txn_type,
            sub_category=self._cell(row, self.SUB_CATEGORY_COL),
        )

    def _detect_currency(self, df: pd.DataFrame) -> Optional[str]:
        """The single currency code used by the file, if there is exactly one"""
        if self.CURRENCY_COL not in df.columns:
            return None
        codes = df[self.CURRENCY_COL].dropna().str.strip().str.upper().unique()
        if len(codes) == 1:
            return str(codes[0])
        return None
