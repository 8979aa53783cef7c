from enum import Enum

class TransactionType(Enum):
    """Represents whether money is coming in or out"""
    INCOME = "INCOME" # in
    EXPENSE = "EXPENSE" # out


class TransactionSource(Enum):
    """Where a transaction was captured from"""
    SCAN = "scan"
    CSV = "csv"
    MANUAL = "manual"


class Severity(Enum):
    """How loudly an insight should be presented"""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"
