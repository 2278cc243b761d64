"""
Ledger Exceptions
"""
from typing import List, Optional


class LedgerError(Exception):
    """Base class for accounting and data-management failures"""
    pass


class ValidationError(LedgerError, ValueError):
    """Raised when input is rejected before anything is written."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class PersistenceError(LedgerError):
    """Raised when a database call fails; `step` names the failing call."""

    def __init__(self, message: str, step: str):
        super().__init__(f"{step}: {message}")
        self.step = step


class ResetError(PersistenceError):
    """Raised when a reset step fails. Earlier steps stay committed."""

    def __init__(self, message: str, step: str, completed_steps: Optional[List[str]] = None):
        super().__init__(message, step)
        self.completed_steps = list(completed_steps or [])
