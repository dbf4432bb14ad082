"""Errors raised by the advisor flow. Rejected trades are results, not errors."""

from typing import List, Optional


class AdvisorError(Exception):
    """Base class for advisor flow errors"""


class UnknownInstrumentError(AdvisorError, LookupError):
    """Raised when a symbol is not part of the catalog."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Unknown instrument: {symbol}")
        self.symbol = symbol


class IncompleteQuestionnaireError(AdvisorError, ValueError):
    """Raised when scoring is requested before every category has a valid answer."""

    def __init__(self, missing: List[str], invalid: Optional[List[str]] = None) -> None:
        self.missing = missing
        self.invalid = invalid or []
        problems = []
        if self.missing:
            problems.append(f"missing: {', '.join(self.missing)}")
        if self.invalid:
            problems.append(f"invalid: {', '.join(self.invalid)}")
        super().__init__(f"Questionnaire incomplete, {'; '.join(problems)}")


class RiskProfileMissingError(AdvisorError):
    """Raised when an operation needs a risk profile and none exists yet."""


class PersistenceError(AdvisorError):
    """Raised when the snapshot store cannot load or save state."""
