from .cases import CATALOG, SmokeCase, find_case, select_cases
from .runner import CaseResult, SmokeSuite, case_outcome

__all__ = [
    "CATALOG",
    "SmokeCase",
    "find_case",
    "select_cases",
    "CaseResult",
    "SmokeSuite",
    "case_outcome",
]
