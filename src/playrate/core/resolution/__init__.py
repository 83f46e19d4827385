"""Query parsing, candidate selection and play-count annualization."""

from .annualizer import annualize, annualize_record
from .candidate_matcher import CandidateMatcher, MatchRule
from .intent_parser import IntentParser
from .orchestrator import ResolutionOrchestrator
from .overrides import OverrideRule, OverrideTable

__all__ = [
    "CandidateMatcher",
    "IntentParser",
    "MatchRule",
    "OverrideRule",
    "OverrideTable",
    "ResolutionOrchestrator",
    "annualize",
    "annualize_record",
]
