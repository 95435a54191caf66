"""Core business-logic engines."""

from qa_matrix.engines.apply_engine import ApplyEngine
from qa_matrix.engines.fuzzy_matcher import CandidateProfile, FuzzyMatcher
from qa_matrix.engines.reconciliation import ReconciliationStore

__all__ = [
    "ApplyEngine",
    "CandidateProfile",
    "FuzzyMatcher",
    "ReconciliationStore",
]
