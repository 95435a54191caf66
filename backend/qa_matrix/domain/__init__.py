"""Domain rules: status recalculation, vocabulary, dashboard tallies."""

from qa_matrix.domain.status import control_rating, recalculate
from qa_matrix.domain.summary import dashboard_summary, tally
from qa_matrix.domain.vocabulary import SYNONYMS, area_family, expand_synonyms

__all__ = [
    "recalculate",
    "control_rating",
    "dashboard_summary",
    "tally",
    "SYNONYMS",
    "expand_synonyms",
    "area_family",
]
