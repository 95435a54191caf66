"""Fuzzy matching of repeat-issue defect text to QA matrix concerns.

Combines several lexical signals (synonym-expanded Jaccard, substring
overlap, bigram Dice, length-weighted token overlap) with a station-code
bonus.  Fully deterministic: the same text against the same candidates
always yields the same match and score.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from qa_matrix.domain.vocabulary import area_family, expand_synonyms
from qa_matrix.schemas.concern import Concern
from qa_matrix.schemas.report import MatchResult

logger = logging.getLogger(__name__)

_NON_TOKEN = re.compile(r"[^a-z0-9\s/\-]")
_SEPARATORS = re.compile(r"[\s/\-]+")
_NON_ALNUM = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class CandidateProfile:
    """A concern reduced to what the matcher compares, tokenized once per run."""

    s_no: int
    concern: str
    station: str
    text: str
    tokens: tuple[str, ...]
    token_set: frozenset[str]
    expanded: frozenset[str]
    joined: str
    bigrams: frozenset[str]


def tokenize(text: str) -> List[str]:
    """Lowercase, strip punctuation, split on whitespace/slash/hyphen, drop 1-char tokens."""
    cleaned = _NON_TOKEN.sub(" ", text.lower())
    return [t for t in _SEPARATORS.split(cleaned) if len(t) > 1]


def bigrams(text: str) -> frozenset[str]:
    """Character bigrams of the lowercased alphanumeric content of *text*."""
    s = _NON_ALNUM.sub("", text.lower())
    return frozenset(s[i:i + 2] for i in range(len(s) - 1))


def dice_coefficient(a: frozenset[str], b: frozenset[str]) -> float:
    if not a and not b:
        return 0.0
    return 2 * len(a & b) / (len(a) + len(b))


def jaccard_similarity(a: Iterable[str], b: Iterable[str]) -> float:
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    return len(set_a & set_b) / len(union) if union else 0.0


def substring_overlap(query_tokens: Sequence[str], target_joined: str) -> float:
    """Fraction of query tokens found anywhere inside the joined target tokens."""
    if not query_tokens:
        return 0.0
    hits = sum(1 for qt in query_tokens if qt in target_joined)
    return hits / len(query_tokens)


def keyword_weight(token: str) -> float:
    """Longer, more specific words carry more weight."""
    if len(token) <= 2:
        return 0.5
    if len(token) <= 4:
        return 0.8
    return 1.0


def weighted_token_overlap(
    query_tokens: Sequence[str],
    target_tokens: Sequence[str],
    target_set: Optional[frozenset[str]] = None,
) -> float:
    """Length-weighted overlap; partial containment earns 60% of a token's weight."""
    if target_set is None:
        target_set = frozenset(target_tokens)
    total = 0.0
    matched = 0.0
    for qt in query_tokens:
        w = keyword_weight(qt)
        total += w
        if qt in target_set:
            matched += w
        elif any(qt in tt or tt in qt for tt in target_tokens):
            matched += w * 0.6
    return matched / total if total else 0.0


def station_bonus(location: str, station: str) -> float:
    """Bonus when the defect's location points at the concern's station.

    Exact code → 0.3; same code once punctuation is stripped → 0.25;
    same area family (leading t/c/f/p) → 0.1.  A blank location counts as
    an exact match for a blank station.
    """
    loc = location.strip().lower()
    qa = station.strip().lower()
    if loc == qa:
        return 0.3
    if len(loc) >= 2 and len(qa) >= 2 and _NON_ALNUM.sub("", loc) == _NON_ALNUM.sub("", qa):
        return 0.25
    if loc and qa and area_family(loc) is not None and loc[0] == qa[0]:
        return 0.1
    return 0.0


class FuzzyMatcher:
    """Pick the concern whose text best resembles a defect description."""

    # signal → weight in the combined score
    WEIGHTS: dict[str, float] = {
        "jaccard": 0.20,
        "substring": 0.25,
        "dice": 0.15,
        "weighted": 0.25,
        "station": 0.15,
    }

    def __init__(self, threshold: float = 0.15):
        self.threshold = threshold

    # ── candidate preparation ────────────────────────────────────────

    @staticmethod
    def profile(concern: Concern) -> CandidateProfile:
        text = f"{concern.description} {concern.station} {concern.area}"
        tokens = tuple(tokenize(text))
        return CandidateProfile(
            s_no=concern.s_no,
            concern=concern.description,
            station=concern.station,
            text=text,
            tokens=tokens,
            token_set=frozenset(tokens),
            expanded=frozenset(expand_synonyms(tokens)),
            joined=" ".join(tokens),
            bigrams=bigrams(text),
        )

    def prepare_candidates(self, concerns: Iterable[Concern]) -> List[CandidateProfile]:
        """Tokenize every concern once; reuse the result for a whole matching pass."""
        return [self.profile(c) for c in concerns]

    # ── scoring ──────────────────────────────────────────────────────

    def score(
        self,
        text: str,
        candidate: CandidateProfile,
        location: str = "",
    ) -> float:
        """Combined similarity of *text* to one candidate, in [0, 1]."""
        raw_tokens = tokenize(text)
        return self._score(
            raw_tokens, expand_synonyms(raw_tokens), bigrams(text), candidate, location
        )

    def _score(
        self,
        raw_tokens: List[str],
        expanded: set[str],
        query_bigrams: frozenset[str],
        c: CandidateProfile,
        location: str,
    ) -> float:
        signals = {
            "jaccard": jaccard_similarity(expanded, c.expanded),
            "substring": substring_overlap(raw_tokens, c.joined),
            "dice": dice_coefficient(query_bigrams, c.bigrams),
            "weighted": weighted_token_overlap(raw_tokens, c.tokens, c.token_set),
            "station": station_bonus(location, c.station),
        }
        return sum(self.WEIGHTS[name] * value for name, value in signals.items())

    # ── public API ───────────────────────────────────────────────────

    def best_match(
        self,
        text: str,
        candidates: Sequence[CandidateProfile],
        threshold: Optional[float] = None,
        location: str = "",
    ) -> Optional[MatchResult]:
        """Return the highest-scoring candidate at or above the threshold.

        Ties keep the first candidate encountered.  Returns *None* when the
        text has no usable tokens, no candidate scores above zero, or the
        best score falls below the threshold.
        """
        if threshold is None:
            threshold = self.threshold

        raw_tokens = tokenize(text)
        if not raw_tokens:
            return None
        expanded = expand_synonyms(raw_tokens)
        query_bigrams = bigrams(text)

        # Only a strictly positive score can win.
        best_idx: Optional[int] = None
        best_score = 0.0
        for i, candidate in enumerate(candidates):
            s = self._score(raw_tokens, expanded, query_bigrams, candidate, location)
            if s > best_score:
                best_idx, best_score = i, s

        if best_idx is None or best_score < threshold:
            logger.debug("No match for %r (best %.3f)", text, best_score)
            return None

        best = candidates[best_idx]
        return MatchResult(
            s_no=best.s_no,
            concern=best.concern,
            score=best_score,
            candidate_index=best_idx,
        )
