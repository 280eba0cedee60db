"""Fuzzy matching and ranked catalog search."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple

from pharmapos import config
from pharmapos.ledger import StockLedger
from pharmapos.models.medicine import Medicine


class MatchResult(NamedTuple):
    match: bool
    score: float


NO_MATCH = MatchResult(False, 0.0)

# Fields compared against the query; on equal scores the earlier one wins.
SEARCH_FIELDS = (
    ("name", "name"),
    ("type", "type"),
    ("genericName", "generic_name"),
    ("companyName", "company_name"),
)


def fuzzy_score(query: str, text: str) -> MatchResult:
    """Score how well ``query`` matches ``text``, case-insensitively.

    Containment scores 100 and a prefix 90. Otherwise the query is matched as
    an ordered subsequence of ``text``: each matched character earns
    ``10 + run`` where ``run`` counts consecutive matches. A full subsequence
    adds the share of ``text`` that was matched (as a percentage); a partial
    one that still covers ``PARTIAL_MATCH_RATIO`` of the query is halved.
    """
    search = query.lower()
    target = text.lower()

    if search in target:
        return MatchResult(True, 100.0)
    if target.startswith(search):
        return MatchResult(True, 90.0)

    matched = 0
    score = 0.0
    run = 0
    for char in target:
        if matched >= len(search):
            break
        if char == search[matched]:
            matched += 1
            run += 1
            score += 10 + run
        else:
            run = 0

    if matched == len(search):
        return MatchResult(True, score + (matched / len(target)) * 100)
    if matched >= math.ceil(len(search) * config.PARTIAL_MATCH_RATIO):
        return MatchResult(True, score * 0.5)
    return NO_MATCH


@dataclass
class SearchResult:
    medicine: Medicine
    score: float
    matched_field: str

    @property
    def selectable(self) -> bool:
        """Out-of-stock medicines are listed but cannot be added to a bill."""
        return self.medicine.in_stock


def best_match(query: str, medicine: Medicine) -> SearchResult | None:
    best: MatchResult = NO_MATCH
    best_field = SEARCH_FIELDS[0][0]
    for label, attr in SEARCH_FIELDS:
        result = fuzzy_score(query, getattr(medicine, attr) or "")
        if result.score > best.score:
            best, best_field = result, label
    if not best.match:
        return None
    return SearchResult(medicine=medicine, score=best.score, matched_field=best_field)


def rank_medicines(query: str, medicines: Iterable[Medicine], limit: int | None = None) -> List[SearchResult]:
    """Match, order (in stock first, then by score) and cap the results."""
    if not query.strip():
        return []
    limit = config.SEARCH_RESULT_LIMIT if limit is None else limit
    results = [r for r in (best_match(query, m) for m in medicines) if r is not None]
    results.sort(key=lambda r: (not r.medicine.in_stock, -r.score))
    return results[:limit]


class CatalogSearch:
    """Searches the live medicine list held by a stock ledger."""

    def __init__(self, ledger: StockLedger, limit: int | None = None) -> None:
        self.ledger = ledger
        self.limit = config.SEARCH_RESULT_LIMIT if limit is None else limit

    def search(self, query: str) -> List[SearchResult]:
        return rank_medicines(query, self.ledger.list_medicines(), self.limit)
