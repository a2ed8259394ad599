"""Candidate matching predicates and the no-match policy."""

import logging
import re
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from reconcile.errors import NoMatchFound
from reconcile.models import Candidate, Entry

logger = logging.getLogger(__name__)

Predicate = Callable[[Candidate, Entry], bool]

HONORIFIC_PATTERN = re.compile(r"^(mr|ms|mrs|miss|dr|sir)\.? ")
NON_ALPHA_PATTERN = re.compile(r"[^a-z ]")
NON_ALPHANUMERIC_PATTERN = re.compile(r"[^a-z0-9 ]")


class NoMatchPolicy(str, Enum):
    """What an entry yields when no candidate matches."""

    EMPTY = "empty"
    RAISE = "raise"


def normalise_name(name: Optional[str]) -> str:
    """Lowercase, drop non-letters and strip one leading honorific."""
    if not name:
        return ""
    normalised = NON_ALPHA_PATTERN.sub("", name.lower())
    return HONORIFIC_PATTERN.sub("", normalised, count=1)


def normalise_company_name(name: Optional[str]) -> str:
    """Lowercase, drop punctuation and treat 'limited' and 'ltd' alike."""
    if not name:
        return ""
    normalised = NON_ALPHANUMERIC_PATTERN.sub("", name.lower())
    words = ["ltd" if word == "limited" else word for word in normalised.split()]
    return " ".join(words)


def by_date_of_birth(field: str) -> Predicate:
    """Match the candidate's birth year and month against an ISO 8601 date column."""

    def predicate(candidate: Candidate, entry: Entry) -> bool:
        value = entry.value(field)
        if not value:
            return True
        # Without a year and month the candidate can't be ruled out
        if not candidate.birth_year or not candidate.birth_month:
            return True
        return (
            str(candidate.birth_year) == value[0:4]
            and str(candidate.birth_month).zfill(2) == value[5:7]
        )

    return predicate


def by_precise_name(field: str, normalise: Callable[[Optional[str]], str] = normalise_name) -> Predicate:
    """Require the normalised names to be equal."""

    def predicate(candidate: Candidate, entry: Entry) -> bool:
        return normalise(candidate.name) == normalise(entry.data.get(field))

    return predicate


def by_non_middle_name(field: str, normalise: Callable[[Optional[str]], str] = normalise_name) -> Predicate:
    """Require the first and last names to be equal, ignoring any middle names."""

    def predicate(candidate: Candidate, entry: Entry) -> bool:
        candidate_names = normalise(candidate.name).split()
        entry_names = normalise(entry.data.get(field)).split()
        if not candidate_names or not entry_names:
            return candidate_names == entry_names
        return (
            candidate_names[0] == entry_names[0]
            and candidate_names[-1] == entry_names[-1]
        )

    return predicate


def build_predicates(
    name_field: Optional[str] = None,
    date_of_birth_field: Optional[str] = None,
    precise_match: bool = False,
    non_middle_name_match: bool = False,
    normalise: Callable[[Optional[str]], str] = normalise_name,
) -> list[Predicate]:
    """Build the ordered predicate list for the enabled match strategies."""
    predicates: list[Predicate] = []
    if date_of_birth_field:
        predicates.append(by_date_of_birth(date_of_birth_field))
    if precise_match and name_field:
        predicates.append(by_precise_name(name_field, normalise))
    if non_middle_name_match and name_field:
        predicates.append(by_non_middle_name(name_field, normalise))
    return predicates


def conform(row: dict[str, Any], columns: list[str]) -> dict[str, Any]:
    """Return a row holding exactly the declared columns, in order."""
    unexpected = set(row) - set(columns)
    if unexpected:
        raise ValueError(f"Row has undeclared columns: {', '.join(sorted(unexpected))}")
    return {column: row.get(column) for column in columns}


class Matcher:
    """Filter candidates through every enabled predicate."""

    def __init__(
        self,
        predicates: Iterable[Predicate] = (),
        on_no_match: NoMatchPolicy = NoMatchPolicy.EMPTY,
    ):
        self.predicates = list(predicates)
        self.on_no_match = on_no_match

    def filter(self, candidates: Iterable[Candidate], entry: Entry) -> list[Candidate]:
        """Keep the candidates that pass every predicate, in their original order."""
        return [
            candidate
            for candidate in candidates
            if all(predicate(candidate, entry) for predicate in self.predicates)
        ]

    def settle(self, rows: list[dict[str, Any]], not_found: str) -> list[dict[str, Any]]:
        """Apply the no-match policy to an entry's complete set of rows."""
        if rows:
            return rows
        if self.on_no_match == NoMatchPolicy.RAISE:
            raise NoMatchFound(not_found)
        logger.debug(not_found)
        return rows
