"""Query matching, prefix grouping and ranking of directory usage entries.

Everything here is a pure function over ``models`` values; the engine owns
the history map and calls into this module from its control loop.
"""

import re
from typing import Iterable, Optional

from .models import PATH_SEP, DirUsage, MatchOffset, QueryMatch

# query token which lists every known directory
QUERY_ALL = "*"

# groups with more members than this collapse into their common prefix
GROUP_COLLAPSE_THRESHOLD = 2


def split_terms(query: str) -> list[str]:
    return query.split()


def find_term(path: str, term: str) -> list[MatchOffset]:
    """Return every non-overlapping, case-insensitive occurrence of term in path."""
    pattern = re.compile(re.escape(term), re.IGNORECASE)
    return [MatchOffset(m.start(), m.end() - m.start()) for m in pattern.finditer(path)]


def query_match(terms: list[str], candidate: DirUsage) -> Optional[QueryMatch]:
    """Match a candidate against every query term.

    Returns a QueryMatch carrying all offsets when each term occurs at least
    once in the path, otherwise None.
    """
    offsets: list[MatchOffset] = []
    for term in terms:
        found = find_term(candidate.path, term)
        if not found:
            return None
        offsets.extend(found)
    return QueryMatch(dir=candidate, offsets=offsets)


def matched_prefix(path: str, offsets: Iterable[MatchOffset]) -> str:
    """Return the components of path up to and including the last matched one."""
    match_end = max((o.end for o in offsets), default=0)
    sep_index = path.find(PATH_SEP, match_end)
    if sep_index > -1:
        return path[:sep_index]
    return path


def group_matches(matches: list[QueryMatch]) -> list[QueryMatch]:
    """Collapse matches which share a matched prefix into the prefix itself.

    A prefix shared by more than GROUP_COLLAPSE_THRESHOLD matches becomes a
    single synthetic match carrying the freshest access time of the group.
    """
    groups: dict[str, list[QueryMatch]] = {}
    for match in matches:
        groups.setdefault(matched_prefix(match.path, match.offsets), []).append(match)

    result: list[QueryMatch] = []
    for prefix, members in groups.items():
        if len(members) > GROUP_COLLAPSE_THRESHOLD:
            newest = max(m.dir.access_time for m in members)
            result.append(QueryMatch(
                dir=DirUsage(path=prefix, access_time=newest),
                offsets=list(members[0].offsets),
            ))
        else:
            result.extend(members)
    return result


def rank_matches(matches: list[QueryMatch]) -> list[QueryMatch]:
    """Best match first: component-prefix hits, then most recent access."""
    return sorted(
        matches,
        key=lambda m: (m.component_prefix_matches(), m.dir.access_time),
        reverse=True,
    )


def sort_group_matches(matches: list[QueryMatch]) -> list[QueryMatch]:
    return rank_matches(group_matches(matches))


RESULT_ID_RE = re.compile(r"[+-]?[0-9]+")


def parse_result_id(query: str) -> Optional[int]:
    """Return the result id for a plain ASCII integer query, else None."""
    if RESULT_ID_RE.fullmatch(query) is None:
        return None
    return int(query)
