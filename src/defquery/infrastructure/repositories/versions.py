"""Latest-version resolution over a filtered candidate set.

Given a statement that applies every non-version predicate, keep exactly
one row per key: the one with the highest version among the candidates.
Version predicates are tested against the resolved rows by the caller.
Version uniqueness per key (``UNIQUE(key, version)``) rules out ties,
so the join yields at most one row per group.

Runs before sorting and paging so a page never holds superseded versions.
"""

from __future__ import annotations

from sqlalchemy import Select, and_, func, select


def latest_versions(candidates: Select) -> Select:
    """Restrict *candidates* to the max-version row of each key."""
    matched = candidates.subquery("candidates")
    latest = (
        select(
            matched.c["key"].label("latest_key"),
            func.max(matched.c.version).label("latest_version"),
        )
        .group_by(matched.c["key"])
        .subquery("latest")
    )
    return select(matched).join(
        latest,
        and_(
            matched.c["key"] == latest.c.latest_key,
            matched.c.version == latest.c.latest_version,
        ),
    )
