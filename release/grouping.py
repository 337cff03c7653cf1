"""
Release grouping.

All pull requests of one `from..to` range land in a single release keyed by `to` (or the unreleased marker
when `to` is HEAD). The map is keyed by release name so more keys can flow through, but current callers
only ever produce one: grouping a range that spans several tags into several releases is not supported.
"""
from typing import Dict, List

from normalize.models import PullRequestRecord, Release

UNRELEASED_TAG = "___unreleased___"
HEAD = "HEAD"


def release_key(to: str) -> str:
    return UNRELEASED_TAG if to == HEAD else to


def group_by_release(pull_requests: List[PullRequestRecord], to: str, repository) -> List[Release]:
    """Group categorized pull requests into releases. Uncategorized PRs are dropped."""
    releases: Dict[str, Release] = {}
    key = release_key(to)
    date = None if key == UNRELEASED_TAG else repository.tag_date(to)

    for pr in pull_requests:
        if len(pr.categories) == 0:
            continue
        if key not in releases:
            releases[key] = Release(name=key, date=date)
        releases[key].pull_requests.append(pr)

    return list(releases.values())
