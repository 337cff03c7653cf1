"""
Contributor collection per release.
"""
from typing import Dict, List

from normalize.models import Author, PullRequestRecord, Release


def ignore_committer(login: str, ignore_committers: List[str]) -> bool:
    """True when the login equals, or contains, any ignored entry (e.g. "dependabot[bot]")."""
    return any(c == login or c in login for c in ignore_committers)


def get_committers(pull_requests: List[PullRequestRecord], ignore_committers: List[str]) -> List[Author]:
    committers: Dict[str, Author] = {}
    for pr in pull_requests:
        author = pr.author
        if author is None or not author.login:
            continue
        if ignore_committer(author.login, ignore_committers) or author.login in committers:
            continue
        committers[author.login] = author
    return list(committers.values())


def fill_in_contributors(releases: List[Release], ignore_committers: List[str], github=None) -> List[Release]:
    """Attach contributors to every release.

    When a GitHub client is passed, each contributor's display name is looked up once per login.
    """
    names: Dict[str, str] = {}
    for release in releases:
        release.contributors = get_committers(release.pull_requests, ignore_committers)
        if github is None:
            continue
        for author in release.contributors:
            if author.login not in names:
                names[author.login] = github.get_user_data(author.login).name or ""
            author.name = names[author.login] or None
    return releases
