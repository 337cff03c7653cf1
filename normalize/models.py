"""
Unified data models for commits, pull requests, issues and releases.
"""

from typing import Dict, Iterable, Iterator, List, Optional


class CategorySet:
    """
    Ordered set of category display strings.
    Adding an existing category is a no-op; iteration follows first insertion.
    """

    def __init__(self, items: Optional[Iterable[str]] = None):
        self._items: Dict[str, None] = {}
        for item in items or []:
            self.add(item)

    def add(self, item: str):
        if item not in self._items:
            self._items[item] = None

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CategorySet):
            return list(self) == list(other)
        return NotImplemented

    def __repr__(self):
        return f"CategorySet({list(self._items)!r})"

    def to_list(self) -> List[str]:
        return list(self._items)


class Author:
    """
    GitHub account that authored a pull request.
    """

    def __init__(self, login: str, url: str = "", avatar_url: str = "", name: Optional[str] = None):
        self.login = login
        self.url = url
        self.avatar_url = avatar_url
        self.name = name  # filled by user-data enrichment only

    def __repr__(self):
        return f"Author({self.login!r})"


class UserRecord:
    """
    Public profile of a GitHub user (REST /users/{login}).
    """

    def __init__(self, login: str, name: Optional[str] = None, html_url: str = ""):
        self.login = login
        self.name = name
        self.html_url = html_url


class Label:
    def __init__(self, name: str):
        self.name = name


class IssueType:
    def __init__(self, name: str):
        self.name = name


class LinkedIssue:
    """
    Issue a pull request closes automatically (closing issues reference).
    """

    def __init__(self, number: int, title: str, issue_type: Optional[IssueType] = None, labels: Optional[List[Label]] = None):
        self.number = number
        self.title = title
        self.issue_type = issue_type
        self.labels = labels or []

    def type_key(self) -> Optional[str]:
        """Lower-cased issue type name, or None when the issue has no type."""
        if self.issue_type is None or not self.issue_type.name:
            return None
        return self.issue_type.name.lower()


class IssueRecord:
    """
    Issue (or pull request) as returned by the REST issues endpoint.
    """

    def __init__(self, number: int, title: str, labels: Optional[List[Label]] = None, user: Optional[Author] = None, pull_request_url: Optional[str] = None):
        self.number = number
        self.title = title
        self.labels = labels or []
        self.user = user
        self.pull_request_url = pull_request_url


class PullRequestRecord:
    """
    Normalized pull request. Identity is the PR number.
    """

    def __init__(self, number: int, title: str, url: str, author: Optional[Author], merged: bool, base_branch: Optional[str], head_branch: Optional[str] = None):
        self.number = number
        self.title = title
        self.url = url
        self.author = author
        self.merged = merged
        self.base_branch = base_branch
        self.head_branch = head_branch
        self.categories = CategorySet()
        self.packages: List[str] = []

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PullRequestRecord):
            return self.number == other.number
        return NotImplemented

    def __hash__(self):
        return hash(self.number)

    def __repr__(self):
        return f"PullRequestRecord(#{self.number} {self.title!r})"


class CommitAssociation:
    """
    Result of the commit -> pull request lookup.
    """

    def __init__(self, is_merge_commit: bool, pr: Optional[PullRequestRecord], base_branch: Optional[str] = None, head_branch: Optional[str] = None):
        self.is_merge_commit = is_merge_commit
        self.pr = pr
        self.merged = pr.merged if pr else False
        self.base_branch = base_branch
        self.head_branch = head_branch


class RawCommit:
    """
    One line of the local commit log, before parsing.
    """

    def __init__(self, sha: str, ref_names: str, message: str, date: str):
        self.sha = sha
        self.ref_names = ref_names
        self.message = message
        self.date = date


class CommitRecord:
    """
    Parsed commit. The enrichment fields are filled in by the resolver and the package mapper.
    """

    def __init__(self, sha: str, message: str, date: str, tags: Optional[List[str]] = None, issue_number: Optional[str] = None):
        self.sha = sha
        self.message = message
        self.date = date
        self.tags = tags or []
        self.issue_number = issue_number
        # enrichment
        self.pr_number: Optional[int] = None
        self.github_pr: Optional[PullRequestRecord] = None
        self.github_issue: Optional[IssueRecord] = None
        self.linked_issues: List[LinkedIssue] = []
        self.packages: List[str] = []

    def __repr__(self):
        return f"CommitRecord({self.sha[:8]!r})"


class Release:
    """
    Group of categorized pull requests published under one tag (or the unreleased marker).
    """

    def __init__(self, name: str, date: Optional[str] = None, pull_requests: Optional[List[PullRequestRecord]] = None, contributors: Optional[List[Author]] = None):
        self.name = name
        self.date = date
        self.pull_requests = pull_requests or []
        self.contributors = contributors or []
