"""
Normalization utility helpers.
Small helpers to turn raw GitHub GraphQL/REST payloads into normalize.models entities.
"""
from typing import Dict, Any, List, Optional
from normalize.models import Author, CommitAssociation, IssueRecord, IssueType, Label, LinkedIssue, PullRequestRecord, UserRecord


def _nodes(raw: Any) -> List[Dict[str, Any]]:
    """Return the node list of a GraphQL connection, or the list itself for REST payloads."""
    if isinstance(raw, dict):
        return [n for n in (raw.get('nodes') or []) if n]
    if isinstance(raw, list):
        return [n for n in raw if n]
    return []


def normalize_labels(raw: Any) -> List[Label]:
    return [Label(n.get('name') or '') for n in _nodes(raw) if isinstance(n, dict) and n.get('name')]


def normalize_author(raw: Optional[Dict[str, Any]]) -> Optional[Author]:
    """Create an Author from a GraphQL `author` (login/url/avatarUrl) or REST `user` (login/html_url/avatar_url) dict."""
    if not raw or not raw.get('login'):
        return None
    return Author(
        login=raw['login'],
        url=raw.get('url') or raw.get('html_url') or '',
        avatar_url=raw.get('avatarUrl') or raw.get('avatar_url') or '',
    )


def normalize_pull_request(raw: Optional[Dict[str, Any]]) -> Optional[PullRequestRecord]:
    """Create a PullRequestRecord from an `associatedPullRequests` node. Returns None for empty input."""
    if not raw or raw.get('number') is None:
        return None
    return PullRequestRecord(
        number=int(raw['number']),
        title=raw.get('title') or '',
        url=raw.get('url') or '',
        author=normalize_author(raw.get('author')),
        merged=bool(raw.get('merged')),
        base_branch=raw.get('baseRefName'),
        head_branch=raw.get('headRefName'),
    )


def normalize_commit_association(raw: Optional[Dict[str, Any]]) -> CommitAssociation:
    """Build the commit -> PR lookup result from the GraphQL `object` of a commit (which may be null)."""
    raw = raw or {}
    parents = raw.get('parents') or {}
    prs = _nodes(raw.get('associatedPullRequests'))
    pr = normalize_pull_request(prs[0]) if prs else None
    return CommitAssociation(
        is_merge_commit=int(parents.get('totalCount') or 0) > 1,
        pr=pr,
        base_branch=pr.base_branch if pr else None,
        head_branch=pr.head_branch if pr else None,
    )


def normalize_linked_issue(raw: Dict[str, Any]) -> LinkedIssue:
    issue_type = raw.get('issueType')
    return LinkedIssue(
        number=int(raw.get('number') or 0),
        title=raw.get('title') or '',
        issue_type=IssueType(issue_type['name']) if isinstance(issue_type, dict) and issue_type.get('name') else None,
        labels=normalize_labels(raw.get('labels')),
    )


def normalize_linked_issues(raw: Any) -> List[LinkedIssue]:
    return [normalize_linked_issue(n) for n in _nodes(raw)]


def normalize_issue(raw: Dict[str, Any]) -> IssueRecord:
    """Create an IssueRecord from a REST issue payload. Pull requests carry a `pull_request.html_url`."""
    pull_request = raw.get('pull_request') or {}
    return IssueRecord(
        number=int(raw.get('number') or 0),
        title=raw.get('title') or '',
        labels=normalize_labels(raw.get('labels')),
        user=normalize_author(raw.get('user')),
        pull_request_url=pull_request.get('html_url'),
    )


def normalize_user(raw: Dict[str, Any]) -> UserRecord:
    return UserRecord(login=raw.get('login') or '', name=raw.get('name'), html_url=raw.get('html_url') or '')
