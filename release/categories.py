"""
Category assignment.
Routes each pull request to release-note categories using the issue type of the issues it closes.
"""
import logging
from typing import Dict, List

from normalize.models import CategorySet, CommitRecord, LinkedIssue, PullRequestRecord

logger = logging.getLogger(__name__)

UNCATEGORIZED_KEY = 'uncategorized'


def extract_pull_requests(commits: List[CommitRecord]) -> List[PullRequestRecord]:
    """Return the distinct pull requests referenced by commits, in first-seen commit order.

    A PR's `packages` becomes the union of the packages of all its commits.
    """
    pull_requests: List[PullRequestRecord] = []
    by_number: Dict[int, PullRequestRecord] = {}
    for commit in commits:
        pr = commit.github_pr
        if pr is None or not pr.number:
            continue
        if pr.number not in by_number:
            by_number[pr.number] = pr
            pull_requests.append(pr)
        target = by_number[pr.number]
        for package in commit.packages:
            if package not in target.packages:
                target.packages.append(package)
    return pull_requests


def linked_issues_for(pr: PullRequestRecord, commits: List[CommitRecord]) -> List[LinkedIssue]:
    issues: List[LinkedIssue] = []
    for commit in commits:
        if commit.github_pr is not None and commit.github_pr.number == pr.number:
            issues.extend(commit.linked_issues)
    return issues


def categorize(issues: List[LinkedIssue], labels: Dict[str, str]) -> CategorySet:
    """Map linked issues to display categories by issue type, falling back to "uncategorized" when mapped."""
    categories = CategorySet()
    for issue in issues:
        key = issue.type_key()
        if key and labels.get(key):
            categories.add(labels[key])

    if len(categories) == 0 and labels.get(UNCATEGORIZED_KEY):
        categories.add(labels[UNCATEGORIZED_KEY])
    return categories


def assign_to_categories(pull_requests: List[PullRequestRecord], commits: List[CommitRecord], labels: Dict[str, str]) -> List[PullRequestRecord]:
    """Set `categories` on every pull request. Each call rebuilds the sets, so re-running is idempotent."""
    for pr in pull_requests:
        issues = linked_issues_for(pr, commits)
        if not any(i.issue_type is not None or i.labels for i in issues):
            logger.warning("No labels or types found on anything associated with PR #%s. Skipping categorization.", pr.number)
        pr.categories = categorize(issues, labels)
    return pull_requests
