import sys
import os
import threading
import time

import pytest

# Add project root to sys.path so tests can import top-level modules like 'correlate', 'release', 'report', etc.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from configuration import Configuration  # noqa: E402
from normalize.models import Author, CommitAssociation, IssueRecord, IssueType, Label, LinkedIssue, PullRequestRecord, RawCommit, UserRecord  # noqa: E402


def make_pr(number, title=None, login="alice", merged=True, base="main"):
    author = Author(login, f"https://github.com/{login}", f"https://avatars.githubusercontent.com/u/{number}?v=4") if login else None
    return PullRequestRecord(number, title or f"PR {number}", f"https://github.com/o/r/pull/{number}", author, merged, base)


def make_issue(number, issue_type=None, labels=()):
    return LinkedIssue(number, f"Issue {number}", IssueType(issue_type) if issue_type else None, [Label(n) for n in labels])


class FakeGitHub:
    """Instrumented issue tracker double. Counts every call per argument."""

    def __init__(self, prs_by_sha=None, linked_issues=None, issues=None, users=None, fail_on=None, linked_delay=None):
        self.prs_by_sha = prs_by_sha or {}
        self.linked_issues = linked_issues or {}
        self.issues = issues or {}
        self.users = users or {}
        self.fail_on = fail_on
        self.linked_delay = linked_delay
        self.calls = {'get_pr_for_commit': [], 'get_linked_issues': [], 'get_issue_data': [], 'get_user_data': []}
        self._lock = threading.Lock()

    def _record(self, name, arg):
        with self._lock:
            self.calls[name].append(arg)
        if self.fail_on and self.fail_on == (name, arg):
            from errors import RemoteCallError
            raise RemoteCallError(502, {'message': 'Bad Gateway'}, name)

    def base_issue_url(self, repo):
        return f"https://github.com/{repo}/issues/"

    def get_pr_for_commit(self, repo, sha):
        self._record('get_pr_for_commit', sha)
        pr = self.prs_by_sha.get(sha)
        return CommitAssociation(False, pr, pr.base_branch if pr else None)

    def get_linked_issues(self, repo, pr_number):
        self._record('get_linked_issues', pr_number)
        if self.linked_delay:
            time.sleep(self.linked_delay)
        return list(self.linked_issues.get(pr_number, []))

    def get_issue_data(self, repo, issue_number):
        self._record('get_issue_data', issue_number)
        return self.issues.get(issue_number) or IssueRecord(int(issue_number), f"Issue {issue_number}")

    def get_user_data(self, login):
        self._record('get_user_data', login)
        return self.users.get(login) or UserRecord(login)


class FakeRepository:
    def __init__(self, commits=None, paths=None, last_tag=None, tag_dates=None):
        self.commits = commits or []
        self.paths = paths or {}
        self._last_tag = last_tag
        self.tag_dates = tag_dates or {}
        self.list_calls = []

    def list_commits(self, from_ref, to_ref="HEAD"):
        self.list_calls.append((from_ref, to_ref))
        return list(self.commits)

    def changed_paths(self, sha):
        return list(self.paths.get(sha, []))

    def last_tag(self):
        return self._last_tag

    def tag_date(self, tag):
        return self.tag_dates.get(tag)


def raw(sha, message, ref_names="", date="2025-01-01"):
    return RawCommit(sha, ref_names, message, date)


@pytest.fixture
def config():
    return Configuration(repo="o/r", labels={'bug': ':bug: Bug Fix', 'feature': ':rocket: Enhancement'})
