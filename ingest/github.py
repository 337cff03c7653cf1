"""
GitHub ingestion client used by the changelog pipeline.
Commit -> PR association and closing-issue references go through the GraphQL API; single issues and users
through REST. Every non-success response raises RemoteCallError; there is no retry.
"""
import logging
import os
from typing import List, Dict, Any, Optional
import requests

from errors import ConfigurationError, RemoteCallError
from normalize.models import CommitAssociation, IssueRecord, LinkedIssue, UserRecord
from normalize.util import normalize_commit_association, normalize_issue, normalize_linked_issues, normalize_user

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("GITHUB_AUTH", "GITHUB_TOKEN")

PR_FOR_COMMIT_QUERY = """
query($owner: String!, $name: String!, $sha: String!) {
  repository(owner: $owner, name: $name) {
    object(expression: $sha) {
      ... on Commit {
        parents(first: 2) { totalCount }
        associatedPullRequests(first: 5) {
          nodes {
            author { ... on User { login url avatarUrl } }
            merged
            number
            title
            url
            baseRefName
            headRefName
          }
        }
      }
    }
  }
}
"""

LINKED_ISSUES_QUERY = """
query($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) {
      closingIssuesReferences(first: 10) {
        nodes {
          number
          title
          issueType { name }
          labels(first: 10) { nodes { name } }
        }
      }
    }
  }
}
"""


def resolve_token(token: Optional[str] = None) -> Optional[str]:
    """Return the explicit token or the first of GITHUB_AUTH / GITHUB_TOKEN that is set."""
    if token:
        return token
    for var in TOKEN_ENV_VARS:
        value = os.getenv(var)
        if value:
            return value
    return None


def split_repo(repo: str):
    owner, _, name = (repo or "").partition("/")
    if not owner or not name:
        raise ConfigurationError(f'Invalid repository "{repo}"; expected "<owner>/<name>".')
    return owner, name


def _parse_body(resp) -> Any:
    try:
        return resp.json()
    except ValueError:
        return getattr(resp, 'text', None)


class GitHubClient:
    """Issue tracker client: PR lookup for a commit, linked issues of a PR, issue and user data."""

    def __init__(self, token: Optional[str] = None, base_url: str = None, graphql_url: str = None):
        self.token = resolve_token(token)
        if not self.token:
            raise ConfigurationError("Must provide GITHUB_AUTH (or GITHUB_TOKEN) to access the GitHub API.")
        self.base_url = base_url or "https://api.github.com"
        self.graphql_url = graphql_url or f"{self.base_url}/graphql"
        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
        }

    def base_issue_url(self, repo: str) -> str:
        return f"https://github.com/{repo}/issues/"

    def _post(self, query: str, variables: Dict[str, Any], allow_not_found: bool = False) -> Dict[str, Any]:
        resp = requests.post(self.graphql_url, headers=self.headers, json={"query": query, "variables": variables})
        body = _parse_body(resp)
        if resp.status_code != 200:
            raise RemoteCallError(resp.status_code, body, "GraphQL request failed")
        if not isinstance(body, dict):
            raise RemoteCallError(resp.status_code, body, "GraphQL response is not an object")
        # GraphQL reports query errors with a 200 status
        errors = body.get('errors') or []
        if errors and not (allow_not_found and all(e.get('type') == 'NOT_FOUND' for e in errors)):
            raise RemoteCallError(resp.status_code, body, "GraphQL query returned errors")
        return body.get('data') or {}

    def _get(self, url: str) -> Any:
        resp = requests.get(url, headers=self.headers)
        body = _parse_body(resp)
        if resp.status_code != 200:
            raise RemoteCallError(resp.status_code, body, f"GET {url} failed")
        return body

    def get_pr_for_commit(self, repo: str, sha: str) -> CommitAssociation:
        """Return the first pull request associated with a commit, plus whether the commit is a merge commit."""
        owner, name = split_repo(repo)
        data = self._post(PR_FOR_COMMIT_QUERY, {"owner": owner, "name": name, "sha": sha})
        commit = (data.get('repository') or {}).get('object')
        association = normalize_commit_association(commit)
        logger.debug("commit %s -> PR %s", sha, association.pr.number if association.pr else None)
        return association

    def get_linked_issues(self, repo: str, pr_number: int) -> List[LinkedIssue]:
        """Return the issues a pull request closes. A number that is not a pull request yields no issues."""
        owner, name = split_repo(repo)
        data = self._post(LINKED_ISSUES_QUERY, {"owner": owner, "name": name, "number": int(pr_number)}, allow_not_found=True)
        pull_request = (data.get('repository') or {}).get('pullRequest')
        if not pull_request:
            logger.debug("#%s is not a pull request in %s", pr_number, repo)
            return []
        return normalize_linked_issues(pull_request.get('closingIssuesReferences'))

    def get_issue_data(self, repo: str, issue_number: str) -> IssueRecord:
        return normalize_issue(self._get(f"{self.base_url}/repos/{repo}/issues/{issue_number}"))

    def get_user_data(self, login: str) -> UserRecord:
        return normalize_user(self._get(f"{self.base_url}/users/{login}"))
