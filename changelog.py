"""
Changelog pipeline: commits -> pull requests -> categories -> releases -> Markdown.
"""
import logging
from typing import List, Optional

from configuration import Configuration
from correlate.linker import to_commit_records
from correlate.resolver import PullRequestResolver, fill_in_packages
from ingest.git import GitRepository
from ingest.github import GitHubClient
from normalize.models import PullRequestRecord, Release
from release.categories import assign_to_categories, extract_pull_requests
from release.contributors import fill_in_contributors
from release.grouping import HEAD, group_by_release
from report.progress import ProgressBar
from report.renderer import MarkdownRenderer
from storage.cache import PRCache

logger = logging.getLogger(__name__)

UNRELEASED_NAME = "Unofficial Release"


class Changelog:
    """
    One changelog run over a `from..to` commit range.

    Parameters:
        config (Configuration): loaded configuration.
        github: issue tracker client; a GitHubClient is created from the environment token when omitted.
        repository: local git source; the current checkout when omitted.
        quiet (bool): hide progress output.
        map_packages (bool): map commits to packages/<name> directories.
        contributor_names (bool): look up contributor display names.
    """

    def __init__(self, config: Configuration, github=None, repository=None, quiet: bool = False, map_packages: bool = False, contributor_names: bool = False):
        self.config = config
        self.github = github if github is not None else GitHubClient()
        self.repository = repository if repository is not None else GitRepository(config.root_path)
        self.quiet = quiet
        self.map_packages = map_packages
        self.contributor_names = contributor_names
        self.progress = ProgressBar(quiet=quiet)
        self.renderer = MarkdownRenderer(
            categories=config.categories(),
            base_issue_url=self.github.base_issue_url(config.repo),
            unreleased_name=config.next_version or UNRELEASED_NAME,
        )

    def create_markdown(self, tag_from: Optional[str] = None, tag_to: Optional[str] = None) -> str:
        from_ref = tag_from or self.repository.last_tag()
        to_ref = tag_to or HEAD
        releases = self.list_releases(from_ref, to_ref)
        return self.renderer.render_markdown(releases)

    def list_releases(self, from_ref: Optional[str], to_ref: str) -> List[Release]:
        pull_requests = self.get_pull_requests_info(from_ref, to_ref)
        releases = group_by_release(pull_requests, to_ref, self.repository)
        return fill_in_contributors(releases, self.config.ignore_committers, self.github if self.contributor_names else None)

    def get_pull_requests_info(self, from_ref: Optional[str], to_ref: str) -> List[PullRequestRecord]:
        """Resolve and categorize every pull request merged in the commit range."""
        logger.info("Getting commits from %s to %s...", from_ref or "the first commit", to_ref)
        commits = to_commit_records(self.repository.list_commits(from_ref, to_ref))
        if self.map_packages:
            fill_in_packages(commits, self.repository, progress=self.progress)

        # the cache lives for this call only
        resolver = PullRequestResolver(self.github, self.config, cache=PRCache(), progress=self.progress)
        resolver.download_issue_data(commits)

        pull_requests = extract_pull_requests(commits)
        assign_to_categories(pull_requests, commits, self.config.labels)
        logger.info("Found %d pull request(s) in %d commit(s)", len(pull_requests), len(commits))
        return pull_requests
