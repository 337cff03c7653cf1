"""
Pull request resolution: enrich each commit with the pull request it came from and the issues that PR closes.

Commits are processed on a bounded thread pool. Lookups of linked issues are single-flight per PR number
through a per-run PRCache, so any number of commits sharing a PR cost one linked-issues request.
"""
import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, List, Optional

from normalize.models import CommitRecord, PullRequestRecord
from storage.cache import PRCache, PRCacheEntry
from correlate.linker import unique_packages

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5


def run_bounded(items: List, worker: Callable, concurrency: int = DEFAULT_CONCURRENCY):
    """Run `worker(item)` for every item with at most `concurrency` in flight.

    The first failure cancels everything still queued and is re-raised; results are discarded.
    """
    if not items:
        return
    with ThreadPoolExecutor(max_workers=concurrency) as pool:
        futures = [pool.submit(worker, item) for item in items]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        for f in done:
            if f.exception() is not None:
                for pending in futures:
                    pending.cancel()
                raise f.exception()


class PullRequestResolver:
    """
    Populates `pr_number`, `github_pr`, `linked_issues` and `github_issue` on commit records.

    Parameters:
        github: issue tracker client (get_pr_for_commit, get_linked_issues, get_issue_data).
        config: Configuration providing `repo` and `base_branch_names`.
        cache: PRCache for this run; a fresh one is created when omitted.
        concurrency: maximum number of commits in flight.
        progress: optional ProgressBar.
    """

    def __init__(self, github, config, cache: Optional[PRCache] = None, concurrency: int = DEFAULT_CONCURRENCY, progress=None):
        self.github = github
        self.config = config
        self.cache = cache if cache is not None else PRCache()
        self.concurrency = concurrency
        self.progress = progress

    def _accept(self, pr: Optional[PullRequestRecord]) -> bool:
        return bool(pr and pr.merged and pr.number and pr.base_branch in self.config.base_branch_names)

    def _lookup_merged_pr(self, sha: str) -> Optional[PullRequestRecord]:
        association = self.github.get_pr_for_commit(self.config.repo, sha)
        if self._accept(association.pr):
            return association.pr
        if association.pr is not None:
            logger.debug("commit %s: PR #%s rejected (merged=%s, base=%s)", sha, association.pr.number, association.pr.merged, association.pr.base_branch)
        return None

    def _create_entry(self, commit: CommitRecord, pr_number: int, found_pr: Optional[PullRequestRecord]) -> PRCacheEntry:
        if found_pr is None:
            found_pr = self._lookup_merged_pr(commit.sha)
            # the message may reference an issue while the commit belongs to another PR
            if found_pr is not None and found_pr.number != pr_number:
                found_pr = None
        linked = self.github.get_linked_issues(self.config.repo, pr_number)
        logger.debug("PR #%s closes %d issue(s)", pr_number, len(linked))
        return PRCacheEntry(found_pr, linked)

    def _tick(self):
        if self.progress is not None:
            self.progress.tick()

    def enrich_commit(self, commit: CommitRecord):
        """Resolve one commit. Steps run strictly in order: PR discovery, cache, issue fetch."""
        pr_number = int(commit.issue_number) if commit.issue_number else None
        found_pr: Optional[PullRequestRecord] = None

        if pr_number is None:
            found_pr = self._lookup_merged_pr(commit.sha)
            if found_pr is not None:
                pr_number = found_pr.number

        if pr_number is not None:
            entry = self.cache.get_or_create(pr_number, lambda: self._create_entry(commit, pr_number, found_pr))
            if entry.pr is None and found_pr is not None:
                self.cache.backfill(pr_number, found_pr)
            commit.pr_number = pr_number

        if commit.issue_number and commit.github_issue is None:
            commit.github_issue = self.github.get_issue_data(self.config.repo, commit.issue_number)
        self._tick()

    def download_issue_data(self, commits: List[CommitRecord]) -> List[CommitRecord]:
        """Enrich all commits; any remote failure propagates and aborts the run."""
        if self.progress is not None:
            self.progress.init("Downloading issue and PR data from GitHub…", len(commits))
        try:
            run_bounded(commits, self.enrich_commit, self.concurrency)
        finally:
            if self.progress is not None:
                self.progress.terminate()

        # single deterministic pass so every commit sees back-filled PR objects
        for commit in commits:
            if commit.pr_number is None:
                continue
            entry = self.cache.get(commit.pr_number)
            if entry is not None:
                commit.github_pr = entry.pr
                commit.linked_issues = list(entry.linked_issues)
        logger.debug("PR cache: %s", self.cache.stats())
        return commits


def fill_in_packages(commits: List[CommitRecord], repository, concurrency: int = DEFAULT_CONCURRENCY, progress=None) -> List[CommitRecord]:
    """Map each commit to the packages its changed paths belong to."""

    def _map(commit: CommitRecord):
        commit.packages = unique_packages(repository.changed_paths(commit.sha))
        if progress is not None:
            progress.tick()

    if progress is not None:
        progress.init("Mapping commits to packages…", len(commits))
    try:
        run_bounded(commits, _map, concurrency)
    finally:
        if progress is not None:
            progress.terminate()
    return commits
