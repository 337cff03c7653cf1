"""
Linker heuristics to associate commits with the pull requests and packages they belong to.
Simple, dependency-free heuristics:
- merge commit subject ("Merge pull request #N from ...")
- squash merge suffix ("... (#N)")
- homu/bors subject ("Auto merge of #N - ...")
"""
import re
from typing import List, Optional
from normalize.models import CommitRecord, RawCommit

TAG_PREFIX = "tag: "

MERGE_RE = re.compile(r"^Merge pull request #(\d+) from ")
SQUASH_MERGE_RE = re.compile(r"\(#(\d+)\)$")
HOMU_RE = re.compile(r"^Auto merge of #(\d+) - ")


def find_pull_request_id(message: str) -> Optional[str]:
    """Return the PR/issue number referenced on the first line of a commit message, as a digit string."""
    if not message:
        return None
    first_line = message.split("\n", 1)[0].strip()
    for pattern in (MERGE_RE, SQUASH_MERGE_RE, HOMU_RE):
        m = pattern.search(first_line)
        if m:
            return m.group(1)
    return None


def parse_tags(ref_names: str) -> List[str]:
    """Extract tag names from a ref decoration such as "HEAD -> main, tag: v1.2.0, origin/main"."""
    if not ref_names:
        return []
    # one commit may carry several tags
    return [ref[len(TAG_PREFIX):] for ref in ref_names.split(", ") if ref.startswith(TAG_PREFIX)]


def to_commit_record(raw: RawCommit) -> CommitRecord:
    return CommitRecord(
        sha=raw.sha,
        message=raw.message or "",
        date=raw.date,
        tags=parse_tags(raw.ref_names),
        issue_number=find_pull_request_id(raw.message),
    )


def to_commit_records(raws: List[RawCommit]) -> List[CommitRecord]:
    return [to_commit_record(r) for r in raws]


def package_from_path(path: str) -> str:
    """
    Map a changed file path to the package it belongs to.

    packages/foo/src/a.py        -> foo
    packages/@scope/foo/src/a.py -> @scope/foo
    anything else                -> "" (no package)
    """
    parts = path.split("/")
    if parts[0] != "packages" or len(parts) < 3:
        return ""
    if len(parts) >= 4 and parts[1].startswith("@"):
        return f"{parts[1]}/{parts[2]}"
    return parts[1]


def unique_packages(paths) -> List[str]:
    seen: List[str] = []
    for p in paths:
        name = package_from_path(p)
        if name and name not in seen:
            seen.append(name)
    return seen
