"""
Correlate package: link commits to pull requests and the issues those pull requests close.
"""

from .linker import find_pull_request_id, parse_tags, to_commit_records
from .resolver import PullRequestResolver, fill_in_packages

__all__ = ["find_pull_request_id", "parse_tags", "to_commit_records", "PullRequestResolver", "fill_in_packages"]
