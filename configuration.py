"""
Configuration loading.
Reads a partial config from .changelog.yml (or [tool.changelog] in pyproject.toml) at the repository root
and fills in defaults. The result is read-only for the rest of the run.
"""
import os
import re
import tomllib
from typing import Any, Dict, List, Optional

import yaml

from errors import ConfigurationError
from ingest.git import GitRepository

CONFIG_FILENAMES = ('.changelog.yml', '.changelog.yaml')
PYPROJECT_FILENAME = 'pyproject.toml'

DEFAULT_LABELS = {
    'breaking': ':boom: Breaking Change',
    'enhancement': ':rocket: Enhancement',
    'bug': ':bug: Bug Fix',
    'documentation': ':memo: Documentation',
    'internal': ':house: Internal',
}

WILDCARD_CATEGORY = ':present: Additional updates'

DEFAULT_IGNORE_COMMITTERS = [
    'dependabot-bot',
    'dependabot[bot]',
    'dependabot-preview[bot]',
    'greenkeeperio-bot',
    'greenkeeper[bot]',
    'renovate-bot',
    'renovate[bot]',
]

DEFAULT_BASE_BRANCH_NAMES = ['main']

GITHUB_URL_RE = re.compile(r"github\.com[:/]+([^/\s]+)/([^/\s#?]+?)(?:\.git)?/?$")


class Configuration:
    """
    Settings for one changelog run.
    """

    def __init__(
        self,
        repo: str,
        root_path: Optional[str] = None,
        labels: Optional[Dict[str, str]] = None,
        ignore_committers: Optional[List[str]] = None,
        base_branch_names: Optional[List[str]] = None,
        next_version: Optional[str] = None,
        wildcard_label: Optional[str] = None,
    ):
        self.repo = repo
        self.root_path = root_path
        self.labels = dict(DEFAULT_LABELS if labels is None else labels)
        if isinstance(ignore_committers, str):
            ignore_committers = [ignore_committers]
        if isinstance(base_branch_names, str):
            base_branch_names = [base_branch_names]
        self.ignore_committers = list(DEFAULT_IGNORE_COMMITTERS if ignore_committers is None else ignore_committers)
        self.base_branch_names = list(base_branch_names or DEFAULT_BASE_BRANCH_NAMES)
        self.next_version = next_version
        self.wildcard_label = wildcard_label

    def categories(self) -> List[str]:
        """Display strings of all configured categories, in config order, without duplicates."""
        seen: List[str] = []
        for value in self.labels.values():
            if value not in seen:
                seen.append(value)
        return seen


def _read_yaml_config(root_path: str) -> Optional[Dict[str, Any]]:
    for name in CONFIG_FILENAMES:
        path = os.path.join(root_path, name)
        if not os.path.exists(path):
            continue
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping.")
        return data
    return None


def _read_pyproject(root_path: str) -> Dict[str, Any]:
    path = os.path.join(root_path, PYPROJECT_FILENAME)
    if not os.path.exists(path):
        return {}
    try:
        with open(path, 'rb') as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Failed to read {path}: {e}") from e


def from_pyproject_config(root_path: str) -> Optional[Dict[str, Any]]:
    return (_read_pyproject(root_path).get('tool') or {}).get('changelog')


def find_repo_from_url(url: Optional[str]) -> Optional[str]:
    """Return "owner/name" for a GitHub https/ssh URL, otherwise None."""
    if not url:
        return None
    m = GITHUB_URL_RE.search(url.strip())
    if not m:
        return None
    return f"{m.group(1)}/{m.group(2)}"


def find_repo(root_path: str, repository: Optional[GitRepository] = None) -> Optional[str]:
    """Infer the GitHub repository from pyproject.toml project URLs, then from the origin remote."""
    urls = (_read_pyproject(root_path).get('project') or {}).get('urls') or {}
    for url in urls.values():
        repo = find_repo_from_url(url)
        if repo:
            return repo
    repository = repository or GitRepository(root_path)
    return find_repo_from_url(repository.remote_url())


def _string_list(config: Dict[str, Any], key: str) -> Optional[List[str]]:
    """Read a list-of-strings setting. A single string counts as a one-element list."""
    value = config.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f'"{key}" must be a string or a list of strings.')
    return value


def find_next_version(root_path: str) -> Optional[str]:
    version = (_read_pyproject(root_path).get('project') or {}).get('version')
    return f"v{version}" if version else None


def from_path(root_path: str, repo: Optional[str] = None, next_version_from_metadata: bool = False, repository: Optional[GitRepository] = None) -> Configuration:
    # Step 1: partial config from the YAML file or pyproject.toml
    config = _read_yaml_config(root_path)
    if config is None:
        config = from_pyproject_config(root_path) or {}

    if repo:
        config['repo'] = repo

    # Step 2: fill in defaults
    repo = config.get('repo')
    if not repo:
        repo = find_repo(root_path, repository)
        if not repo:
            raise ConfigurationError('Could not infer "repo" from pyproject.toml or the git remote.')

    next_version = config.get('next_version')
    if next_version_from_metadata or config.get('next_version_from_metadata'):
        next_version = find_next_version(root_path)
        if not next_version:
            raise ConfigurationError('Could not infer "next_version" from the pyproject.toml file.')

    labels = config.get('labels')
    labels = {str(k).lower(): v for k, v in labels.items()} if labels else dict(DEFAULT_LABELS)

    wildcard_label = config.get('wildcard_label')
    if wildcard_label:
        wildcard_label = str(wildcard_label).lower()
        if wildcard_label not in labels:
            labels[wildcard_label] = WILDCARD_CATEGORY

    return Configuration(
        repo=repo,
        root_path=root_path,
        labels=labels,
        ignore_committers=_string_list(config, 'ignore_committers'),
        base_branch_names=_string_list(config, 'base_branch_names'),
        next_version=next_version,
        wildcard_label=wildcard_label,
    )


def load(repo: Optional[str] = None, next_version_from_metadata: bool = False, repository: Optional[GitRepository] = None) -> Configuration:
    """Load the configuration for the repository containing the current directory."""
    repository = repository or GitRepository()
    root_path = repository.root_path() or os.getcwd()
    return from_path(root_path, repo=repo, next_version_from_metadata=next_version_from_metadata, repository=repository)
