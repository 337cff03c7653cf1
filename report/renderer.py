"""
Report renderer: turn categorized releases into changelog Markdown.
Release sections and the contributor gallery are Jinja2 templates under report/templates.
"""

import os
from datetime import date
from typing import Optional, List, Dict, Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from normalize.models import Author, PullRequestRecord, Release
from release.grouping import UNRELEASED_TAG

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), 'templates')


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(['html', 'xml']),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    return env


def render_package_names(package_names: List[str]) -> str:
    return ", ".join(f"`{pkg}`" for pkg in package_names) if package_names else "Other"


class MarkdownRenderer:
    """
    Render releases as Markdown.

    Parameters:
        categories (list): category display strings, in the order sections should appear.
        base_issue_url (str): e.g. https://github.com/owner/name/issues/ - used to link PRs that carry no URL.
        unreleased_name (str): heading used for the unreleased marker.
        today (str): date shown for the unreleased section; defaults to the current date.
    """

    def __init__(self, categories: List[str], base_issue_url: str, unreleased_name: str, today: Optional[str] = None):
        self.categories = categories
        self.base_issue_url = base_issue_url
        self.unreleased_name = unreleased_name
        self.today = today or date.today().isoformat()
        self.env = _environment()
        self.env.filters['pr_line'] = self.render_pull_request

    def render_markdown(self, releases: List[Release]) -> str:
        output = "\n\n\n".join(r for r in (self.render_release(release) for release in releases) if r)
        return f"\n{output}" if output else ""

    def render_release(self, release: Release) -> str:
        unreleased = release.name == UNRELEASED_TAG
        context = {
            'title': self.unreleased_name if unreleased else release.name,
            'pre_text': "Includes changes up to " if unreleased else "Released on ",
            'date': (release.date or self.today) if unreleased else (release.date or ""),
            'categories': self._category_sections(release.pull_requests),
            'contributors': self.render_contributor_list(release.contributors) if release.contributors else "",
        }
        return self.env.get_template('release.md.j2').render(**context).rstrip("\n")

    def render_pull_request(self, pr: PullRequestRecord) -> str:
        url = pr.url or f"{self.base_issue_url}{pr.number}"
        if pr.author is None:
            return f"{pr.title} in [#{pr.number}]({url})"
        return f"{pr.title} by [@{pr.author.login}]({pr.author.url}) in [#{pr.number}]({url})"

    def render_contributor_list(self, contributors: List[Author]) -> str:
        if not contributors:
            return ""
        return self.env.get_template('contributors.md.j2').render(contributors=contributors).rstrip("\n") + "\n"

    def group_by_category(self, pull_requests: List[PullRequestRecord]) -> List[Dict[str, Any]]:
        """Keep, per configured category, the pull requests routed to it."""
        return [{'name': name, 'pull_requests': [pr for pr in pull_requests if name in pr.categories]} for name in self.categories]

    def _category_sections(self, pull_requests: List[PullRequestRecord]) -> List[Dict[str, Any]]:
        sections = []
        for category in self.group_by_category(pull_requests):
            prs = category['pull_requests']
            if not prs:
                continue
            category['packages'] = self.group_by_package(prs) if any(pr.packages for pr in prs) else []
            sections.append(category)
        return sections

    def group_by_package(self, pull_requests: List[PullRequestRecord]) -> List[Dict[str, Any]]:
        groups: Dict[str, List[PullRequestRecord]] = {}
        for pr in pull_requests:
            groups.setdefault(render_package_names(pr.packages), []).append(pr)
        return [{'name': name, 'pull_requests': prs} for name, prs in groups.items()]
