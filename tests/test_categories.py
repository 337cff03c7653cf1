import logging
import unittest

from correlate.linker import to_commit_records
from release.categories import assign_to_categories, categorize, extract_pull_requests
from release.grouping import group_by_release
from conftest import FakeRepository, make_issue, make_pr, raw

LABELS = {'bug': ':bug: Bug Fix', 'feature': ':rocket: Enhancement', 'task': ':house: Internal'}


def _commits(*pairs):
    """Build commits from (pr, linked_issues, packages) tuples."""
    commits = to_commit_records([raw(f"c{i}", "msg") for i in range(len(pairs))])
    for commit, (pr, issues, packages) in zip(commits, pairs):
        commit.github_pr = pr
        commit.linked_issues = list(issues)
        commit.packages = list(packages)
    return commits


class TestExtractPullRequests(unittest.TestCase):
    def test_dedup_keeps_first_seen_position(self):
        pr1, pr2 = make_pr(1), make_pr(2)
        commits = _commits((pr2, [], []), (pr1, [], []), (pr2, [], []), (None, [], []), (pr2, [], []))
        prs = extract_pull_requests(commits)
        self.assertEqual([p.number for p in prs], [2, 1])

    def test_packages_union(self):
        pr = make_pr(1)
        commits = _commits((pr, [], ['a']), (pr, [], ['b', 'a']))
        self.assertEqual(extract_pull_requests(commits)[0].packages, ['a', 'b'])


class TestAssignToCategories(unittest.TestCase):
    def test_issue_type_maps_to_category(self):
        pr = make_pr(10)
        commits = _commits((pr, [make_issue(10, 'Bug')], []))
        assign_to_categories([pr], commits, {'bug': '🐛 Bug Fixes'})
        self.assertEqual(pr.categories.to_list(), ['🐛 Bug Fixes'])

    def test_union_of_linked_issues_across_commits(self):
        pr = make_pr(1)
        commits = _commits((pr, [make_issue(1, 'Bug')], []), (pr, [make_issue(2, 'Feature'), make_issue(3, 'bug')], []))
        assign_to_categories([pr], commits, LABELS)
        self.assertEqual(pr.categories.to_list(), [':bug: Bug Fix', ':rocket: Enhancement'])

    def test_uncategorized_fallback(self):
        pr = make_pr(1)
        commits = _commits((pr, [make_issue(1, 'Epic')], []))
        assign_to_categories([pr], commits, dict(LABELS, uncategorized=':question: Other'))
        self.assertEqual(pr.categories.to_list(), [':question: Other'])

    def test_no_fallback_leaves_empty_set(self):
        pr = make_pr(1)
        commits = _commits((pr, [make_issue(1, 'Epic')], []))
        assign_to_categories([pr], commits, LABELS)
        self.assertEqual(len(pr.categories), 0)

    def test_wildcard_category_does_not_catch_unmapped_types(self):
        labels = dict(LABELS, misc=':present: Additional updates')
        pr = make_pr(1)
        commits = _commits((pr, [make_issue(1, 'Epic')], []))
        assign_to_categories([pr], commits, labels)
        self.assertEqual(len(pr.categories), 0)
        self.assertEqual(group_by_release([pr], 'HEAD', FakeRepository()), [])
        # only an explicit uncategorized mapping catches them
        labels['uncategorized'] = ':question: Other'
        self.assertEqual(categorize([make_issue(1, 'Epic')], labels).to_list(), [':question: Other'])

    def test_rerun_is_idempotent(self):
        pr = make_pr(1)
        commits = _commits((pr, [make_issue(1, 'Bug'), make_issue(2, 'Bug')], []), (pr, [make_issue(1, 'Bug')], []))
        assign_to_categories([pr], commits, LABELS)
        first = pr.categories.to_list()
        assign_to_categories([pr], commits, LABELS)
        self.assertEqual(pr.categories.to_list(), first)
        self.assertEqual(first, [':bug: Bug Fix'])

    def test_issue_without_type_or_labels_warns(self):
        pr = make_pr(5)
        commits = _commits((pr, [make_issue(1)], []))
        with self.assertLogs('release.categories', level=logging.WARNING) as logs:
            assign_to_categories([pr], commits, LABELS)
        self.assertIn('#5', logs.output[0])
        self.assertEqual(len(pr.categories), 0)

    def test_labels_do_not_drive_categories(self):
        pr = make_pr(1)
        commits = _commits((pr, [make_issue(1, None, labels=['bug'])], []))
        assign_to_categories([pr], commits, LABELS)
        self.assertEqual(len(pr.categories), 0)


if __name__ == '__main__':
    unittest.main()
