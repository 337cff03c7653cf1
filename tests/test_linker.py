import unittest
from correlate.linker import find_pull_request_id, parse_tags, to_commit_record, package_from_path, unique_packages
from normalize.models import RawCommit


class TestLinker(unittest.TestCase):
    def test_merge_commit(self):
        self.assertEqual(find_pull_request_id("Merge pull request #123 from owner/branch"), "123")

    def test_squash_merge(self):
        self.assertEqual(find_pull_request_id("Fix login redirect (#45)"), "45")

    def test_homu(self):
        self.assertEqual(find_pull_request_id("Auto merge of #7 - owner:branch, r=someone"), "7")

    def test_only_first_line_is_inspected(self):
        self.assertIsNone(find_pull_request_id("Fix login\n\nSee (#45)"))

    def test_no_reference(self):
        self.assertIsNone(find_pull_request_id("Update README"))
        self.assertIsNone(find_pull_request_id("Mentions #45 in the middle"))
        self.assertIsNone(find_pull_request_id(""))

    def test_parse_tags(self):
        self.assertEqual(parse_tags("HEAD -> main, tag: v1.2.0, tag: latest, origin/main"), ["v1.2.0", "latest"])
        self.assertEqual(parse_tags("HEAD -> main"), [])
        self.assertEqual(parse_tags(""), [])

    def test_to_commit_record(self):
        rec = to_commit_record(RawCommit("abc123", "tag: v2.0.0", "Add export (#99)", "2025-02-01"))
        self.assertEqual(rec.sha, "abc123")
        self.assertEqual(rec.tags, ["v2.0.0"])
        self.assertEqual(rec.issue_number, "99")
        self.assertEqual(rec.date, "2025-02-01")
        self.assertIsNone(rec.github_pr)
        self.assertEqual(rec.linked_issues, [])


def test_package_from_path():
    assert package_from_path("packages/core/src/index.py") == "core"
    assert package_from_path("packages/@scope/util/src/a.py") == "@scope/util"
    assert package_from_path("packages/README.md") == ""
    assert package_from_path("src/app.py") == ""


def test_unique_packages_keeps_first_seen_order():
    paths = ["packages/b/x.py", "docs/a.md", "packages/a/y.py", "packages/b/z.py"]
    assert unique_packages(paths) == ["b", "a"]


if __name__ == '__main__':
    unittest.main()
