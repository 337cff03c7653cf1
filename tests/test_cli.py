from pathlib import Path

import cli
from cli import NEXT_VERSION_DEFAULT, build_parser, main, write_output
from configuration import Configuration
from errors import ConfigurationError


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.from_ref is None
    assert args.to_ref is None
    assert args.next_version == NEXT_VERSION_DEFAULT
    assert not args.packages
    assert args.out_file == ""


def test_parser_range_options():
    args = build_parser().parse_args(['--from', 'v1.0.0', '--to', 'v1.1.0', '--repo', 'o/r', '--packages', '--quiet'])
    assert (args.from_ref, args.to_ref, args.repo) == ('v1.0.0', 'v1.1.0', 'o/r')
    assert args.packages and args.quiet


def test_write_output_creates_file(tmp_path):
    out = tmp_path / 'docs' / 'CHANGELOG.md'
    write_output("## v1\n", str(out))
    assert out.read_text(encoding='utf-8') == "## v1\n"


def test_main_writes_out_file(tmp_path, monkeypatch):
    monkeypatch.setattr(cli, 'run', lambda args: "\n## Unreleased\n")
    out = tmp_path / 'CHANGELOG.md'
    assert main(['--out-file', str(out)]) == 0
    assert Path(out).read_text(encoding='utf-8') == "\n## Unreleased\n"


def test_configuration_error_exits_nonzero(monkeypatch, capsys):
    def fail(**kwargs):
        raise ConfigurationError('Could not infer "repo" from pyproject.toml or the git remote.')

    monkeypatch.setattr(cli.configuration, 'load', fail)
    assert main(['--quiet']) == 1
    assert 'Could not infer "repo"' in capsys.readouterr().err


def test_unexpected_error_exits_nonzero(monkeypatch):
    def boom(args):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli, 'run', boom)
    assert main([]) == 1


def test_run_passes_options_to_pipeline(monkeypatch):
    captured = {}

    class FakeChangelog:
        def __init__(self, config, quiet=False, map_packages=False, contributor_names=False):
            captured['config'] = config
            captured['flags'] = (quiet, map_packages, contributor_names)

        def create_markdown(self, tag_from=None, tag_to=None):
            captured['range'] = (tag_from, tag_to)
            return "ok"

    monkeypatch.setattr(cli.configuration, 'load', lambda **kwargs: Configuration(repo=kwargs['repo'] or 'o/r'))
    monkeypatch.setattr(cli, 'Changelog', FakeChangelog)

    args = build_parser().parse_args(['--tag-from', 'v1', '--to', 'v2', '--next-version', 'v2.0.0', '--packages'])
    assert cli.run(args) == "ok"
    assert captured['range'] == ('v1', 'v2')
    assert captured['flags'] == (False, True, False)
    assert captured['config'].next_version == 'v2.0.0'
