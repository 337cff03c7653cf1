"""
CLI entry point for the changelog generator. Wires the pipeline: config -> commits -> pull requests -> report
"""

import argparse
import logging
import os
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax

import configuration
from changelog import Changelog
from errors import ChangelogError

NEXT_VERSION_DEFAULT = "Unreleased"

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="issuetype-changelog",
        description="Generate a changelog from merged pull requests, categorized by the type of the issues they close.",
        epilog='Example: issuetype-changelog --from=v0.1.0 --to=v0.3.0',
    )
    parser.add_argument("--from", dest="from_ref", type=str, default=None, help="Git tag or commit hash for the lower bound of the commit range (default: latest tag)")
    parser.add_argument("--to", dest="to_ref", type=str, default=None, help="Git tag or commit hash for the upper bound of the commit range (default: HEAD)")
    parser.add_argument("--tag-from", type=str, default=None, help=argparse.SUPPRESS)
    parser.add_argument("--tag-to", type=str, default=None, help=argparse.SUPPRESS)
    parser.add_argument("--next-version", type=str, default=NEXT_VERSION_DEFAULT, help="Name of the next version")
    parser.add_argument("--next-version-from-metadata", action="store_true", help="Infer the name of the next version from pyproject.toml")
    parser.add_argument("--repo", type=str, default=None, help="<owner>/<name> of the GitHub project (default: inferred from pyproject.toml or the origin remote)")
    parser.add_argument("--packages", action="store_true", help="Group entries by the packages/<name> directories they touch")
    parser.add_argument("--contributor-names", action="store_true", help="Look up contributor display names on GitHub")
    parser.add_argument("--out-file", type=str, default="", help="Write the Markdown to this file instead of the terminal")
    parser.add_argument("--quiet", action="store_true", help="Hide progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def write_output(rendered: str, out_file: str = ""):
    """Write Markdown to a file, or print it highlighted to stdout."""
    if out_file:
        out_dir = os.path.dirname(out_file)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(out_file, "w", encoding="utf-8") as f:
            f.write(rendered)
        err_console.print(f"Wrote changelog to {out_file}")
        return
    console.print(Syntax(rendered, "markdown", theme="ansi_dark", word_wrap=True, background_color="default"))


def run(args) -> str:
    config = configuration.load(repo=args.repo, next_version_from_metadata=args.next_version_from_metadata)
    if args.next_version != NEXT_VERSION_DEFAULT:
        config.next_version = args.next_version

    changelog = Changelog(config, quiet=args.quiet, map_packages=args.packages, contributor_names=args.contributor_names)
    return changelog.create_markdown(
        tag_from=args.from_ref or args.tag_from,
        tag_to=args.to_ref or args.tag_to,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        rendered = run(args)
    except ChangelogError as e:
        err_console.print(str(e), style="red", markup=False, highlight=False)
        return 1
    except Exception:
        err_console.print_exception()
        return 1

    write_output(rendered, args.out_file.strip())
    return 0


if __name__ == "__main__":
    sys.exit(main())
