"""
Local repository inspection through the git CLI (read-only).
"""
import logging
import subprocess
from typing import List, Optional

from errors import GitError
from normalize.models import RawCommit

logger = logging.getLogger(__name__)

# unit separator keeps subjects containing "<", ">" or ";" intact
SEP = "\x1f"
LOG_FORMAT = SEP.join(["%H", "%D", "%s", "%cd"])


class GitRepository:
    """Read-only view of a local git checkout."""

    def __init__(self, cwd: Optional[str] = None):
        self.cwd = cwd

    def _run(self, args: List[str], check: bool = True) -> str:
        proc = subprocess.run(["git"] + args, capture_output=True, text=True, cwd=self.cwd, check=False)
        if proc.returncode != 0:
            if check:
                raise GitError(f"git {' '.join(args)} failed: {proc.stderr.strip()}")
            logger.debug("git %s exited with %s: %s", " ".join(args), proc.returncode, proc.stderr.strip())
            return ""
        return proc.stdout

    def list_commits(self, from_ref: Optional[str], to_ref: str = "HEAD") -> List[RawCommit]:
        """Return commits in `from_ref..to_ref`, newest first. Without a lower bound, all history up to `to_ref`."""
        rev_range = f"{from_ref}..{to_ref}" if from_ref else to_ref
        out = self._run(["log", f"--pretty=format:{LOG_FORMAT}", "--date=short", rev_range])
        commits: List[RawCommit] = []
        for line in out.splitlines():
            parts = line.split(SEP)
            if len(parts) != 4:
                logger.debug("skipping unparsable log line: %r", line)
                continue
            sha, ref_names, message, date = parts
            commits.append(RawCommit(sha=sha.strip(), ref_names=ref_names.strip(), message=message, date=date.strip()))
        return commits

    def changed_paths(self, sha: str) -> List[str]:
        """Paths touched by a commit (first parent for merges), in git's order without duplicates."""
        out = self._run(["show", "-m", "--name-only", "--pretty=format:", "--first-parent", sha])
        paths: List[str] = []
        for line in out.splitlines():
            line = line.strip()
            if line and line not in paths:
                paths.append(line)
        return paths

    def last_tag(self) -> Optional[str]:
        return self._run(["describe", "--abbrev=0", "--tags"], check=False).strip() or None

    def tag_date(self, tag: str) -> Optional[str]:
        return self._run(["log", "-1", "--format=%cd", "--date=short", tag], check=False).strip() or None

    def root_path(self) -> Optional[str]:
        return self._run(["rev-parse", "--show-toplevel"], check=False).strip() or None

    def remote_url(self, remote: str = "origin") -> Optional[str]:
        return self._run(["remote", "get-url", remote], check=False).strip() or None
