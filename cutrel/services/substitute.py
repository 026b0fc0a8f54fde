"""Version substitution over the source tree.

Rewrites every occurrence of the current version string to the target
version in git-tracked text files. A match must not be glued to other
version characters, so ``1.2.3`` does not touch ``11.2.3`` or ``1.2.30``.
"""

from __future__ import annotations

import re

from cutrel.core.result import Err, Ok, Result
from cutrel.git.repository import Repository
from cutrel.release.errors import StageFailure

STAGE = "substitute"


def version_pattern(version: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![\d.]){re.escape(version)}(?![\w\-]|\.\d)")


def substitute_version(
    repo: Repository, current: str, target: str
) -> Result[list[str], StageFailure]:
    """Replace ``current`` with ``target`` in all tracked files.

    Returns:
        Ok(rewritten relative paths)
    """
    if current == target:
        return Err(
            StageFailure(
                stage=STAGE,
                message=f"target version equals the current version ({current})",
                hint="Pass the version being released, not the one already configured.",
            )
        )

    files = repo.tracked_files()
    if isinstance(files, Err):
        return Err(StageFailure(stage=STAGE, message=files.error.message))

    pattern = version_pattern(current)
    rewritten: list[str] = []
    for rel in files.value:
        path = repo.path / rel
        if path.is_symlink() or not path.is_file():
            continue
        try:
            raw = path.read_bytes()
            if b"\0" in raw:
                continue
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            continue
        except OSError as e:
            return Err(StageFailure(stage=STAGE, message=f"cannot read {rel}: {e}"))

        updated, count = pattern.subn(target, text)
        if count == 0:
            continue
        try:
            path.write_bytes(updated.encode("utf-8"))
        except OSError as e:
            return Err(StageFailure(stage=STAGE, message=f"cannot write {rel}: {e}"))
        rewritten.append(rel)

    if not rewritten:
        return Err(
            StageFailure(
                stage=STAGE,
                message=f"version {current} not found in any tracked file",
            )
        )
    return Ok(rewritten)
