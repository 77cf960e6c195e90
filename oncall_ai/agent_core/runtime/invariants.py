"""File-read-before-write invariant.

A tool that writes files (for example draft pull-request creation) carries the
full new content of every file it touches. If the model never read an existing
file, that content was invented and would overwrite the real file. The check
below blocks such writes while still allowing brand-new files.

Files are keyed ``"<repo>:<path>"`` in both per-run maps.
"""

import json
from typing import Any, Iterable, List, Mapping

from pydantic import Field

from ..schemas.base import BaseSchema
from ..schemas.domain import AgentState

INVALID_FILES_SENTINEL = "(invalid files array)"
NO_FILES_SENTINEL = "(no files specified)"


class FileReadValidation(BaseSchema):
    valid: bool
    missing_files: List[str] = Field(default_factory=list)
    new_files: List[str] = Field(default_factory=list)


def file_key(repo: Any, path: Any) -> str:
    return f"{repo}:{path}"


def validate_pr_files_were_read(
    args: Mapping[str, Any],
    successfully_read_files: Mapping[str, bool],
    known_existing_files: Mapping[str, bool],
) -> FileReadValidation:
    """
    Check that every existing file a write touches was read this session.

    Args:
        args: Raw tool arguments holding ``repo`` and ``files`` (a list of
            ``{path|filename}`` objects or the same list JSON-encoded).
        successfully_read_files: Keys of files read successfully in this run.
        known_existing_files: Keys of files known to exist in the repository.

    Returns:
        FileReadValidation: ``missing_files`` lists existing-but-unread paths
        (blocking); ``new_files`` lists paths not known to exist.
    """
    files = args.get("files")
    if isinstance(files, str):
        try:
            files = json.loads(files)
        except ValueError:
            return FileReadValidation(valid=False, missing_files=[INVALID_FILES_SENTINEL])

    if not isinstance(files, list) or not files:
        return FileReadValidation(valid=False, missing_files=[NO_FILES_SENTINEL])

    repo = args.get("repo")
    missing: List[str] = []
    new: List[str] = []
    for entry in files:
        if not isinstance(entry, Mapping):
            continue
        path = entry.get("path") or entry.get("filename")
        if not isinstance(path, str) or not path:
            continue
        key = file_key(repo, path)
        if key not in known_existing_files:
            new.append(path)
        elif key not in successfully_read_files:
            missing.append(path)

    return FileReadValidation(valid=not missing, missing_files=missing, new_files=new)


def missing_files_message(validation: FileReadValidation) -> str:
    """Tool error text telling the model which files to read first."""
    listed = ", ".join(validation.missing_files)
    if validation.missing_files in ([INVALID_FILES_SENTINEL], [NO_FILES_SENTINEL]):
        return f"Cannot create pull request: {listed}. Provide a non-empty files array."
    return (
        f"Cannot create pull request: these existing files were not read first: {listed}. "
        "Read each of them with github_get_file, then resubmit the change with their full updated content."
    )


def record_file_read(state: AgentState, repo: Any, path: Any) -> None:
    key = file_key(repo, path)
    state.successfully_read_files[key] = True
    state.known_existing_files[key] = True


def record_listed_files(state: AgentState, repo: Any, paths: Iterable[str]) -> None:
    for path in paths:
        state.known_existing_files[file_key(repo, path)] = True
