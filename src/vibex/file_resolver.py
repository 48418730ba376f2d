from __future__ import annotations

import glob
import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

import pathspec
from pydantic import BaseModel, ConfigDict, Field, computed_field

from vibex.binary_detection import BinaryDetector
from vibex.config import (
    DEFAULT_EXCLUDES,
    OUTPUT_PREFIX,
    PRUNED_DIRS,
    CommentStyle,
    SupportTier,
    comment_style_for,
    extension_of,
    file_category,
    is_supported,
    support_level,
)
from vibex.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from vibex.settings import Settings


class FileSpec(BaseModel):
    """A resolved text file ready to be assembled.

    Attributes:
        path: Absolute path to the file on disk.
        rel: The path as matched, relative to the working directory when possible,
            with POSIX separators. Used in the start/end markers.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="Absolute file path")
    rel: str = Field(..., description="File path as displayed in the output")

    @computed_field
    @property
    def extension(self) -> str:
        return extension_of(self.path)

    @computed_field
    @property
    def comment_style(self) -> CommentStyle:
        return comment_style_for(self.extension)

    @computed_field
    @property
    def support_tier(self) -> SupportTier:
        return support_level(self.extension)

    @computed_field
    @property
    def category(self) -> str:
        return file_category(self.extension)


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path with POSIX separators.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def normalize_globs(globs: Iterable[str]) -> list[str]:
    """Normalize a sequence of path glob patterns.

    Strip whitespace, replace backslashes with forward slashes and drop empty
    patterns.

    Args:
        globs (Iterable[str]): the glob patterns to normalize

    Returns:
        list[str]: the normalized glob patterns
    """
    out: list[str] = []
    for g in globs:
        g2 = (g or "").strip()
        if not g2:
            continue
        out.append(g2.replace("\\", "/"))
    return out


def is_generated_output(rel: str) -> bool:
    """Check if a path names a previously generated vibex output file."""
    return Path(rel).name.startswith(OUTPUT_PREFIX)


def expand_pattern(pattern: str, cwd: Path) -> list[str]:
    """Expand one user pattern into the matching paths, sorted.

    Patterns are recursive globs (``**`` crosses directories) and match hidden files.
    A plain file name expands to itself when it exists.

    Args:
        pattern (str): a glob pattern or a path, relative to `cwd` or absolute
        cwd (Path): the directory relative patterns are expanded from

    Returns:
        list[str]: the matches, with POSIX separators
    """
    matches = glob.glob(pattern, root_dir=cwd, recursive=True, include_hidden=True)
    return sorted(m.replace("\\", "/") for m in matches)


def expand_patterns(patterns: Sequence[str], cwd: Path) -> list[str]:
    """Union the expansions of several patterns, first-seen order, no duplicates."""
    seen: dict[str, None] = {}
    for pattern in normalize_globs(patterns):
        for match in expand_pattern(pattern, cwd):
            key = relpath(_absolute(match, cwd), cwd)
            seen.setdefault(key, None)
    return list(seen)


def walk_supported_files(cwd: Path, *, prune: bool = True) -> list[str]:
    """Collect every file with a supported extension under `cwd`.

    Recursively walk the filesystem, pruning the dependency and VCS directories
    unless `prune` is False.

    Args:
        cwd (Path): the root directory to walk
        prune (bool): whether to skip `PRUNED_DIRS`

    Returns:
        list[str]: the relative paths found, sorted
    """
    results: list[str] = []
    for root, dirs, files in os.walk(cwd):
        if prune:
            dirs[:] = [d for d in dirs if d not in PRUNED_DIRS]
        dirs.sort()
        for f in files:
            if is_supported(extension_of(f)):
                results.append(relpath(Path(root) / f, cwd))
    return sorted(results)


def build_exclude_spec(
    user_excludes: Sequence[str],
    default_excludes: Sequence[str],
    *,
    force: bool,
) -> pathspec.PathSpec:
    """Compile the active exclusion patterns.

    The built-in excludes are dropped when `force` is set; the user's never are.

    Returns:
        pathspec.PathSpec: a gitignore-style matcher over relative POSIX paths
    """
    patterns = normalize_globs(user_excludes)
    if not force:
        patterns = [*normalize_globs(default_excludes), *patterns]
    return pathspec.GitIgnoreSpec.from_lines(patterns)


def is_regular_file(path: Path) -> bool:
    """Check if a file is regular.

    Args:
        path (Path): path to test.

    Raises:
        OSError: if the path cannot be stat'ed for another reason than not existing.

    Returns:
        bool: True if the file is regular, False otherwise.
    """
    try:
        st = path.stat()
    except FileNotFoundError:
        return False
    return stat.S_ISREG(st.st_mode)


def read_file_text(path: Path, errors: str = "replace") -> str:
    """Read a text file exactly as stored.

    Line endings are not translated, so character offsets match the file on disk.

    Args:
        path (Path): the file to read
        errors (str, optional): UTF-8 decoding error policy. Defaults to "replace".

    Raises:
        OSError: if the file cannot be read.
        UnicodeDecodeError: if `errors` is "strict" and the file is not UTF-8.

    Returns:
        str: the decoded content
    """
    with Path(path).open(encoding="utf-8", errors=errors, newline="") as f:
        return f.read()


def _absolute(rel: str, cwd: Path) -> Path:
    p = Path(rel)
    return p if p.is_absolute() else cwd / p


def resolve_files(
    settings: Settings,
    default_excludes: Sequence[str] = DEFAULT_EXCLUDES,
    *,
    use_default_glob: bool = True,
    detector: BinaryDetector | None = None,
) -> list[FileSpec]:
    """Resolve the text files a run should process.

    1. Explicit patterns in ``settings.files`` are expanded one by one and unioned;
       otherwise, when `use_default_glob` is set, every supported file under
       ``settings.cwd`` is collected.
    2. Generated ``vx_*`` outputs are never candidates.
    3. The user's excludes always apply, the built-in ones unless ``settings.force``.
    4. Only existing regular files that are not binary are kept.

    Args:
        settings (Settings): the run options (cwd, files, exclude, force)
        default_excludes (Sequence[str]): the built-in exclusion patterns
        use_default_glob (bool): fall back to all supported files when no pattern is given
        detector (BinaryDetector | None): binary classifier, a default one when None

    Returns:
        list[FileSpec]: the files in first-seen order, without duplicates
    """
    cwd = settings.cwd.resolve()
    detector = detector or BinaryDetector()

    if settings.files:
        candidates = expand_patterns(settings.files, cwd)
    elif use_default_glob:
        candidates = walk_supported_files(cwd, prune=not settings.force)
    else:
        candidates = []

    spec = build_exclude_spec(settings.exclude, default_excludes, force=settings.force)

    out: list[FileSpec] = []
    for rel in candidates:
        if is_generated_output(rel) or spec.match_file(rel):
            continue
        path = _absolute(rel, cwd)
        try:
            if not is_regular_file(path):
                continue
        except OSError as e:
            logger.warning("Could not stat file %s, skipping: %s", rel, e)
            continue
        if detector.is_binary(path):
            logger.info("Skipping binary file: %s", rel)
            continue
        out.append(FileSpec(path=path, rel=rel))
    return out
