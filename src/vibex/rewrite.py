"""In-place comment removal for the ``remove-comments`` command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from vibex.comments import strip_comments
from vibex.file_resolver import read_file_text, resolve_files
from vibex.logging import logger

if TYPE_CHECKING:
    from vibex.binary_detection import BinaryDetector
    from vibex.settings import Settings


class RewriteReport(BaseModel):
    """Outcome of an in-place comment removal run."""

    modified: list[str] = Field(default_factory=list, description="Files rewritten.")
    unchanged: list[str] = Field(default_factory=list, description="Files without comments.")
    errored: list[str] = Field(default_factory=list, description="Files that failed.")

    @property
    def total(self) -> int:
        return len(self.modified) + len(self.unchanged) + len(self.errored)


def remove_comments_in_files(
    settings: Settings,
    *,
    detector: BinaryDetector | None = None,
) -> RewriteReport:
    """Strip comments from the resolved files, rewriting them in place.

    Files are selected exactly as for ``combine``. Only files whose content changes
    are written back, and a failure on one file never stops the others.

    Args:
        settings (Settings): the run options (files, exclude, force)
        detector (BinaryDetector | None): binary classifier, a default one when None

    Returns:
        RewriteReport: which files were modified, left alone or failed
    """
    report = RewriteReport()
    for file_spec in resolve_files(settings, detector=detector):
        try:
            original = read_file_text(file_spec.path, errors="strict")
            stripped = strip_comments(original, file_spec.comment_style)
            if stripped == original:
                report.unchanged.append(file_spec.rel)
                continue
            file_spec.path.write_text(stripped, encoding="utf-8", newline="")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error processing file %s: %s", file_spec.rel, e)
            report.errored.append(file_spec.rel)
        else:
            logger.info("Removed comments from: %s", file_spec.rel)
            report.modified.append(file_spec.rel)
    return report
