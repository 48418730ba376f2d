from __future__ import annotations

import asyncio
import io
import re
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from vibex.binary_detection import BinaryDetector
from vibex.comments import strip_comments
from vibex.config import OUTPUT_PREFIX
from vibex.exceptions import ArtifactWriteError
from vibex.file_resolver import FileSpec, read_file_text, resolve_files
from vibex.logging import logger
from vibex.ranges import RangeOptions, apply_ranges
from vibex.scrubber import ScrubConfig, scrub

if TYPE_CHECKING:
    from collections.abc import Sequence

    from vibex.settings import Settings

_WHITESPACE = re.compile(r"\s+")


class TransformConfig(BaseModel):
    """The content transforms enabled for one invocation.

    Attributes:
        ranges: Trim/cut ranges; empty means the full content passes through.
        remove_comments: Strip comments according to each file's extension.
        scrub: Redaction tokens, or None when scrubbing is off.
        separate: Lead every block with a newline before normalization.
    """

    model_config = ConfigDict(frozen=True)

    ranges: RangeOptions = Field(default_factory=RangeOptions)
    remove_comments: bool = False
    scrub: ScrubConfig | None = None
    separate: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> TransformConfig:
        return cls(
            ranges=RangeOptions(trim=tuple(settings.trim), cut=tuple(settings.cut)),
            remove_comments=settings.rc,
            scrub=settings.scrub if settings.rp else None,
            separate=settings.separate,
        )


class FileBlock(BaseModel):
    """One file's transformed content between its markers."""

    model_config = ConfigDict(frozen=True)

    rel: str
    content: str

    @property
    def start_marker(self) -> str:
        return f"<start of {self.rel}>"

    @property
    def end_marker(self) -> str:
        return f"<end of {self.rel}>"

    def render(self, *, separate: bool = False) -> str:
        lead = "\n" if separate else ""
        return f"{lead}{self.start_marker}\n{self.content}\n{self.end_marker}\n"


class AssemblyResult(BaseModel):
    """The combined document of one pass.

    Attributes:
        files: The resolved files the pass was run over.
        blocks: File blocks keyed by displayed path, in resolver order.
        output_path: Where the document is written.
        separate: Block formatting flag carried from the transform config.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    files: list[FileSpec] = Field(default_factory=list)
    blocks: dict[str, FileBlock] = Field(default_factory=dict)
    output_path: Path
    separate: bool = False

    @property
    def text(self) -> str:
        out = io.StringIO()
        for block in self.blocks.values():
            out.write(block.render(separate=self.separate))
        return normalize_whitespace(out.getvalue())


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run to one space and trim both ends."""
    return _WHITESPACE.sub(" ", text).strip()


def transform_content(content: str, file_spec: FileSpec, config: TransformConfig) -> str:
    """Apply ranges, comment removal, scrubbing and normalization, in that order.

    Args:
        content (str): the raw file content
        file_spec (FileSpec): the file the content comes from
        config (TransformConfig): the enabled transforms

    Returns:
        str: the transformed, whitespace-normalized content
    """
    result = content
    if not config.ranges.is_empty:
        result = apply_ranges(result, config.ranges)
    if config.remove_comments:
        result = strip_comments(result, file_spec.comment_style)
    if config.scrub is not None:
        result = scrub(result, config.scrub)
    return normalize_whitespace(result)


async def read_text(path: Path) -> str:
    return await asyncio.to_thread(read_file_text, path)


async def assemble(
    files: Sequence[FileSpec],
    config: TransformConfig,
    output_path: Path,
) -> AssemblyResult:
    """Read and transform every file into one document.

    Reads run concurrently but blocks keep the order of `files`. A file that cannot
    be read is logged and left out; it never aborts the others.

    Args:
        files (Sequence[FileSpec]): the resolved files, in order
        config (TransformConfig): the enabled transforms
        output_path (Path): the destination recorded in the result

    Returns:
        AssemblyResult: the blocks of every readable file
    """
    contents = await asyncio.gather(*(read_text(f.path) for f in files), return_exceptions=True)
    result = AssemblyResult(files=list(files), output_path=output_path, separate=config.separate)
    for file_spec, content in zip(files, contents, strict=True):
        if isinstance(content, BaseException):
            logger.error("Error reading file %s, skipping: %s", file_spec.rel, content)
            continue
        result.blocks[file_spec.rel] = FileBlock(
            rel=file_spec.rel,
            content=transform_content(content, file_spec, config),
        )
    return result


def output_path_for(settings: Settings, files: Sequence[FileSpec]) -> Path:
    """Name the output file.

    The first resolved file names it when patterns were given explicitly, e.g.
    ``vx_index.txt`` for ``index.js``; otherwise the working directory does.
    """
    if settings.files and files:
        name = files[0].path.name
        base = name.split(".")[0] or name
    else:
        base = settings.cwd.resolve().name
    return settings.cwd / f"{OUTPUT_PREFIX}{base}.txt"


async def write_artifact(result: AssemblyResult) -> Path:
    """Overwrite the output file with the document.

    Raises:
        ArtifactWriteError: if the file cannot be written.
    """
    try:
        await asyncio.to_thread(result.output_path.write_text, result.text, encoding="utf-8")
    except OSError as e:
        raise ArtifactWriteError(path=result.output_path, reason=str(e)) from e
    return result.output_path


async def build_artifact(
    settings: Settings,
    *,
    detector: BinaryDetector | None = None,
) -> AssemblyResult | None:
    """Run one full pass: resolve, assemble and write.

    Args:
        settings (Settings): the run options
        detector (BinaryDetector | None): binary classifier shared across passes

    Raises:
        ArtifactWriteError: if the output cannot be written.

    Returns:
        AssemblyResult | None: the written document, or None when no file matched
    """
    files = await asyncio.to_thread(resolve_files, settings, detector=detector)
    if not files:
        logger.warning("No suitable text files found to combine.")
        return None
    logger.info("Combining %d file(s)...", len(files))
    config = TransformConfig.from_settings(settings)
    result = await assemble(files, config, output_path_for(settings, files))
    await write_artifact(result)
    return result
