"""Pattern-based comment removal.

This is lexical, not a tokenizer: a ``//`` inside a string literal is removed
like any other comment.
"""

from __future__ import annotations

import re
from pathlib import Path

from vibex.config import CommentStyle, comment_style_for, extension_of

_LINE_HASH = r"#[^\r\n]*"
_C_BLOCK = r"/\*[\s\S]*?\*/"

COMMENT_RULES: dict[CommentStyle, re.Pattern[str] | None] = {
    CommentStyle.C_LIKE: re.compile(rf"//[^\r\n]*|{_C_BLOCK}"),
    CommentStyle.PYTHON: re.compile(rf'{_LINE_HASH}|"""[\s\S]*?"""|\'\'\'[\s\S]*?\'\'\''),
    CommentStyle.MARKUP: re.compile(r"<!--[\s\S]*?-->"),
    CommentStyle.CSS: re.compile(_C_BLOCK),
    CommentStyle.SHELL: re.compile(_LINE_HASH),
    CommentStyle.RUBY: re.compile(rf"{_LINE_HASH}|^=begin\b[\s\S]*?^=end\b", re.MULTILINE),
    CommentStyle.NONE: None,
}


def resolve_style(file_type: str | Path | CommentStyle) -> CommentStyle:
    """Map an extension (``".py"``), a path or a style to a comment style."""
    if isinstance(file_type, CommentStyle):
        return file_type
    text = str(file_type)
    ext = text.lower() if text.startswith(".") and "/" not in text else extension_of(text)
    return comment_style_for(ext)


def strip_comments(content: str, file_type: str | Path | CommentStyle) -> str:
    """Remove the comment syntax of `file_type` from `content`.

    Args:
        content (str): the source text
        file_type (str | Path | CommentStyle): an extension, a file path or a comment style

    Returns:
        str: the text without comments; unchanged for unknown types
    """
    rule = COMMENT_RULES[resolve_style(file_type)]
    if rule is None:
        return content
    return rule.sub("", content)
