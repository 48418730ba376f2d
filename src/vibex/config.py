from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path

OUTPUT_PREFIX = "vx_"
DEPENDENCY_DIR = "node_modules"
DEBOUNCE_SECONDS = 0.5


class CommentStyle(StrEnum):
    """Comment syntax families understood by the comment stripper.

    Anything without a known syntax maps to ``NONE`` and passes through untouched.
    """

    C_LIKE = auto()
    PYTHON = auto()
    MARKUP = auto()
    CSS = auto()
    SHELL = auto()
    RUBY = auto()
    NONE = auto()


class SupportTier(StrEnum):
    """How richly an extension is handled by the content transforms."""

    FULL = auto()
    PARTIAL = auto()
    BASIC = auto()
    UNSUPPORTED = auto()


FULL_SUPPORT: tuple[str, ...] = (
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".py",
    ".html",
    ".htm",
    ".css",
    ".scss",
    ".md",
    ".json",
)

PARTIAL_SUPPORT: tuple[str, ...] = (
    ".rb",
    ".go",
    ".swift",
    ".kt",
    ".kts",
    ".java",
    ".c",
    ".cpp",
    ".h",
    ".hpp",
    ".php",
    ".rs",
    ".sh",
    ".bash",
    ".xml",
    ".svg",
    ".yaml",
    ".yml",
    ".sql",
    ".less",
)

BASIC_SUPPORT: tuple[str, ...] = (
    ".txt",
    ".csv",
    ".ini",
    ".conf",
    ".toml",
    ".env",
    ".gitignore",
    ".dockerignore",
    ".ps1",
    ".pl",
    ".pm",
    ".r",
    ".elm",
    ".lua",
    ".dart",
    ".ex",
    ".exs",
    ".hs",
    ".fs",
    ".fsx",
)

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset((*FULL_SUPPORT, *PARTIAL_SUPPORT, *BASIC_SUPPORT))

FILE_CATEGORIES: dict[str, tuple[str, ...]] = {
    "frontend": (".js", ".jsx", ".ts", ".tsx", ".html", ".css", ".scss", ".less", ".svg"),
    "backend": (".js", ".ts", ".py", ".rb", ".go", ".java", ".php", ".cs", ".rs"),
    "config": (".json", ".yaml", ".yml", ".toml", ".ini", ".conf", ".env"),
    "documentation": (".md", ".txt", ".rst", ".adoc"),
    "data": (".json", ".csv", ".xml", ".yaml", ".yml"),
    "script": (".sh", ".bash", ".ps1", ".bat", ".cmd"),
}

EXT2COMMENT_STYLE: dict[str, CommentStyle] = {
    ".js": CommentStyle.C_LIKE,
    ".ts": CommentStyle.C_LIKE,
    ".py": CommentStyle.PYTHON,
    ".html": CommentStyle.MARKUP,
    ".xml": CommentStyle.MARKUP,
    ".css": CommentStyle.CSS,
    ".sh": CommentStyle.SHELL,
    ".rb": CommentStyle.RUBY,
}

BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".bmp",
        ".ico",
        ".tif",
        ".tiff",
        ".pdf",
        ".doc",
        ".docx",
        ".ppt",
        ".pptx",
        ".xls",
        ".xlsx",
        ".zip",
        ".tar",
        ".gz",
        ".7z",
        ".rar",
        ".exe",
        ".dll",
        ".so",
        ".mp3",
        ".mp4",
        ".avi",
        ".mov",
        ".wav",
        ".ogg",
        ".flac",
        ".ttf",
        ".otf",
        ".woff",
        ".woff2",
    },
)

# Matched at any depth, like the directories pruned by the default walk.
DEFAULT_EXCLUDES: tuple[str, ...] = (
    f"**/{DEPENDENCY_DIR}/**",
    "**/.git/**",
    f"**/{OUTPUT_PREFIX}*.txt",
)

# Directories never descended into by the default walk unless forced.
PRUNED_DIRS: frozenset[str] = frozenset({DEPENDENCY_DIR, ".git"})


def extension_of(path: str | Path) -> str:
    """Return the lower-cased extension of a path, dotfiles included.

    ``.gitignore`` is its own extension, which is how the basic support tier lists it.

    Args:
        path (str | Path): the path to inspect

    Returns:
        str: the extension with its leading dot, or "" when the name has none
    """
    name = Path(path).name.lower()
    if "." not in name:
        return ""
    return "." + name.rsplit(".", 1)[-1]


def support_level(extension: str) -> SupportTier:
    """Get the support tier of an extension.

    Args:
        extension (str): the extension, with its leading dot

    Returns:
        SupportTier: the tier the extension belongs to
    """
    ext = extension.lower()
    if ext in FULL_SUPPORT:
        return SupportTier.FULL
    if ext in PARTIAL_SUPPORT:
        return SupportTier.PARTIAL
    if ext in BASIC_SUPPORT:
        return SupportTier.BASIC
    return SupportTier.UNSUPPORTED


def is_supported(extension: str) -> bool:
    return extension.lower() in SUPPORTED_EXTENSIONS


def file_category(extension: str) -> str:
    """Get the first category listing an extension, or "other"."""
    ext = extension.lower()
    for category, extensions in FILE_CATEGORIES.items():
        if ext in extensions:
            return category
    return "other"


def comment_style_for(extension: str) -> CommentStyle:
    return EXT2COMMENT_STYLE.get(extension.lower(), CommentStyle.NONE)
