from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class VibexError(Exception):
    """Base exception for errors in the vibex package."""


@dataclass(frozen=True)
class ArtifactWriteError(VibexError):
    """Raised when the combined output file cannot be written."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"Could not write {self.path}: {self.reason}"


@dataclass(frozen=True)
class ConfigFileError(VibexError):
    """Raised when the YAML project configuration cannot be loaded."""

    path: Path
    message: str = "The configuration file is not a valid YAML mapping."

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"
