"""Option handling for the shell's ``ls`` command."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

__all__ = ["Format", "Files", "LsConfig", "preprocess_args", "list_directory"]


class Format(Enum):
    """How entries are laid out."""

    COLUMNS = "Columns"
    ONE_LINE = "OneLine"  # -1: one entry per line
    LONG = "Long"  # -l: long listing
    COMMAS = "Commas"  # -m: comma separated
    ACROSS = "Across"  # -x: by lines instead of columns

    def __str__(self) -> str:
        return self.value


class Files(Enum):
    """Which entries are listed."""

    NORMAL = "Normal"
    ALMOST_ALL = "AlmostAll"  # -A: hide . and ..
    ALL = "All"  # -a: include dot files

    def __str__(self) -> str:
        return self.value


_FORMAT_FLAGS = {
    "-1": Format.ONE_LINE,
    "-l": Format.LONG,
    "-m": Format.COMMAS,
    "-x": Format.ACROSS,
}

_FILES_FLAGS = {
    "-A": Files.ALMOST_ALL,
    "--almost-all": Files.ALMOST_ALL,
    "-a": Files.ALL,
    "--all": Files.ALL,
}


def preprocess_args(args: Iterable[str]) -> list[str]:
    """Split combined flags such as ``-la`` into single flags.

    Arguments that are not flags are dropped.
    """
    flags: list[str] = []
    for arg in args:
        if not arg.startswith("-"):
            continue
        if len(arg) > 2:
            flags.extend(f"-{char}" for char in arg[1:])
        else:
            flags.append(arg)
    return flags


@dataclass
class LsConfig:
    """Settings for one ``ls`` invocation."""

    format: Format = Format.COLUMNS
    files: Files = Files.NORMAL

    @classmethod
    def from_args(cls, args: Iterable[str]) -> LsConfig:
        """Build a configuration from command-line arguments; later flags win."""
        config = cls()
        for flag in preprocess_args(args):
            if flag in _FORMAT_FLAGS:
                config.format = _FORMAT_FLAGS[flag]
            elif flag in _FILES_FLAGS:
                config.files = _FILES_FLAGS[flag]
        return config

    def __str__(self) -> str:
        return f"LsConfig {{ format: {self.format}, files: {self.files} }}"


def list_directory(directory: str, config: LsConfig) -> str:
    """Return the listing text for ``directory``."""
    return f"Listing directory: {directory}\nConfig: {config}\n"