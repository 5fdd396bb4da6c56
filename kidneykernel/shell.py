"""A small interactive shell with ``cd``, ``pwd``, ``ls`` and ``clear``."""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Iterable, TextIO

from kidneykernel.ls_config import LsConfig, list_directory

__all__ = [
    "HOME_DIR",
    "HOST_NAME",
    "CLEAR_SCREEN",
    "PathError",
    "ShellExit",
    "Shell",
    "resolve_path",
    "main",
]

HOME_DIR = "/"
HOST_NAME = "kidney"
CLEAR_SCREEN = "\x1b[2J\x1b[H"

_BACKSPACE = 0x08
_DELETE = 0x7F


class PathError(ValueError):
    """Raised when a path cannot be resolved."""


class ShellExit(Exception):
    """Raised when the shell is asked to exit."""

    def __init__(self, code: int = 0) -> None:
        super().__init__(code)
        self.code = code


def resolve_path(path: str) -> str:
    """Normalise ``path`` into an absolute path ending with ``/``.

    Empty and ``.`` parts are dropped, ``..`` moves up (never past the root),
    and any part containing ``~`` is rejected.
    """
    parts: list[str] = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if parts:
                parts.pop()
            continue
        if "~" in part:
            raise PathError("No such file or directory")
        parts.append(part)
    return "/" + "".join(f"{part}/" for part in parts)


class Shell:
    """Line-oriented command interpreter.

    ``is_directory`` decides whether ``cd`` may enter a resolved path; by
    default every path is accepted.
    """

    def __init__(
        self,
        out: TextIO,
        err: TextIO,
        is_directory: Callable[[str], bool] | None = None,
    ) -> None:
        self.out = out
        self.err = err
        self._is_directory = is_directory if is_directory is not None else (lambda _: True)
        self.host_name = HOST_NAME
        self.current_dir = "/"
        self.cwd_path = "/"
        self._buffer: list[str] = []

    def _error(self, message: str) -> None:
        self.err.write(message + "\n")

    def prompt(self, is_root: bool = False) -> str:
        """Return the prompt text."""
        marker = "# " if is_root else "$ "
        return f"{self.host_name}:{self.current_dir}{marker}"

    def cd(self, args: Iterable[str]) -> None:
        """Change the working directory."""
        args = list(args)
        if not args:
            path = HOME_DIR
        elif len(args) > 1:
            self._error("rush: cd: too many arguments")
            return
        else:
            new_path = args[0]
            if new_path.startswith("/"):
                cd_path = new_path
            elif new_path.startswith("~/"):
                cd_path = HOME_DIR + new_path[2:]
            else:
                cd_path = self.cwd_path + new_path
            try:
                path = resolve_path(cd_path)
            except PathError:
                self._error(f"rush: cd: {new_path}: No such file or directory")
                return

        if not self._is_directory(path):
            self._error("rush: cd: No such file or directory")
            return
        self.cwd_path = path

    def pwd(self) -> None:
        """Print the working directory."""
        self.out.write(f"{self.cwd_path}\n")

    def clear(self) -> None:
        """Clear the screen."""
        self.out.write(CLEAR_SCREEN)

    def parse_input(self, line: str) -> None:
        """Run one command line."""
        tokens = line.split()
        command = tokens[0] if tokens else ""
        args = tokens[1:]

        if command in ("cat", "echo"):
            return
        if command == "cd":
            self.cd(args)
        elif command == "clear":
            self.clear()
        elif command == "exit":
            raise ShellExit(0)
        elif command == "ls":
            self.out.write(list_directory(self.current_dir, LsConfig.from_args(args)))
        elif command == "pwd":
            self.pwd()
        else:
            self._error(f"rush: {command}: command not found")

    def feed(self, byte: int) -> None:
        """Handle one byte of keyboard input, echoing it and running full lines."""
        if byte in (_BACKSPACE, _DELETE):
            if self._buffer:
                self._buffer.pop()
                self.out.write("\b \b")
            return

        char = chr(byte)
        if char != "\r":
            self._buffer.append(char)
            self.out.write(char)
            return

        self.out.write("\n")
        line = "".join(self._buffer)
        self._buffer.clear()
        self.parse_input(line)
        self.out.write(self.prompt(False))


def main(argv: list[str] | None = None) -> int:
    """Run the shell on standard input until ``exit`` or end of input."""
    parser = argparse.ArgumentParser(prog="rush", description="A minimal shell.")
    parser.parse_args(argv)

    shell = Shell(sys.stdout, sys.stderr)
    while True:
        sys.stdout.write(shell.prompt(False))
        sys.stdout.flush()
        line = sys.stdin.readline()
        if not line:
            sys.stdout.write("\n")
            return 0
        try:
            shell.parse_input(line.rstrip("\n"))
        except ShellExit as exit_request:
            return exit_request.code