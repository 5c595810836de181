#!/usr/bin/env python3
"""Local clipboard access through external command-line tools.

This module provides the clipboard capability used by the client's
convergence loop. Reading and writing shell out to the first supported
tool found on PATH:
- wl-paste / wl-copy (Wayland)
- xclip (X11)
- xsel (X11)

Every invocation is bounded by CLIPBOARD_TIMEOUT so an unresponsive tool
can never hang the loop; failures surface as ReadError / WriteError.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from dataclasses import dataclass, field
from typing import Protocol

from clipbridge.errors import AdapterError, ReadError, WriteError

logger = logging.getLogger(__name__)

# Timeout in seconds for a single clipboard tool invocation.
CLIPBOARD_TIMEOUT: float = 2.0


class ClipboardPort(Protocol):
    """Clipboard capability required by the convergence loop."""

    @property
    def can_write(self) -> bool: ...

    async def read(self) -> str: ...

    async def write(self, text: str) -> None: ...


@dataclass(frozen=True)
class ClipboardCommand:
    """A clipboard tool invocation: executable name plus arguments."""

    name: str
    args: tuple[str, ...] = field(default_factory=tuple)

    @property
    def argv(self) -> list[str]:
        return [self.name, *self.args]


def detect_clipboard_commands() -> tuple[ClipboardCommand, ClipboardCommand | None]:
    """Find clipboard read and write commands on PATH.

    Prefers wl-clipboard, then xclip, then xsel. When wl-paste exists
    without wl-copy, a read command is returned with no write command.

    Returns:
        Tuple of (read command, write command or None).

    Raises:
        AdapterError: If no supported clipboard tool is installed.
    """
    if shutil.which("wl-paste"):
        if shutil.which("wl-copy"):
            return ClipboardCommand("wl-paste"), ClipboardCommand("wl-copy")
        return ClipboardCommand("wl-paste"), None
    if shutil.which("xclip"):
        return (
            ClipboardCommand("xclip", ("-o", "-selection", "clipboard")),
            ClipboardCommand("xclip", ("-selection", "clipboard")),
        )
    if shutil.which("xsel"):
        return (
            ClipboardCommand("xsel", ("--clipboard", "--output")),
            ClipboardCommand("xsel", ("--clipboard", "--input")),
        )
    raise AdapterError(
        "no supported clipboard command found (install wl-clipboard, xclip, or xsel)"
    )


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        proc.kill()
        await proc.wait()


class CommandClipboard:
    """Clipboard adapter running external tools with a bounded timeout.

    Args:
        read_command: Command printing the clipboard text on stdout.
        write_command: Command reading new clipboard text from stdin, or
            None for a read-only clipboard.
        timeout: Per-invocation timeout in seconds.
    """

    def __init__(
        self,
        read_command: ClipboardCommand,
        write_command: ClipboardCommand | None = None,
        timeout: float = CLIPBOARD_TIMEOUT,
    ) -> None:
        self.read_command = read_command
        self.write_command = write_command
        self.timeout = timeout

    @property
    def can_write(self) -> bool:
        return self.write_command is not None

    async def read(self) -> str:
        """Return the current clipboard text.

        Raises:
            ReadError: On missing tool, non-zero exit, or timeout.
        """
        argv = self.read_command.argv
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ReadError(f"{argv[0]}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            await _kill(proc)
            raise ReadError(f"{argv[0]} timed out after {self.timeout}s") from e

        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise ReadError(f"{argv[0]} exited with {proc.returncode}: {detail}")
        return stdout.decode("utf-8", errors="replace")

    async def write(self, text: str) -> None:
        """Set the clipboard to text.

        Output streams are discarded: xclip and wl-copy fork a background
        process that keeps serving the selection after the command exits.

        Raises:
            WriteError: If no write command is configured, or on missing
                tool, non-zero exit, or timeout.
        """
        if self.write_command is None:
            raise WriteError("clipboard write command not configured")
        argv = self.write_command.argv
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            raise WriteError(f"{argv[0]}: {e}") from e

        try:
            await asyncio.wait_for(proc.communicate(text.encode("utf-8")), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            await _kill(proc)
            raise WriteError(f"{argv[0]} timed out after {self.timeout}s") from e

        if proc.returncode != 0:
            raise WriteError(f"{argv[0]} exited with {proc.returncode}")


def create_clipboard(timeout: float = CLIPBOARD_TIMEOUT) -> CommandClipboard:
    """Detect the local clipboard tools and return an adapter for them.

    Should be called at startup to fail fast when no tool is installed.

    Raises:
        AdapterError: If no supported clipboard tool is installed.
    """
    read_command, write_command = detect_clipboard_commands()
    logger.debug("Clipboard read command: %s", " ".join(read_command.argv))
    if write_command is None:
        logger.warning(
            "No clipboard write command found; this client will only push local copies"
        )
    return CommandClipboard(read_command, write_command, timeout)
