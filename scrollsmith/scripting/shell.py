"""Shell command execution for variable files and scripts."""
import os
import queue
import subprocess
import threading
import unicodedata
from pathlib import Path
from typing import IO, Optional, Union

from scrollsmith.core.config import get_config
from scrollsmith.core.logger import get_logger

logger = get_logger(__name__)

_EOF = object()


def _pump(stream: IO[bytes], channel: queue.Queue) -> None:
    """Forward lines of one pipe to the shared channel, then signal EOF."""
    try:
        for raw in iter(stream.readline, b''):
            line = raw.decode('utf-8', errors='replace')
            if line.endswith('\n'):
                line = line[:-1]
                if line.endswith('\r'):
                    line = line[:-1]
            channel.put(line)
    finally:
        stream.close()
        channel.put(_EOF)


def run_shell(command: str, workdir: Optional[Union[str, Path]] = None) -> str:
    """Run ``command`` through the shell and capture stdout and stderr.

    Both pipes are read concurrently and interleaved line by line into one
    output; every line ends with a newline. The exit status is not
    inspected: whatever the command printed is returned.

    Args:
        command: Shell command line
        workdir: Working directory (defaults to the current directory)

    Returns:
        Combined output of the command
    """
    env = {**os.environ, **get_config().shell_env}
    cwd = Path(workdir).resolve(strict=True) if workdir is not None else None

    logger.debug(f"Running shell command: {command}")
    process = subprocess.Popen(
        command,
        shell=True,
        cwd=cwd,
        env=env,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )

    channel: queue.Queue = queue.Queue(maxsize=1)
    readers = [
        threading.Thread(target=_pump, args=(stream, channel), daemon=True)
        for stream in (process.stdout, process.stderr)
    ]
    for reader in readers:
        reader.start()

    lines = []
    open_streams = len(readers)
    while open_streams:
        item = channel.get()
        if item is _EOF:
            open_streams -= 1
            continue
        lines.append(f"{item}\n")

    for reader in readers:
        reader.join()

    returncode = process.wait()
    if returncode != 0:
        logger.warning(f"Shell command exited with status {returncode}: {command}")

    return ''.join(lines)


def escape_control(text: str) -> str:
    """Escape control characters, keeping newlines.

    Tabs become a literal ``\\t``; any other control character becomes
    ``\\uXXXX`` with lowercase hex digits.
    """
    escaped = []
    for ch in text:
        if ch == '\n' or unicodedata.category(ch) != 'Cc':
            escaped.append(ch)
        elif ch == '\t':
            escaped.append('\\t')
        else:
            escaped.append(f"\\u{ord(ch):04x}")
    return ''.join(escaped)


def shell_exec(command: str, workdir: Optional[Union[str, Path]] = None) -> str:
    """Run a command and return its escaped combined output."""
    return escape_control(run_shell(command, workdir))
