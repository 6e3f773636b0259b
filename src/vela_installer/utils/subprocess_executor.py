"""Subprocess execution utilities with automatic logging."""

import subprocess
from collections import deque
from collections.abc import Callable, Mapping
from pathlib import Path

from vela_installer.logger import get_logger

logger = get_logger(__name__)


def is_progress_line(line: str) -> bool:
    """
    Check if a line appears to be a progress update (e.g., contains control characters
    like \r, \b, or ANSI escape sequences).
    """
    return "\r" in line or "\b" in line or "\033[" in line


class SubprocessExecutor:
    """Executes subprocess commands with automatic debug logging."""

    @staticmethod
    def run_sync(
        *args: str,
        cwd: Path | str | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = False,
        timeout: float | None = None,
    ) -> subprocess.CompletedProcess[bytes]:
        """
        Execute a subprocess command, capturing its output.

        Args:
            *args: Command arguments
            cwd: Working directory
            env: Environment variables
            check: Whether to raise exception on non-zero exit code
            timeout: Timeout in seconds

        Returns:
            subprocess.CompletedProcess object

        Raises:
            subprocess.CalledProcessError: If check=True and returncode != 0
            subprocess.TimeoutExpired: If timeout is exceeded
            FileNotFoundError: If the executable does not exist
        """
        cmd_str = " ".join(args)
        logger.debug(f"Executing sync subprocess: {cmd_str}")
        if cwd:
            logger.debug(f"Working directory: {cwd}")

        cwd_arg = str(cwd) if cwd else None

        try:
            result = subprocess.run(
                args, check=check, capture_output=True, cwd=cwd_arg, env=dict(env) if env else None, timeout=timeout
            )

            # Log outputs at debug level
            if result.stdout:
                logger.debug(f"Subprocess stdout: {result.stdout.decode('utf-8', errors='replace')}")
            if result.stderr:
                logger.debug(f"Subprocess stderr: {result.stderr.decode('utf-8', errors='replace')}")

            return result

        except subprocess.TimeoutExpired:
            logger.error(f"Subprocess timeout after {timeout}s: {cmd_str}")
            raise
        except (OSError, subprocess.CalledProcessError) as e:
            logger.error(f"Subprocess execution failed: {cmd_str} - {e}")
            raise

    @staticmethod
    def run_streaming(
        *args: str,
        cwd: Path | str | None = None,
        env: Mapping[str, str] | None = None,
        progress_callback: Callable[[str], None] | None = None,
        max_buffer_lines: int | None = 200,
    ) -> subprocess.CompletedProcess[str]:
        """
        Execute a long-running subprocess (clone, build) streaming its merged output.

        Args:
            *args: Command arguments
            cwd: Working directory
            env: Environment variables
            progress_callback: Called with every output line
            max_buffer_lines: Lines kept for error logging. None keeps everything.
                Consecutive progress lines (containing \r, \b, or ANSI escapes)
                overwrite each other in the buffer.

        Returns:
            CompletedProcess with the buffered output as stdout

        Raises:
            subprocess.CalledProcessError: If the process exits non-zero
            FileNotFoundError: If the executable does not exist
        """
        cmd_str = " ".join(args)
        logger.debug(f"Executing subprocess with streaming: {cmd_str}")
        if cwd:
            logger.debug(f"Working directory: {cwd}")

        output_lines: deque[str] | list[str]
        if max_buffer_lines is not None:
            output_lines = deque(maxlen=max_buffer_lines)
        else:
            output_lines = []

        with subprocess.Popen(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env else None,
            text=True,
            errors="replace",
        ) as process:
            assert process.stdout is not None
            for raw in process.stdout:
                line = raw.rstrip("\n")
                if is_progress_line(line) and output_lines and is_progress_line(output_lines[-1]):
                    output_lines[-1] = line
                else:
                    output_lines.append(line)
                logger.debug(f"Subprocess: {line}")
                if progress_callback:
                    progress_callback(line)
            returncode = process.wait()

        full_output = "\n".join(output_lines)
        if returncode != 0:
            buffer_note = f" (last {max_buffer_lines} lines)" if max_buffer_lines is not None else ""
            logger.error(f"Subprocess failed with code {returncode}: {cmd_str}{buffer_note}")
            logger.error(f"Error output{buffer_note}: {full_output}")
            raise subprocess.CalledProcessError(returncode, args, output=full_output)

        return subprocess.CompletedProcess(args, returncode, full_output, None)

    @staticmethod
    def run_attached(
        *args: str,
        cwd: Path | str | None = None,
        env: Mapping[str, str] | None = None,
        capture_stdout: bool = False,
    ) -> subprocess.CompletedProcess[str]:
        """
        Execute a command attached to the terminal (sudo prompts, TUI widgets).

        stdin and stderr stay connected to the terminal; stdout is captured only
        when ``capture_stdout`` is set, so the command's answer can be read back.
        """
        cmd_str = " ".join(args)
        logger.debug(f"Executing attached subprocess: {cmd_str}")

        try:
            result = subprocess.run(
                args,
                stdout=subprocess.PIPE if capture_stdout else None,
                cwd=str(cwd) if cwd else None,
                env=dict(env) if env else None,
                text=True,
                check=False,
            )
        except OSError as e:
            logger.error(f"Subprocess execution failed: {cmd_str} - {e}")
            raise

        logger.debug(f"Attached subprocess exited with {result.returncode}: {cmd_str}")
        return result
