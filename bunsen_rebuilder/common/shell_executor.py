"""
Shell Executor Module - Handles external command execution with logging
"""

import os
import subprocess
import time
import logging
from pathlib import Path

from bunsen_rebuilder.common.errors import ToolError

logger = logging.getLogger(__name__)


def _format_cmd(cmd) -> str:
    if isinstance(cmd, (list, tuple)):
        return " ".join(str(part) for part in cmd)
    return str(cmd)


class ShellExecutor:
    """Handles command execution with logging, timeout and optional privilege elevation"""

    def __init__(self, debug_mode: bool = False):
        self.debug_mode = debug_mode

    def run_command(self, cmd, cwd=None, capture=True, check=False, sudo=False,
                    log_cmd=False, timeout=1800, extra_env=None, input_text=None):
        """
        Run a command (argv list) and return the CompletedProcess.

        Args:
            cmd: Command as a list of arguments
            cwd: Working directory (default: current directory)
            capture: Capture stdout/stderr as text
            check: Raise ToolError on nonzero exit
            sudo: Prefix the command with sudo
            log_cmd: Log the command and a truncated copy of its output
            timeout: Seconds before the command is killed
            extra_env: Extra environment variables
            input_text: Text fed to stdin
        """
        cmd = list(cmd)
        if sudo:
            cmd = ['sudo'] + cmd

        if log_cmd or self.debug_mode:
            logger.info(f"RUNNING COMMAND: {_format_cmd(cmd)}")

        if cwd is None:
            cwd = Path.cwd()

        env = os.environ.copy()
        env['LC_ALL'] = 'C'
        if extra_env:
            env.update(extra_env)

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=capture,
                text=True,
                check=False,
                env=env,
                timeout=timeout,
                input=input_text,
            )
        except subprocess.TimeoutExpired as e:
            logger.error(f"⚠️ Command timed out after {timeout} seconds: {_format_cmd(cmd)}")
            raise ToolError(
                f"Command timed out after {timeout} seconds: {_format_cmd(cmd)}",
                diagnostic=_decode(e.stderr) or _decode(e.output),
                command=cmd,
            ) from e
        except FileNotFoundError as e:
            raise ToolError(f"Command not found: {cmd[0]}", diagnostic=str(e), command=cmd) from e

        if log_cmd or self.debug_mode:
            if result.stdout:
                logger.debug(f"STDOUT: {result.stdout[:500]}")
            if result.stderr:
                logger.debug(f"STDERR: {result.stderr[:500]}")
            logger.info(f"EXIT CODE: {result.returncode}")

        if check and result.returncode != 0:
            raise ToolError(
                f"Command failed with exit code {result.returncode}: {_format_cmd(cmd)}",
                diagnostic=(result.stderr or "") + (result.stdout or "") if capture else "",
                command=cmd,
                returncode=result.returncode,
            )

        return result

    def run_command_with_retry(self, cmd, max_retries: int = 3, initial_delay: float = 2.0,
                               retry_errors=None, **kwargs):
        """
        Run command, retrying on transient failures

        Args:
            cmd: Command to execute
            max_retries: Maximum number of attempts
            initial_delay: Initial delay between retries (doubles each retry)
            retry_errors: Output patterns that mark a failure as transient
            kwargs: Same as run_command
        """
        if retry_errors is None:
            retry_errors = ["Could not get lock", "Temporary failure resolving",
                            "Connection timed out", "Unable to acquire the dpkg frontend lock"]

        check = kwargs.pop('check', False)
        delay = initial_delay
        result = None

        for attempt in range(max_retries):
            if attempt > 0:
                logger.info(f"CMD_RETRY attempt={attempt} max={max_retries} delay={delay:.1f}s")
                time.sleep(delay)
                delay *= 2

            result = self.run_command(cmd, check=False, **kwargs)
            if result.returncode == 0:
                return result

            output = (result.stderr or "") + (result.stdout or "")
            reason = next((p for p in retry_errors if p in output), None)
            if reason is None:
                break
            logger.warning(f"CMD_RETRY_REASON attempt={attempt} reason={reason}")

        if check:
            raise ToolError(
                f"Command failed with exit code {result.returncode}: {_format_cmd(cmd)}",
                diagnostic=(result.stderr or "") + (result.stdout or ""),
                command=cmd,
                returncode=result.returncode,
            )
        return result


def _decode(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode('utf-8', errors='replace')
    return data
