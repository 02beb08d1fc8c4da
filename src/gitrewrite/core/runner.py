"""Command execution on top of invoke."""

import io
import shlex
from collections.abc import Sequence
from pathlib import Path

from invoke import Context, Result
from invoke.exceptions import CommandTimedOut

from gitrewrite.core.log import logger


class Runner(Context):
    """invoke.Context with a single execute() entry point.

    Output is always captured, never echoed; callers inspect the
    returned Result themselves.
    """

    def execute(
        self,
        command: str | Sequence[str],
        cwd: Path | None = None,
        timeout: int | None = None,
        stdin: str | None = None,
        check: bool = True,
        env: dict[str, str] | None = None,
    ) -> Result:
        """Run a command and return its invoke Result.

        Args:
            command: Shell string, or an argv list that is quoted
                with shlex.join
            cwd: Working directory
            timeout: Seconds before the command is killed; a timed
                out command comes back with exited == -1
            stdin: Text fed to the command's stdin
            check: Raise invoke.UnexpectedExit on non-zero exit
            env: Extra environment variables (merged into os.environ)

        Returns:
            invoke.Result with stdout, stderr and exited
        """
        if not isinstance(command, str):
            command = shlex.join(str(part) for part in command)

        kwargs = {
            "hide": True,
            "warn": not check,
            "in_stream": io.StringIO(stdin) if stdin else False,
        }
        if timeout:
            kwargs["timeout"] = timeout
        if env:
            kwargs["env"] = env

        logger.trace("exec", command=command, cwd=str(cwd) if cwd else None)

        try:
            if cwd:
                with self.cd(str(cwd)):
                    result = self.run(command, **kwargs)
            else:
                result = self.run(command, **kwargs)
        except CommandTimedOut as e:
            result = e.result
            result.exited = -1

        logger.trace(
            "exec finished",
            command=command,
            exited=result.exited,
            stdout_bytes=len(result.stdout),
            stderr_bytes=len(result.stderr),
        )
        return result
