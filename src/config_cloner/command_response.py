import logging
from io import StringIO

from config_cloner.constants import Constants


class CommandResult:
    """Outcome of one remote command."""

    def __init__(self, exit_code: int = Constants.SUCCESS, stdout: str = "", stderr: str = ""):
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr

    def succeeded(self) -> bool:
        return self.exit_code == Constants.SUCCESS

    def __repr__(self):
        return f"CommandResult(exit_code={self.exit_code!r}, stdout={self.stdout!r}, stderr={self.stderr!r})"


class CommandResponse:
    """Accumulates progress lines and the outcome of any number of remote commands.

    The response succeeds only when every merged result succeeded and the return code was never
    set to a failure. ``exit_code()`` is the explicit return code when it is non-zero, otherwise the
    first non-zero merged code, otherwise zero.
    """

    def __init__(self, logger: logging.Logger = None):
        self.logger = logger if logger else logging.getLogger(self.__class__.__name__)
        self.out = StringIO()
        self.err = StringIO()
        self._return_code = Constants.SUCCESS
        self._first_failure = Constants.SUCCESS

    def println(self, line: str):
        self.logger.info(line)
        self.out.write(line + "\n")
        return self

    def eprintln(self, line: str):
        self.logger.error(line)
        self.err.write(line + "\n")
        return self

    def return_code(self, code: int):
        self._return_code = code
        return self

    def merge(self, result):
        """Merge a CommandResult or another CommandResponse into this response."""
        if isinstance(result, CommandResponse):
            stdout, stderr, code = result.stdout(), result.stderr(), result.exit_code()
        else:
            stdout, stderr, code = result.stdout, result.stderr, result.exit_code
        self.out.write(stdout or "")
        self.err.write(stderr or "")
        if code != Constants.SUCCESS:
            self.logger.warning(f"merging a failure with exit code {code}")
            if self._first_failure == Constants.SUCCESS:
                self._first_failure = code
        return self

    def stdout(self) -> str:
        return self.out.getvalue()

    def stderr(self) -> str:
        return self.err.getvalue()

    def get_return_code(self) -> int:
        return self._return_code

    def exit_code(self) -> int:
        if self._return_code != Constants.SUCCESS:
            return self._return_code
        return self._first_failure

    def succeeded(self) -> bool:
        return self._return_code == Constants.SUCCESS and self._first_failure == Constants.SUCCESS
