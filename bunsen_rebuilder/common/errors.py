"""
Error taxonomy for the rebuild pipeline
"""


class RebuilderError(Exception):
    """Base error: a human-readable summary plus the raw tool diagnostic"""

    def __init__(self, message: str, diagnostic: str = ""):
        super().__init__(message)
        self.message = message
        self.diagnostic = (diagnostic or "").strip()

    def describe(self) -> str:
        """Summary followed by the underlying diagnostic, if any"""
        if self.diagnostic:
            return f"{self.message}\n{self.diagnostic}"
        return self.message


class NetworkError(RebuilderError):
    """Unreachable host or missing remote document"""


class ParseError(RebuilderError):
    """Changelog or packaging metadata is malformed"""


class FormatError(RebuilderError):
    """Unsupported source packaging layout"""


class ToolError(RebuilderError):
    """An external command returned nonzero"""

    def __init__(self, message: str, diagnostic: str = "", command=None, returncode=None):
        super().__init__(message, diagnostic)
        self.command = command
        self.returncode = returncode


class StateError(RebuilderError):
    """The run reached a state it cannot continue from"""


class PreconditionError(RebuilderError):
    """A pre-flight check failed; nothing useful can be done this run"""
