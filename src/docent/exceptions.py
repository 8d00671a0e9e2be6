"""Custom exception classes for docent."""


class DocentError(Exception):
    """Base exception for docent failures."""


class ConfigurationError(DocentError, ValueError):
    """Raised when a project config file cannot be parsed."""

    def __init__(self, config_file: str, reason: str) -> None:
        self.config_file = config_file
        self.reason = reason
        super().__init__(f"Failed to parse config file {config_file}: {reason}")


class ToolUnavailableError(DocentError):
    """Raised when an external command-line tool is not installed."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"'{tool}' is not installed or not in PATH")


class GitTimeoutError(DocentError, TimeoutError):
    """Raised when a single git invocation exceeds its timeout."""

    def __init__(self, command: str, timeout: float) -> None:
        self.command = command
        self.timeout = timeout
        super().__init__(f"'git {command}' timed out after {timeout:g} seconds")
