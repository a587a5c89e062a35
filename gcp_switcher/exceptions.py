"""Custom exception hierarchy for gcp-switcher.

Exception Hierarchy:
    GcpSwitcherError (base)
    ├── ToolNotFoundError - gcloud is not installed or not on PATH
    ├── CommandError - a gcloud invocation did not succeed
    │   ├── CommandTimeoutError (retryable)
    │   └── CommandFailedError - non-zero exit, carries captured output
    ├── MalformedResponseError - JSON payload could not be interpreted
    ├── AccountNotAuthenticatedError - switch target has no credentials
    ├── TransitionError - trigger not permitted from the current state
    └── ConfigurationError - invalid settings

Usage:
    from gcp_switcher.exceptions import CommandTimeoutError

    raise CommandTimeoutError("command timed out: gcloud auth list", timeout=5)
"""

from typing import Any, Optional


class GcpSwitcherError(Exception):
    """Base exception for all gcp-switcher errors.

    Attributes:
        message: Human-readable error description, shown in the UI
        context: Additional context about the error, included in str() for logs
        retryable: Whether this error might succeed on retry
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        **context: Any,
    ) -> None:
        self.message = message
        self.context = context
        self.retryable = retryable
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ToolNotFoundError(GcpSwitcherError):
    """The gcloud binary could not be located."""

    def __init__(
        self,
        message: str = (
            "Google Cloud SDK (gcloud) is not installed or not in PATH\n"
            "Please install it from: https://cloud.google.com/sdk/docs/install"
        ),
        **context: Any,
    ) -> None:
        super().__init__(message, **context)


# =============================================================================
# Command Errors
# =============================================================================


class CommandError(GcpSwitcherError):
    """Base exception for gcloud invocation failures."""

    pass


class CommandTimeoutError(CommandError):
    """A gcloud invocation exceeded its deadline."""

    def __init__(
        self,
        message: str = "Command timed out",
        *,
        timeout: Optional[float] = None,
        **context: Any,
    ) -> None:
        if timeout is not None:
            context["timeout"] = timeout
        super().__init__(message, retryable=True, **context)


class CommandFailedError(CommandError):
    """A gcloud invocation exited with a non-zero status."""

    def __init__(
        self,
        message: str = "Command failed",
        *,
        output: str = "",
        returncode: Optional[int] = None,
        **context: Any,
    ) -> None:
        self.output = output
        self.returncode = returncode
        if returncode is not None:
            context["returncode"] = returncode
        super().__init__(message, **context)


class MalformedResponseError(GcpSwitcherError):
    """A gcloud JSON payload was not in the expected shape."""

    pass


class AccountNotAuthenticatedError(GcpSwitcherError):
    """The account to switch to has not been authenticated with gcloud."""

    def __init__(self, account: str) -> None:
        self.account = account
        super().__init__(
            f"account {account} is not authenticated\n\n"
            f"Please run 'gcloud auth login {account}' to authenticate this account first."
        )


class TransitionError(GcpSwitcherError):
    """A trigger was fired that the current state does not permit."""

    pass


class ConfigurationError(GcpSwitcherError):
    """Settings could not be loaded or are invalid."""

    pass


def user_message(error: Optional[BaseException]) -> str:
    """Return the text to show an operator for an error."""
    if error is None:
        return ""
    if isinstance(error, GcpSwitcherError):
        return error.message
    return str(error)
