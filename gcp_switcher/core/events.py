"""Events consumed by the reducer and commands it emits.

Every input to the application is one of the `Event` variants below: key
presses forwarded by the UI, the bootstrap fallback timer, and the single
outcome each dispatched gcloud operation produces. The reducer answers with
a list of `Command` variants for the UI layer to execute.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from ..models import Account, Project


class Operation(Enum):
    """Named external operations the dispatcher knows how to run."""

    CHECK_TOOL = "check_tool"
    GET_ACTIVE_ACCOUNT = "get_active_account"
    GET_ACTIVE_PROJECT = "get_active_project"
    LIST_ACCOUNTS = "list_accounts"
    LIST_PROJECTS = "list_projects"
    SWITCH_ACCOUNT = "switch_account"
    SWITCH_PROJECT = "switch_project"
    LOGIN_NEW_ACCOUNT = "login_new_account"

    @property
    def is_mutation(self) -> bool:
        return self in MUTATING_OPERATIONS

    @property
    def is_interactive(self) -> bool:
        return self is Operation.LOGIN_NEW_ACCOUNT


MUTATING_OPERATIONS = frozenset(
    {Operation.SWITCH_ACCOUNT, Operation.SWITCH_PROJECT, Operation.LOGIN_NEW_ACCOUNT}
)


# =============================================================================
# EVENTS
# =============================================================================


@dataclass(frozen=True)
class KeyPressed:
    """A key the UI did not consume itself.

    `value` carries the opaque widget selection where one applies: the
    highlighted list identifier or the submitted text input.
    """

    key: str
    value: Optional[str] = None


@dataclass(frozen=True)
class FallbackTimerFired:
    seconds: float


@dataclass(frozen=True)
class ToolChecked:
    available: bool


@dataclass(frozen=True)
class ActiveAccountLoaded:
    account: str


@dataclass(frozen=True)
class ActiveProjectLoaded:
    project: str


@dataclass(frozen=True)
class AccountsLoaded:
    accounts: Tuple[Account, ...]


@dataclass(frozen=True)
class ProjectsLoaded:
    projects: Tuple[Project, ...]


@dataclass(frozen=True)
class CommandFailed:
    """A read operation failed (timeout, non-zero exit, tool missing)."""

    operation: Operation
    error: Exception


@dataclass(frozen=True)
class OperationFinished:
    """Outcome of a mutating operation started from Processing."""

    operation: Operation
    success: bool
    account_switched: bool = False
    error: Optional[Exception] = None


Event = Union[
    KeyPressed,
    FallbackTimerFired,
    ToolChecked,
    ActiveAccountLoaded,
    ActiveProjectLoaded,
    AccountsLoaded,
    ProjectsLoaded,
    CommandFailed,
    OperationFinished,
]


# =============================================================================
# COMMANDS
# =============================================================================


@dataclass(frozen=True)
class Dispatch:
    """Run one external operation; `target` is the identifier to switch to."""

    operation: Operation
    target: Optional[str] = None


@dataclass(frozen=True)
class StartFallbackTimer:
    seconds: float


@dataclass(frozen=True)
class Quit:
    exit_code: int = 0


Command = Union[Dispatch, StartFallbackTimer, Quit]
