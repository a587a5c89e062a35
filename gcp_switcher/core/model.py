"""Application model owned and mutated by the reducer."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..models import Account, Project
from .events import Operation
from .state_machine import AppStateMachine
from .tracker import CompletionTracker

BOOTSTRAP_OPERATIONS: Tuple[Operation, ...] = (
    Operation.CHECK_TOOL,
    Operation.GET_ACTIVE_ACCOUNT,
    Operation.GET_ACTIVE_PROJECT,
    Operation.LIST_ACCOUNTS,
    Operation.LIST_PROJECTS,
)

REFRESH_OPERATIONS: Tuple[Operation, ...] = (
    Operation.GET_ACTIVE_ACCOUNT,
    Operation.GET_ACTIVE_PROJECT,
    Operation.LIST_ACCOUNTS,
    Operation.LIST_PROJECTS,
)


@dataclass
class AppData:
    accounts: Tuple[Account, ...] = ()
    projects: Tuple[Project, ...] = ()
    active_account: str = ""
    active_project: str = ""


@dataclass
class UIState:
    menu_choice: int = 0
    confirm_choice: int = 0
    notice: str = ""
    # Set after an account switch so the project list opens once loaded
    need_project_selection: bool = False


@dataclass
class OperationState:
    tracker: CompletionTracker = field(
        default_factory=lambda: CompletionTracker(BOOTSTRAP_OPERATIONS)
    )
    command_errors: List[str] = field(default_factory=list)


@dataclass
class AppModel:
    machine: AppStateMachine = field(default_factory=AppStateMachine)
    data: AppData = field(default_factory=AppData)
    ui: UIState = field(default_factory=UIState)
    operations: OperationState = field(default_factory=OperationState)
    error: Optional[Exception] = None

    @property
    def state(self):
        return self.machine.state

    @property
    def context(self):
        return self.machine.context
