"""Navigation state machine.

A guarded transition table drives which screen is shown and which inputs
are accepted. The table is declared as data (`TRANSITION_TABLE`) and loaded
into a `transitions.Machine`; guards read the `TransitionContext`, which is
mutated only through the setters below or by the three state-entry hooks
(Loading records the loading purpose, Confirming the prompt, Error the error).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from transitions import Machine, MachineError

from ..config.constants import MENU_ACCOUNTS, MENU_MANUAL_PROJECT, MENU_NEW_LOGIN, MENU_PROJECTS
from ..exceptions import TransitionError
from .events import Operation

logger = logging.getLogger(__name__)


class AppState(Enum):
    LOADING = "loading"
    ERROR = "error"
    MAIN = "main"
    ACCOUNTS = "accounts"
    PROJECTS = "projects"
    MANUAL_PROJECT = "manual_project"
    CONFIRMING = "confirming"
    PROCESSING = "processing"


class Trigger(Enum):
    DATA_LOADED = "data_loaded"
    ERROR = "error"
    MENU_CHOICE = "menu_choice"
    LOAD_ACCOUNTS = "load_accounts"
    LOAD_PROJECTS = "load_projects"
    ACCOUNT_SELECTED = "account_selected"
    PROJECT_SELECTED = "project_selected"
    MANUAL_PROJECT_ENTRY = "manual_project_entry"
    CONFIRM_YES = "confirm_yes"
    CONFIRM_NO = "confirm_no"
    OPERATION_COMPLETE = "operation_complete"
    OPERATION_FAILED = "operation_failed"
    GO_BACK = "go_back"


class LoadingContext(Enum):
    """Why the machine is in Loading."""

    INITIAL = "initial"
    ACCOUNTS = "accounts"
    PROJECTS = "projects"


@dataclass
class TransitionContext:
    """Data the guards and entry hooks read and write."""

    loading_context: LoadingContext = LoadingContext.INITIAL
    selected_id: str = ""
    menu_choice: int = 0
    has_accounts: bool = False
    has_projects: bool = False
    confirm_text: str = ""
    last_error: Optional[Exception] = None
    pending_operation: Optional[Operation] = None


@dataclass(frozen=True)
class TransitionRule:
    source: AppState
    trigger: Trigger
    dest: AppState
    guard: Optional[str] = None  # name of a TransitionContext predicate below


TRANSITION_TABLE: Tuple[TransitionRule, ...] = (
    TransitionRule(AppState.LOADING, Trigger.DATA_LOADED, AppState.MAIN),
    TransitionRule(AppState.LOADING, Trigger.ERROR, AppState.ERROR),
    TransitionRule(AppState.MAIN, Trigger.LOAD_ACCOUNTS, AppState.LOADING, "accounts_missing"),
    TransitionRule(AppState.MAIN, Trigger.MENU_CHOICE, AppState.ACCOUNTS, "accounts_chosen"),
    TransitionRule(AppState.MAIN, Trigger.LOAD_PROJECTS, AppState.LOADING, "projects_missing"),
    TransitionRule(AppState.MAIN, Trigger.MENU_CHOICE, AppState.PROJECTS, "projects_chosen"),
    TransitionRule(AppState.MAIN, Trigger.MENU_CHOICE, AppState.CONFIRMING, "new_login_chosen"),
    TransitionRule(AppState.MAIN, Trigger.MENU_CHOICE, AppState.MANUAL_PROJECT, "manual_project_chosen"),
    TransitionRule(AppState.ACCOUNTS, Trigger.ACCOUNT_SELECTED, AppState.CONFIRMING),
    TransitionRule(AppState.ACCOUNTS, Trigger.GO_BACK, AppState.MAIN),
    TransitionRule(AppState.PROJECTS, Trigger.PROJECT_SELECTED, AppState.CONFIRMING),
    TransitionRule(AppState.PROJECTS, Trigger.GO_BACK, AppState.MAIN),
    TransitionRule(AppState.MANUAL_PROJECT, Trigger.MANUAL_PROJECT_ENTRY, AppState.CONFIRMING),
    TransitionRule(AppState.MANUAL_PROJECT, Trigger.GO_BACK, AppState.MAIN),
    TransitionRule(AppState.CONFIRMING, Trigger.CONFIRM_YES, AppState.PROCESSING),
    TransitionRule(AppState.CONFIRMING, Trigger.CONFIRM_NO, AppState.MAIN),
    TransitionRule(AppState.PROCESSING, Trigger.OPERATION_COMPLETE, AppState.MAIN),
    TransitionRule(AppState.PROCESSING, Trigger.OPERATION_FAILED, AppState.ERROR),
    TransitionRule(AppState.ERROR, Trigger.GO_BACK, AppState.MAIN),
)


class _MachineModel:
    """Holds `state` and the trigger methods transitions attaches."""


class AppStateMachine:
    """Guarded state machine plus the context its guards evaluate.

    `fire` raises TransitionError for any trigger the current state does not
    permit or whose guard rejects it; state is left unchanged in that case.
    """

    def __init__(self) -> None:
        self.context = TransitionContext()
        self._model = _MachineModel()
        self._machine = Machine(
            model=self._model,
            states=list(AppState),
            transitions=[self._to_transition(rule) for rule in TRANSITION_TABLE],
            initial=AppState.LOADING,
            auto_transitions=False,
            send_event=False,
            ignore_invalid_triggers=False,
        )
        self._machine.get_state(AppState.LOADING).add_callback("enter", self._enter_loading)
        self._machine.get_state(AppState.CONFIRMING).add_callback("enter", self._enter_confirming)
        self._machine.get_state(AppState.ERROR).add_callback("enter", self._enter_error)

    def _to_transition(self, rule: TransitionRule) -> dict:
        transition: dict = {
            "trigger": rule.trigger.value,
            "source": rule.source,
            "dest": rule.dest,
        }
        if rule.guard:
            transition["conditions"] = [self._guard(rule.guard)]
        return transition

    def _guard(self, name: str):
        predicate = getattr(self, f"_{name}")

        def check(*args: Any, **kwargs: Any) -> bool:
            return predicate()

        check.__name__ = name
        return check

    # Guards

    def _accounts_missing(self) -> bool:
        return not self.context.has_accounts

    def _accounts_chosen(self) -> bool:
        return self.context.menu_choice == MENU_ACCOUNTS and self.context.has_accounts

    def _projects_missing(self) -> bool:
        return not self.context.has_projects

    def _projects_chosen(self) -> bool:
        return self.context.menu_choice == MENU_PROJECTS and self.context.has_projects

    def _new_login_chosen(self) -> bool:
        return self.context.menu_choice == MENU_NEW_LOGIN

    def _manual_project_chosen(self) -> bool:
        return self.context.menu_choice == MENU_MANUAL_PROJECT

    # Entry hooks

    def _enter_loading(self, *args: Any, **kwargs: Any) -> None:
        if args and isinstance(args[0], LoadingContext):
            self.context.loading_context = args[0]

    def _enter_confirming(self, *args: Any, **kwargs: Any) -> None:
        if args and isinstance(args[0], str):
            self.context.confirm_text = args[0]

    def _enter_error(self, *args: Any, **kwargs: Any) -> None:
        if args and isinstance(args[0], BaseException):
            self.context.last_error = args[0]

    # Public API

    @property
    def state(self) -> AppState:
        return self._model.state

    def fire(self, trigger: Trigger, *args: Any) -> AppState:
        """Fire a trigger, passing args to the destination's entry hook.

        Returns:
            The new state

        Raises:
            TransitionError: If the trigger is not permitted or its guard fails.
        """
        source = self.state
        try:
            moved = self._model.trigger(trigger.value, *args)
        except MachineError as e:
            raise TransitionError(
                f"{trigger.name} is not permitted from {source.name}",
                state=source.name,
                trigger=trigger.name,
            ) from e
        if not moved:
            raise TransitionError(
                f"Guard rejected {trigger.name} from {source.name}",
                state=source.name,
                trigger=trigger.name,
            )
        logger.debug(f"Transition {source.name} --{trigger.name}--> {self.state.name}")
        return self.state

    def can_fire(self, trigger: Trigger) -> bool:
        """Check whether a trigger would be accepted right now."""
        return getattr(self._model, f"may_{trigger.value}")()

    def permitted_triggers(self) -> List[Trigger]:
        """Triggers the current state accepts with its guards satisfied."""
        return [t for t in Trigger if self.can_fire(t)]

    # Context setters

    def set_menu_choice(self, choice: int) -> None:
        self.context.menu_choice = choice

    def set_has_accounts(self, has_accounts: bool) -> None:
        self.context.has_accounts = has_accounts

    def set_has_projects(self, has_projects: bool) -> None:
        self.context.has_projects = has_projects

    def set_selected_id(self, selected_id: str) -> None:
        self.context.selected_id = selected_id

    def set_pending_operation(self, operation: Optional[Operation]) -> None:
        self.context.pending_operation = operation


def to_dot(table: Tuple[TransitionRule, ...] = TRANSITION_TABLE) -> str:
    """Render the transition table as a Graphviz DOT digraph."""
    lines = [
        "digraph gcp_switcher {",
        "  rankdir=LR;",
        f'  "{AppState.LOADING.name}" [shape=doublecircle];',
    ]
    for rule in table:
        label = rule.trigger.name
        if rule.guard:
            label += f" [{rule.guard}]"
        lines.append(f'  "{rule.source.name}" -> "{rule.dest.name}" [label="{label}"];')
    lines.append("}")
    return "\n".join(lines)
