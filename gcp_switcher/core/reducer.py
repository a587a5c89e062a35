"""Event reducer: the single place application state changes.

`update(model, event)` applies one event to the model and its state machine
and returns the commands the UI layer must execute next. It performs no I/O;
dispatched work comes back later as new events, processed one at a time.
"""

import logging
from typing import Callable, Dict, List, Tuple

from ..config.constants import (
    CONFIRM_NO,
    CONFIRM_YES,
    MENU_ACCOUNTS,
    MENU_MANUAL_PROJECT,
    MENU_NEW_LOGIN,
    MENU_PROJECTS,
    MENU_SIZE,
    NEW_LOGIN_PROMPT,
)
from ..exceptions import GcpSwitcherError, ToolNotFoundError, TransitionError, user_message
from .events import (
    AccountsLoaded,
    ActiveAccountLoaded,
    ActiveProjectLoaded,
    Command,
    CommandFailed,
    Dispatch,
    Event,
    FallbackTimerFired,
    KeyPressed,
    Operation,
    OperationFinished,
    ProjectsLoaded,
    Quit,
    StartFallbackTimer,
    ToolChecked,
)
from .model import REFRESH_OPERATIONS, AppModel
from .state_machine import AppState, LoadingContext, Trigger

logger = logging.getLogger(__name__)

_QUIT_KEYS = {"q", "ctrl+c"}
_MENU_SHORTCUTS = {
    "1": MENU_ACCOUNTS,
    "a": MENU_ACCOUNTS,
    "2": MENU_PROJECTS,
    "p": MENU_PROJECTS,
    "3": MENU_NEW_LOGIN,
    "l": MENU_NEW_LOGIN,
    "4": MENU_MANUAL_PROJECT,
    "m": MENU_MANUAL_PROJECT,
}
_LIST_PURPOSES = {
    Operation.LIST_ACCOUNTS: LoadingContext.ACCOUNTS,
    Operation.LIST_PROJECTS: LoadingContext.PROJECTS,
}

Handler = Callable[[AppModel, Event], List[Command]]


def bootstrap(model: AppModel, fallback_seconds: float) -> List[Command]:
    """Commands to run at startup: every tracked operation plus the fallback timer."""
    commands: List[Command] = [
        Dispatch(operation) for operation in model.operations.tracker.expected
    ]
    commands.append(StartFallbackTimer(fallback_seconds))
    return commands


def update(model: AppModel, event: Event) -> Tuple[AppModel, List[Command]]:
    """Apply one event and return the model with the commands to dispatch."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unhandled event type: {type(event).__name__}")
    if not isinstance(event, KeyPressed):
        logger.debug(f"Event {event!r} in state {model.state.name}")
    commands = handler(model, event)
    for command in commands:
        logger.debug(f"Scheduling {command!r}")
    return model, commands


def _fire(model: AppModel, trigger: Trigger, *args) -> bool:
    """Fire a trigger, logging and absorbing a rejected transition."""
    try:
        model.machine.fire(trigger, *args)
    except TransitionError as e:
        logger.warning(f"Rejected transition: {e}")
        return False
    return True


# =============================================================================
# BOOTSTRAP AND LOADING
# =============================================================================


def _finish_bootstrap(model: AppModel) -> None:
    if model.state is AppState.LOADING and model.context.loading_context is LoadingContext.INITIAL:
        _fire(model, Trigger.DATA_LOADED)
    else:
        logger.debug(f"Bootstrap finished in {model.state.name}; no transition needed")


def _record(model: AppModel, operation: Operation) -> None:
    if model.operations.tracker.record(operation):
        _finish_bootstrap(model)


def _purpose_loaded(model: AppModel, purpose: LoadingContext, failure: str = "") -> None:
    """Leave a purpose-specific Loading once its list outcome has arrived."""
    if model.state is not AppState.LOADING or model.context.loading_context is not purpose:
        return
    if not _fire(model, Trigger.DATA_LOADED):
        return

    if purpose is LoadingContext.ACCOUNTS:
        choice, available, noun = MENU_ACCOUNTS, model.context.has_accounts, "accounts"
    else:
        choice, available, noun = MENU_PROJECTS, model.context.has_projects, "projects"

    if failure:
        model.ui.notice = f"Could not load {noun}: {failure}"
    elif not available:
        model.ui.notice = f"No {noun} found"
    else:
        model.ui.menu_choice = choice
        model.machine.set_menu_choice(choice)
        _fire(model, Trigger.MENU_CHOICE)
        if purpose is LoadingContext.PROJECTS and model.ui.need_project_selection:
            model.ui.notice = "Account switched. Select a project to use with it."
    if purpose is LoadingContext.PROJECTS:
        model.ui.need_project_selection = False


def _on_fallback_timer(model: AppModel, event: FallbackTimerFired) -> List[Command]:
    if model.operations.tracker.expire():
        _finish_bootstrap(model)
    return []


def _on_tool_checked(model: AppModel, event: ToolChecked) -> List[Command]:
    if event.available:
        _record(model, Operation.CHECK_TOOL)
        return []

    error = ToolNotFoundError()
    model.error = error
    model.operations.tracker.abort()
    if model.state is AppState.LOADING:
        _fire(model, Trigger.ERROR, error)
    return []


def _on_active_account(model: AppModel, event: ActiveAccountLoaded) -> List[Command]:
    model.data.active_account = event.account
    _record(model, Operation.GET_ACTIVE_ACCOUNT)
    return []


def _on_active_project(model: AppModel, event: ActiveProjectLoaded) -> List[Command]:
    model.data.active_project = event.project
    _record(model, Operation.GET_ACTIVE_PROJECT)
    return []


def _on_accounts(model: AppModel, event: AccountsLoaded) -> List[Command]:
    model.data.accounts = tuple(event.accounts)
    model.machine.set_has_accounts(bool(model.data.accounts))
    _purpose_loaded(model, LoadingContext.ACCOUNTS)
    _record(model, Operation.LIST_ACCOUNTS)
    return []


def _on_projects(model: AppModel, event: ProjectsLoaded) -> List[Command]:
    model.data.projects = tuple(event.projects)
    model.machine.set_has_projects(bool(model.data.projects))
    _purpose_loaded(model, LoadingContext.PROJECTS)
    _record(model, Operation.LIST_PROJECTS)
    return []


def _on_command_failed(model: AppModel, event: CommandFailed) -> List[Command]:
    message = user_message(event.error)
    logger.warning(f"{event.operation.value} failed: {event.error}")
    model.operations.command_errors.append(f"{event.operation.value}: {message}")

    purpose = _LIST_PURPOSES.get(event.operation)
    if purpose is not None:
        _purpose_loaded(model, purpose, failure=message)
    _record(model, event.operation)
    return []


# =============================================================================
# OPERATION RESULTS
# =============================================================================


def _on_operation_finished(model: AppModel, event: OperationFinished) -> List[Command]:
    refresh: List[Command] = [Dispatch(operation) for operation in REFRESH_OPERATIONS]

    if model.state is not AppState.PROCESSING:
        logger.warning(f"Stale {event.operation.value} result in {model.state.name}")
        return refresh if event.success else []

    target = model.context.selected_id
    model.machine.set_pending_operation(None)

    if not event.success:
        error = event.error or GcpSwitcherError(f"{event.operation.value} failed")
        model.error = error
        _fire(model, Trigger.OPERATION_FAILED, error)
        return []

    _fire(model, Trigger.OPERATION_COMPLETE)

    if event.account_switched:
        # The active project belongs to the previous account
        model.data.active_project = ""
        model.data.projects = ()
        model.machine.set_has_projects(False)
        model.ui.need_project_selection = True
        _fire(model, Trigger.LOAD_PROJECTS, LoadingContext.PROJECTS)
        return [
            Dispatch(Operation.GET_ACTIVE_ACCOUNT),
            Dispatch(Operation.LIST_ACCOUNTS),
            Dispatch(Operation.LIST_PROJECTS),
        ]

    if event.operation is Operation.SWITCH_PROJECT:
        model.ui.notice = f"Switched to project {target}"
    elif event.operation is Operation.LOGIN_NEW_ACCOUNT:
        model.ui.notice = "Login complete"
    return refresh


# =============================================================================
# KEYS
# =============================================================================


def _quit() -> List[Command]:
    return [Quit()]


def _choose_menu(model: AppModel, choice: int) -> List[Command]:
    machine = model.machine
    model.ui.menu_choice = choice
    machine.set_menu_choice(choice)

    if choice == MENU_ACCOUNTS:
        if machine.can_fire(Trigger.LOAD_ACCOUNTS):
            if _fire(model, Trigger.LOAD_ACCOUNTS, LoadingContext.ACCOUNTS):
                return [Dispatch(Operation.LIST_ACCOUNTS)]
            return []
        _fire(model, Trigger.MENU_CHOICE)
    elif choice == MENU_PROJECTS:
        if machine.can_fire(Trigger.LOAD_PROJECTS):
            if _fire(model, Trigger.LOAD_PROJECTS, LoadingContext.PROJECTS):
                return [Dispatch(Operation.LIST_PROJECTS)]
            return []
        _fire(model, Trigger.MENU_CHOICE)
    elif choice == MENU_NEW_LOGIN:
        machine.set_selected_id("")
        machine.set_pending_operation(Operation.LOGIN_NEW_ACCOUNT)
        model.ui.confirm_choice = CONFIRM_YES
        _fire(model, Trigger.MENU_CHOICE, NEW_LOGIN_PROMPT)
    elif choice == MENU_MANUAL_PROJECT:
        _fire(model, Trigger.MENU_CHOICE)
    return []


def _request_switch(
    model: AppModel, trigger: Trigger, operation: Operation, kind: str, target: str, active: str
) -> List[Command]:
    if target == active:
        model.ui.notice = f"{target} is already the active {kind}"
        return []
    model.machine.set_selected_id(target)
    model.machine.set_pending_operation(operation)
    model.ui.confirm_choice = CONFIRM_YES
    _fire(model, trigger, f"Switch to {kind} {target}?")
    return []


def _main_key(model: AppModel, key: str) -> List[Command]:
    if key in _QUIT_KEYS:
        return _quit()
    if key in ("up", "k"):
        model.ui.menu_choice = (model.ui.menu_choice - 1) % MENU_SIZE
    elif key in ("down", "j"):
        model.ui.menu_choice = (model.ui.menu_choice + 1) % MENU_SIZE
    elif key in _MENU_SHORTCUTS:
        return _choose_menu(model, _MENU_SHORTCUTS[key])
    elif key == "enter":
        return _choose_menu(model, model.ui.menu_choice)
    return []


def _list_key(model: AppModel, event: KeyPressed) -> List[Command]:
    if event.key in _QUIT_KEYS or event.key == "escape":
        _fire(model, Trigger.GO_BACK)
        return []
    if event.key != "enter" or not event.value:
        return []

    if model.state is AppState.ACCOUNTS:
        return _request_switch(
            model,
            Trigger.ACCOUNT_SELECTED,
            Operation.SWITCH_ACCOUNT,
            "account",
            event.value,
            model.data.active_account,
        )
    return _request_switch(
        model,
        Trigger.PROJECT_SELECTED,
        Operation.SWITCH_PROJECT,
        "project",
        event.value,
        model.data.active_project,
    )


def _manual_project_key(model: AppModel, event: KeyPressed) -> List[Command]:
    # "q" is ordinary text here
    if event.key in ("escape", "ctrl+c"):
        _fire(model, Trigger.GO_BACK)
        return []
    if event.key != "enter":
        return []
    project_id = (event.value or "").strip()
    if not project_id:
        return []
    return _request_switch(
        model,
        Trigger.MANUAL_PROJECT_ENTRY,
        Operation.SWITCH_PROJECT,
        "project",
        project_id,
        model.data.active_project,
    )


def _confirm(model: AppModel) -> List[Command]:
    operation = model.context.pending_operation
    if operation is None:
        logger.error("Confirmation accepted with no pending operation")
        return _decline(model)
    if not _fire(model, Trigger.CONFIRM_YES):
        return []
    target = model.context.selected_id or None
    return [Dispatch(operation, target=target)]


def _decline(model: AppModel) -> List[Command]:
    model.machine.set_pending_operation(None)
    _fire(model, Trigger.CONFIRM_NO)
    return []


def _confirm_key(model: AppModel, key: str) -> List[Command]:
    if key in ("up", "left", "h", "k"):
        model.ui.confirm_choice = CONFIRM_YES
    elif key in ("down", "j"):
        model.ui.confirm_choice = CONFIRM_NO
    elif key in ("right", "tab"):
        model.ui.confirm_choice = CONFIRM_NO if model.ui.confirm_choice == CONFIRM_YES else CONFIRM_YES
    elif key == "y":
        return _confirm(model)
    elif key == "n" or key == "escape" or key in _QUIT_KEYS:
        return _decline(model)
    elif key == "enter":
        if model.ui.confirm_choice == CONFIRM_YES:
            return _confirm(model)
        return _decline(model)
    return []


def _error_key(model: AppModel, key: str) -> List[Command]:
    if key in _QUIT_KEYS:
        return _quit()
    if key in ("enter", "escape"):
        if _fire(model, Trigger.GO_BACK):
            model.error = None
    return []


def _on_key(model: AppModel, event: KeyPressed) -> List[Command]:
    state = model.state
    logger.debug(f"Key {event.key!r} in state {state.name}")
    model.ui.notice = ""

    if state is AppState.LOADING:
        return _quit() if event.key in _QUIT_KEYS else []
    if state is AppState.MAIN:
        return _main_key(model, event.key)
    if state in (AppState.ACCOUNTS, AppState.PROJECTS):
        return _list_key(model, event)
    if state is AppState.MANUAL_PROJECT:
        return _manual_project_key(model, event)
    if state is AppState.CONFIRMING:
        return _confirm_key(model, event.key)
    if state is AppState.ERROR:
        return _error_key(model, event.key)
    # Processing waits for the operation result
    return []


_HANDLERS: Dict[type, Handler] = {
    KeyPressed: _on_key,
    FallbackTimerFired: _on_fallback_timer,
    ToolChecked: _on_tool_checked,
    ActiveAccountLoaded: _on_active_account,
    ActiveProjectLoaded: _on_active_project,
    AccountsLoaded: _on_accounts,
    ProjectsLoaded: _on_projects,
    CommandFailed: _on_command_failed,
    OperationFinished: _on_operation_finished,
}
