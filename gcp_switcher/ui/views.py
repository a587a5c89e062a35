"""Pure rendering of the application model into Rich text.

Nothing here makes decisions: each function reads the model and returns a
`Text` for the body panel of the current state. The list and input widgets
are composed by the app; this module only renders their labels.
"""

from typing import Callable, Dict

from rich.text import Text

from ..config.constants import CONFIRM_YES, MENU_ENTRIES
from ..core.model import AppModel
from ..core.state_machine import AppState, LoadingContext
from ..exceptions import GcpSwitcherError, user_message
from ..models import Account, Project
from .styles import Styles

MAIN_HINT = "Press q to quit, ↑/↓ to navigate, Enter to select"
LIST_HINT = "Press Enter to select, q to go back"
MANUAL_HINT = "Press Enter to confirm, Esc to go back"
CONFIRM_HINT = "(Use arrow keys to select, Enter to confirm)"
ERROR_HINT = "Press Enter to go back, q to quit"
RETRY_HINT = "This is usually temporary; try the operation again."

_LOADING_TEXT = {
    LoadingContext.INITIAL: "Loading GCP configuration...",
    LoadingContext.ACCOUNTS: "Loading Accounts...",
    LoadingContext.PROJECTS: "Loading Projects...",
}


def _notice(text: Text, model: AppModel, styles: Styles) -> None:
    if model.ui.notice:
        text.append("\n\n")
        text.append(model.ui.notice, style=styles.success)


def render_loading(model: AppModel, styles: Styles) -> Text:
    purpose = model.context.loading_context
    text = Text(_LOADING_TEXT[purpose])
    if purpose is LoadingContext.INITIAL:
        tracker = model.operations.tracker
        text.append("\n\n")
        text.append(f"Commands completed: {tracker.completed}/{tracker.total}", style=styles.info)
    return text


def render_error(model: AppModel, styles: Styles) -> Text:
    error = model.error or model.context.last_error
    text = Text("Error", style=styles.title)
    text.append("\n\n")
    text.append(user_message(error) or "Unknown error", style=styles.error)
    if isinstance(error, GcpSwitcherError) and error.retryable:
        text.append("\n\n")
        text.append(RETRY_HINT, style=styles.info)
    text.append("\n\n")
    text.append(ERROR_HINT, style=styles.info)
    return text


def render_main(model: AppModel, styles: Styles) -> Text:
    text = Text("GCP Account Manager", style=styles.title)
    text.append("\n\nActive Account: ")
    text.append(model.data.active_account or "(none)", style=styles.highlight)
    text.append("\nActive Project: ")
    text.append(model.data.active_project or "(none)", style=styles.highlight)
    text.append("\n\n")
    text.append("What would you like to do?", style=styles.subtitle)
    text.append("\n")
    for index, entry in enumerate(MENU_ENTRIES):
        style = styles.focused_button if index == model.ui.menu_choice else styles.blurred_button
        text.append(f"\n{index + 1}. ")
        text.append(f" {entry} ", style=style)
    text.append("\n\n")
    text.append(MAIN_HINT, style=styles.info)

    tracker = model.operations.tracker
    if tracker.expired:
        text.append("\n\n")
        text.append(
            f"Loading timed out with {tracker.completed}/{tracker.total} commands completed; "
            "late results will still be shown.",
            style=styles.info,
        )

    errors = model.operations.command_errors
    if errors:
        text.append("\n\n")
        text.append("Some data could not be loaded:", style=styles.error)
        for error in errors:
            text.append(f"\n  {error.splitlines()[0]}", style=styles.error)
    _notice(text, model, styles)
    return text


def render_list_header(model: AppModel, styles: Styles) -> Text:
    title = "Select Account" if model.state is AppState.ACCOUNTS else "Select Project"
    text = Text(title, style=styles.title)
    text.append("\n")
    text.append(LIST_HINT, style=styles.info)
    _notice(text, model, styles)
    return text


def render_manual_project(model: AppModel, styles: Styles) -> Text:
    text = Text("Enter Project ID", style=styles.title)
    text.append("\n\nPlease enter the GCP project ID you want to switch to:\n")
    text.append(MANUAL_HINT, style=styles.info)
    _notice(text, model, styles)
    return text


def render_confirming(model: AppModel, styles: Styles) -> Text:
    yes_focused = model.ui.confirm_choice == CONFIRM_YES
    text = Text("Confirmation", style=styles.title)
    text.append(f"\n\n{model.context.confirm_text}\n\n")
    text.append(" Yes ", style=styles.focused_button if yes_focused else styles.blurred_button)
    text.append("   ")
    text.append(" No ", style=styles.blurred_button if yes_focused else styles.focused_button)
    text.append("\n\n")
    text.append(CONFIRM_HINT, style=styles.info)
    return text


def render_processing(model: AppModel, styles: Styles) -> Text:
    return Text("Processing, please wait...")


_RENDERERS: Dict[AppState, Callable[[AppModel, Styles], Text]] = {
    AppState.LOADING: render_loading,
    AppState.ERROR: render_error,
    AppState.MAIN: render_main,
    AppState.ACCOUNTS: render_list_header,
    AppState.PROJECTS: render_list_header,
    AppState.MANUAL_PROJECT: render_manual_project,
    AppState.CONFIRMING: render_confirming,
    AppState.PROCESSING: render_processing,
}


def render(model: AppModel, styles: Styles) -> Text:
    """Render the body text for the current state."""
    return _RENDERERS[model.state](model, styles)


def account_label(account: Account, active_account: str, styles: Styles) -> Text:
    is_active = account.account == active_account if active_account else account.is_active
    if is_active:
        return Text(f"{account.account} (ACTIVE)", style=styles.active_item)
    return Text(account.account)


def project_label(project: Project, active_project: str, styles: Styles) -> Text:
    style = styles.active_item if project.project_id == active_project else ""
    text = Text(project.project_id, style=style)
    if project.project_id == active_project:
        text.append(" (ACTIVE)", style=styles.active_item)
    if project.name:
        text.append(f"\n  {project.name}", style=styles.info)
    return text
