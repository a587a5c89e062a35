"""Textual application hosting the switcher.

The app is a thin shell around the reducer: it turns key presses, widget
selections, timer ticks and gcloud outcomes into events, feeds them to
`update()` one at a time on the app's message loop, executes the commands
that come back, then redraws the widgets from the model.
"""

import logging
from typing import Iterable, Optional

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.widgets import Input, ListItem, ListView, LoadingIndicator, Static

from ..config.settings import SwitcherConfig
from ..core.events import (
    Command,
    Dispatch,
    Event,
    FallbackTimerFired,
    KeyPressed,
    Operation,
    OperationFinished,
    Quit,
    StartFallbackTimer,
)
from ..core.model import AppModel
from ..core.reducer import bootstrap, update
from ..core.state_machine import AppState
from ..exceptions import GcpSwitcherError
from ..services.gcloud_service import GcloudService
from .styles import DEFAULT_STYLES, Styles
from .views import account_label, project_label, render

logger = logging.getLogger(__name__)

_LIST_STATES = (AppState.ACCOUNTS, AppState.PROJECTS)
# Keys the focused widget consumes in each state
_LIST_WIDGET_KEYS = {"enter", "up", "down", "home", "end", "pageup", "pagedown"}
_INPUT_PASSTHROUGH_KEYS = {"escape"}


class GcloudOutcome(Message):
    """A dispatched gcloud operation finished."""

    def __init__(self, event: Event) -> None:
        self.event = event
        super().__init__()


class ChoiceItem(ListItem):
    """A list entry carrying the identifier it selects."""

    def __init__(self, value: str, label: Text, **kwargs) -> None:
        super().__init__(**kwargs)
        self.value = value
        self._label = label

    def compose(self) -> ComposeResult:
        yield Static(self._label)


class SwitcherApp(App):
    """Interactive gcloud account and project switcher."""

    TITLE = "GCP Switcher"

    CSS = """
    #frame {
        border: round #875fff;
        padding: 1 2;
        height: auto;
        max-height: 100%;
    }

    #spinner {
        height: 1;
    }

    #choices {
        height: auto;
        max-height: 20;
        margin-top: 1;
    }

    #project-input {
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "interrupt", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        config: SwitcherConfig,
        service: Optional[GcloudService] = None,
        styles: Styles = DEFAULT_STYLES,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.config = config
        self.service = service or GcloudService(config)
        self.switcher_styles = styles
        self.model = AppModel()
        self._shown_state: Optional[AppState] = None
        self._list_signature: Optional[tuple] = None

    def compose(self) -> ComposeResult:
        with Vertical(id="frame"):
            yield LoadingIndicator(id="spinner")
            yield Static("", id="body")
            yield ListView(id="choices")
            yield Input(placeholder="my-project-id", id="project-input")

    async def on_mount(self) -> None:
        logger.info("Switcher app mounted, starting bootstrap")
        self._execute(bootstrap(self.model, self.config.fallback_seconds))
        await self._sync_view()

    # =========================================================================
    # EVENT LOOP
    # =========================================================================

    async def _apply(self, event: Event) -> None:
        """Run one event through the reducer and act on the result."""
        _, commands = update(self.model, event)
        self._execute(commands)
        await self._sync_view()

    def _execute(self, commands: Iterable[Command]) -> None:
        for command in commands:
            if isinstance(command, Quit):
                logger.info("Quit requested")
                self.exit(return_code=command.exit_code)
            elif isinstance(command, StartFallbackTimer):
                self.set_timer(command.seconds, self._fallback_fired)
            elif isinstance(command, Dispatch):
                if command.operation.is_interactive:
                    self.call_later(self._run_login)
                else:
                    self.run_worker(
                        self._dispatch(command),
                        group="gcloud",
                        exit_on_error=False,
                    )

    async def _dispatch(self, command: Dispatch) -> None:
        event = await self.service.run(command)
        self.post_message(GcloudOutcome(event))

    async def _fallback_fired(self) -> None:
        await self._apply(FallbackTimerFired(self.config.fallback_seconds))

    async def _run_login(self) -> None:
        """Hand the terminal to gcloud for the browser-driven login."""
        try:
            with self.suspend():
                event = self.service.run_login()
        except SuspendNotSupported:
            logger.warning("Cannot suspend this terminal for interactive login")
            event = OperationFinished(
                Operation.LOGIN_NEW_ACCOUNT,
                success=False,
                error=GcpSwitcherError(
                    "Interactive login needs a real terminal.\n"
                    "Run 'gcloud auth login' directly instead."
                ),
            )
        await self._apply(event)

    async def on_gcloud_outcome(self, message: GcloudOutcome) -> None:
        await self._apply(message.event)

    # =========================================================================
    # INPUT
    # =========================================================================

    async def action_interrupt(self) -> None:
        await self._apply(KeyPressed("ctrl+c"))

    async def on_key(self, event: events.Key) -> None:
        state = self.model.state
        if event.key == "ctrl+c":
            return
        if state in _LIST_STATES and event.key in _LIST_WIDGET_KEYS:
            return
        if state is AppState.MANUAL_PROJECT and event.key not in _INPUT_PASSTHROUGH_KEYS:
            return
        event.stop()
        await self._apply(KeyPressed(event.key))

    async def on_list_view_selected(self, message: ListView.Selected) -> None:
        message.stop()
        item = message.item
        if isinstance(item, ChoiceItem):
            await self._apply(KeyPressed("enter", item.value))

    async def on_input_submitted(self, message: Input.Submitted) -> None:
        message.stop()
        await self._apply(KeyPressed("enter", message.value))

    # =========================================================================
    # RENDERING
    # =========================================================================

    def _list_items(self) -> tuple:
        data = self.model.data
        if self.model.state is AppState.ACCOUNTS:
            return tuple(
                (a.account, account_label(a, data.active_account, self.switcher_styles))
                for a in data.accounts
            )
        return tuple(
            (p.project_id, project_label(p, data.active_project, self.switcher_styles))
            for p in data.projects
        )

    async def _populate_list(self) -> None:
        data = self.model.data
        if self.model.state is AppState.ACCOUNTS:
            signature = (AppState.ACCOUNTS, data.accounts, data.active_account)
            active = data.active_account
        else:
            signature = (AppState.PROJECTS, data.projects, data.active_project)
            active = data.active_project
        if signature == self._list_signature:
            return
        self._list_signature = signature

        items = self._list_items()
        list_view = self.query_one("#choices", ListView)
        await list_view.clear()
        await list_view.extend(ChoiceItem(value, label) for value, label in items)
        values = [value for value, _ in items]
        if values:
            list_view.index = values.index(active) if active in values else 0

    async def _sync_view(self) -> None:
        state = self.model.state
        entered = state is not self._shown_state
        self._shown_state = state

        self.query_one("#spinner", LoadingIndicator).display = state in (
            AppState.LOADING,
            AppState.PROCESSING,
        )
        self.query_one("#body", Static).update(render(self.model, self.switcher_styles))

        list_view = self.query_one("#choices", ListView)
        project_input = self.query_one("#project-input", Input)
        list_view.display = state in _LIST_STATES
        project_input.display = state is AppState.MANUAL_PROJECT

        if state in _LIST_STATES:
            await self._populate_list()
            if entered:
                list_view.focus()
        else:
            self._list_signature = None

        if state is AppState.MANUAL_PROJECT:
            if entered:
                project_input.value = ""
                project_input.focus()
        elif state not in _LIST_STATES:
            self.set_focus(None)


def run_switcher(config: SwitcherConfig) -> int:
    """Run the switcher until the operator quits.

    Returns:
        The app's exit status; non-zero when the run loop failed.
    """
    app = SwitcherApp(config)
    app.run()
    return app.return_code or 0
