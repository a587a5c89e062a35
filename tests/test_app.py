"""Pilot-based tests for the switcher TUI."""

from typing import Any, Callable, Dict, List, Union
from unittest.mock import PropertyMock, patch

import pytest
from textual.widgets import Input, ListView, Static

from gcp_switcher.core.events import (
    AccountsLoaded,
    ActiveAccountLoaded,
    ActiveProjectLoaded,
    Dispatch,
    Event,
    Operation,
    OperationFinished,
    ProjectsLoaded,
    ToolChecked,
)
from gcp_switcher.core.state_machine import AppState
from gcp_switcher.models import Project
from gcp_switcher.ui.app import SwitcherApp, run_switcher
from gcp_switcher.ui.styles import DEFAULT_STYLES, Styles
from sample_data import ACCOUNTS, PROJECTS

Response = Union[Event, Callable[[Dispatch], Event]]


class FakeGcloudService:
    """Answers dispatched operations from canned responses."""

    def __init__(self, **overrides: Response) -> None:
        self.responses: Dict[Operation, Response] = {
            Operation.CHECK_TOOL: ToolChecked(True),
            Operation.GET_ACTIVE_ACCOUNT: ActiveAccountLoaded("user@example.com"),
            Operation.GET_ACTIVE_PROJECT: ActiveProjectLoaded("alpha-123"),
            Operation.LIST_ACCOUNTS: AccountsLoaded(ACCOUNTS),
            Operation.LIST_PROJECTS: ProjectsLoaded(PROJECTS),
            Operation.SWITCH_ACCOUNT: OperationFinished(
                Operation.SWITCH_ACCOUNT, success=True, account_switched=True
            ),
            Operation.SWITCH_PROJECT: OperationFinished(Operation.SWITCH_PROJECT, success=True),
        }
        for name, response in overrides.items():
            self.responses[Operation[name.upper()]] = response
        self.dispatched: List[Dispatch] = []

    async def run(self, command: Dispatch) -> Event:
        self.dispatched.append(command)
        response = self.responses[command.operation]
        return response(command) if callable(response) else response

    def run_login(self) -> OperationFinished:
        return OperationFinished(Operation.LOGIN_NEW_ACCOUNT, success=True)


async def settle(app: SwitcherApp, pilot: Any) -> None:
    """Let dispatched workers finish and their outcomes be processed."""
    for _ in range(3):
        await app.workers.wait_for_complete()
        await pilot.pause()


def make_app(config, **overrides: Response) -> SwitcherApp:
    return SwitcherApp(config, service=FakeGcloudService(**overrides))


class TestBootstrap:
    @pytest.mark.asyncio
    async def test_reaches_main_menu(self, config):
        app = make_app(config)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            assert app.model.state is AppState.MAIN
            assert app.model.data.active_account == "user@example.com"
            assert not app.query_one("#choices", ListView).display
            assert not app.query_one("#project-input", Input).display
            assert len(app.service.dispatched) == 5

    @pytest.mark.asyncio
    async def test_render_styles_leave_css_styles_intact(self, config):
        app = make_app(config)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            assert app.switcher_styles is DEFAULT_STYLES
            assert not isinstance(app.styles, Styles)
            assert app.query_one("#body", Static).display
            assert app.model.state is AppState.MAIN

    @pytest.mark.asyncio
    async def test_missing_tool_shows_error(self, config):
        app = make_app(config, check_tool=ToolChecked(False))
        async with app.run_test() as pilot:
            await settle(app, pilot)
            assert app.model.state is AppState.ERROR

            await pilot.press("enter")
            await pilot.pause()
            assert app.model.state is AppState.MAIN


class TestNavigation:
    @pytest.mark.asyncio
    async def test_switch_account_then_pick_project(self, config):
        new_projects = ProjectsLoaded((Project("gamma789", "Gamma"),))
        app = make_app(config)
        async with app.run_test() as pilot:
            await settle(app, pilot)

            await pilot.press("1")
            await pilot.pause()
            assert app.model.state is AppState.ACCOUNTS
            list_view = app.query_one("#choices", ListView)
            assert list_view.display
            assert list_view.index == 0

            await pilot.press("down", "enter")
            await pilot.pause()
            assert app.model.state is AppState.CONFIRMING
            assert app.model.context.confirm_text == "Switch to account ops@example.com?"

            app.service.responses[Operation.LIST_PROJECTS] = new_projects
            await pilot.press("y")
            await settle(app, pilot)

            assert Dispatch(Operation.SWITCH_ACCOUNT, "ops@example.com") in app.service.dispatched
            assert app.model.state is AppState.PROJECTS
            assert app.model.data.projects == new_projects.projects

    @pytest.mark.asyncio
    async def test_manual_project_entry(self, config):
        app = make_app(config)
        async with app.run_test() as pilot:
            await settle(app, pilot)

            await pilot.press("4")
            await pilot.pause()
            assert app.model.state is AppState.MANUAL_PROJECT

            await pilot.press(*"gamma789")
            await pilot.press("enter")
            await pilot.pause()
            assert app.model.state is AppState.CONFIRMING
            assert app.model.context.selected_id == "gamma789"

            await pilot.press("enter")
            await settle(app, pilot)
            assert app.model.state is AppState.MAIN
            assert Dispatch(Operation.SWITCH_PROJECT, "gamma789") in app.service.dispatched

    @pytest.mark.asyncio
    async def test_escape_leaves_manual_entry(self, config):
        app = make_app(config)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("4", "escape")
            await pilot.pause()
            assert app.model.state is AppState.MAIN


class TestQuit:
    @pytest.mark.asyncio
    async def test_q_from_main(self, config):
        app = make_app(config)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("q")
        assert app.return_code == 0

    @pytest.mark.asyncio
    async def test_ctrl_c_from_main(self, config):
        app = make_app(config)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("ctrl+c")
        assert app.return_code == 0

    def test_run_switcher_returns_app_exit_status(self, config):
        with patch.object(SwitcherApp, "run") as mock_run, patch.object(
            SwitcherApp, "return_code", new_callable=PropertyMock, return_value=1
        ):
            assert run_switcher(config) == 1
        mock_run.assert_called_once_with()
