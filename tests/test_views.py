"""Tests for state rendering."""

from gcp_switcher.core.events import (
    CommandFailed,
    FallbackTimerFired,
    KeyPressed,
    Operation,
    ToolChecked,
)
from gcp_switcher.core.reducer import update
from gcp_switcher.exceptions import CommandTimeoutError
from gcp_switcher.models import Account, Project
from gcp_switcher.ui.styles import DEFAULT_STYLES
from gcp_switcher.ui.views import RETRY_HINT, account_label, project_label, render


def test_initial_loading_shows_progress(model):
    update(model, ToolChecked(True))
    text = render(model, DEFAULT_STYLES).plain
    assert "Loading GCP configuration..." in text
    assert "Commands completed: 1/5" in text


def test_main_shows_active_identifiers_and_menu(loaded_model):
    text = render(loaded_model, DEFAULT_STYLES).plain
    assert "Active Account: user@example.com" in text
    assert "Active Project: alpha-123" in text
    assert "1.  View/Switch Accounts " in text
    assert "4.  Enter Project ID Manually " in text


def test_main_focuses_menu_cursor(loaded_model):
    update(loaded_model, KeyPressed("down"))
    text = render(loaded_model, DEFAULT_STYLES)
    focused = [
        text.plain[span.start:span.end]
        for span in text.spans
        if span.style == DEFAULT_STYLES.focused_button
    ]
    assert focused == [" View/Switch Projects "]


def test_main_lists_bootstrap_errors(model):
    update(model, CommandFailed(Operation.LIST_PROJECTS, CommandTimeoutError("command timed out")))
    update(model, FallbackTimerFired(10.0))
    text = render(model, DEFAULT_STYLES).plain
    assert "Some data could not be loaded:" in text
    assert "list_projects: command timed out" in text


def test_confirming_prompt(loaded_model):
    update(loaded_model, KeyPressed("2"))
    update(loaded_model, KeyPressed("enter", "beta-456"))
    text = render(loaded_model, DEFAULT_STYLES).plain
    assert "Switch to project beta-456?" in text
    assert " Yes " in text and " No " in text


def test_error_shows_message(model):
    update(model, ToolChecked(False))
    text = render(model, DEFAULT_STYLES).plain
    assert "Google Cloud SDK (gcloud) is not installed" in text
    assert "Press Enter to go back, q to quit" in text


def test_account_label_marks_active():
    assert account_label(Account("user@example.com"), "user@example.com", DEFAULT_STYLES).plain == (
        "user@example.com (ACTIVE)"
    )
    assert account_label(Account("ops@example.com"), "user@example.com", DEFAULT_STYLES).plain == (
        "ops@example.com"
    )


def test_account_label_falls_back_to_status():
    label = account_label(Account("user@example.com", "ACTIVE"), "", DEFAULT_STYLES)
    assert label.plain.endswith("(ACTIVE)")


def test_project_label_shows_name():
    label = project_label(Project("beta-456", "Beta"), "alpha-123", DEFAULT_STYLES)
    assert label.plain == "beta-456\n  Beta"


def test_main_reports_loading_timeout(model):
    update(model, ToolChecked(True))
    update(model, FallbackTimerFired(10.0))
    text = render(model, DEFAULT_STYLES).plain
    assert "Loading timed out with 1/5 commands completed" in text


def test_main_omits_timeout_when_bootstrap_completed(loaded_model):
    assert "Loading timed out" not in render(loaded_model, DEFAULT_STYLES).plain


def test_error_suggests_retry_for_transient_failures(model):
    update(model, ToolChecked(False))
    assert RETRY_HINT not in render(model, DEFAULT_STYLES).plain

    model.error = CommandTimeoutError("command timed out: gcloud config set project beta-456")
    text = render(model, DEFAULT_STYLES).plain
    assert "command timed out: gcloud config set project beta-456" in text
    assert RETRY_HINT in text
