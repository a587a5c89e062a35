"""Shared pytest fixtures for gcp-switcher tests."""

from pathlib import Path

import pytest

from gcp_switcher.config.settings import SwitcherConfig
from gcp_switcher.core.events import (
    AccountsLoaded,
    ActiveAccountLoaded,
    ActiveProjectLoaded,
    ProjectsLoaded,
    ToolChecked,
)
from gcp_switcher.core.model import AppModel
from gcp_switcher.core.reducer import update
from sample_data import ACCOUNTS, PROJECTS


@pytest.fixture
def config(tmp_path: Path) -> SwitcherConfig:
    """Config that never touches the real home directory."""
    return SwitcherConfig(
        gcloud_binary="gcloud",
        fallback_seconds=60.0,
        log_file=tmp_path / "logs" / "gcp-switcher.log",
    )


@pytest.fixture
def model() -> AppModel:
    """A fresh model in Loading with the bootstrap batch pending."""
    return AppModel()


@pytest.fixture
def loaded_model() -> AppModel:
    """A model whose bootstrap completed with accounts and projects loaded."""
    model = AppModel()
    for event in (
        ToolChecked(True),
        ActiveAccountLoaded("user@example.com"),
        ActiveProjectLoaded("alpha-123"),
        AccountsLoaded(ACCOUNTS),
        ProjectsLoaded(PROJECTS),
    ):
        update(model, event)
    return model
