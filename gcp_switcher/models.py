"""Account and project records parsed from gcloud JSON output."""

import json
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .exceptions import MalformedResponseError


@dataclass(frozen=True)
class Account:
    """A credentialed account as reported by `gcloud auth list`."""

    account: str
    status: str = ""

    @property
    def is_active(self) -> bool:
        return self.status == "ACTIVE"

    @classmethod
    def from_gcloud_json(cls, data: Dict[str, Any]) -> "Account":
        """Create Account from one `gcloud auth list --format=json` entry."""
        if not isinstance(data, dict) or not data.get("account"):
            raise MalformedResponseError("account entry without an 'account' field", entry=data)
        return cls(account=str(data["account"]), status=str(data.get("status") or ""))


@dataclass(frozen=True)
class Project:
    """A project as reported by `gcloud projects list`."""

    project_id: str
    name: str = ""

    @classmethod
    def from_gcloud_json(cls, data: Dict[str, Any]) -> "Project":
        """Create Project from one `gcloud projects list --format=json` entry."""
        if not isinstance(data, dict) or not data.get("projectId"):
            raise MalformedResponseError("project entry without a 'projectId' field", entry=data)
        return cls(project_id=str(data["projectId"]), name=str(data.get("name") or ""))


def _load_list(payload: str, what: str) -> list:
    try:
        data = json.loads(payload) if payload.strip() else []
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"failed to parse {what} JSON: {e}") from e
    if not isinstance(data, list):
        raise MalformedResponseError(f"expected a JSON list of {what}", got=type(data).__name__)
    return data


def parse_accounts(payload: str) -> Tuple[Account, ...]:
    """Parse `gcloud auth list --format=json` output.

    Raises:
        MalformedResponseError: If the payload is not a list of account objects.
    """
    return tuple(Account.from_gcloud_json(entry) for entry in _load_list(payload, "accounts"))


def parse_projects(payload: str) -> Tuple[Project, ...]:
    """Parse `gcloud projects list --format=json` output.

    Raises:
        MalformedResponseError: If the payload is not a list of project objects.
    """
    return tuple(Project.from_gcloud_json(entry) for entry in _load_list(payload, "projects"))
