"""Canned gcloud data shared by the tests."""

from gcp_switcher.models import Account, Project

ACCOUNTS = (
    Account("user@example.com", "ACTIVE"),
    Account("ops@example.com", ""),
)
PROJECTS = (
    Project("alpha-123", "Alpha"),
    Project("beta-456", "Beta"),
)

ACCOUNTS_JSON = """[
  {"account": "user@example.com", "status": "ACTIVE"},
  {"account": "ops@example.com", "status": ""}
]"""

PROJECTS_JSON = """[
  {"projectId": "alpha-123", "name": "Alpha", "projectNumber": "111"},
  {"projectId": "beta-456", "name": "Beta", "projectNumber": "222"}
]"""
