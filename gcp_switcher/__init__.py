"""
gcp-switcher - Terminal UI for gcloud account and project switching
"""

__version__ = "0.3.0"


def get_version_info() -> str:
    """Return the human readable version banner."""
    return f"GCP Switcher {__version__}"
