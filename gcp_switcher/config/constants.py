"""
Centralized constants for gcp-switcher.

Timeouts, delays and paths that the dispatcher, reducer and UI share.
"""

from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "gcp-switcher"
CONFIG_FILE_NAME = "config.json"
LOG_FILE_NAME = "gcp-switcher.log"

# =============================================================================
# TIMEOUTS (in seconds)
# =============================================================================

COMMAND_TIMEOUT_SECONDS = 5.0  # read operations and project switch
LONG_COMMAND_TIMEOUT_SECONDS = 30.0  # account switch (two gcloud calls)
LOGIN_TIMEOUT_SECONDS = 30.0  # each step of the interactive login
FALLBACK_TIMER_SECONDS = 10.0  # force the UI out of initial loading

# =============================================================================
# UI
# =============================================================================

MENU_ENTRIES = (
    "View/Switch Accounts",
    "View/Switch Projects",
    "Login to a New Account",
    "Enter Project ID Manually",
)
MENU_SIZE = len(MENU_ENTRIES)

MENU_ACCOUNTS = 0
MENU_PROJECTS = 1
MENU_NEW_LOGIN = 2
MENU_MANUAL_PROJECT = 3

CONFIRM_YES = 0
CONFIRM_NO = 1

NEW_LOGIN_PROMPT = "Would you like to login to a new GCP account?"

# =============================================================================
# ENVIRONMENT VARIABLES
# =============================================================================

ENV_VAR_DEFINITIONS = {
    "GCP_SWITCHER_GCLOUD": {
        "field": "gcloud_binary",
        "description": "Name or path of the gcloud executable",
    },
    "GCP_SWITCHER_LOG_FILE": {
        "field": "log_file",
        "description": "Where debug logs are written",
    },
    "GCP_SWITCHER_DEBUG": {
        "field": "debug",
        "description": "Enable debug logging (1/true/yes)",
        "valid_values": ["0", "1", "true", "false", "yes", "no"],
    },
}
