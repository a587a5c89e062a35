"""Services that talk to the outside world."""

from .gcloud_service import GcloudService

__all__ = ["GcloudService"]
