"""Pipeline orchestration and per-client progress channels."""

from setlist_scout.pipeline.orchestrator import SetlistPipeline, client_status, user_message
from setlist_scout.pipeline.progress_channel import ProgressChannelManager

__all__ = [
    "ProgressChannelManager",
    "SetlistPipeline",
    "client_status",
    "user_message",
]
