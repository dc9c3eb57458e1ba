from feedback_bank.client.api import FeedbackAPIError, FeedbackClient, SiteLock
from feedback_bank.client.poller import SiteLockPoller
from feedback_bank.client.session import EditorSession, ReorderPersister
from feedback_bank.client.tree import FeedbackTree

__all__ = [
    "EditorSession",
    "FeedbackAPIError",
    "FeedbackClient",
    "FeedbackTree",
    "ReorderPersister",
    "SiteLock",
    "SiteLockPoller",
]
