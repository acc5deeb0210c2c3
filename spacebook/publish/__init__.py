"""
Scheduled publishing — background publisher and its host.
"""

from spacebook.publish.background import BackgroundPublisher, FetchResult, PublishReport
from spacebook.publish.host import BackgroundTaskHost, next_delay

__all__ = [
    "BackgroundPublisher",
    "BackgroundTaskHost",
    "FetchResult",
    "PublishReport",
    "next_delay",
]
