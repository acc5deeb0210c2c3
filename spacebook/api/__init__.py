"""
REST API layer — transport normalizer and endpoint clients.
"""

from spacebook.api.client import SpacebookClient
from spacebook.api.friends import FriendsAPI
from spacebook.api.posts import PostsAPI
from spacebook.api.result import ErrorKind, Outcome, Result
from spacebook.api.transport import SpacebookError, Transport, UnreachableError
from spacebook.api.users import UsersAPI

__all__ = [
    "ErrorKind",
    "FriendsAPI",
    "Outcome",
    "PostsAPI",
    "Result",
    "SpacebookClient",
    "SpacebookError",
    "Transport",
    "UnreachableError",
    "UsersAPI",
]
