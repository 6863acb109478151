"""
Controllers package.

Per-screen request state holders. A query controller mirrors one GET and
keeps ``data``/``loading``/``error`` for a screen to render; mutation and
upload controllers wrap a single write and re-raise its failures so call
sites can branch on them.
"""

from .state import RequestState
from .query import QueryController
from .mutation import MutationController, UploadController

__all__ = [
    "RequestState",
    "QueryController",
    "MutationController",
    "UploadController",
]
