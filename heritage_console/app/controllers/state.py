"""
Request state shared by the console controllers.
"""

from dataclasses import dataclass
from typing import Any, Optional

from shared.errors import NormalizedError


@dataclass
class RequestState:
    """What a screen renders for one controller."""
    data: Any = None
    loading: bool = False
    error: Optional[NormalizedError] = None
