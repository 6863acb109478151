"""
Endpoint policy table for the console client.
"""

from dataclasses import dataclass
from typing import Iterable, List

import httpx


@dataclass(frozen=True)
class EndpointRule:
    """Credential and cache policy for paths starting with ``prefix``."""
    prefix: str
    public: bool = True
    cacheable: bool = True

    @property
    def attach_credentials(self) -> bool:
        return not self.public


PRIVATE = EndpointRule(prefix="", public=False, cacheable=False)


class EndpointPolicy:
    """Resolves request paths to their credential/cache policy.

    Matching is a plain string-prefix test on the URL path, so
    ``/api/heritage-sites`` also covers ``/api/heritage-sites/42`` and
    every method sent to it. The longest matching prefix wins; unmatched
    paths are private and uncached.
    """

    def __init__(self, rules: Iterable[EndpointRule] = ()):
        self.rules: List[EndpointRule] = sorted(rules, key=lambda rule: len(rule.prefix), reverse=True)

    @classmethod
    def from_prefixes(cls, prefixes: Iterable[str]) -> "EndpointPolicy":
        """Build a policy marking every prefix public and cacheable."""
        return cls(EndpointRule(prefix=prefix) for prefix in prefixes)

    def resolve(self, url: str) -> EndpointRule:
        path = httpx.URL(url).path
        for rule in self.rules:
            if path.startswith(rule.prefix):
                return rule
        return PRIVATE

    def is_public(self, url: str) -> bool:
        return self.resolve(url).public
