"""
Resource services for the Heritage Console.

Endpoint catalogues that name the backend paths of one resource and
route every call through the shared request client.
"""

from .heritage_sites import HeritageSitesService, SiteEndpoints

__all__ = [
    "HeritageSitesService",
    "SiteEndpoints",
]
