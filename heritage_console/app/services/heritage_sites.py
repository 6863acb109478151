"""
Heritage sites service for the console.
"""

from typing import Any, Dict, Optional

from ..adapters import RequestClient
from ..adapters.request_client import ProgressCallback, UploadSource
from ..main import get_request_client


class SiteEndpoints:
    """Backend paths for heritage sites."""

    SITES = "/api/heritage-sites"
    STATISTICS = "/api/heritage-sites/statistics"
    STATUS_CHANGES = "/api/heritage-sites/status/changes"
    TRENDS = "/api/heritage-sites/trends"
    SEARCH = "/api/heritage-sites/search"
    FILTER_OPTIONS = "/api/heritage-sites/filter-options"
    FEATURED = "/api/heritage-sites/featured"
    ACTIVE = "/api/heritage-sites/active"
    CONSERVATION = "/api/heritage-sites/conservation"
    PROPOSED = "/api/heritage-sites/proposed"

    @staticmethod
    def site(site_id: Any) -> str:
        return f"{SiteEndpoints.SITES}/{site_id}"

    @staticmethod
    def by_region(region: str) -> str:
        return f"{SiteEndpoints.SITES}/region/{region}"

    @staticmethod
    def by_category(category: str) -> str:
        return f"{SiteEndpoints.SITES}/category/{category}"

    @staticmethod
    def by_name(name: str) -> str:
        return f"{SiteEndpoints.SITES}/name/{name}"


class HeritageSitesService:
    """Heritage site reads and writes through the shared request client."""

    def __init__(self, client: Optional[RequestClient] = None):
        self.client = client or get_request_client()

    async def get_all_sites(self,
                            page: int = 0,
                            size: int = 20,
                            sort: str = "nameEn,asc",
                            status: Optional[str] = None,
                            category: Optional[str] = None,
                            region: Optional[str] = None,
                            featured: Optional[bool] = None,
                            language: Optional[str] = None,
                            search: Optional[str] = None,
                            **extra: Any) -> Any:
        """Paginated site listing; empty filters are left out of the query."""
        params: Dict[str, Any] = {"page": page, "size": size, "sort": sort}
        filters = {
            "status": status,
            "category": category,
            "region": region,
            "language": language,
            "search": search,
        }
        params.update({name: value for name, value in filters.items() if value})
        if featured is not None:
            params["featured"] = featured
        params.update(extra)
        return await self.client.get(SiteEndpoints.SITES, params)

    async def get_site(self, site_id: Any, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.site(site_id), params)

    async def get_statistics(self, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.STATISTICS, params)

    async def get_status_changes(self, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.STATUS_CHANGES, params)

    async def get_trends(self, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.TRENDS, params)

    async def search_sites(self, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.SEARCH, params)

    async def get_filter_options(self) -> Any:
        return await self.client.get(SiteEndpoints.FILTER_OPTIONS)

    async def get_sites_by_region(self, region: str, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.by_region(region), params)

    async def get_sites_by_category(self, category: str, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.by_category(category), params)

    async def get_sites_by_name(self, name: str, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.by_name(name), params)

    async def get_featured_sites(self, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.FEATURED, params)

    async def get_active_sites(self, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.ACTIVE, params)

    async def get_conservation_sites(self, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.CONSERVATION, params)

    async def get_proposed_sites(self, **params: Any) -> Any:
        return await self.client.get(SiteEndpoints.PROPOSED, params)

    async def create_site(self, site: Dict[str, Any]) -> Any:
        return await self.client.post(SiteEndpoints.SITES, site)

    async def update_site(self, site_id: Any, site: Dict[str, Any]) -> Any:
        return await self.client.put(SiteEndpoints.site(site_id), site)

    async def update_site_status(self, site_id: Any, status: Dict[str, Any]) -> Any:
        return await self.client.patch(f"{SiteEndpoints.site(site_id)}/status", status)

    async def delete_site(self, site_id: Any) -> Any:
        return await self.client.delete(SiteEndpoints.site(site_id))

    async def upload_site_image(self,
                                site_id: Any,
                                image: UploadSource,
                                on_progress: Optional[ProgressCallback] = None) -> Any:
        return await self.client.upload(f"{SiteEndpoints.site(site_id)}/images", image, on_progress)