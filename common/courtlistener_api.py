import httpx
from typing import List, Dict, Any, Optional
from common.config import Config
from common.http import token_headers
from common.logging import logger


class CourtListenerAPI:
    """Case-law full-text search against the CourtListener REST v4 API."""

    def __init__(self, api_token: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or Config.COURTLISTENER_BASE_URL).rstrip("/")
        self.api_token = api_token if api_token is not None else Config.COURTLISTENER_API_TOKEN
        self.timeout = timeout or Config.PROVIDER_TIMEOUT_SECONDS
        self.headers_cl = token_headers(self.api_token)
        self._transport = transport

    def _sanitize_query(self, query: str) -> str:
        query = query.strip()
        return query[:300]

    def absolute_url(self, path: str) -> str:
        if not path or path.startswith("http"):
            return path
        return f"{self.base_url}{path if path.startswith('/') else '/' + path}"

    async def search_opinions(self, query: str, court_id: Optional[str] = None,
                              date_min: Optional[str] = None, only_published: bool = False,
                              page_size: int = 25) -> List[Dict[str, Any]]:
        """Search opinions; any failure yields an empty list."""
        if not self.api_token:
            logger.warning(
                "COURTLISTENER_API_TOKEN is not set; skipping CourtListener search")
            return []

        params = {
            "q": self._sanitize_query(query),
            "type": "o",
            "page_size": str(page_size),
        }
        if court_id:
            params["court"] = court_id
        if date_min:
            params["filed_after"] = date_min
        if only_published:
            params["stat_Precedential"] = "on"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                res = await client.get(f"{self.base_url}/api/rest/v4/search/",
                                       params=params, headers=self.headers_cl)
                res.raise_for_status()
                results = res.json().get("results", []) or []
                logger.info("CourtListener returned %d opinions", len(results))
                return results
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"CourtListener search error: {str(e)}")
                return []


courtlistener_api = CourtListenerAPI()
