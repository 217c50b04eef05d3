"""
Exa API client used for semantic document search and highlight extraction.
Covers the /search and /contents endpoints only.
"""

import httpx
from typing import List, Dict, Any, Optional
from common.config import Config
from common.http import api_key_headers
from common.logging import logger


def highlight_spec(query: str, num_sentences: int = 2, per_url: int = 1) -> Dict[str, Any]:
    """Build the highlight options Exa expects for query-guided excerpts."""
    return {
        "query": query,
        "numSentences": num_sentences,
        "highlightsPerUrl": per_url,
    }


class ExaAPI:
    # Exa can return short query-guided highlights instead of full text
    supports_highlights = True

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key if api_key is not None else Config.EXA_API_KEY
        self.base_url = (base_url or Config.EXA_BASE_URL).rstrip("/")
        self.timeout = timeout or Config.PROVIDER_TIMEOUT_SECONDS
        self.headers = api_key_headers(self.api_key)
        self._transport = transport

    async def _post(self, path: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if not self.api_key:
            logger.warning("EXA_API_KEY is not set; skipping Exa %s", path)
            return None

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                res = await client.post(f"{self.base_url}{path}", json=payload, headers=self.headers)
                res.raise_for_status()
                return res.json()
            except httpx.HTTPStatusError as e:
                logger.error("Exa request failed %s: status %d",
                             path, e.response.status_code)
                return None
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Exa request error {path}: {str(e)}")
                return None

    async def search(self, query: str, num_results: int = 10,
                     include_domains: Optional[List[str]] = None,
                     exclude_domains: Optional[List[str]] = None,
                     text: bool = True,
                     highlights: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Semantic search; returns `[{id, url, title?, text?, highlights?}]`."""
        contents: Dict[str, Any] = {"text": text}
        if highlights:
            contents["highlights"] = highlights

        payload: Dict[str, Any] = {
            "query": query,
            "numResults": num_results,
            "contents": contents,
        }
        if include_domains:
            payload["includeDomains"] = include_domains
        if exclude_domains:
            payload["excludeDomains"] = exclude_domains

        data = await self._post("/search", payload)
        results = (data or {}).get("results", []) or []
        logger.info("Exa search returned %d results (domains=%s)",
                    len(results), include_domains)
        return results

    async def contents(self, urls: List[str], text: bool = True,
                       highlights: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Fetch text and/or highlights; returns `[{url, text?, highlights?}]`."""
        payload: Dict[str, Any] = {"urls": urls, "text": text}
        if highlights:
            payload["highlights"] = highlights

        data = await self._post("/contents", payload)
        return (data or {}).get("results", []) or []


exa_api = ExaAPI()
