"""Common HTTP helpers shared by the service boundary and provider clients."""
from typing import Dict, Any, Optional


def error_response(code: str, message: str) -> Dict[str, Any]:
    """Generate a standardized error response as JSON."""
    return {"error": {"code": code, "message": message}}


def api_key_headers(api_key: Optional[str]) -> Dict[str, str]:
    """Headers for providers authenticating with an x-api-key header."""
    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["x-api-key"] = api_key
    return headers


def token_headers(token: Optional[str]) -> Dict[str, str]:
    """Headers for providers authenticating with a DRF-style token."""
    return {"Authorization": f"Token {token}"} if token else {}
