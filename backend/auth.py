"""
FarmerAid - Optional frontend API key for the generative endpoint.
"""
from typing import Optional

from fastapi import Header, HTTPException, Query

from app_config import settings


def extract_key(
    x_api_key: Optional[str] = None,
    api_key: Optional[str] = None,
    authorization: Optional[str] = None,
) -> Optional[str]:
    """First of: x-api-key header, api_key query parameter, Authorization header."""
    return x_api_key or api_key or authorization


def verify_key(provided: Optional[str], expected: Optional[str]) -> None:
    """No expected key configured lets everything through."""
    if not expected:
        return
    if not provided:
        raise HTTPException(status_code=401, detail="Missing API key")
    if provided != expected:
        raise HTTPException(status_code=403, detail="Invalid API key")


def require_frontend_key(
    x_api_key: Optional[str] = Header(None),
    api_key: Optional[str] = Query(None),
    authorization: Optional[str] = Header(None),
) -> None:
    """FastAPI dependency guarding POST /gemini."""
    verify_key(extract_key(x_api_key, api_key, authorization), settings.FRONTEND_API_KEY)
