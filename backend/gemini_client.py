"""
FarmerAid - Generative text proxy client.
Wraps a short prompt into a generateContent body, forwards it with the
server-side key and normalises whatever comes back to the candidates shape the
frontend reads (candidates[0].content.parts[0].text).
"""
import json
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests

from app_config import settings
from app_logging import get_logger
from errors import ConfigurationError, UpstreamError

logger = get_logger("gemini")

SYSTEM_INSTRUCTION = "You are AgriGuide, a concise agricultural expert."
DEFAULT_GENERATION_CONFIG = {"temperature": 0.2, "maxOutputTokens": 1200}
GOOGLE_HOST = "generativelanguage.googleapis.com"
PLACEHOLDER_HOSTS = ("your-gemini-endpoint", "example.com", "example.org", "example.net")
MAX_LISTED_MODELS = 50


def build_request_body(payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Full bodies pass through; {prompt, generationConfig} is wrapped. ValueError otherwise."""
    payload = payload or {}
    if payload.get("systemInstruction") or payload.get("contents"):
        return payload
    prompt = payload.get("prompt")
    if not prompt:
        raise ValueError("Missing prompt or full request body")
    return {
        "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": payload.get("generationConfig") or dict(DEFAULT_GENERATION_CONFIG),
    }


def body_preview(payload: Any, limit: int = 500) -> str:
    try:
        text = json.dumps(payload) if isinstance(payload, (dict, list)) else str(payload)
    except (TypeError, ValueError):
        return "<unserializable>"
    return text[:limit]


def extract_text(obj: Any) -> Optional[str]:
    """Best-effort text from the response shapes of common providers."""
    if not obj:
        return None
    if isinstance(obj, str):
        return obj
    if not isinstance(obj, dict):
        return json.dumps(obj, default=str)[:1000]

    output = obj.get("output")
    if isinstance(output, list) and output and isinstance(output[0], dict) and output[0].get("content"):
        content = output[0]["content"]
        if isinstance(content, list):
            for item in content:
                if isinstance(item, dict) and item.get("text"):
                    return item["text"]
        elif isinstance(content, dict) and content.get("text"):
            return content["text"]

    outputs = obj.get("outputs")
    if isinstance(outputs, list) and outputs and isinstance(outputs[0], dict):
        content = outputs[0].get("content")
        if isinstance(content, list) and content and isinstance(content[0], dict) and content[0].get("text"):
            return content[0]["text"]

    if obj.get("generated_text"):
        return obj["generated_text"]
    if obj.get("text"):
        return obj["text"]
    choices = obj.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict) and choices[0].get("text"):
        return choices[0]["text"]

    return json.dumps(obj, default=str)[:1000]


def normalize_response(upstream: Any) -> Dict[str, Any]:
    if isinstance(upstream, dict):
        candidates = upstream.get("candidates")
        if isinstance(candidates, list) and candidates:
            return upstream
    text = extract_text(upstream) or ""
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def candidate_text(response: Dict[str, Any]) -> str:
    """Text of the first candidate in a normalised response ("" if absent)."""
    try:
        parts = response["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


def is_placeholder_url(api_url: Optional[str]) -> bool:
    """True for an empty URL, one without a host, or one pointing at a template host."""
    host = (urlparse(api_url).hostname or "") if api_url else ""
    if not host:
        return True
    return any(host == p or host.endswith("." + p) for p in PLACEHOLDER_HOSTS)


def _check_configuration(api_key: str, api_url: str):
    if not api_key:
        raise ConfigurationError("Server-side Gemini API key not configured")
    if is_placeholder_url(api_url):
        logger.error("GEMINI_API_URL looks like a placeholder: %s", api_url)
        raise ConfigurationError("Server misconfiguration: GEMINI_API_URL is not set correctly")


def _upstream_message(response: Optional[requests.Response]) -> Optional[str]:
    if response is None:
        return None
    try:
        data = response.json()
    except ValueError:
        return response.text[:400] or None
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            return error.get("message") or json.dumps(error)[:400]
        return error or data.get("message") or json.dumps(data)[:400]
    return json.dumps(data)[:400]


def list_models(api_key: str) -> List[str]:
    """Model names available to the key (first 50)."""
    response = requests.get(
        settings.GEMINI_MODELS_URL,
        params={"key": api_key},
        timeout=settings.UPSTREAM_TIMEOUT,
    )
    response.raise_for_status()
    models = (response.json() or {}).get("models") or []
    return [m.get("name") for m in models if isinstance(m, dict)][:MAX_LISTED_MODELS]


def generate(payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Forward a generation request upstream and normalise the answer.

    Raises ValueError for a bad body, ConfigurationError for a missing key or
    placeholder URL, and UpstreamError (carrying the upstream status) otherwise.
    """
    logger.info("Generation request bodyPreview=%s", body_preview(payload))
    body = build_request_body(payload)

    api_key = settings.GEMINI_API_KEY
    api_url = settings.GEMINI_API_URL
    _check_configuration(api_key, api_url)

    headers = {"Content-Type": "application/json"}
    params = None
    if GOOGLE_HOST in api_url:
        params = {"key": api_key}
    else:
        headers["Authorization"] = f"Bearer {api_key}"

    try:
        response = requests.post(api_url, json=body, headers=headers, params=params, timeout=settings.GEMINI_TIMEOUT)
        response.raise_for_status()
        upstream = response.json()
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        message = _upstream_message(e.response)
        logger.error("Generation upstream error: %s", message, extra={"upstream": "gemini", "status": status})
        if status == 404:
            _raise_model_not_found(api_key, message)
        raise UpstreamError("AI generation failed", status_code=status or 500, details=message or str(e))
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error("Generation request failed: %s", e, extra={"upstream": "gemini"})
        raise UpstreamError("AI generation failed", details=str(e))

    return normalize_response(upstream)


def _raise_model_not_found(api_key: str, message: Optional[str]):
    try:
        names = list_models(api_key)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error("Failed to list models: %s", e)
        raise UpstreamError("AI generation failed", status_code=404, details=message or "Model not found")
    logger.warning("Available models (truncated): %s", names[:20])
    raise UpstreamError(
        "Model not found",
        status_code=404,
        details=message,
        extra={"availableModels": names},
    )
