"""
FarmerAid - Weather-driven crop advisory for Pakistan.
FastAPI backend: geocoding/forecast proxy, generative text proxy, zone/district
resolution, threshold-based crop suitability, rule-based crop care advisory and
custom threshold management.
"""
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

import gemini_client
import weather_service
from advisory import build_advisory_prompt, generate_advisory
from app_config import settings
from app_logging import configure_logging, get_logger
from auth import require_frontend_key
from context import AssessmentContext, build_context
from crop_thresholds import ThresholdRegistry, ThresholdSet, crop_key, custom_key
from districts import AUTO_ZONE, canonical_zone, resolve_zone_selection
from errors import ConfigurationError, InsufficientForecastData, UpstreamError
from middleware import ErrorResponseMiddleware, RequestLoggingMiddleware
from rate_limiter import limit_gemini
from suitability import evaluate_suitability, suitability_alert
from threshold_store import CustomThresholdStore

configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)
logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set. The /gemini proxy will return errors until configured.")
    yield


app = FastAPI(title="FarmerAid API", version="1.0.0", lifespan=lifespan)

app.add_middleware(ErrorResponseMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Dependencies ---

@lru_cache()
def get_threshold_store() -> CustomThresholdStore:
    return CustomThresholdStore(settings.THRESHOLD_STORE_PATH)


def get_registry(store: CustomThresholdStore = Depends(get_threshold_store)) -> ThresholdRegistry:
    return ThresholdRegistry(custom_store=store)


# --- Models ---

class AssessmentRequest(BaseModel):
    crop: str
    place: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    zone: str = AUTO_ZONE
    forecast: Optional[Dict[str, Any]] = None


class AdvisoryRequest(AssessmentRequest):
    include_ai: bool = False


class ThresholdPayload(BaseModel):
    ideal_max: List[float]
    ideal_min: List[float]
    min_soil_temp: float = 0.0
    min_total_rain_5d: float = 0.0


def _upstream_http_error(e: UpstreamError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


def _resolve_coordinates(req: AssessmentRequest) -> Tuple[float, float, Optional[str]]:
    if req.latitude is not None and req.longitude is not None:
        return req.latitude, req.longitude, req.place
    if not req.place:
        raise HTTPException(status_code=400, detail="Provide a place, coordinates or a forecast payload")
    located = weather_service.locate_place(req.place, req.zone)
    if located is None:
        raise HTTPException(status_code=404, detail=f"Location not found: {req.place}")
    return located


def _assessment_context(req: AssessmentRequest) -> AssessmentContext:
    """Forecast (fetched when not supplied) plus resolved zone for one request."""
    if not req.crop or not req.crop.strip():
        raise HTTPException(status_code=400, detail="Missing crop")

    latitude, longitude, name = req.latitude, req.longitude, req.place
    forecast = req.forecast
    try:
        if forecast is None:
            latitude, longitude, display_name = _resolve_coordinates(req)
            name = req.place or display_name
            forecast = weather_service.fetch_forecast(latitude, longitude)
        return build_context(
            crop=req.crop.strip(),
            forecast=forecast,
            location_name=name,
            latitude=latitude,
            longitude=longitude,
            zone_selection=req.zone,
        )
    except UpstreamError as e:
        raise _upstream_http_error(e)
    except InsufficientForecastData as e:
        raise HTTPException(status_code=422, detail=str(e))


# --- Upstream proxies ---

@app.get("/geocode")
def geocode(
    name: Optional[str] = None,
    count: int = 1,
    language: str = "en",
    countrycodes: Optional[str] = None,
):
    """Forward a place search to the geocoder; its JSON comes back unchanged."""
    if not name:
        raise HTTPException(status_code=400, detail="Missing `name` query parameter")
    try:
        return weather_service.geocode(name, count=count, language=language, countrycodes=countrycodes)
    except UpstreamError as e:
        raise _upstream_http_error(e)


@app.get("/weather")
def weather(latitude: Optional[float] = None, longitude: Optional[float] = None):
    """7-day forecast for a coordinate pair."""
    if latitude is None or longitude is None:
        raise HTTPException(status_code=400, detail="Missing latitude or longitude")
    try:
        return weather_service.fetch_forecast(latitude, longitude)
    except UpstreamError as e:
        raise _upstream_http_error(e)


@app.get("/gemini")
def gemini_usage():
    return JSONResponse(
        status_code=405,
        content={
            "error": "Method Not Allowed",
            "message": 'Use POST /gemini with a JSON body (e.g., { "prompt": "..." })',
        },
    )


@app.post("/gemini", dependencies=[Depends(require_frontend_key), Depends(limit_gemini)])
def gemini(payload: Optional[Dict[str, Any]] = Body(None)):
    """Generative text proxy. Accepts {prompt, generationConfig} or a full upstream body."""
    try:
        return gemini_client.generate(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except UpstreamError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


# --- Zones ---

@app.get("/zones/resolve")
def resolve_zone(
    place: Optional[str] = None,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    zone: str = AUTO_ZONE,
):
    """Agro-climatic zone and district for a place name and/or coordinates."""
    if not place and (lat is None or lon is None) and not canonical_zone(zone):
        raise HTTPException(status_code=400, detail="Provide a place, coordinates or a zone")
    location = resolve_zone_selection(zone, place, lat, lon)
    return {"place": place, "latitude": lat, "longitude": lon, **location.to_dict()}


# --- Assessments ---

@app.post("/suitability")
def suitability(req: AssessmentRequest, registry: ThresholdRegistry = Depends(get_registry)):
    context = _assessment_context(req)
    result = evaluate_suitability(context, registry)
    return {
        "crop": context.crop,
        "location": context.location_label,
        **result.to_dict(),
        "alert": suitability_alert(result, context.crop, context.location_label),
    }


@app.post("/advisory")
def advisory(req: AdvisoryRequest, registry: ThresholdRegistry = Depends(get_registry)):
    """Rule-based advisory with the suitability verdict; optionally a generated narrative too."""
    context = _assessment_context(req)
    result = evaluate_suitability(context, registry)
    response = {
        **generate_advisory(context).to_dict(),
        "zone": context.location.zone,
        "district": context.location.district,
        "suitability": result.to_dict(),
        "suitability_alert": suitability_alert(result, context.crop, context.location_label),
        "ai_advisory": None,
    }

    if req.include_ai:
        try:
            generated = gemini_client.generate({"prompt": build_advisory_prompt(context)})
        except ConfigurationError as e:
            raise HTTPException(status_code=500, detail=str(e))
        except UpstreamError as e:
            raise HTTPException(status_code=e.status_code, detail=e.to_detail())
        response["ai_advisory"] = gemini_client.candidate_text(generated)
    return response


# --- Custom thresholds ---

@app.get("/thresholds")
def list_thresholds(store: CustomThresholdStore = Depends(get_threshold_store)):
    return {key: value.to_dict() for key, value in store.load().items()}


@app.get("/thresholds/{zone}/{crop}")
def get_thresholds(
    zone: str,
    crop: str,
    district: Optional[str] = Query(None),
    registry: ThresholdRegistry = Depends(get_registry),
):
    """Effective thresholds for a zone/crop and which tier they came from."""
    zone_name = canonical_zone(zone)
    resolved = registry.resolve(crop, zone_name, district)
    if resolved is None:
        raise HTTPException(status_code=404, detail=f"No thresholds known for {crop}")
    return {
        "zone": zone_name,
        "crop": crop_key(crop),
        "district": district,
        "source": resolved.source,
        "is_custom": resolved.is_custom,
        "thresholds": resolved.thresholds.to_dict(),
    }


@app.put("/thresholds/{zone}/{crop}")
def put_thresholds(
    zone: str,
    crop: str,
    payload: ThresholdPayload,
    store: CustomThresholdStore = Depends(get_threshold_store),
):
    try:
        thresholds = ThresholdSet(
            ideal_max=tuple(payload.ideal_max),
            ideal_min=tuple(payload.ideal_min),
            min_soil_temp=payload.min_soil_temp,
            min_total_rain_5d=payload.min_total_rain_5d,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid thresholds: {e}")

    zone_name = canonical_zone(zone)
    if not store.put(zone_name, crop, thresholds):
        raise HTTPException(status_code=500, detail="Failed to save thresholds")
    return {"key": custom_key(zone_name, crop), "thresholds": thresholds.to_dict()}


@app.delete("/thresholds/{zone}/{crop}")
def reset_thresholds(zone: str, crop: str, store: CustomThresholdStore = Depends(get_threshold_store)):
    zone_name = canonical_zone(zone)
    key = custom_key(zone_name, crop)
    if store.get(zone_name, crop) is None:
        raise HTTPException(status_code=404, detail=f"No custom thresholds for {key}")
    if not store.reset(zone_name, crop):
        raise HTTPException(status_code=500, detail="Failed to reset thresholds")
    return {"key": key, "reset": True}


@app.post("/thresholds/undo")
def undo_threshold_reset(store: CustomThresholdStore = Depends(get_threshold_store)):
    key = store.undo()
    if key is None:
        raise HTTPException(status_code=404, detail="Nothing to undo")
    return {"key": key, "restored": True}


# --- Diagnostics ---

@app.get("/_routes")
def list_routes():
    routes = []
    for route in app.routes:
        methods = getattr(route, "methods", None)
        if methods:
            routes.append({"path": route.path, "methods": sorted(methods)})
    return {"routes": routes}


@app.get("/health")
def health():
    return {
        "status": "active",
        "version": app.version,
        "ai_configured": bool(settings.GEMINI_API_KEY),
        "features": [
            "geocode",
            "weather",
            "gemini_proxy",
            "zone_resolution",
            "suitability",
            "advisory",
            "custom_thresholds",
        ],
    }
