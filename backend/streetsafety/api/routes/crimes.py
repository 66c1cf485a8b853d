import logging
from typing import List, Optional, Union
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from streetsafety.api.deps import get_crime_engine
from streetsafety.core.config import Settings, get_settings
from streetsafety.core.exceptions import GeocodingError, ValidationError
from streetsafety.models.crime_report import CrimeReport
from streetsafety.schemas.crime_report import (
    AlreadyVotedResponse,
    CrimeReportCreate,
    CrimeReportRead,
    NearestCrimeSummary,
    ProximityResponse,
    RadiusAlertRead,
    VoteRequest,
)
from streetsafety.services.crimes.engine import CrimeRecordEngine, VoteDirection
from streetsafety.services.geocoding.nominatim_client import NominatimClient, get_geocoder
from streetsafety.services.proximity.evaluator import (
    ProximityPolicy,
    alert_to_dict,
    find_nearest_record,
    find_radius_alerts,
    summarize_nearest,
)
from streetsafety.services.realtime.websocket_manager import get_websocket_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/crimes", tags=["Crimes"])


def to_crime_read(crime: CrimeReport) -> CrimeReportRead:
    return CrimeReportRead(
        id=crime.id,
        type=crime.type,
        location=crime.location,
        address=crime.address,
        details=crime.details,
        latitude=crime.latitude,
        longitude=crime.longitude,
        severity=crime.severity,
        upvotes=crime.upvotes,
        downvotes=crime.downvotes,
        upvoted_by=crime.upvoted_by,
        downvoted_by=crime.downvoted_by,
        created_at=crime.created_at,
    )


def _geocode_submission(geocoder: NominatimClient, payload: CrimeReportCreate):
    try:
        return geocoder.geocode(payload.address)
    except GeocodingError:
        location = payload.location.strip()
        if not location or location == payload.address.strip():
            raise
        logger.info(f"Address '{payload.address}' not found, trying location '{location}'")
        return geocoder.geocode(location)


@router.get("", response_model=List[CrimeReportRead])
def list_crimes(engine: CrimeRecordEngine = Depends(get_crime_engine)):
    """List all crime reports, most upvoted first"""
    return [to_crime_read(crime) for crime in engine.list_sorted()]


@router.post("", response_model=CrimeReportRead, status_code=status.HTTP_201_CREATED)
def create_crime(
    payload: CrimeReportCreate,
    background_tasks: BackgroundTasks,
    engine: CrimeRecordEngine = Depends(get_crime_engine),
    geocoder: NominatimClient = Depends(get_geocoder),
):
    """
    Submit a new crime report.

    Coordinates are looked up from the address (or location) when the
    client did not resolve them itself.
    """
    # Reject incomplete reports before any geocoder round trip
    for field in ("type", "location", "address"):
        if not getattr(payload, field).strip():
            raise ValidationError(f"'{field}' is required", field=field)

    if payload.latitude is not None and payload.longitude is not None:
        coordinates = (payload.latitude, payload.longitude)
    else:
        coordinates = _geocode_submission(geocoder, payload)

    crime = engine.submit(
        crime_type=payload.type,
        location=payload.location,
        address=payload.address,
        details=payload.details,
        coordinates=coordinates,
    )
    crime_read = to_crime_read(crime)

    background_tasks.add_task(
        get_websocket_manager().broadcast_crime_reported,
        crime_read.model_dump(mode="json", by_alias=True),
    )

    return crime_read


@router.get("/nearby", response_model=ProximityResponse)
def nearby_crimes(
    lat: float = Query(..., ge=-90, le=90, description="User latitude"),
    lng: float = Query(..., ge=-180, le=180, description="User longitude"),
    policy: Optional[ProximityPolicy] = Query(None, description="nearest or radius (default from settings)"),
    radius_m: Optional[float] = Query(None, gt=0, description="Alert radius in meters"),
    engine: CrimeRecordEngine = Depends(get_crime_engine),
    settings: Settings = Depends(get_settings),
):
    """
    Evaluate crime reports around a position.

    The nearest policy returns a single summary, the radius policy one
    alert per report within the radius.
    """
    policy = policy or ProximityPolicy(settings.proximity_policy)
    crimes = engine.list_sorted()

    if policy == ProximityPolicy.NEAREST:
        summary = summarize_nearest(find_nearest_record(lat, lng, crimes))
        return ProximityResponse(policy=policy.value, nearest=NearestCrimeSummary(**summary))

    alerts = find_radius_alerts(lat, lng, crimes, radius_m or settings.proximity_alert_radius_m)
    return ProximityResponse(
        policy=policy.value,
        alerts=[RadiusAlertRead(**alert_to_dict(alert)) for alert in alerts],
    )


@router.get("/{crime_id}", response_model=CrimeReportRead)
def get_crime(crime_id: UUID, engine: CrimeRecordEngine = Depends(get_crime_engine)):
    """Get a specific crime report by ID"""
    return to_crime_read(engine.get(crime_id))


def _vote(engine: CrimeRecordEngine, crime_id: UUID, payload: VoteRequest, direction: VoteDirection):
    outcome = engine.vote(crime_id, payload.user_email, direction)
    crime_read = to_crime_read(outcome.crime)
    if not outcome.changed:
        verb = "upvoted" if direction == VoteDirection.UP else "downvoted"
        return AlreadyVotedResponse(message=f"You have already {verb} this crime", crime=crime_read)
    return crime_read


@router.post("/{crime_id}/upvote", response_model=Union[CrimeReportRead, AlreadyVotedResponse])
def upvote_crime(
    crime_id: UUID,
    payload: VoteRequest,
    engine: CrimeRecordEngine = Depends(get_crime_engine),
):
    """Upvote a crime report on behalf of a user"""
    return _vote(engine, crime_id, payload, VoteDirection.UP)


@router.post("/{crime_id}/downvote", response_model=Union[CrimeReportRead, AlreadyVotedResponse])
def downvote_crime(
    crime_id: UUID,
    payload: VoteRequest,
    engine: CrimeRecordEngine = Depends(get_crime_engine),
):
    """Downvote a crime report on behalf of a user"""
    return _vote(engine, crime_id, payload, VoteDirection.DOWN)
