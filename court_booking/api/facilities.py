"""Sport, facility and court configuration endpoints."""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from court_booking.api.deps import CurrentUser, get_current_user, raise_booking_error, raise_unexpected
from court_booking.core.database import get_db
from court_booking.core.exceptions import BookingError, InvalidBookingRequest
from court_booking.models.facility import Facility
from court_booking.models.sport import Sport
from court_booking.schemas.court_config import CourtConfigUpsert, CourtConfigInDB
from court_booking.schemas.booking import BookingInDB
from court_booking.schemas.facility import FacilityCreate, FacilityInDB, FacilityStatusUpdate, SportCreate, SportInDB
from court_booking.services.booking_service import booking_service
from court_booking.services.court_config_store import court_config_store
from court_booking.services.operating_hours import validate_operating_hours

sports_router = APIRouter(prefix="/sports", tags=["sports"])
router = APIRouter(prefix="/facilities", tags=["facilities"])


@sports_router.post("", response_model=SportInDB, status_code=201)
async def create_sport(
    sport: SportCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Register a sport. Admins only.

    Args:
        sport: Sport data
        user: Caller
        db: Database session

    Returns:
        Created sport
    """
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Only admins can add sports")

    result = await db.execute(
        select(Sport).where(
            (Sport.name == sport.name) | (Sport.sport_type == sport.sport_type)
        )
    )
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=400,
            detail=f"Sport '{sport.name}' ({sport.sport_type}) already exists",
        )

    db_sport = Sport(**sport.model_dump())
    db.add(db_sport)
    await db.commit()
    await db.refresh(db_sport)

    return db_sport


@sports_router.get("", response_model=List[SportInDB])
async def list_sports(db: AsyncSession = Depends(get_db)):
    """List all sports."""
    result = await db.execute(select(Sport).order_by(Sport.name))
    return result.scalars().all()


@router.post("", response_model=FacilityInDB, status_code=201)
async def create_facility(
    facility: FacilityCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a facility owned by the caller.

    Approval is handled by the admin workflow; new facilities start unapproved.

    Args:
        facility: Facility data
        user: Caller, becomes the owner
        db: Database session

    Returns:
        Created facility
    """
    try:
        validate_operating_hours(facility.operating_hours)
    except InvalidBookingRequest as e:
        raise_booking_error(e)

    db_facility = Facility(**facility.model_dump(), owner_id=user.user_id)
    db.add(db_facility)
    await db.commit()
    await db.refresh(db_facility)

    return db_facility


@router.get("", response_model=List[FacilityInDB])
async def list_facilities(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
):
    """
    List facilities.

    Args:
        skip: Number of records to skip
        limit: Maximum number of records to return
        db: Database session

    Returns:
        List of facilities
    """
    result = await db.execute(
        select(Facility).order_by(Facility.created_at).offset(skip).limit(limit)
    )
    return result.scalars().all()


@router.get("/{facility_id}", response_model=FacilityInDB)
async def get_facility(
    facility_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific facility by ID."""
    try:
        return await court_config_store.get_facility(db, facility_id)
    except BookingError as e:
        raise_booking_error(e)


@router.get("/{facility_id}/courts", response_model=List[CourtConfigInDB])
async def list_court_configs(
    facility_id: str,
    db: AsyncSession = Depends(get_db),
):
    """List the sports a facility offers, with court counts and prices."""
    try:
        return await court_config_store.list_court_configs(db, facility_id)
    except BookingError as e:
        raise_booking_error(e)


@router.put("/{facility_id}/courts/{sport_id}", response_model=CourtConfigInDB)
async def upsert_court_config(
    facility_id: str,
    sport_id: str,
    config: CourtConfigUpsert,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Set how many courts a facility has for a sport and their hourly price.

    Only the facility owner or an admin may change this.

    Args:
        facility_id: Facility ID
        sport_id: Sport ID
        config: Court count and price
        user: Caller
        db: Database session

    Returns:
        Stored court configuration
    """
    try:
        facility = await court_config_store.get_facility(db, facility_id)
        if not user.is_admin and facility.owner_id != user.user_id:
            raise HTTPException(status_code=403, detail="Not authorized to manage this facility")

        return await court_config_store.upsert_court_config(
            db, facility_id, sport_id, config.court_count, config.price_per_hour
        )
    except HTTPException:
        raise
    except BookingError as e:
        raise_booking_error(e)
    except Exception as e:
        raise_unexpected("update court configuration", e)


@router.delete("/{facility_id}/courts/{sport_id}", status_code=204)
async def delete_court_config(
    facility_id: str,
    sport_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Stop offering a sport at a facility.

    Refused while bookings for the sport are still active and not yet over.
    Past bookings are kept.
    """
    try:
        facility = await court_config_store.get_facility(db, facility_id)
        if not user.is_admin and facility.owner_id != user.user_id:
            raise HTTPException(status_code=403, detail="Not authorized to manage this facility")

        deleted = await court_config_store.delete_court_config(db, facility_id, sport_id)
    except HTTPException:
        raise
    except BookingError as e:
        raise_booking_error(e)

    if not deleted:
        raise HTTPException(status_code=404, detail="Sport is not offered at this facility")


@router.patch("/{facility_id}/status", response_model=FacilityInDB)
async def update_facility_status(
    facility_id: str,
    status: FacilityStatusUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Open or close a facility, or approve it.

    The owner may toggle is_active; only admins may change is_approved.
    Bookings are only taken at active, approved facilities.
    """
    try:
        facility = await court_config_store.get_facility(db, facility_id)
    except BookingError as e:
        raise_booking_error(e)

    if not user.is_admin and facility.owner_id != user.user_id:
        raise HTTPException(status_code=403, detail="Not authorized to manage this facility")
    if status.is_approved is not None and not user.is_admin:
        raise HTTPException(status_code=403, detail="Only admins can approve facilities")

    return await court_config_store.update_facility_status(
        db, facility_id, is_active=status.is_active, is_approved=status.is_approved
    )


@router.get("/{facility_id}/bookings", response_model=List[BookingInDB])
async def list_facility_bookings(
    facility_id: str,
    status: Optional[List[str]] = Query(default=None, description="Only these statuses"),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List the bookings made on a facility's courts.

    Only the facility owner or an admin may see them.

    Args:
        facility_id: Facility ID
        status: Optional status filter, repeatable
        user: Caller
        db: Database session

    Returns:
        Bookings ordered by start time and court number
    """
    try:
        facility = await court_config_store.get_facility(db, facility_id)
    except BookingError as e:
        raise_booking_error(e)

    if not user.is_admin and facility.owner_id != user.user_id:
        raise HTTPException(status_code=403, detail="Not authorized to view this facility's bookings")

    return await booking_service.list_facility_bookings(db, facility_id, status)
