"""Booking endpoints."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from court_booking.api.deps import CurrentUser, get_current_user, raise_booking_error, raise_unexpected
from court_booking.core.database import get_db
from court_booking.core.exceptions import BookingError
from court_booking.schemas.booking import BookingCreate, BookingConfirm, BookingCancel, BookingInDB
from court_booking.services.booking_service import booking_service

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingInDB, status_code=201)
async def create_booking(
    booking: BookingCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Book a court.

    The lowest-numbered free court is assigned and held as pending until the
    payment is confirmed. The caller creates the payment intent afterwards.

    Error codes in the response detail:
    - no_courts_available: every court is taken, pick another time
    - not_offered: the sport cannot be booked at this facility
    - allocation_conflict: a concurrent booking won the court, please retry

    Args:
        booking: Facility, sport and time window
        user: Caller, becomes the booking owner
        db: Database session

    Returns:
        Created booking with its court number
    """
    try:
        return await booking_service.create_booking(
            db,
            user_id=user.user_id,
            facility_id=booking.facility_id,
            sport_id=booking.sport_id,
            start_time=booking.start_time,
            end_time=booking.end_time,
            amount=booking.total_amount,
            notes=booking.notes,
        )
    except BookingError as e:
        raise_booking_error(e)
    except Exception as e:
        raise_unexpected("create booking", e)


@router.get("", response_model=List[BookingInDB])
async def list_my_bookings(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's bookings, newest slot first."""
    return await booking_service.list_user_bookings(db, user.user_id)


@router.get("/{booking_id}", response_model=BookingInDB)
async def get_booking(
    booking_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a booking. Only its owner or an admin may see it."""
    try:
        booking = await booking_service.get_booking(db, booking_id)
    except BookingError as e:
        raise_booking_error(e)

    if not user.is_admin and booking.user_id != user.user_id:
        raise HTTPException(status_code=403, detail="Not authorized to view this booking")

    return booking


@router.post("/{booking_id}/confirm", response_model=BookingInDB)
async def confirm_booking(
    booking_id: str,
    payload: BookingConfirm,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Confirm a pending booking once its payment succeeded.

    Args:
        booking_id: Booking ID
        payload: Payment reference
        user: Caller
        db: Database session

    Returns:
        Confirmed booking
    """
    try:
        booking = await booking_service.get_booking(db, booking_id)
        if not user.is_admin and booking.user_id != user.user_id:
            raise HTTPException(status_code=403, detail="Not authorized to confirm this booking")

        return await booking_service.confirm_booking(
            db, booking_id, payment_intent_id=payload.payment_intent_id
        )
    except HTTPException:
        raise
    except BookingError as e:
        raise_booking_error(e)
    except Exception as e:
        raise_unexpected("confirm booking", e)


@router.put("/{booking_id}/cancel", response_model=BookingInDB)
async def cancel_booking(
    booking_id: str,
    payload: BookingCancel,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a booking and free its court for the window."""
    try:
        return await booking_service.cancel_booking(
            db,
            booking_id,
            user_id=user.user_id,
            is_admin=user.is_admin,
            reason=payload.reason,
        )
    except BookingError as e:
        raise_booking_error(e)
