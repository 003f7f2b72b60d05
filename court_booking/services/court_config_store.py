"""Court configuration store.

Per facility and sport, how many physical courts exist and what an hour
costs. The allocator only reads from here; facility owners write through
the management endpoints.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from court_booking.core.exceptions import CourtConfigInUse, FacilityNotFound, SportNotFound
from court_booking.models.court_config import CourtConfiguration
from court_booking.models.facility import Facility
from court_booking.models.sport import Sport
from court_booking.services.booking_ledger import booking_ledger
from court_booking.services.operating_hours import facility_now

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class CourtConfigStore:
    """Reads and writes court configurations."""

    async def get_facility(self, db: AsyncSession, facility_id: str) -> Facility:
        """
        Load a facility.

        Raises:
            FacilityNotFound: If no facility has this ID
        """
        result = await db.execute(select(Facility).where(Facility.id == facility_id))
        facility = result.scalar_one_or_none()

        if not facility:
            raise FacilityNotFound(f"Facility {facility_id} not found")

        return facility

    async def get_sport(self, db: AsyncSession, sport_id: str) -> Sport:
        result = await db.execute(select(Sport).where(Sport.id == sport_id))
        sport = result.scalar_one_or_none()

        if not sport:
            raise SportNotFound(f"Sport {sport_id} not found")

        return sport

    async def get_court_config(
        self, db: AsyncSession, facility_id: str, sport_id: str
    ) -> Optional[CourtConfiguration]:
        """
        Get the court configuration for a sport at a facility.

        Args:
            db: Database session
            facility_id: Facility ID
            sport_id: Sport ID

        Returns:
            The configuration, or None when the sport is not offered there
        """
        result = await db.execute(
            select(CourtConfiguration).where(
                and_(
                    CourtConfiguration.facility_id == facility_id,
                    CourtConfiguration.sport_id == sport_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def list_court_configs(
        self, db: AsyncSession, facility_id: str
    ) -> List[CourtConfiguration]:
        """List every sport configuration of a facility."""
        await self.get_facility(db, facility_id)

        result = await db.execute(
            select(CourtConfiguration)
            .where(CourtConfiguration.facility_id == facility_id)
            .order_by(CourtConfiguration.created_at)
        )
        return list(result.scalars().all())

    async def upsert_court_config(
        self,
        db: AsyncSession,
        facility_id: str,
        sport_id: str,
        court_count: int,
        price_per_hour: Decimal,
    ) -> CourtConfiguration:
        """
        Create the configuration for a facility and sport, or update it.

        Lowering the court count leaves existing bookings on higher-numbered
        courts untouched; new allocations only use courts 1..court_count.

        Args:
            db: Database session
            facility_id: Facility ID
            sport_id: Sport ID
            court_count: Number of physical courts (at least 1)
            price_per_hour: Hourly price

        Returns:
            The stored configuration
        """
        if court_count < 1:
            raise ValueError("court_count must be at least 1")

        await self.get_facility(db, facility_id)
        await self.get_sport(db, sport_id)

        price = Decimal(str(price_per_hour)).quantize(CENTS)
        config = await self.get_court_config(db, facility_id, sport_id)

        if config:
            config.court_count = court_count
            config.price_per_hour = price
            logger.info(
                f"Updated court config for facility {facility_id} sport {sport_id}: "
                f"{court_count} court(s) at {price}/h"
            )
        else:
            config = CourtConfiguration(
                facility_id=facility_id,
                sport_id=sport_id,
                court_count=court_count,
                price_per_hour=price,
            )
            db.add(config)
            logger.info(
                f"Created court config for facility {facility_id} sport {sport_id}: "
                f"{court_count} court(s) at {price}/h"
            )

        await db.commit()
        await db.refresh(config)

        return config

    async def delete_court_config(
        self, db: AsyncSession, facility_id: str, sport_id: str
    ) -> bool:
        """
        Remove a sport from a facility.

        Returns:
            False if the sport was not offered there

        Raises:
            CourtConfigInUse: Active bookings for the sport have not ended yet
        """
        config = await self.get_court_config(db, facility_id, sport_id)

        if not config:
            return False

        facility = await self.get_facility(db, facility_id)
        upcoming = await booking_ledger.count_upcoming_bookings(
            db, facility_id, sport_id, after=facility_now(facility.timezone)
        )
        if upcoming:
            raise CourtConfigInUse(
                f"{upcoming} active booking(s) for this sport have not ended yet; "
                "cancel them before removing the sport"
            )

        await db.delete(config)
        await db.commit()
        logger.info(f"Deleted court config for facility {facility_id} sport {sport_id}")

        return True

    async def update_facility_status(
        self,
        db: AsyncSession,
        facility_id: str,
        is_active: Optional[bool] = None,
        is_approved: Optional[bool] = None,
    ) -> Facility:
        """Open, close, approve or unapprove a facility for booking."""
        facility = await self.get_facility(db, facility_id)

        if is_active is not None:
            facility.is_active = is_active
        if is_approved is not None:
            facility.is_approved = is_approved

        await db.commit()
        await db.refresh(facility)
        logger.info(
            f"Facility {facility_id} status: active={facility.is_active} approved={facility.is_approved}"
        )

        return facility


# Singleton instance
court_config_store = CourtConfigStore()
