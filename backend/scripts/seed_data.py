"""Seed the database with Ubud villas, an admin account and sample bookings.

Bookings are created through the ledger so their blocked nights, prices and
reference codes are exactly what the API would produce.

Run from the backend directory:
    python -m scripts.seed_data
"""

import asyncio
import logging
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete

from villa_ledger.auth.passwords import hash_password
from villa_ledger.clock import SystemClock
from villa_ledger.config import settings
from villa_ledger.database import Base, engine, session_scope
from villa_ledger.models.blocked_date import BlockedDate
from villa_ledger.models.booking import Booking
from villa_ledger.models.user import AdminUser
from villa_ledger.models.villa import Villa
from villa_ledger.services.availability import AvailabilityIndex
from villa_ledger.services.ledger import BookingDraft, BookingLedger
from villa_ledger.services.repository import LedgerRepository

logger = logging.getLogger("seed_data")

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

ADMIN_USER = {
    "email": "admin@stayinubud.com",
    "password": "admin1234",
    "name": "StayinUBUD Team",
    "role": "admin",
}

VILLAS = [
    {
        "name": "Villa Sawah Ubud",
        "location": "Ubud, Bali",
        "description": "Two-bedroom pool villa facing the rice terraces of Penestanan.",
        "price_per_night": Decimal("1850000.00"),
        "capacity": 4,
        "minimum_stay": 2,
        "cleaning_fee": Decimal("150000.00"),
        "service_fee": Decimal("100000.00"),
    },
    {
        "name": "Villa Ayung Riverside",
        "location": "Sayan, Ubud, Bali",
        "description": "Three-bedroom villa above the Ayung river gorge with an infinity pool.",
        "price_per_night": Decimal("3200000.00"),
        "capacity": 6,
        "minimum_stay": 3,
        "cleaning_fee": Decimal("250000.00"),
        "service_fee": Decimal("200000.00"),
    },
    {
        "name": "Villa Kecil Tegallalang",
        "location": "Tegallalang, Bali",
        "description": "A one-bedroom hideaway for couples, ten minutes from the rice terraces.",
        "price_per_night": Decimal("950000.00"),
        "capacity": 2,
        "minimum_stay": 1,
        "cleaning_fee": Decimal("100000.00"),
        "service_fee": Decimal("50000.00"),
    },
]

# (villa name, days from today to check-in, nights, guests, status, guest name, guest email)
BOOKINGS = [
    ("Villa Sawah Ubud", 3, 4, 2, "confirmed", "Emma Thompson", "emma.thompson@example.com"),
    ("Villa Sawah Ubud", 7, 3, 3, "pending", "Yuki Tanaka", "yuki.tanaka@example.com"),
    ("Villa Ayung Riverside", 5, 5, 6, "confirmed", "Liam O'Brien", "liam.obrien@example.com"),
    ("Villa Ayung Riverside", 14, 3, 4, "pending", "Marie Dubois", "marie.dubois@example.com"),
    ("Villa Kecil Tegallalang", 1, 2, 2, "confirmed", "Ananya Sharma", "ananya.sharma@example.com"),
]

# (villa name, days from today, nights, reason)
MANUAL_BLOCKS = [
    ("Villa Kecil Tegallalang", 20, 3, "Pool resurfacing"),
]


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    clock = SystemClock(settings.property_timezone)
    today = clock.today()

    async with session_scope() as session:
        for model in (BlockedDate, Booking, Villa, AdminUser):
            await session.execute(delete(model))

        admin = dict(ADMIN_USER)
        session.add(AdminUser(hashed_password=hash_password(admin.pop("password")), **admin))

        villas = {fields["name"]: Villa(**fields) for fields in VILLAS}
        session.add_all(villas.values())
        await session.commit()

        repository = LedgerRepository(session)
        ledger = BookingLedger(
            repository,
            AvailabilityIndex(repository, clock),
            clock,
            reference_prefix=settings.reference_prefix,
            reference_length=settings.reference_length,
        )

        for villa_name, offset, nights, guests, status, guest_name, guest_email in BOOKINGS:
            check_in = today + timedelta(days=offset)
            booking = await ledger.create(
                BookingDraft(
                    villa_id=villas[villa_name].id,
                    check_in=check_in,
                    check_out=check_in + timedelta(days=nights),
                    guests=guests,
                    status=status,
                    guest_name=guest_name,
                    guest_email=guest_email,
                )
            )
            logger.info("Seeded booking %s at %s", booking.reference_code, villa_name)

        for villa_name, offset, nights, reason in MANUAL_BLOCKS:
            start = today + timedelta(days=offset)
            dates: list[date] = [start + timedelta(days=i) for i in range(nights)]
            await ledger.block_dates(villas[villa_name].id, dates, reason)

    await engine.dispose()
    logger.info("Seed complete: %d villas, %d bookings", len(VILLAS), len(BOOKINGS))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(seed())
