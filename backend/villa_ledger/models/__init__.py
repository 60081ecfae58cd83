"""SQLAlchemy models for the booking ledger.

All models are imported here so that Alembic and ``Base.metadata.create_all``
can discover them. If you add a new model, import it in this file.
"""

from villa_ledger.models.blocked_date import BlockedDate
from villa_ledger.models.booking import Booking
from villa_ledger.models.user import AdminUser
from villa_ledger.models.villa import Villa

__all__ = [
    "AdminUser",
    "BlockedDate",
    "Booking",
    "Villa",
]
