# bledor/core/tickets.py
import random
from datetime import datetime
from typing import Optional

from bledor.config import settings


def generate_ticket_number(now: Optional[datetime] = None, rng: Optional[random.Random] = None,
                           prefix: Optional[str] = None) -> str:
    """Build a customer-facing ticket like ``BLE-20251118-0742-4821``.

    The 4-digit suffix is drawn uniformly from [1000, 9999], so two orders in
    the same minute can collide; the unique index on ``orders.ticket_number``
    catches that and the caller retries with a fresh draw.
    """
    now = now or datetime.now()
    rng = rng or random
    prefix = prefix or settings.TICKET_PREFIX
    suffix = rng.randint(1000, 9999)
    return f"{prefix}-{now:%Y%m%d}-{now:%H%M}-{suffix}"
