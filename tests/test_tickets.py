import random
import re
from datetime import datetime

from bledor.core.tickets import generate_ticket_number

TICKET_RE = re.compile(r"^BLE-(\d{8})-(\d{4})-(\d{4})$")


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def randint(self, low, high):
        assert (low, high) == (1000, 9999)
        return self.value


def test_ticket_format():
    ticket = generate_ticket_number(now=datetime(2025, 11, 18, 7, 42, 59), rng=FixedRandom(4821))
    assert ticket == "BLE-20251118-0742-4821"


def test_ticket_suffix_stays_four_digits():
    rng = random.Random(42)
    now = datetime(2026, 1, 2, 23, 5)
    for _ in range(500):
        match = TICKET_RE.match(generate_ticket_number(now=now, rng=rng))
        assert match
        assert match.group(1) == "20260102"
        assert match.group(2) == "2305"
        assert 1000 <= int(match.group(3)) <= 9999


def test_ticket_bounds_and_prefix():
    now = datetime(2025, 3, 4, 0, 0)
    assert generate_ticket_number(now=now, rng=FixedRandom(1000)).endswith("-0000-1000")
    assert generate_ticket_number(now=now, rng=FixedRandom(9999), prefix="TST") == "TST-20250304-0000-9999"


def test_ticket_defaults_to_current_minute():
    before = datetime.now()
    ticket = generate_ticket_number()
    after = datetime.now()
    assert TICKET_RE.match(ticket)
    assert ticket[4:12] in {f"{before:%Y%m%d}", f"{after:%Y%m%d}"}
