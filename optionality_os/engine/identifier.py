"""
Display identifier generation.

The only impure step of an assessment: it reads the clock and, when no
contact is given, draws random digits. Both are injected so tests can pin
them.
"""

import datetime
import random
import re
from typing import Callable, Optional

_NON_DIGIT = re.compile(r"[^0-9]")


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class IdentifierGenerator:
    """
    Builds ``<Initial><YYMMDD>-<4 digits>``, e.g. ``J250214-4821``.

    The suffix is the last four characters of the contact with every
    non-digit replaced by ``1``. A contact shorter than four characters is
    left-padded with ``1``. With no contact, four random digits are used.
    """

    FILLER_DIGIT = "1"

    def __init__(self, clock: Optional[Callable[[], datetime.datetime]] = None, rng: Optional[random.Random] = None):
        self.clock = clock or _utc_now
        self.rng = rng or random.Random()

    def generate(self, first_name: Optional[str], contact: Optional[str]) -> str:
        first_name = (first_name or "").strip()
        initial = first_name[0].upper() if first_name else "X"

        now = self.clock()
        if now.tzinfo is not None:
            now = now.astimezone(datetime.timezone.utc)
        date_part = now.strftime("%y%m%d")

        return f"{initial}{date_part}-{self._suffix(contact)}"

    def _suffix(self, contact: Optional[str]) -> str:
        contact = (contact or "").strip()
        if not contact:
            return str(self.rng.randint(1000, 9999))
        tail = _NON_DIGIT.sub(self.FILLER_DIGIT, contact[-4:])
        return tail.rjust(4, self.FILLER_DIGIT)
