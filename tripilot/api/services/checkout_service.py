# tripilot/api/services/checkout_service.py
"""Simulated checkout: review, pay, wait for the fake gateway, done."""

import logging
import secrets
import string
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from tripilot.api.config import get_checkout_config
from tripilot.api.errors import CheckoutError
from tripilot.api.models import Booking, PendingBooking, round_half_up

logger = logging.getLogger(__name__)

REVIEW = "review"
PROCESSING = "processing"
CONFIRMED = "confirmed"

_CODE_ALPHABET = string.ascii_uppercase + string.digits


def compute_totals(items: Sequence[PendingBooking], tax_rate: Optional[float] = None) -> Dict[str, float]:
    """Subtotal, taxes and grand total for a list of items.

    Taxes are rounded half-up to whole currency units.
    """
    if tax_rate is None:
        tax_rate = get_checkout_config()["tax_rate"]
    subtotal = sum(item.price for item in items)
    taxes = round_half_up(subtotal * tax_rate)
    return {
        "subtotal": subtotal,
        "taxes": taxes,
        "grandTotal": subtotal + taxes,
    }


class CheckoutFlow:
    """One checkout session over the store's staged booking(s).

    Steps only move forward: review -> processing -> confirmed. Cancelling is
    possible in review only; once paid, the simulated payment always lands.
    """

    def __init__(self, store, items: Optional[Sequence[PendingBooking]] = None,
                 delay: Optional[float] = None,
                 timer_factory: Callable[..., Any] = threading.Timer,
                 on_change: Optional[Callable[["CheckoutFlow"], None]] = None):
        """Open checkout.

        Args:
            store: TripStore the bookings are committed into
            items: Items to pay for; defaults to the store's pending booking
            delay: Simulated payment latency in seconds
            timer_factory: ``threading.Timer``-compatible factory
            on_change: Called after every step change
        """
        held = None
        if items is None:
            held = store.hold_pending_booking()
            if held is None:
                raise CheckoutError("Nothing to check out: no pending booking")
            items = [held]
        if not items:
            raise CheckoutError("Nothing to check out")

        config = get_checkout_config()
        self.store = store
        self.items: List[PendingBooking] = list(items)
        # The pending booking this checkout consumes, if it came from the store
        self.held = held
        self.delay = config["delay_seconds"] if delay is None else delay
        self.tax_rate = config["tax_rate"]
        self.timer_factory = timer_factory
        self.on_change = on_change

        self.step = REVIEW
        self.cancelled = False
        self.completed = False
        self.confirmation_code: Optional[str] = None
        self.bookings: List[Booking] = []
        self._timer = None
        self._lock = threading.Lock()

    @property
    def totals(self) -> Dict[str, float]:
        return compute_totals(self.items, self.tax_rate)

    @property
    def is_open(self) -> bool:
        return not (self.cancelled or self.completed)

    def pay(self) -> None:
        """Start the simulated payment."""
        with self._lock:
            self._require(REVIEW, "pay")
            self.step = PROCESSING
            self._timer = self.timer_factory(self.delay, self._payment_settled)
            if hasattr(self._timer, "daemon"):
                self._timer.daemon = True
        logger.info(f"Processing payment of ${self.totals['grandTotal']} for {len(self.items)} item(s)")
        self._notify()
        self._timer.start()

    def cancel(self) -> None:
        """Abandon checkout and discard the staged booking."""
        with self._lock:
            self._require(REVIEW, "cancel")
            self.cancelled = True
        if self.held is not None:
            self.store.cancel_pending_booking(expected=self.held)
        logger.info("Checkout cancelled")
        self._notify()

    def complete(self) -> List[Booking]:
        """Commit the paid items as confirmed bookings.

        Returns:
            The bookings created in the store
        """
        with self._lock:
            self._require(CONFIRMED, "complete")
            self.completed = True
        self.bookings = self.store.commit_bookings(self.items, expected=self.held)
        self._notify()
        return self.bookings

    def _payment_settled(self) -> None:
        with self._lock:
            if self.step != PROCESSING:
                return
            self.step = CONFIRMED
            self.confirmation_code = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(8))
        logger.info(f"Payment confirmed, confirmation #{self.confirmation_code}")
        self._notify()

    def _require(self, step: str, action: str) -> None:
        if not self.is_open:
            raise CheckoutError(f"Cannot {action}: checkout is closed")
        if self.step != step:
            raise CheckoutError(f"Cannot {action} while checkout is in '{self.step}'")

    def _notify(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(self)
        except Exception as exc:
            logger.exception("Checkout change callback failed: %s", exc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "cancelled": self.cancelled,
            "completed": self.completed,
            "items": [item.to_dict() for item in self.items],
            **self.totals,
            "confirmationCode": self.confirmation_code,
            "bookings": [b.to_dict() for b in self.bookings],
        }


__all__ = ["CheckoutFlow", "compute_totals", "REVIEW", "PROCESSING", "CONFIRMED"]
