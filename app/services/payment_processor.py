# app/services/payment_processor.py
"""
Payment processor boundary.
The gateway is simulated: a charge succeeds with probability PAYMENT_SUCCESS_RATE.
Swap in a real gateway by providing another object with the same charge() method.
"""

import random
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ChargeResult:
    success: bool
    transaction_id: str
    message: str = ""


class SimulatedPaymentProcessor:
    def __init__(self, success_rate: float = settings.PAYMENT_SUCCESS_RATE,
                 rng: Optional[random.Random] = None):
        self.success_rate = success_rate
        self._rng = rng or random.Random()

    def charge(self, booking_id: str, amount: Decimal, method: str) -> ChargeResult:
        transaction_id = f"txn_{int(time.time() * 1000)}_{self._rng.randrange(10**6):06d}"
        success = self._rng.random() < self.success_rate
        logger.info(f"[PAYMENT] Simulated {method} charge {amount} {settings.CURRENCY} "
                    f"for booking {booking_id}: {'ok' if success else 'declined'}")
        return ChargeResult(
            success=success,
            transaction_id=transaction_id,
            message="Payment processed successfully" if success else "Payment failed",
        )


def get_payment_processor() -> SimulatedPaymentProcessor:
    """FastAPI dependency — override in tests to force an outcome."""
    return SimulatedPaymentProcessor()
