"""
Simulated payment settlement.

There is no real gateway: cash settles immediately, every digital method
waits a fixed delay and then succeeds with probability ``success_rate``
(0.9 by default).  The wait is shielded so a cancelled request cannot
abort a settlement mid-flight.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import CARD_METHODS, PaymentMethod


@dataclass(frozen=True)
class SettlementResult:
    success: bool
    transaction_id: Optional[str] = None


def transaction_id_for(moment: datetime) -> str:
    return f"TXN{moment:%Y%m%d%H%M%S}"


class PaymentSimulator:
    def __init__(
        self,
        success_rate: float = 0.9,
        delay_seconds: float = 1.0,
        rng: Optional[random.Random] = None,
    ):
        self.success_rate = success_rate
        self.delay_seconds = delay_seconds
        self.rng = rng or random.Random()

    def decide(self) -> bool:
        """One Bernoulli draw; no delay."""
        return self.rng.random() < self.success_rate

    async def settle(self, method: PaymentMethod) -> SettlementResult:
        if method == PaymentMethod.CASH:
            return SettlementResult(success=True)
        return await asyncio.shield(self._settle_digital())

    async def _settle_digital(self) -> SettlementResult:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        if self.decide():
            return SettlementResult(True, transaction_id_for(datetime.now()))
        return SettlementResult(False)


def mask_payment_details(
    method: str,
    card_number: Optional[str] = None,
    upi_id: Optional[str] = None,
    wallet_type: Optional[str] = None,
) -> str:
    """Summary stored on the payment; card numbers keep their last 4 chars."""
    try:
        method = PaymentMethod(method)
    except ValueError:
        return "Unknown"

    if method in CARD_METHODS:
        return f"Card: {(card_number or '')[-4:]}"
    if method == PaymentMethod.UPI:
        return f"UPI: {upi_id or ''}"
    if method == PaymentMethod.WALLET:
        return f"Wallet: {wallet_type or ''}"
    return "Cash Payment"
