"""Unit tests for simulated settlement, masking and password hashing."""

import random
import re
from datetime import datetime

import pytest

from cab_booking.domain.enums import PaymentMethod
from cab_booking.domain.security import hash_password, verify_password
from cab_booking.domain.settlement import (
    PaymentSimulator,
    mask_payment_details,
    transaction_id_for,
)


class TestMasking:
    @pytest.mark.parametrize("method", ["CreditCard", "DebitCard"])
    def test_card_keeps_last_four(self, method):
        assert mask_payment_details(method, card_number="4111111111111234") == "Card: 1234"

    def test_short_card_number_kept_whole(self):
        assert mask_payment_details("CreditCard", card_number="12") == "Card: 12"

    def test_missing_card_number(self):
        assert mask_payment_details("DebitCard") == "Card: "

    def test_upi_verbatim(self):
        assert mask_payment_details("UPI", upi_id="rider@okbank") == "UPI: rider@okbank"

    def test_wallet_verbatim(self):
        assert mask_payment_details("Wallet", wallet_type="Paytm") == "Wallet: Paytm"

    def test_cash_literal(self):
        assert mask_payment_details("Cash", card_number="4111") == "Cash Payment"

    def test_unknown_method(self):
        assert mask_payment_details("Bitcoin") == "Unknown"


class TestPaymentSimulator:
    @pytest.mark.asyncio
    async def test_cash_always_settles_without_transaction_id(self):
        sim = PaymentSimulator(success_rate=0.0, delay_seconds=0)
        result = await sim.settle(PaymentMethod.CASH)
        assert result.success is True
        assert result.transaction_id is None

    @pytest.mark.asyncio
    async def test_digital_success_stamps_transaction_id(self):
        sim = PaymentSimulator(success_rate=1.0, delay_seconds=0)
        result = await sim.settle(PaymentMethod.UPI)
        assert result.success is True
        assert re.fullmatch(r"TXN\d{14}", result.transaction_id)

    @pytest.mark.asyncio
    async def test_digital_failure_has_no_transaction_id(self):
        sim = PaymentSimulator(success_rate=0.0, delay_seconds=0)
        result = await sim.settle(PaymentMethod.CREDIT_CARD)
        assert result.success is False
        assert result.transaction_id is None

    def test_success_rate_with_fixed_seed(self):
        sim = PaymentSimulator(rng=random.Random(2024))
        successes = sum(sim.decide() for _ in range(1000))
        assert 850 <= successes <= 950

    def test_transaction_id_format(self):
        assert transaction_id_for(datetime(2026, 3, 4, 5, 6, 7)) == "TXN20260304050607"


class TestPasswordHashing:
    def test_round_trip(self):
        encoded = hash_password("s3cret", iterations=1000)
        assert verify_password("s3cret", encoded)
        assert not verify_password("wrong", encoded)

    def test_salted(self):
        assert hash_password("same", iterations=1000) != hash_password("same", iterations=1000)

    def test_plain_text_is_never_accepted(self):
        assert not verify_password("s3cret", "s3cret")
