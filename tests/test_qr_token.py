# tests/test_qr_token.py
"""Unit tests for booking QR tokens."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from jose import jwt
from app.errors import InvalidQrToken
from app.utils.qr_token import issue_qr_token, render_qr_data_url, verify_qr_token
from conftest import at


class TestQrToken:
    def test_claims_survive_verification(self):
        token = issue_qr_token("booking-1", "space-1", at(9), at(11))
        claims = verify_qr_token(token)
        assert claims == {
            "booking_id": "booking-1",
            "space_id": "space-1",
            "start_time": at(9),
            "end_time": at(11),
        }

    def test_tokens_differ_per_booking(self):
        assert issue_qr_token("b-1", "s-1", at(9), at(11)) != issue_qr_token("b-2", "s-1", at(9), at(11))

    def test_tampered_token_rejected(self):
        token = issue_qr_token("booking-1", "space-1", at(9), at(11))
        forged = jwt.encode({"bid": "booking-1", "sid": "space-1", "start": "x", "end": "y"},
                            "wrong-secret", algorithm="HS256")
        with pytest.raises(InvalidQrToken):
            verify_qr_token(forged)
        with pytest.raises(InvalidQrToken):
            verify_qr_token(token[:-4] + "abcd")

    def test_garbage_rejected(self):
        with pytest.raises(InvalidQrToken):
            verify_qr_token("not-a-token")

    def test_render_png_data_url(self):
        url = render_qr_data_url(issue_qr_token("booking-1", "space-1", at(9), at(11)))
        assert url.startswith("data:image/png;base64,")
        assert len(url) > 100
