# app/utils/qr_token.py
"""
QR tokens for bookings.
The token is a JWT signed with QR_SECRET over (booking id, space id, window),
so gate staff can verify it offline without a database lookup and it cannot
be guessed from booking ids.
"""

import base64
import io
from datetime import datetime

import qrcode
from jose import jwt, JWTError

from app.config import settings
from app.errors import InvalidQrToken


def issue_qr_token(booking_id: str, space_id: str, start: datetime, end: datetime) -> str:
    claims = {
        "bid": booking_id,
        "sid": space_id,
        "start": start.isoformat(),
        "end": end.isoformat(),
    }
    return jwt.encode(claims, settings.QR_SECRET, algorithm=settings.QR_ALGORITHM)


def verify_qr_token(token: str) -> dict:
    """Return the decoded claims, or raise InvalidQrToken if the signature or shape is wrong."""
    try:
        claims = jwt.decode(token, settings.QR_SECRET, algorithms=[settings.QR_ALGORITHM])
    except JWTError as exc:
        raise InvalidQrToken(f"QR token rejected: {exc}") from exc

    missing = {"bid", "sid", "start", "end"} - set(claims)
    if missing:
        raise InvalidQrToken(f"QR token missing claims: {sorted(missing)}")

    return {
        "booking_id": claims["bid"],
        "space_id": claims["sid"],
        "start_time": datetime.fromisoformat(claims["start"]),
        "end_time": datetime.fromisoformat(claims["end"]),
    }


def render_qr_data_url(token: str) -> str:
    """PNG of the token as a data: URL, ready for an <img> tag."""
    img = qrcode.make(token)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("utf-8")
