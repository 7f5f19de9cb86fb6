"""
uri.py: otpauth:// enrollment URI and its QR rendering.
"""

import base64
import io
from urllib.parse import quote

import qrcode

from .otp_core import DEFAULT_DIGITS, DEFAULT_TIME_STEP

DEFAULT_ISSUER = "PointBridge"


def build_enrollment_uri(secret_b32: str, account_label: str, issuer_label: str = DEFAULT_ISSUER) -> str:
    """
    TOTP URI for authenticator apps (Google Authenticator, Authy, 1Password...).

    otpauth://totp/{issuer}:{label}?secret=...&issuer=...&algorithm=SHA1&digits=6&period=30

    Label and issuer are percent-encoded; the secret is Base32 and passes through.
    Empty labels are accepted but callers should avoid them.
    """
    issuer = quote(issuer_label, safe="")
    label = quote(account_label, safe="")
    return (
        f"otpauth://totp/{issuer}:{label}?secret={secret_b32}&issuer={issuer}"
        f"&algorithm=SHA1&digits={DEFAULT_DIGITS}&period={DEFAULT_TIME_STEP}"
    )


def qr_code_data_url(uri: str) -> str:
    """PNG QR code for `uri` as a data: URL, ready for an <img src>."""
    qr = qrcode.QRCode(version=1, box_size=10, border=5)
    qr.add_data(uri)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    img_str = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{img_str}"
