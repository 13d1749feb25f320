"""
QR image rendering.

Styled renders use qrcode's StyledPilImage with the business branding
(dot shape, corner shape, foreground color, centered logo). When the styled
render fails for any reason (bad color, unreachable logo, missing drawer) a
plain black-on-white image is produced instead, so an identity code is
always available.
"""

import base64
import io
import logging
from dataclasses import dataclass

import qrcode
import requests
from PIL import Image, ImageColor
from qrcode.image.styledpil import StyledPilImage
from qrcode.image.styles.colormasks import SolidFillColorMask
from qrcode.image.styles.moduledrawers.pil import (
    CircleModuleDrawer,
    RoundedModuleDrawer,
    SquareModuleDrawer,
)

from qroyal.conf import qroyal_settings

logger = logging.getLogger(__name__)

_DOT_DRAWERS = {
    "square": SquareModuleDrawer,
    "dots": CircleModuleDrawer,
    "rounded": RoundedModuleDrawer,
}

_CORNER_DRAWERS = {
    "square": SquareModuleDrawer,
    "rounded": RoundedModuleDrawer,
}


@dataclass(frozen=True)
class QRStyle:
    """Flat style record applied to identity codes."""

    logo_url: str = ""
    foreground_color: str = "#000000"
    corner_shape: str = "square"
    dot_shape: str = "square"

    @classmethod
    def for_business(cls, business) -> "QRStyle":
        return cls(
            logo_url=business.qr_logo_url or "",
            foreground_color=business.qr_color or "#000000",
            corner_shape=business.qr_eye_shape or "square",
            dot_shape=business.qr_dot_style or "square",
        )

    @property
    def is_plain(self) -> bool:
        return self == QRStyle()


def _make_qr(data: str) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=qroyal_settings.QR_BOX_SIZE,
        border=qroyal_settings.QR_BORDER,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr


def _to_png(img) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def _fetch_logo(url: str) -> Image.Image:
    response = requests.get(url, timeout=qroyal_settings.QR_LOGO_TIMEOUT_SECONDS)
    response.raise_for_status()
    logo = Image.open(io.BytesIO(response.content))
    return logo.convert("RGBA")


def render_plain_png(data: str) -> bytes:
    img = _make_qr(data).make_image(fill_color="black", back_color="white")
    return _to_png(img)


def render_styled_png(data: str, style: QRStyle) -> bytes:
    """Styled render. Raises on any failure."""
    front = ImageColor.getrgb(style.foreground_color)[:3]
    options = {
        "image_factory": StyledPilImage,
        "module_drawer": _DOT_DRAWERS[style.dot_shape](),
        "eye_drawer": _CORNER_DRAWERS[style.corner_shape](),
        "color_mask": SolidFillColorMask(back_color=(255, 255, 255), front_color=front),
    }
    if style.logo_url:
        options["embeded_image"] = _fetch_logo(style.logo_url)
    img = _make_qr(data).make_image(**options)
    return _to_png(img)


def render_identity_image(data: str, style: QRStyle | None = None) -> bytes:
    """
    Render a QR PNG for a token or customer URL.

    Deterministic for identical data and style. Falls back to the plain
    render when the styled one fails.
    """
    style = style or QRStyle()
    if style.is_plain:
        return render_plain_png(data)
    try:
        return render_styled_png(data, style)
    except Exception:
        logger.warning("Styled QR render failed; using plain render", exc_info=True)
        return render_plain_png(data)


def to_data_url(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")
