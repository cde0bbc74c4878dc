from __future__ import annotations

import base64
import io

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from freecrm.contexts.two_factor.application.ports.qr_code_renderer import QrCodeRenderer

_DATA_URL_PREFIX = "data:image/png;base64,"


class QrCodePngDataUrlRenderer(QrCodeRenderer):
    """
    QrCodePngDataUrlRenderer — renders provisioning URIs as base64 PNG data URLs via `qrcode`.

    Related:
      - src/freecrm/contexts/two_factor/application/ports/qr_code_renderer.py
      - src/freecrm/contexts/two_factor/application/use_cases/setup_two_factor.py
    """

    def __init__(self, *, box_size: int = 10, border: int = 2) -> None:
        """
        Configure QR module size and quiet zone.

        Args:
            box_size: Pixels per QR module.
            border: Quiet-zone width in modules.
        Returns:
            None.
        Assumptions:
            Defaults give an image authenticator apps scan reliably from a screen.
        Raises:
            ValueError: If box size is not positive or border is negative.
        Side Effects:
            None.
        """
        if box_size <= 0:
            raise ValueError("QrCodePngDataUrlRenderer box_size must be > 0")
        if border < 0:
            raise ValueError("QrCodePngDataUrlRenderer border must be >= 0")
        self._box_size = box_size
        self._border = border

    def render_data_url(self, *, uri: str) -> str:
        """
        Encode `uri` into a PNG QR code and wrap it as a data URL.

        Args:
            uri: Provisioning URI.
        Returns:
            str: `data:image/png;base64,...`.
        Assumptions:
            Medium error correction; version is chosen to fit the payload.
        Raises:
            ValueError: If `uri` is empty.
        Side Effects:
            None.
        """
        if not uri:
            raise ValueError("QrCodePngDataUrlRenderer requires non-empty uri")

        code = qrcode.QRCode(
            error_correction=ERROR_CORRECT_M,
            box_size=self._box_size,
            border=self._border,
        )
        code.add_data(uri)
        code.make(fit=True)
        image = code.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"{_DATA_URL_PREFIX}{encoded}"
