from __future__ import annotations

from typing import Protocol


class QrCodeRenderer(Protocol):
    """
    QrCodeRenderer — external collaborator turning a provisioning URI into an image data URL.

    Related:
      - src/freecrm/contexts/two_factor/adapters/outbound/qr/qrcode_png_renderer.py
      - src/freecrm/contexts/two_factor/application/use_cases/setup_two_factor.py
    """

    def render_data_url(self, *, uri: str) -> str:
        """
        Render `uri` as a QR code image.

        Args:
            uri: Provisioning URI.
        Returns:
            str: `data:image/png;base64,...` string.
        Assumptions:
            Output format beyond the prefix is opaque to the 2FA subsystem.
        Raises:
            ValueError: If the URI cannot be encoded.
        Side Effects:
            None.
        """
        ...
