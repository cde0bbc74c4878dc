from .qrcode_png_renderer import QrCodePngDataUrlRenderer

__all__ = ["QrCodePngDataUrlRenderer"]
