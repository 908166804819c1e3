import logging
from pathlib import Path

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from qrcode.exceptions import DataOverflowError

from .errors import ArtifactError

logger = logging.getLogger("shorrt.qr")


class QRCodeWriter:
    """Writes <directory>/<token>.png for each new link."""

    def __init__(self, directory: str | Path, box_size: int = 8, public_base_url: str | None = None):
        self.directory = Path(directory)
        self.box_size = box_size
        self.public_base_url = public_base_url

    def payload(self, token: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{token}"
        return token

    def write(self, token: str) -> str:
        qr = qrcode.QRCode(
            version=None, box_size=self.box_size, border=4,
            error_correction=ERROR_CORRECT_M
        )
        qr.add_data(self.payload(token))
        path = self.directory / f"{token}.png"
        try:
            qr.make(fit=True)
            img = qr.make_image(fill_color="black", back_color="white")
            self.directory.mkdir(parents=True, exist_ok=True)
            with path.open("wb") as fh:
                img.save(fh)
        except (OSError, ValueError, DataOverflowError) as exc:
            logger.error("Error generating QR code for %s: %s", token, exc)
            raise ArtifactError(f"Error generating QR code: {exc}") from exc
        return path.as_posix()
