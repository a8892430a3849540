"""
Cipherslip - QR Code Rendering and Scanning

Public keys and tokens are plain UTF-8 strings, so moving them through a
QR code needs no framing: what is rendered is exactly what a scan returns.
Requires optional dependencies: qrcode and pillow for rendering, pyzbar
for scanning.

Install with: pip install cipherslip[qr]

Author: orpheus497
Version: 1.0.0
"""

import logging
from pathlib import Path

from .constants import QR_BORDER, QR_BOX_SIZE, QR_ERROR_CORRECTION
from .errors import ErrorCode, QRCodeError

logger = logging.getLogger(__name__)

# Optional dependencies; features report themselves unavailable without them
try:
    import qrcode

    QRCODE_AVAILABLE = True
except ImportError:
    QRCODE_AVAILABLE = False
    logger.debug("qrcode not available - QR code rendering disabled")

try:
    from PIL import Image

    PIL_AVAILABLE = True
except ImportError:
    PIL_AVAILABLE = False
    logger.debug("pillow not available - PNG export and scanning disabled")

try:
    from pyzbar import pyzbar

    PYZBAR_AVAILABLE = True
except ImportError:
    PYZBAR_AVAILABLE = False
    logger.debug("pyzbar not available - QR code scanning disabled")


def generate_qr_code(
    data: str,
    error_correction: str = QR_ERROR_CORRECTION,
    box_size: int = QR_BOX_SIZE,
    border: int = QR_BORDER,
) -> "qrcode.QRCode":
    """Generate a QR code from data.

    Args:
        data: Text to encode in the QR code
        error_correction: Error correction level (L, M, Q, H)
        box_size: Size of each box in pixels
        border: Border size in boxes

    Returns:
        QR code object

    Raises:
        QRCodeError: If QR code generation is not available or fails
    """
    if not QRCODE_AVAILABLE:
        raise QRCodeError(
            ErrorCode.E901_QR_UNAVAILABLE,
            "QR code generation not available - install qrcode and pillow",
        )

    # Map error correction levels
    error_levels = {
        "L": qrcode.constants.ERROR_CORRECT_L,  # 7% correction
        "M": qrcode.constants.ERROR_CORRECT_M,  # 15% correction
        "Q": qrcode.constants.ERROR_CORRECT_Q,  # 25% correction
        "H": qrcode.constants.ERROR_CORRECT_H,  # 30% correction
    }

    error_level = error_levels.get(error_correction, qrcode.constants.ERROR_CORRECT_M)

    try:
        qr = qrcode.QRCode(
            version=None,  # Smallest version that fits
            error_correction=error_level,
            box_size=box_size,
            border=border,
        )

        qr.add_data(data.encode("utf-8"))
        qr.make(fit=True)

        logger.debug(f"Generated QR code: {len(data)} characters, version {qr.version}")
        return qr

    except qrcode.exceptions.DataOverflowError as e:
        raise QRCodeError(
            ErrorCode.E902_QR_GENERATION_FAILED,
            "Data too large for a QR code",
            {"length": len(data)},
        ) from e
    except (ValueError, TypeError) as e:
        raise QRCodeError(
            ErrorCode.E902_QR_GENERATION_FAILED, f"QR code generation failed: {e}", {"error": str(e)}
        ) from e


def display_qr_terminal(qr: "qrcode.QRCode") -> str:
    """Render a QR code as block characters for the terminal.

    Args:
        qr: QR code object

    Returns:
        Text representation, light modules as blocks and dark as spaces
    """
    matrix = qr.get_matrix()

    lines = []
    for row in matrix:
        lines.append("".join("  " if cell else "██" for cell in row))

    return "\n".join(lines)


def export_qr_png(
    qr: "qrcode.QRCode", output_path: Path, fill_color: str = "black", back_color: str = "white"
) -> None:
    """Export QR code as PNG image.

    Args:
        qr: QR code object
        output_path: Path to save PNG file
        fill_color: Foreground color
        back_color: Background color

    Raises:
        QRCodeError: If PNG export is not available or fails
    """
    if not PIL_AVAILABLE:
        raise QRCodeError(ErrorCode.E901_QR_UNAVAILABLE, "PNG export not available - install pillow")

    try:
        img = qr.make_image(fill_color=fill_color, back_color=back_color)

        # Ensure output directory exists
        output_path.parent.mkdir(parents=True, exist_ok=True)

        img.save(str(output_path))

        logger.info(f"Exported QR code to: {output_path}")

    except OSError as e:
        raise QRCodeError(
            ErrorCode.E902_QR_GENERATION_FAILED,
            f"PNG export failed: {e}",
            {"error": str(e), "path": str(output_path)},
        ) from e


def is_qr_available() -> bool:
    """Check if QR code rendering is available."""
    return QRCODE_AVAILABLE


def is_scan_available() -> bool:
    """Check if QR code scanning is available."""
    return PYZBAR_AVAILABLE and PIL_AVAILABLE


def scan_qr_code(image_path: Path) -> str:
    """Scan and decode a QR code from an image file.

    Uses pyzbar to decode QR codes from PNG, JPG, and other image formats.
    If the image holds several codes the first one is returned.

    Args:
        image_path: Path to image containing QR code

    Returns:
        Decoded QR code data as string, exactly as it was encoded

    Raises:
        QRCodeError: If scanning is not available, file not found, or decode fails
    """
    if not is_scan_available():
        raise QRCodeError(
            ErrorCode.E901_QR_UNAVAILABLE,
            "QR code scanning not available - install pyzbar and pillow",
        )

    if not image_path.exists():
        raise QRCodeError(
            ErrorCode.E903_QR_SCAN_FAILED,
            f"Image file not found: {image_path}",
            {"path": str(image_path)},
        )

    try:
        with Image.open(image_path) as image:
            logger.debug(f"Loaded image: {image_path} ({image.size[0]}x{image.size[1]})")
            decoded_objects = pyzbar.decode(image)
    except OSError as e:
        raise QRCodeError(
            ErrorCode.E903_QR_SCAN_FAILED,
            f"Failed to read image: {e}",
            {"error": str(e), "path": str(image_path)},
        ) from e

    if not decoded_objects:
        raise QRCodeError(
            ErrorCode.E903_QR_SCAN_FAILED,
            "No QR code found in image",
            {"path": str(image_path)},
        )

    if len(decoded_objects) > 1:
        logger.info(f"Found {len(decoded_objects)} QR codes in image, using first one")

    try:
        qr_data = decoded_objects[0].data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise QRCodeError(
            ErrorCode.E903_QR_SCAN_FAILED,
            f"QR code contains invalid text encoding: {e}",
            {"error": str(e), "path": str(image_path)},
        ) from e

    logger.info(f"Decoded QR code from {image_path.name}: {len(qr_data)} characters")
    return qr_data
