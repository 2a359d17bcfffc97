from typing import Dict, Any
from io import BytesIO
import hashlib
import json
import base64
import qrcode
from qrcode import constants
from PIL import Image

from src.config import settings
from src.models import Booking

class TicketService:
    """Renders booking tickets as QR codes"""

    def __init__(self, qr_size: int = 300, border: int = 4):
        self.qr_size = qr_size
        self.border = border

    def build_payload(self, booking: Booking) -> Dict[str, Any]:
        screening = booking.screening
        return {
            "v": "1.0",
            "ref": booking.booking_number,
            "screening": {
                "id": booking.screening_id,
                "theatre": screening.theatre_id,
                "screen": screening.screen_number,
                "start": screening.start_time.isoformat()
            },
            "seats": list(booking.booked_seats or []),
            "status": booking.payment_status,
            "check": self.ticket_checksum(booking)
        }

    def ticket_checksum(self, booking: Booking) -> str:
        """Short digest tying the ticket data to this deployment's secret key"""
        hash_input = (
            f"{booking.booking_number}{booking.screening_id}"
            f"{','.join(booking.booked_seats or [])}{settings.SECRET_KEY}"
        )
        return hashlib.sha256(hash_input.encode()).hexdigest()[:16]

    def encode_payload(self, booking: Booking) -> str:
        payload = json.dumps(self.build_payload(booking), separators=(",", ":"))
        return base64.b64encode(payload.encode()).decode()

    def generate_qr_png(self, booking: Booking) -> bytes:
        """PNG image of the ticket QR code"""

        qr = qrcode.QRCode(
            version=1,
            error_correction=constants.ERROR_CORRECT_M,
            box_size=10,
            border=self.border,
        )
        qr.add_data(self.encode_payload(booking))
        qr.make(fit=True)

        qr_image = qr.make_image(fill_color="black", back_color="white").get_image()
        qr_image = qr_image.resize((self.qr_size, self.qr_size), Image.LANCZOS)

        buffer = BytesIO()
        qr_image.save(buffer, format="PNG")
        return buffer.getvalue()
