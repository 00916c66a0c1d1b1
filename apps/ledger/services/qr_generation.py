"""
VietQR payment code generation.

Classes:
    VietQRClient: Submits a normalised payment payload to the VietQR
        ``/v2/generate`` endpoint and returns the QR image and raw code.

Functions:
    render_qr_png: Render a raw VietQR code string to a PNG locally.

Example:
    Generating a code for a debt::

        from apps.ledger.services.payment_instructions import build_payment_instruction
        from apps.ledger.services.qr_generation import VietQRClient

        payload = build_payment_instruction(
            debt_id=debt.id,
            requesting_user_id=request.user.id,
        )
        result = VietQRClient.from_settings().generate(payload)
        # result.qr_data_url -> "data:image/png;base64,..."

    Request body sent to VietQR::

        {"accountNo": "0123456789", "accountName": "NGUYEN VAN A",
         "acqId": "970436", "amount": 1500000,
         "addInfo": "Tran B Tien nha 1932026", "template": "compact"}

Note:
    Any transport error, non-2xx response or VietQR ``code`` other than
    ``"00"`` surfaces as UpstreamServiceError; there is no silent fallback.
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

import qrcode
import requests
from django.conf import settings

from .exceptions import UpstreamServiceError, QRServiceNotConfiguredError

logger = logging.getLogger(__name__)

VIETQR_SUCCESS_CODE = '00'


@dataclass(frozen=True)
class QRCodeResult:
    qr_data_url: Optional[str]
    qr_code: Optional[str]


class VietQRClient:
    """HTTP client for the VietQR generate endpoint."""

    def __init__(self, *, endpoint, client_id, api_key, timeout=10):
        self.endpoint = endpoint
        self.client_id = client_id
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_settings(cls):
        return cls(
            endpoint=settings.VIETQR_GENERATE_URL,
            client_id=settings.VIETQR_CLIENT_ID,
            api_key=settings.VIETQR_API_KEY,
            timeout=settings.VIETQR_TIMEOUT,
        )

    @property
    def is_configured(self):
        return bool(self.client_id and self.api_key)

    def generate(self, payload) -> QRCodeResult:
        """
        Request a QR code for a payment payload.

        Args:
            payload (PaymentPayload): Normalised payment instruction.

        Returns:
            QRCodeResult: Image data URL and raw code string as returned
            by VietQR (either may be None).

        Raises:
            QRServiceNotConfiguredError: If client id or API key is missing.
            UpstreamServiceError: On transport failure, non-2xx status or
                a non-success VietQR response code.
        """
        if not self.is_configured:
            raise QRServiceNotConfiguredError(
                "VietQR is not configured. Set VIETQR_CLIENT_ID and VIETQR_API_KEY."
            )

        try:
            response = requests.post(
                self.endpoint,
                json=payload.as_vietqr_request(),
                headers={
                    'x-client-id': self.client_id,
                    'x-api-key': self.api_key,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("VietQR request failed: %s", e)
            raise UpstreamServiceError("Could not reach the VietQR service.", details=str(e))

        if not response.ok:
            logger.error("VietQR returned HTTP %s", response.status_code)
            raise UpstreamServiceError(
                "Could not generate a QR code with VietQR.",
                details=response.text,
            )

        try:
            result = response.json()
        except ValueError:
            raise UpstreamServiceError(
                "VietQR returned an unreadable response.",
                details=response.text,
            )

        code = result.get('code')
        if code and code != VIETQR_SUCCESS_CODE:
            logger.error("VietQR rejected the payload with code %s", code)
            raise UpstreamServiceError(
                result.get('desc') or "VietQR returned an error.",
                code=code,
            )

        data = result.get('data') or {}
        return QRCodeResult(
            qr_data_url=data.get('qrDataURL'),
            qr_code=data.get('qrCode'),
        )


def render_qr_png(qr_code: str) -> bytes:
    """
    Render a raw VietQR code string as a PNG image.

    The QR code uses error correction level M (15% recovery), which banking
    apps scan reliably at phone-screen sizes.
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(qr_code)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()
