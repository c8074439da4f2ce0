# app/services/payment_client.py
from typing import Iterable, List

import requests

from app.domain.errors import PaymentProviderError
from app.domain.order_status import PaymentMethod
from app.domain.schemas import PaymentLinkProduct, PaymentLinkRequest, PaymentLinkResponse
from app.utils.retry import http_retry
from app.utils.settings import PAYMENT_API_URL, PAYMENT_API_KEY, PAYMENT_TIMEOUT_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)

CREATE_TRANSACTION_PATH = "/transaction/create-transaction"
DEFAULT_ERROR_MESSAGE = "Erreur lors de la création de la transaction de paiement"
WAVE_ERROR_HINT = (
    "Erreur lors de la création du paiement Wave. Veuillez :\n"
    "1. Vérifier que votre numéro est au format international (+221... ou +226...)\n"
    "2. Vérifier que votre compte est configuré pour accepter les paiements Wave\n"
    "3. Contacter le support si le problème persiste"
)


def provider_methods(method: PaymentMethod) -> List[str]:
    return ["WAVE"] if PaymentMethod(method) is PaymentMethod.WAVE else ["ORANGE_MONEY"]


def build_line_items(items: Iterable) -> List[PaymentLinkProduct]:
    products = []
    for item in items:
        description = item.name
        if item.color:
            description += f" - Couleur: {item.color}"
        if item.size:
            description += f" - Taille: {item.size}"
        products.append(
            PaymentLinkProduct(
                name=item.name[:100],
                category=item.category or "General",
                amount=round(item.price),
                quantity=item.quantity,
                description=description[:200],
            )
        )
    return products


def extract_error_message(body) -> str:
    """
    Best-effort human message from a provider error body:
    first validation detail (with its location), then message, then error.
    """
    if not isinstance(body, dict):
        return DEFAULT_ERROR_MESSAGE

    detail = body.get("detail")
    if isinstance(detail, list) and detail:
        first = detail[0]
        if isinstance(first, dict) and first.get("msg"):
            message = first["msg"]
            loc = first.get("loc")
            if loc:
                message += f" ({'.'.join(str(part) for part in loc)})"
            return message
    if isinstance(detail, str) and detail:
        return detail
    if body.get("message"):
        return str(body["message"])
    if body.get("error"):
        return str(body["error"])
    return DEFAULT_ERROR_MESSAGE


def _mentions_wave(message: str) -> bool:
    return "wave" in message.lower()


class PaymentLinkClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or PAYMENT_API_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else PAYMENT_API_KEY
        self.timeout = timeout or PAYMENT_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @http_retry()
    def _put(self, path: str, payload: dict):
        url = f"{self.base_url}{path}"
        logger.info(f"PaymentLinkClient PUT {url}")
        return self.session.put(url, json=payload, headers=self._headers(), timeout=self.timeout)

    def create_transaction(self, request: PaymentLinkRequest) -> PaymentLinkResponse:
        wave = "WAVE" in request.method_of_payment
        try:
            resp = self._put(CREATE_TRANSACTION_PATH, request.model_dump())
        except requests.RequestException as e:
            logger.error(f"Payment provider unreachable: {e}")
            raise PaymentProviderError(DEFAULT_ERROR_MESSAGE) from e

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = None
            message = extract_error_message(body)
            logger.error(f"Payment provider rejected transaction ({resp.status_code}): {body}")
            if wave and _mentions_wave(message):
                message = WAVE_ERROR_HINT
            raise PaymentProviderError(message, status_code=resp.status_code)

        try:
            return PaymentLinkResponse.model_validate(resp.json())
        except ValueError as e:
            logger.error(f"Unexpected payment provider response: {e}")
            raise PaymentProviderError(DEFAULT_ERROR_MESSAGE, status_code=resp.status_code) from e
