'''
Outbound WhatsApp text messages through the Graph API.
'''
import json
from dataclasses import dataclass
from typing import Optional

import httpx

from ..common.config import settings
from ..common.exceptions import WhatsAppSendError
from ..common.logger import log
from ..database import models as db_models


@dataclass
class WhatsAppCredentials:
    phone_number_id: str
    token: str


def resolve_credentials(creator: Optional[db_models.Profiles]) -> Optional[WhatsAppCredentials]:
    """
    The session creator's own credentials win when both parts are set,
    otherwise the system-wide ones from the environment.
    """
    if creator is not None and creator.has_whatsapp_credentials:
        return WhatsAppCredentials(creator.whatsapp_phone_number_id, creator.whatsapp_token)
    if settings.WHATSAPP_PHONE_NUMBER_ID and settings.WHATSAPP_TOKEN:
        return WhatsAppCredentials(settings.WHATSAPP_PHONE_NUMBER_ID, settings.WHATSAPP_TOKEN)
    return None


def error_body(response: httpx.Response) -> str:
    """Provider error body as JSON text; non-JSON bodies are wrapped."""
    try:
        return json.dumps(response.json())
    except ValueError:
        return json.dumps({"message": response.text, "status": response.status_code})


class WhatsAppClient:
    # Tests swap this for an httpx.MockTransport.
    transport: Optional[httpx.AsyncBaseTransport] = None

    async def send_text(self, credentials: WhatsAppCredentials, to: str, body: str) -> dict:
        """
        Sends one text message. Raises WhatsAppSendError with the provider's
        error body on any non-2xx answer or transport failure.
        """
        url = f"{settings.WHATSAPP_GRAPH_URL}/{credentials.phone_number_id}/messages"
        payload = {
            "messaging_product": "whatsapp",
            "to": "".join(to.split()),
            "type": "text",
            "text": {"body": body},
        }
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Authorization": f"Bearer {credentials.token}"},
                )
        except httpx.RequestError as e:
            log.error(f"WhatsApp request to {url} failed: {e}", exc_info=True)
            raise WhatsAppSendError(json.dumps({"message": str(e)}))

        if not response.is_success:
            body_text = error_body(response)
            log.warning(f"WhatsApp send rejected ({response.status_code}): {body_text}")
            raise WhatsAppSendError(body_text, status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            return {}
