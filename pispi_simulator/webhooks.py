"""
Webhook Subscription Module

Id-keyed registry of webhook subscriptions with field validation and
signing-secret rotation. Subscriptions are plain records: nothing is ever
delivered to the callback URLs.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
import secrets
import threading
import uuid

from pydantic import AnyUrl, TypeAdapter, ValidationError

from .aliases import is_valid_alias_key
from .errors import CapacityExceeded, Entity, FieldViolation, NotFound, ValidationFailed
from .logging_config import get_logger, log_action


class WebhookEvent(Enum):
    """PI-SPI notification events a subscription can listen to"""
    PAIEMENT_RECU = "PAIEMENT_RECU"
    PAIEMENT_ENVOYE = "PAIEMENT_ENVOYE"
    PAIEMENT_REJETE = "PAIEMENT_REJETE"
    RTP_RECU = "RTP_RECU"
    RTP_REJETE = "RTP_REJETE"
    RTP_REPONSE_REJETE = "RTP_REPONSE_REJETE"
    ANNULATION_DEMANDE = "ANNULATION_DEMANDE"
    ANNULATION_REPONSE_REJETE = "ANNULATION_REPONSE_REJETE"
    ANNULATION_REJETE = "ANNULATION_REJETE"
    RETOUR_ENVOYE = "RETOUR_ENVOYE"
    RETOUR_REJETE = "RETOUR_REJETE"
    RETOUR_RECU = "RETOUR_RECU"


_url_adapter = TypeAdapter(AnyUrl)


def generate_secret() -> str:
    return secrets.token_hex(32)


def is_valid_callback_url(url: Any) -> bool:
    if not isinstance(url, str):
        return False
    try:
        _url_adapter.validate_python(url)
    except ValidationError:
        return False
    return True


def is_valid_event_list(events: Any) -> bool:
    return (
        isinstance(events, list)
        and all(isinstance(e, str) and e in WebhookEvent._value2member_map_ for e in events)
    )


def validate_webhook_payload(payload: Mapping[str, Any]) -> List[FieldViolation]:
    """Collect every violation on callbackUrl and events"""
    errors = []

    callback_url = payload.get("callbackUrl")
    if not callback_url:
        errors.append(FieldViolation("callbackUrl", "Le champ callbackUrl est obligatoire"))
    elif not is_valid_callback_url(callback_url):
        errors.append(FieldViolation("callbackUrl", "L'URL de callback est invalide"))

    events = payload.get("events")
    if events is None:
        errors.append(FieldViolation("events", "Le champ events est obligatoire"))
    elif not is_valid_event_list(events):
        errors.append(FieldViolation("events", "Les événements spécifiés ne sont pas valides"))

    return errors


@dataclass(frozen=True)
class Webhook:
    """Webhook subscription snapshot"""
    id: str
    callback_url: str
    events: List[str]
    alias: Optional[str] = None
    secret: str = field(default_factory=generate_secret)
    date_creation: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    date_modification: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "callbackUrl": self.callback_url,
            "events": list(self.events),
            "alias": self.alias,
            "secret": self.secret,
            "dateCreation": self.date_creation.isoformat(),
            "dateModification": self.date_modification.isoformat() if self.date_modification else None,
        }


class WebhookRegistry:
    """In-memory webhook subscriptions keyed by id"""

    def __init__(self, max_webhooks: int = 10):
        self.max_webhooks = max_webhooks
        self._webhooks: Dict[str, Webhook] = {}
        self._lock = threading.RLock()
        self.logger = get_logger("pispi.webhooks")

    @staticmethod
    def _check_id(webhook_id: Any) -> None:
        # Webhook ids share the UUID v4 shape of alias keys
        if not is_valid_alias_key(webhook_id):
            raise ValidationFailed.single("id", "Format UUID invalide")

    @staticmethod
    def _check_payload(payload: Mapping[str, Any]) -> None:
        errors = validate_webhook_payload(payload)
        if errors:
            raise ValidationFailed(errors)

    def _require(self, webhook_id: str) -> Webhook:
        self._check_id(webhook_id)
        webhook = self._webhooks.get(webhook_id)
        if webhook is None:
            raise NotFound(Entity.WEBHOOK, webhook_id)
        return webhook

    def get(self, webhook_id: str) -> Webhook:
        with self._lock:
            return self._require(webhook_id)

    def create(self, payload: Mapping[str, Any]) -> Webhook:
        self._check_payload(payload)
        with self._lock:
            if len(self._webhooks) >= self.max_webhooks:
                raise CapacityExceeded(
                    Entity.WEBHOOK, "webhooks", self.max_webhooks,
                    "Le nombre maximum de webhooks a été atteint"
                )
            webhook = Webhook(
                id=str(uuid.uuid4()),
                callback_url=payload["callbackUrl"],
                events=list(payload["events"]),
                alias=payload.get("alias") or None,
            )
            self._webhooks[webhook.id] = webhook

        log_action(self.logger, "info", "Webhook created", action="create_webhook",
                   resource=f"webhook:{webhook.id}", extra={"callbackUrl": webhook.callback_url})
        return webhook

    def update(self, webhook_id: str, payload: Mapping[str, Any]) -> Webhook:
        with self._lock:
            current = self._require(webhook_id)
            self._check_payload(payload)
            webhook = replace(
                current,
                callback_url=payload["callbackUrl"],
                events=list(payload["events"]),
                alias=payload.get("alias") or None,
                date_modification=datetime.now(timezone.utc),
            )
            self._webhooks[webhook_id] = webhook

        log_action(self.logger, "info", "Webhook updated", action="update_webhook",
                   resource=f"webhook:{webhook_id}", extra={"callbackUrl": webhook.callback_url})
        return webhook

    def delete(self, webhook_id: str) -> None:
        with self._lock:
            self._require(webhook_id)
            del self._webhooks[webhook_id]

        log_action(self.logger, "info", "Webhook deleted", action="delete_webhook",
                   resource=f"webhook:{webhook_id}")

    def rotate_secret(self, webhook_id: str) -> Webhook:
        with self._lock:
            webhook = replace(
                self._require(webhook_id),
                secret=generate_secret(),
                date_modification=datetime.now(timezone.utc),
            )
            self._webhooks[webhook_id] = webhook

        log_action(self.logger, "info", "Webhook secret rotated", action="rotate_webhook_secret",
                   resource=f"webhook:{webhook_id}")
        return webhook
