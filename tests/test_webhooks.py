"""
Test suite for webhook subscriptions

Tests payload validation, CRUD operations, capacity and secret rotation.
"""

import uuid
import pytest

from pispi_simulator.errors import CapacityExceeded, Entity, NotFound, ValidationFailed
from pispi_simulator.webhooks import (
    WebhookRegistry, is_valid_callback_url, is_valid_event_list, validate_webhook_payload
)


VALID_PAYLOAD = {
    "callbackUrl": "https://participant.example.com/hooks",
    "events": ["PAIEMENT_RECU", "RTP_RECU"],
    "alias": None,
}


class TestWebhookValidation:
    """Test webhook field validation"""

    def test_callback_urls(self):
        """Test URL validation"""
        assert is_valid_callback_url("https://example.com/hook")
        assert is_valid_callback_url("http://localhost:8080/cb")
        assert not is_valid_callback_url("not a url")
        assert not is_valid_callback_url(None)

    def test_event_lists(self):
        """Test event vocabulary"""
        assert is_valid_event_list(["PAIEMENT_RECU", "RETOUR_RECU"])
        assert is_valid_event_list([])
        assert not is_valid_event_list(["PAIEMENT_INCONNU"])
        assert not is_valid_event_list("PAIEMENT_RECU")
        assert not is_valid_event_list([1])

    def test_missing_fields(self):
        """Test both required fields are reported"""
        errors = validate_webhook_payload({})
        assert [e.name for e in errors] == ["callbackUrl", "events"]


class TestWebhookRegistry:
    """Test WebhookRegistry operations"""

    def setup_method(self):
        """Set up test fixtures"""
        self.registry = WebhookRegistry(max_webhooks=3)

    def test_create_and_get(self):
        """Test a created webhook can be read back"""
        webhook = self.registry.create(VALID_PAYLOAD)

        assert uuid.UUID(webhook.id).version == 4
        assert len(webhook.secret) == 64
        assert webhook.date_modification is None
        assert self.registry.get(webhook.id) == webhook

        data = webhook.to_dict()
        assert data["callbackUrl"] == VALID_PAYLOAD["callbackUrl"]
        assert data["events"] == ["PAIEMENT_RECU", "RTP_RECU"]

    def test_create_invalid(self):
        """Test invalid payloads are refused"""
        with pytest.raises(ValidationFailed) as exc_info:
            self.registry.create({"callbackUrl": "nope", "events": ["X"]})
        assert [v.name for v in exc_info.value.violations] == ["callbackUrl", "events"]

    def test_capacity(self):
        """Test the registry refuses past its limit"""
        for _ in range(3):
            self.registry.create(VALID_PAYLOAD)

        with pytest.raises(CapacityExceeded) as exc_info:
            self.registry.create(VALID_PAYLOAD)
        assert exc_info.value.message == "Le nombre maximum de webhooks a été atteint"

    def test_update(self):
        """Test update replaces fields and stamps the modification"""
        webhook = self.registry.create(VALID_PAYLOAD)
        updated = self.registry.update(webhook.id, {
            "callbackUrl": "https://other.example.com/cb",
            "events": ["RETOUR_RECU"],
            "alias": "8b1b2499-3e50-435b-b757-ac7a83d8aa7f",
        })

        assert updated.id == webhook.id
        assert updated.secret == webhook.secret
        assert updated.callback_url == "https://other.example.com/cb"
        assert updated.events == ["RETOUR_RECU"]
        assert updated.date_modification is not None
        assert self.registry.get(webhook.id) == updated

    def test_delete(self):
        """Test deleted webhooks are gone"""
        webhook = self.registry.create(VALID_PAYLOAD)
        self.registry.delete(webhook.id)

        with pytest.raises(NotFound) as exc_info:
            self.registry.get(webhook.id)
        assert exc_info.value.entity == Entity.WEBHOOK

    def test_rotate_secret(self):
        """Test secret rotation issues a different secret"""
        webhook = self.registry.create(VALID_PAYLOAD)
        rotated = self.registry.rotate_secret(webhook.id)

        assert rotated.secret != webhook.secret
        assert self.registry.get(webhook.id).secret == rotated.secret

    def test_invalid_id(self):
        """Test malformed ids are validation failures"""
        with pytest.raises(ValidationFailed) as exc_info:
            self.registry.get("123")
        assert exc_info.value.message == "Format UUID invalide"

    def test_unknown_id(self):
        """Test well-formed unknown ids are not found"""
        with pytest.raises(NotFound):
            self.registry.delete(str(uuid.uuid4()))
