"""
Webhook subscription endpoints
"""

from fastapi import APIRouter, Depends, Response, status

from .dependencies import get_webhook_registry
from .schemas import WebhookRequest
from ..security import require_scope
from ..webhooks import WebhookRegistry


router = APIRouter()


@router.get(
    "/{webhook_id}",
    name="webhookConsulter",
    dependencies=[Depends(require_scope("webhook.read"))]
)
async def get_webhook(
    webhook_id: str,
    registry: WebhookRegistry = Depends(get_webhook_registry)
):
    return registry.get(webhook_id).to_dict()


@router.post(
    "",
    name="webhookCreer",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_scope("webhook.write"))]
)
async def create_webhook(
    request: WebhookRequest,
    registry: WebhookRegistry = Depends(get_webhook_registry)
):
    return registry.create(request.model_dump()).to_dict()


@router.put(
    "/{webhook_id}",
    name="webhookModifier",
    dependencies=[Depends(require_scope("webhook.write"))]
)
async def update_webhook(
    webhook_id: str,
    request: WebhookRequest,
    registry: WebhookRegistry = Depends(get_webhook_registry)
):
    return registry.update(webhook_id, request.model_dump()).to_dict()


@router.delete(
    "/{webhook_id}",
    name="webhookSupprimer",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_scope("webhook.delete"))]
)
async def delete_webhook(
    webhook_id: str,
    registry: WebhookRegistry = Depends(get_webhook_registry)
):
    registry.delete(webhook_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{webhook_id}/secrets",
    name="webhookSecretRenouveler",
    dependencies=[Depends(require_scope("webhook.secret"))]
)
async def rotate_webhook_secret(
    webhook_id: str,
    registry: WebhookRegistry = Depends(get_webhook_registry)
):
    """Issue a new signing secret"""
    return {"secret": registry.rotate_secret(webhook_id).secret}
