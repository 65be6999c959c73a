"""
Simulator container and request dependencies
"""

from typing import Optional

from fastapi import Request

from ..config import SimulatorConfig, get_config
from ..use_cases import AccountUseCases
from ..webhooks import WebhookRegistry


class Simulator:
    """Simulated participant with all components initialized"""

    def __init__(self, config: Optional[SimulatorConfig] = None,
                 account_use_cases: Optional[AccountUseCases] = None,
                 webhook_registry: Optional[WebhookRegistry] = None):
        config = config or get_config()
        self.config = config
        self.account_use_cases = account_use_cases or AccountUseCases.default(config)
        self.webhook_registry = webhook_registry or WebhookRegistry(config.max_webhooks)


def get_simulator(request: Request) -> Simulator:
    return request.app.state.simulator


def get_account_use_cases(request: Request) -> AccountUseCases:
    return get_simulator(request).account_use_cases


def get_webhook_registry(request: Request) -> WebhookRegistry:
    return get_simulator(request).webhook_registry
