"""
OAuth2 token endpoint (client-credentials, mocked)
"""

import json
from typing import Any, Dict
from urllib.parse import parse_qs

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..config import SimulatorConfig
from ..security import OAuthError, get_request_config, issue_token


router = APIRouter()


async def _read_token_params(request: Request) -> Dict[str, Any]:
    """Accept both form-encoded (RFC 6749) and JSON bodies"""
    body = await request.body()
    if not body:
        return {}
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/x-www-form-urlencoded"):
        return {key: values[0] for key, values in parse_qs(body.decode(errors="replace")).items()}
    try:
        params = json.loads(body)
    except ValueError:
        return {}
    return params if isinstance(params, dict) else {}


@router.post("/token", name="oauthToken")
async def token(request: Request, config: SimulatorConfig = Depends(get_request_config)):
    params = await _read_token_params(request)
    try:
        return issue_token(params, config)
    except OAuthError as e:
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
