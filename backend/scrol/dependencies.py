"""
Scrol Backend — Request Dependencies
=====================================

What:  FastAPI dependencies shared by the routers: the verified principal,
       capability-flag gates and query-string parameters.
How:   Each dependency raises a ScrolError subclass on bad input; the global
       handler in main.py turns it into the error envelope.

Authentication flow (get_principal):
    1. multipart/form-data → token from the `token` form field
       anything else      → body parsed as JSON, token from {"token": ...}
    2. Unparseable body → 400 "Invalid JSON"; no token → 400 "Token is required"
    3. TokenVerifier exchanges the token for its email claim (→ 400 invalid_token)
    4. The email is the principal for the rest of the request
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from fastapi import Request
from starlette.datastructures import FormData

from scrol.config import settings
from scrol.exceptions import FeatureDisabledError, ValidationError
from scrol.services.token_verifier import token_verifier

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Principal:
    """
    The verified caller of a protected route.

    Attributes:
        email: Email claim returned by the identity verifier
        body:  Parsed JSON body (empty for multipart requests)
        form:  Parsed multipart form, None for JSON requests
    """

    email: str
    body: Dict[str, Any] = field(default_factory=dict)
    form: Optional[FormData] = None


async def get_principal(request: Request) -> Principal:
    """Verify the request's identity token and return the caller."""
    body: Dict[str, Any] = {}
    form: Optional[FormData] = None

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        token = form.get("token")
    else:
        try:
            payload = await request.json()
        except ValueError:
            raise ValidationError(message="Invalid JSON", field="body")
        if isinstance(payload, dict):
            body = payload
        token = body.get("token")

    if not token or not isinstance(token, str):
        raise ValidationError(message="Token is required", field="token")

    email = await token_verifier.verify(token)
    request.state.user_email = email
    return Principal(email=email, body=body, form=form)


def require_feature(flag: str) -> Callable[[], None]:
    """
    Build a dependency that 404s when the capability flag `flag` is off.

    The flag is read per request, so tests and operators can toggle it on
    the live settings object.
    """

    def dependency() -> None:
        if not getattr(settings, flag):
            logger.info("Rejected request to disabled capability %s", flag)
            raise FeatureDisabledError(flag)

    return dependency


def _parse_positive_int(value: str, name: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise ValidationError(message=f"{name} must be a positive integer", field=name)
    if number < 1:
        raise ValidationError(message=f"{name} must be a positive integer", field=name)
    return number


def get_friend_id(request: Request) -> int:
    """The `friendId` query parameter as an integer."""
    value = request.query_params.get("friendId")
    if not value:
        raise ValidationError(message="Missing friendId", field="friendId")
    try:
        return int(value)
    except ValueError:
        raise ValidationError(message="friendId must be an integer", field="friendId")


@dataclass(frozen=True)
class PageParams:
    limit: int
    page: int


def get_page_params(request: Request) -> PageParams:
    """The `limit` and `page` query parameters, validated."""
    limit = request.query_params.get("limit")
    page = request.query_params.get("page")
    if not limit or not page:
        raise ValidationError(message="Missing limit or page params")

    params = PageParams(
        limit=_parse_positive_int(limit, "limit"),
        page=_parse_positive_int(page, "page"),
    )
    if params.limit > MAX_PAGE_SIZE:
        raise ValidationError(message=f"limit must not exceed {MAX_PAGE_SIZE}", field="limit")
    return params
