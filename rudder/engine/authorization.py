"""
Authorization Gate

Runs before parameter resolution for actions carrying ``@Authorized``
(on the method or its controller). The configured checker receives the
action context and the merged role list.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..config import RoutingOptions
from ..faults import (
    AccessDeniedError,
    AuthorizationCheckerNotDefinedError,
    AuthorizationRequiredError,
    HttpError,
)
from .context import ActionContext
from .invoker import maybe_await

if TYPE_CHECKING:
    from .builder import ExecutableAction

logger = logging.getLogger("rudder.engine.authorization")


async def authorize(ctx: ActionContext, action: "ExecutableAction", options: RoutingOptions) -> None:
    """
    Check access to ``action``.

    Raises:
        AuthorizationCheckerNotDefinedError: No checker is configured
        AuthorizationRequiredError: Denied and no roles are required
        AccessDeniedError: Denied and roles are required
        HttpError: Whatever HTTP error the checker itself raised
    """
    roles = action.authorized_roles
    if roles is None:
        return

    checker = options.authorization_checker
    if checker is None:
        raise AuthorizationCheckerNotDefinedError()

    try:
        allowed = await maybe_await(checker(ctx, list(roles)))
    except HttpError:
        raise
    except Exception as e:
        logger.debug(f"Authorization checker raised {type(e).__name__}: {e}")
        allowed = False

    if allowed:
        return

    logger.info(f"Access denied to {ctx.method} {ctx.path} (roles: {list(roles)})")
    if roles:
        raise AccessDeniedError(ctx.method, ctx.path)
    raise AuthorizationRequiredError(ctx.method, ctx.path)
