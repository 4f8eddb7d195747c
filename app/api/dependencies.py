"""FastAPI dependencies: bearer auth, role guards and service wiring."""

from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app.core.logging import user_id_var
from app.models.principal import Principal
from app.repos.provider import Repos, get_repos
from app.services import token_service
from app.services.attempt_lifecycle import AttemptLifecycle
from app.services.question_bank import QuestionBank
from app.services.review_store import review_store

logger = logging.getLogger(__name__)

# Tokens come from the identity provider; tokenUrl only feeds the OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Any signed-in learner or grader."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    principal = Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )
    # Tag the rest of this request's log lines with the caller
    user_id_var.set(principal.user_id)
    return principal


def require_role(role: str):
    """Dependency factory: 403 unless the caller holds `role`."""

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                "Access denied: user=%s lacks role=%s",
                principal.user_id,
                role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


# Question bank edits, attempt listings and every review operation
require_admin = require_role("admin")


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


def get_question_bank(
    repos: Annotated[Repos, Depends(get_repos)],
) -> QuestionBank:
    return QuestionBank(repos.quizzes, repos.questions)


def get_lifecycle(
    repos: Annotated[Repos, Depends(get_repos)],
) -> AttemptLifecycle:
    return AttemptLifecycle(repos, review_store)
