"""
Bearer-token authentication for the HTTP API and edge functions.

Tokens are opaque random strings handed to a user once; only their
SHA-256 digest is stored. Every authenticated request resolves to a
`User`, and every query downstream is scoped to that user's id.
"""

import hashlib
import logging
import secrets
from typing import Optional

import asyncpg
from fastapi import Header, HTTPException
from pydantic import BaseModel

from cellar.app.db import get_pool, record_to_dict

logger = logging.getLogger(__name__)


class User(BaseModel):
    id: str
    email: str


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an 'Authorization: Bearer <token>' header value.

    Returns None when the header is missing, uses another scheme, or
    carries an empty token.
    """
    if not authorization:
        return None

    prefix = "Bearer "
    if not authorization.startswith(prefix):
        return None

    token = authorization[len(prefix):].strip()
    return token or None


async def create_user(email: str) -> User:
    email = email.strip().lower()
    if not email or "@" not in email:
        raise ValueError("a valid email address is required")

    pool = await get_pool()
    async with pool.acquire() as conn:
        try:
            row = await conn.fetchrow(
                "INSERT INTO users (email) VALUES ($1) RETURNING id, email;",
                email,
            )
        except asyncpg.UniqueViolationError:
            raise ValueError(f"a user with email {email} already exists")
    logger.info(f"Created user {email}")
    return User(**record_to_dict(row))


async def get_user_by_email(email: str) -> Optional[User]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            "SELECT id, email FROM users WHERE email = $1;",
            email.strip().lower(),
        )
    return User(**record_to_dict(row)) if row else None


async def issue_token(user_id: str) -> str:
    """
    Create a new token for the user and return it in clear text.

    The clear-text token is never stored, so it can only be shown once.
    """
    token = generate_token()
    pool = await get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            "INSERT INTO auth_tokens (token_hash, user_id) VALUES ($1, $2::uuid);",
            hash_token(token),
            user_id,
        )
    return token


async def authenticate(token: str) -> Optional[User]:
    """Resolve a clear-text token to its user, or None if it is unknown."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """
            UPDATE auth_tokens t
            SET last_used_at = now()
            FROM users u
            WHERE t.token_hash = $1 AND u.id = t.user_id
            RETURNING u.id, u.email;
            """,
            hash_token(token),
        )
    return User(**record_to_dict(row)) if row else None


async def current_user(authorization: Optional[str] = Header(default=None)) -> User:
    """FastAPI dependency returning the authenticated user or raising 401."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    token = bearer_token(authorization)
    user = await authenticate(token) if token else None
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
