# /src/core/security.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt

from src.core.config import settings


def create_access_token(
    *,
    subject: int | str,
    expires_minutes: Optional[int] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Создаёт JWT (Bearer).

    Токены выпускает сервис логина/подписки; здесь - для тестов и служебных скриптов.
    """
    to_encode: Dict[str, Any] = {"sub": str(subject)}
    if extra:
        to_encode.update(extra)
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.auth.access_token_minutes
    )
    to_encode["exp"] = int(expire.timestamp())
    return jwt.encode(to_encode, settings.auth.secret_key, algorithm=settings.auth.algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Декодирует и валидирует JWT. Бросает jose.JWTError при неверной подписи/просрочке.
    """
    payload = jwt.decode(token, settings.auth.secret_key, algorithms=[settings.auth.algorithm])
    return dict(payload)


def has_search_access(payload: Dict[str, Any]) -> bool:
    """Поиск доступен только с активной подпиской (claim subscription_status)."""
    status = str(payload.get("subscription_status") or "").strip().lower()
    return bool(payload.get("sub")) and status in settings.auth.allowed_subscription_statuses
