"""SQLModel table definitions for the internal user cache."""

import types
from datetime import datetime, timezone

from sqlalchemy import DateTime, func
from sqlmodel import Field, SQLModel

TABLE_PREFIX = "internal_user_cache__"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserCacheBase(SQLModel):
    """Columns shared by every platform's user cache table."""

    id: str = Field(primary_key=True)
    username: str
    display_name: str
    avatar: str
    bot: bool = False
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": func.now()},
    )
    last_updated: datetime = Field(
        default_factory=_utcnow,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": func.now()},
    )


_models: dict[str, type[UserCacheBase]] = {}


def table_name(platform_name: str) -> str:
    """Return the cache table name for a platform."""
    if not platform_name.isidentifier():
        raise ValueError(f"Invalid platform name: {platform_name!r}")
    return f"{TABLE_PREFIX}{platform_name}"


def user_cache_model(platform_name: str) -> type[UserCacheBase]:
    """Return the table model for a platform, defining it on first use.

    Args:
        platform_name: Adapter name.

    Returns:
        SQLModel table class bound to ``internal_user_cache__<platform>``.
    """
    model = _models.get(platform_name)
    if model is not None:
        return model

    name = table_name(platform_name)

    def body(namespace: dict) -> None:
        namespace["__tablename__"] = name
        namespace["__module__"] = __name__

    model = types.new_class(
        f"UserCache_{platform_name}", (UserCacheBase,), {"table": True}, body
    )
    _models[platform_name] = model
    return model
