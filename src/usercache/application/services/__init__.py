"""Application services."""

from usercache.application.services.background_refresh import BackgroundRefresher
from usercache.application.services.middleware import MiddlewarePipeline
from usercache.application.services.tiered_cache import TieredUserCache
from usercache.application.services.user_codec import decode_user, encode_user

__all__ = [
    "BackgroundRefresher",
    "MiddlewarePipeline",
    "TieredUserCache",
    "decode_user",
    "encode_user",
]
