"""Redis 클라이언트 (결과 캐시 전용)

Redis가 없어도 번역은 동작해야 하므로 짧은 소켓 타임아웃을 건다.
"""

import logging

import redis

from imgtrans.config import get_settings

logger = logging.getLogger(__name__)


class _RedisHolder:
    client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    if _RedisHolder.client is None:
        settings = get_settings()
        _RedisHolder.client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            socket_connect_timeout=settings.redis_timeout,
            socket_timeout=settings.redis_timeout,
            decode_responses=True,
        )
    return _RedisHolder.client


def ping_redis() -> bool:
    try:
        return bool(get_redis().ping())
    except redis.RedisError as e:
        logger.warning(f"Redis 연결 실패: {e}")
        return False


def close_redis() -> None:
    if _RedisHolder.client is not None:
        _RedisHolder.client.close()
        _RedisHolder.client = None


def set_redis(client: redis.Redis | None) -> None:
    """Redis 클라이언트 교체 (테스트에서 fakeredis 주입)"""
    _RedisHolder.client = client
