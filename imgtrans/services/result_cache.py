"""처리 결과 캐시 (Redis)

같은 이미지 + 대상 언어 + 인식기 조합의 재요청은 저장된 결과를 그대로 돌려준다.
값은 PipelineSuccess JSON 스냅샷 (이미지 바이트는 base64).
"""

import hashlib
import logging
from typing import cast

import redis
from pydantic import ValidationError

from imgtrans.config import get_settings
from imgtrans.constants import RedisPrefix
from imgtrans.infra.redis import get_redis
from imgtrans.schemas.pipeline import PipelineSuccess

logger = logging.getLogger(__name__)


def image_hash(image_bytes: bytes) -> str:
    return hashlib.sha256(image_bytes).hexdigest()


def result_key(image_bytes: bytes, target_lang: str, ocr_variant: str) -> str:
    return f"{RedisPrefix.RESULT}:{image_hash(image_bytes)}:{target_lang}:{ocr_variant}"


class ResultCache:
    def __init__(self, client: redis.Redis, ttl: int) -> None:
        self._client = client
        self._ttl = ttl

    def get(self, image_bytes: bytes, target_lang: str, ocr_variant: str) -> PipelineSuccess | None:
        key = result_key(image_bytes, target_lang, ocr_variant)
        data = self._client.get(key)
        if data is None:
            return None

        try:
            result = PipelineSuccess.model_validate_json(cast(str, data))
        except ValidationError as e:
            logger.warning(f"손상된 결과 캐시 삭제: {key} - {e}")
            self._client.delete(key)
            return None

        return result.model_copy(update={"cached": True})

    def put(
        self, image_bytes: bytes, target_lang: str, ocr_variant: str, result: PipelineSuccess
    ) -> None:
        key = result_key(image_bytes, target_lang, ocr_variant)
        snapshot = result.model_copy(update={"cached": False})
        self._client.set(key, snapshot.model_dump_json(), ex=self._ttl)


class _ResultCacheHolder:
    cache: ResultCache | None = None


def get_result_cache() -> ResultCache | None:
    """설정에서 비활성화되어 있으면 None (set_result_cache로 주입한 값이 우선)"""
    if _ResultCacheHolder.cache is not None:
        return _ResultCacheHolder.cache

    settings = get_settings()
    if not settings.result_cache_enabled:
        return None
    return ResultCache(get_redis(), settings.result_cache_ttl)


def set_result_cache(cache: ResultCache | None) -> None:
    """결과 캐시 설정 (테스트용)"""
    _ResultCacheHolder.cache = cache
