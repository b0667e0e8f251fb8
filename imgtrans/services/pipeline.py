"""이미지 번역 파이프라인

Recognition → Translation → Rendering 순서로 실행.
각 단계는 Protocol 기반 모듈을 팩토리에서 가져온다.
예상 가능한 실패는 예외 대신 결과 타입(PipelineFailure / NoTextDetected)으로 반환한다.
"""

import asyncio
import logging

import redis

from imgtrans.config import get_settings
from imgtrans.schemas.pipeline import (
    NoTextDetected,
    PipelineFailure,
    PipelineOutcome,
    PipelineSuccess,
    TextRegion,
    TranslateSource,
)
from imgtrans.services.recognition import RecognitionError, Recognizer, get_recognizer
from imgtrans.services.recognition.schemas import RecognitionResult
from imgtrans.services.rendering import RenderingError, get_renderer
from imgtrans.services.result_cache import ResultCache, get_result_cache
from imgtrans.services.translation import get_coordinator

logger = logging.getLogger(__name__)


class EmptyResultError(Exception):
    """사용 가능한 텍스트 영역이 하나도 없음"""


def build_text_regions(result: RecognitionResult) -> list[TextRegion]:
    """RecognitionResult → TextRegion 리스트 (빈 텍스트/잘못된 좌표 제외)"""
    regions: list[TextRegion] = []
    for i, span in enumerate(result.spans):
        text = span.text.strip()
        if not text:
            continue
        try:
            bbox = span.to_bbox()
        except ValueError as e:
            logger.warning(f"잘못된 좌표 무시: {span.text!r} - {e}")
            continue
        regions.append(TextRegion.from_bbox(i, text, bbox, span.confidence))
    return regions


def recognize_regions(recognizer: Recognizer, image_bytes: bytes) -> list[TextRegion]:
    """Raises: RecognitionError, EmptyResultError"""
    result = recognizer.recognize(image_bytes)
    regions = build_text_regions(result)
    logger.info(f"Recognition 완료 ({result.engine}): {len(regions)}개 영역")
    if not regions:
        raise EmptyResultError("인식된 텍스트 영역이 없습니다")
    return regions


def _load_cached(
    cache: ResultCache | None, image_bytes: bytes, target_language: str, variant: str
) -> PipelineSuccess | None:
    if cache is None:
        return None
    try:
        return cache.get(image_bytes, target_language, variant)
    except redis.RedisError as e:
        logger.warning(f"결과 캐시 조회 실패, 캐시 없이 진행: {e}")
        return None


def _store_cached(
    cache: ResultCache | None,
    image_bytes: bytes,
    target_language: str,
    variant: str,
    result: PipelineSuccess,
) -> None:
    if cache is None:
        return
    try:
        cache.put(image_bytes, target_language, variant, result)
    except redis.RedisError as e:
        logger.warning(f"결과 캐시 저장 실패: {e}")


async def process_image(image_bytes: bytes, target_language: str = "zh") -> PipelineOutcome:
    """이미지를 번역하여 결과 반환

    Args:
        image_bytes: 원본 이미지 바이트
        target_language: 대상 언어 코드 (zh, en, ja, ...)

    Returns:
        PipelineSuccess: 번역 이미지 + 영역별 번역/출처
        NoTextDetected: 번역할 텍스트 없음
        PipelineFailure: 인식/렌더링 실패 (부분 이미지 없음)
    """
    settings = get_settings()
    recognizer = get_recognizer()
    result_cache = get_result_cache()

    cached = _load_cached(result_cache, image_bytes, target_language, recognizer.variant)
    if cached is not None:
        logger.info("결과 캐시 적중")
        return cached

    # 1. Recognition
    try:
        regions = await asyncio.to_thread(recognize_regions, recognizer, image_bytes)
    except EmptyResultError:
        return NoTextDetected()
    except RecognitionError as e:
        logger.warning(f"Recognition 실패: {e}")
        return PipelineFailure(code="RECOGNITION_FAILED", message=str(e))

    # 2. Translation
    translated = await get_coordinator().translate_all(regions, target_language)
    if not translated:
        return NoTextDetected(message="번역할 텍스트가 없습니다 (워터마크/저작권 문구만 인식됨)")

    # 3. Rendering
    try:
        output_image, stats = await asyncio.to_thread(
            get_renderer().render_bytes, image_bytes, translated, settings.output_format
        )
    except RenderingError as e:
        logger.warning(f"Rendering 실패: {e}")
        return PipelineFailure(code="RENDER_FAILED", message=str(e))

    result = PipelineSuccess(
        output_image=output_image,
        output_format=settings.output_format.upper(),
        regions=translated,
        processed_count=stats.processed_count,
        skipped_count=stats.skipped_count,
    )
    # 원문 유지 영역이 있는 결과는 저장하지 않음
    if any(r.translate_source is TranslateSource.ORIGINAL for r in translated):
        logger.info("번역되지 않은 영역이 있어 결과 캐시 저장 생략")
    else:
        _store_cached(result_cache, image_bytes, target_language, recognizer.variant, result)
    logger.info(
        f"파이프라인 완료: {stats.processed_count}개 렌더링, {stats.skipped_count}개 건너뜀"
    )
    return result
