"""번역 요청 서비스

파이프라인 결과를 저장소에 기록하고 API 응답으로 변환한다.
"""

import uuid

from imgtrans.config import get_settings
from imgtrans.infra.redis import ping_redis
from imgtrans.infra.storage import get_storage
from imgtrans.infra.storage.upload import EXTENSIONS
from imgtrans.schemas.base import BaseSchema
from imgtrans.schemas.pipeline import (
    NoTextDetected,
    PipelineFailure,
    ProviderStatus,
    ServiceStatus,
    TextRegion,
)
from imgtrans.services.pipeline import process_image
from imgtrans.services.recognition import get_recognizer
from imgtrans.services.translation import get_translation_provider

OUTPUT_EXTENSIONS = {"PNG": ".png", "JPEG": ".jpg", "JPG": ".jpg", "WEBP": ".webp"}


class TranslateResponse(BaseSchema):
    success: bool = True
    text_regions: list[TextRegion]
    result_image: str
    original_image: str
    processed_count: int
    skipped_count: int
    cached: bool = False


class NoTextError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PipelineFailedError(Exception):
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


def _generate_result_id() -> str:
    return f"tr_{uuid.uuid4().hex[:8]}"


async def translate_image(content: bytes, content_type: str, target_lang: str) -> TranslateResponse:
    """
    Raises:
        NoTextError: 번역할 텍스트 없음
        PipelineFailedError: 인식/렌더링 실패
    """
    outcome = await process_image(content, target_lang)

    match outcome:
        case NoTextDetected(message=message):
            raise NoTextError(message)
        case PipelineFailure(code=code, message=message):
            raise PipelineFailedError(code, message)

    settings = get_settings()
    storage = get_storage()
    result_id = _generate_result_id()

    original_path = storage.save_bytes(
        content, "original", result_id, EXTENSIONS.get(content_type, ".png")
    )
    try:
        result_path = storage.save_bytes(
            outcome.output_image,
            "result",
            result_id,
            OUTPUT_EXTENSIONS.get(outcome.output_format.upper(), ".png"),
        )
    except OSError:
        # 결과 없이 원본만 남지 않도록
        storage.delete(original_path)
        raise

    return TranslateResponse(
        text_regions=outcome.regions,
        result_image=f"{settings.base_url}{storage.get_url(result_path)}",
        original_image=f"{settings.base_url}{storage.get_url(original_path)}",
        processed_count=outcome.processed_count,
        skipped_count=outcome.skipped_count,
        cached=outcome.cached,
    )


def get_service_status() -> ServiceStatus:
    """설정된 백엔드 상태 (비밀 값은 노출하지 않음)"""
    settings = get_settings()
    recognizer = get_recognizer()
    provider = get_translation_provider()

    return ServiceStatus(
        recognition=ProviderStatus(
            configured=recognizer.configured, provider=settings.recognition_provider
        ),
        translation=ProviderStatus(
            configured=provider is not None and provider.configured,
            provider=settings.translation_provider,
        ),
        result_cache=settings.result_cache_enabled and ping_redis(),
    )
