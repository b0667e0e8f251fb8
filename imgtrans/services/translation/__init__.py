"""Translation 모듈

사용법:
    from imgtrans.services.translation import get_coordinator

    coordinator = get_coordinator()
    regions = await coordinator.translate_all(regions, "zh")

백엔드 선택 (.env TRANSLATION_PROVIDER):
    - "gemini": Google Gemini API (기본값)
    - "openai": OpenAI 호환 Chat Completions (OPENAI_BASE_URL로 DeepSeek 등)
    - "none": 번역하지 않음 (모든 영역 원문 유지)
"""

from imgtrans.config import Settings, get_settings
from imgtrans.services.translation.base import TranslationError, TranslationProvider
from imgtrans.services.translation.cache import TranslationCache
from imgtrans.services.translation.coordinator import BatchTranslationCoordinator
from imgtrans.services.translation.gemini import GeminiTranslation
from imgtrans.services.translation.openai_compat import OpenAICompatibleTranslation
from imgtrans.services.translation.parsing import get_batch_format

__all__ = [
    "BatchTranslationCoordinator",
    "TranslationCache",
    "TranslationError",
    "TranslationProvider",
    "get_coordinator",
    "get_translation_provider",
    "set_coordinator",
    "set_translation_provider",
]

_provider: TranslationProvider | None = None
_coordinator: BatchTranslationCoordinator | None = None
_cache = TranslationCache()


def create_translation_provider(settings: Settings) -> TranslationProvider | None:
    match settings.translation_provider:
        case "gemini":
            return GeminiTranslation(
                api_key=settings.gemini_api_key,
                model=settings.gemini_model,
                timeout=settings.translation_timeout,
            )
        case "openai":
            return OpenAICompatibleTranslation(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                base_url=settings.openai_base_url,
                timeout=settings.translation_timeout,
            )
        case "none":
            return None
        case other:
            raise ValueError(f"Unknown translation provider: {other!r}")


def get_translation_provider() -> TranslationProvider | None:
    """설정에 따라 translation 백엔드 반환 ("none"이면 None)"""
    global _provider
    if _provider is None:
        _provider = create_translation_provider(get_settings())
    return _provider


def set_translation_provider(provider: TranslationProvider | None) -> None:
    """translation 백엔드 설정 (테스트용)"""
    global _provider, _coordinator
    _provider = provider
    _coordinator = None


def get_coordinator() -> BatchTranslationCoordinator:
    """프로세스 공용 번역 캐시를 공유하는 coordinator"""
    global _coordinator
    if _coordinator is None:
        settings = get_settings()
        _coordinator = BatchTranslationCoordinator(
            get_translation_provider(),
            _cache,
            batch_format=get_batch_format(settings.batch_format),
            max_concurrency=settings.translation_max_concurrency,
        )
    return _coordinator


def set_coordinator(coordinator: BatchTranslationCoordinator | None) -> None:
    """coordinator 설정 (테스트용)"""
    global _coordinator
    _coordinator = coordinator


def get_translation_cache() -> TranslationCache:
    return _cache
