"""일괄 번역 코디네이터

흐름:
1. 워터마크/빈 텍스트 제외
2. 번역 캐시 적중분 채우기
3. 나머지를 단계별 전략으로 처리: 일괄 요청 → 영역별 병렬 요청 → 원문 유지
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from imgtrans.constants import BOILERPLATE_MARKERS
from imgtrans.schemas.pipeline import TextRegion, TranslateSource
from imgtrans.services.translation.base import TranslationError, TranslationProvider
from imgtrans.services.translation.cache import TranslationCache
from imgtrans.services.translation.cleanup import is_boilerplate, strip_translation
from imgtrans.services.translation.parsing import (
    BatchFormat,
    NumberedListFormat,
    Ok,
    ParseError,
    ProviderFailure,
    ProviderReply,
    parse_reply,
)
from imgtrans.services.translation.prompts import (
    DEFAULT_GLOSSARY,
    bulk_system_prompt,
    is_chinese,
    relevant_terms,
    single_system_prompt,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranslationRequest:
    target_lang: str
    glossary: Mapping[str, str]


@dataclass(frozen=True)
class Completed:
    items: list[TextRegion]


@dataclass(frozen=True)
class Escalate:
    reason: str


StrategyResult = Completed | Escalate


class TranslationStrategy(Protocol):
    name: str

    async def run(self, regions: list[TextRegion], request: TranslationRequest) -> StrategyResult: ...


async def call_provider(
    provider: TranslationProvider, system_prompt: str, user_prompt: str
) -> str | ProviderFailure:
    """응답 원문 또는 호출 실패"""
    try:
        return await provider.complete(system_prompt, user_prompt)
    except TranslationError as e:
        return ProviderFailure(cause=e)


class BulkStrategy:
    """모든 텍스트를 한 번의 요청으로 번역, 개수가 정확히 맞을 때만 채택"""

    name = "bulk"

    def __init__(self, provider: TranslationProvider | None, batch_format: BatchFormat) -> None:
        self._provider = provider
        self._format = batch_format

    async def run(self, regions: list[TextRegion], request: TranslationRequest) -> StrategyResult:
        if self._provider is None:
            return Escalate("번역 백엔드 미설정")

        texts = [r.text for r in regions]
        terms = relevant_terms(texts, request.glossary)
        system_prompt = bulk_system_prompt(request.target_lang, self._format.reply_instruction, terms)
        logger.info(f"일괄 번역 요청: {len(texts)}개 ({self._format.name})")

        raw = await call_provider(self._provider, system_prompt, self._format.build_payload(texts))
        reply: ProviderReply = (
            raw if isinstance(raw, ProviderFailure) else parse_reply(self._format, raw, len(texts))
        )

        match reply:
            case Ok(value=translations):
                return Completed(
                    [
                        apply_translation(r, t, TranslateSource.BATCH)
                        for r, t in zip(regions, translations)
                    ]
                )
            case ParseError(error=error):
                return Escalate(f"형식 불일치: {error}")
            case ProviderFailure(cause=cause):
                return Escalate(f"호출 실패: {cause}")


class PerRegionStrategy:
    """영역마다 개별 요청 (동시 실행), 개별 실패는 원문 유지"""

    name = "per_region"

    def __init__(self, provider: TranslationProvider | None, max_concurrency: int = 8) -> None:
        self._provider = provider
        self._max_concurrency = max(1, max_concurrency)

    async def run(self, regions: list[TextRegion], request: TranslationRequest) -> StrategyResult:
        provider = self._provider
        if provider is None:
            return Escalate("번역 백엔드 미설정")

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def translate_one(region: TextRegion) -> TextRegion:
            terms = relevant_terms([region.text], request.glossary)
            async with semaphore:
                reply = await call_provider(
                    provider, single_system_prompt(request.target_lang, terms), region.text
                )
            match reply:
                case ProviderFailure(cause=cause):
                    logger.warning(f"개별 번역 실패, 원문 유지: {region.text!r} - {cause}")
                    return keep_original(region)
                case raw:
                    return apply_translation(region, raw, TranslateSource.FALLBACK)

        logger.info(f"개별 번역 시작: {len(regions)}개")
        results = await asyncio.gather(
            *(translate_one(r) for r in regions), return_exceptions=True
        )

        items: list[TextRegion] = []
        for region, result in zip(regions, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.warning(f"개별 번역 예외, 원문 유지: {region.text!r} - {result!r}")
                items.append(keep_original(region))
            else:
                items.append(result)
        return Completed(items)


class OriginalTextStrategy:
    name = "original"

    async def run(self, regions: list[TextRegion], request: TranslationRequest) -> StrategyResult:
        return Completed([keep_original(r) for r in regions])


def keep_original(region: TextRegion) -> TextRegion:
    return region.with_translation(region.text, TranslateSource.ORIGINAL)


def apply_translation(region: TextRegion, raw: str, source: TranslateSource) -> TextRegion:
    """응답 정리 후 적용, 정리 결과가 비면 원문 유지 (ORIGINAL)"""
    cleaned = strip_translation(raw)
    if cleaned is None:
        logger.warning(f"정리 후 빈 번역, 원문 유지: {region.text!r}")
        return keep_original(region)
    return region.with_translation(cleaned, source)


class BatchTranslationCoordinator:
    """영역 목록 번역 (translated/translate_source가 채워진 사본 반환)

    cache는 프로세스당 하나를 만들어 주입한다. 성공한 번역(batch/fallback)만 저장된다.
    glossary를 주지 않으면 중국어 대상일 때 기본 AI 용어집을 쓴다.
    """

    def __init__(
        self,
        provider: TranslationProvider | None,
        cache: TranslationCache,
        *,
        batch_format: BatchFormat | None = None,
        boilerplate_markers: Iterable[str] = BOILERPLATE_MARKERS,
        glossary: Mapping[str, str] | None = None,
        max_concurrency: int = 8,
    ) -> None:
        self.provider = provider
        self.cache = cache
        self._markers = tuple(boilerplate_markers)
        self._glossary = glossary
        self.strategies: Sequence[TranslationStrategy] = (
            BulkStrategy(provider, batch_format or NumberedListFormat()),
            PerRegionStrategy(provider, max_concurrency),
            OriginalTextStrategy(),
        )

    def glossary_for(self, target_lang: str) -> Mapping[str, str]:
        if self._glossary is not None:
            return self._glossary
        return DEFAULT_GLOSSARY if is_chinese(target_lang) else {}

    def filter_regions(self, regions: list[TextRegion]) -> list[TextRegion]:
        """빈 텍스트와 워터마크/저작권 문구 제외"""
        kept = [
            r for r in regions if r.text.strip() and not is_boilerplate(r.text, self._markers)
        ]
        if len(kept) != len(regions):
            logger.info(f"번역 제외 영역: {len(regions) - len(kept)}개")
        return kept

    async def translate_all(self, regions: list[TextRegion], target_lang: str) -> list[TextRegion]:
        candidates = self.filter_regions(regions)
        if not candidates:
            return []

        results: dict[int, TextRegion] = {}
        pending: list[tuple[int, TextRegion]] = []
        for pos, region in enumerate(candidates):
            cached = self.cache.get(region.text, target_lang)
            if cached is not None:
                results[pos] = region.with_translation(cached, TranslateSource.CACHE)
            else:
                pending.append((pos, region))

        if results:
            logger.info(f"번역 캐시 적중: {len(results)}개")

        if pending:
            request = TranslationRequest(target_lang, self.glossary_for(target_lang))
            translated = await self._run_strategies([r for _, r in pending], request)
            for (pos, _), region in zip(pending, translated):
                results[pos] = region
                if region.translate_source in (TranslateSource.BATCH, TranslateSource.FALLBACK):
                    self.cache.put(region.text, target_lang, region.translated)

        return [results[pos] for pos in range(len(candidates))]

    async def _run_strategies(
        self, regions: list[TextRegion], request: TranslationRequest
    ) -> list[TextRegion]:
        for strategy in self.strategies:
            outcome = await strategy.run(regions, request)
            match outcome:
                case Completed(items=items):
                    logger.info(f"번역 완료 ({strategy.name}): {len(items)}개")
                    return items
                case Escalate(reason=reason):
                    logger.warning(f"{strategy.name} 단계 실패, 다음 단계로: {reason}")

        return [keep_original(r) for r in regions]
