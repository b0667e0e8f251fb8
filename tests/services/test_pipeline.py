"""파이프라인 통합 테스트

recognizer / provider는 fake로 교체하고, 렌더링은 실제 OverlayRenderer를 사용한다.
"""

import math
from unittest.mock import MagicMock, patch

import fakeredis
import pytest
import redis

from imgtrans.config import Settings
from imgtrans.schemas.pipeline import (
    NoTextDetected,
    PipelineFailure,
    PipelineSuccess,
    TranslateSource,
)
from imgtrans.services.pipeline import build_text_regions, process_image
from imgtrans.services.recognition import RecognitionError, set_recognizer
from imgtrans.services.recognition.schemas import RecognitionResult, RecognizedSpan
from imgtrans.services.result_cache import ResultCache, get_result_cache, set_result_cache
from imgtrans.services.translation import (
    BatchTranslationCoordinator,
    TranslationCache,
    set_coordinator,
)
from tests.conftest import FakeProvider, FakeRecognizer, failing_reply, make_text_image_bytes

SPANS = [
    RecognizedSpan(text="Agent", box=(20, 20, 80, 20), confidence=95),
    RecognizedSpan(text="Tool", box=(20, 60, 60, 20), confidence=90),
]


def numbered_reply(system_prompt: str, user_prompt: str) -> str:
    """`n. text` → `n. <text>` (개별 요청은 `<text>`)"""
    lines = user_prompt.split("\n")
    if len(lines) == 1 and not lines[0][:1].isdigit():
        return f"<{user_prompt}>"
    return "\n".join(f"{n}. <{text}>" for n, text in (line.split(". ", 1) for line in lines))


class RaisingRecognizer(FakeRecognizer):
    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        self.calls += 1
        raise RecognitionError("tesseract not installed")


@pytest.fixture
def provider() -> FakeProvider:
    fake = FakeProvider(numbered_reply)
    set_coordinator(BatchTranslationCoordinator(fake, TranslationCache()))
    return fake


@pytest.fixture
def recognizer() -> FakeRecognizer:
    fake = FakeRecognizer(SPANS)
    set_recognizer(fake)
    return fake


@pytest.mark.usefixtures("fake_redis")
class TestProcessImage:
    async def test_success(self, recognizer: FakeRecognizer, provider: FakeProvider) -> None:
        result = await process_image(make_text_image_bytes(), "zh")

        assert isinstance(result, PipelineSuccess)
        assert result.output_image.startswith(b"\x89PNG")
        assert [r.translated for r in result.regions] == ["<Agent>", "<Tool>"]
        assert all(r.translate_source is TranslateSource.BATCH for r in result.regions)
        assert [r.index for r in result.regions] == [0, 1]
        assert result.processed_count == 2
        assert result.skipped_count == 0
        assert not result.cached

    async def test_repeat_request_is_served_from_cache(
        self, recognizer: FakeRecognizer, provider: FakeProvider
    ) -> None:
        image = make_text_image_bytes()

        first = await process_image(image, "zh")
        second = await process_image(image, "zh")

        assert isinstance(second, PipelineSuccess)
        assert second.cached
        assert second.output_image == first.output_image  # type: ignore[union-attr]
        assert recognizer.calls == 1
        assert len(provider.calls) == 1

    async def test_other_language_is_not_cached(
        self, recognizer: FakeRecognizer, provider: FakeProvider
    ) -> None:
        image = make_text_image_bytes()

        await process_image(image, "zh")
        await process_image(image, "ja")

        assert recognizer.calls == 2

    async def test_no_text_detected(self, provider: FakeProvider) -> None:
        set_recognizer(FakeRecognizer([]))

        result = await process_image(make_text_image_bytes(), "zh")

        assert isinstance(result, NoTextDetected)
        assert provider.calls == []

    async def test_only_boilerplate_is_no_text(self, provider: FakeProvider) -> None:
        set_recognizer(FakeRecognizer([RecognizedSpan(text="扫码关注公众号", box=(0, 0, 100, 20))]))

        result = await process_image(make_text_image_bytes(), "zh")

        assert isinstance(result, NoTextDetected)
        assert "워터마크" in result.message

    async def test_recognition_failure(self, provider: FakeProvider) -> None:
        set_recognizer(RaisingRecognizer([]))

        result = await process_image(make_text_image_bytes(), "zh")

        assert isinstance(result, PipelineFailure)
        assert result.code == "RECOGNITION_FAILED"
        assert "tesseract" in result.message

    async def test_render_failure_is_not_cached(
        self,
        recognizer: FakeRecognizer,
        provider: FakeProvider,
        fake_redis: fakeredis.FakeRedis,
    ) -> None:
        result = await process_image(b"not really an image", "zh")

        assert isinstance(result, PipelineFailure)
        assert result.code == "RENDER_FAILED"
        assert fake_redis.keys("result:*") == []

    async def test_translation_failure_keeps_original_text(self, recognizer: FakeRecognizer) -> None:
        set_coordinator(BatchTranslationCoordinator(FakeProvider(failing_reply), TranslationCache()))

        result = await process_image(make_text_image_bytes(), "zh")

        assert isinstance(result, PipelineSuccess)
        assert [r.translated for r in result.regions] == ["Agent", "Tool"]
        assert all(r.translate_source is TranslateSource.ORIGINAL for r in result.regions)

    async def test_untranslated_result_is_not_cached(
        self, recognizer: FakeRecognizer, fake_redis: fakeredis.FakeRedis
    ) -> None:
        image = make_text_image_bytes()
        set_coordinator(BatchTranslationCoordinator(FakeProvider(failing_reply), TranslationCache()))

        await process_image(image, "zh")

        assert fake_redis.keys("result:*") == []

        set_coordinator(BatchTranslationCoordinator(FakeProvider(numbered_reply), TranslationCache()))
        result = await process_image(image, "zh")

        assert isinstance(result, PipelineSuccess)
        assert not result.cached
        assert [r.translated for r in result.regions] == ["<Agent>", "<Tool>"]
        assert recognizer.calls == 2


class TestResultCacheDegradation:
    async def test_redis_errors_do_not_fail_pipeline(
        self, recognizer: FakeRecognizer, provider: FakeProvider
    ) -> None:
        broken = MagicMock()
        broken.get.side_effect = redis.ConnectionError("down")
        broken.set.side_effect = redis.ConnectionError("down")
        set_result_cache(ResultCache(broken, ttl=60))

        result = await process_image(make_text_image_bytes(), "zh")

        assert isinstance(result, PipelineSuccess)
        assert broken.set.called

    async def test_disabled_cache(self, recognizer: FakeRecognizer, provider: FakeProvider) -> None:
        with patch(
            "imgtrans.services.result_cache.get_settings",
            return_value=Settings(result_cache_enabled=False),
        ):
            assert get_result_cache() is None
            first = await process_image(make_text_image_bytes(), "zh")
            second = await process_image(make_text_image_bytes(), "zh")

        assert isinstance(first, PipelineSuccess)
        assert isinstance(second, PipelineSuccess)
        assert not second.cached
        assert recognizer.calls == 2


class TestBuildTextRegions:
    def test_skips_blank_and_invalid_spans(self) -> None:
        result = RecognitionResult(
            engine="fake",
            spans=[
                RecognizedSpan(text="  ", box=(0, 0, 10, 10)),
                RecognizedSpan(text="bad", vertices=[(math.nan, 0.0)]),
                RecognizedSpan(text=" Agent ", box=(5, 6, 40, 12), confidence=80),
            ],
        )

        regions = build_text_regions(result)

        assert len(regions) == 1
        assert regions[0].text == "Agent"
        assert regions[0].index == 2
        assert (regions[0].x, regions[0].y, regions[0].width, regions[0].height) == (5, 6, 40, 12)
        assert regions[0].confidence == 80
