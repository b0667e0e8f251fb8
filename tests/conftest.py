from collections.abc import Callable, Generator
from io import BytesIO
from pathlib import Path

import fakeredis
import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw

from imgtrans.infra.redis import set_redis
from imgtrans.infra.storage import set_storage
from imgtrans.infra.storage.local import LocalStorage
from imgtrans.main import app
from imgtrans.services.recognition import set_recognizer
from imgtrans.services.recognition.schemas import RecognitionResult, RecognizedSpan
from imgtrans.services.rendering import set_renderer
from imgtrans.services.result_cache import set_result_cache
from imgtrans.services.translation import (
    TranslationError,
    set_coordinator,
    set_translation_provider,
)


def make_test_image(
    width: int = 200, height: int = 120, fmt: str = "PNG", color: str = "white"
) -> BytesIO:
    """테스트용 실제 이미지 바이트 생성"""
    img = Image.new("RGB", (width, height), color=color)
    buf = BytesIO()
    img.save(buf, format=fmt)
    buf.seek(0)
    return buf


def make_text_image_bytes(width: int = 200, height: int = 120) -> bytes:
    """흰 배경에 검은 막대(글자 대용)가 있는 PNG"""
    img = Image.new("RGB", (width, height), "white")
    ImageDraw.Draw(img).rectangle((20, 20, 100, 40), fill="black")
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def solid_bgr(width: int, height: int, bgr: tuple[int, int, int]) -> np.ndarray:
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :] = bgr
    return image


class FakeRecognizer:
    """고정 span을 돌려주는 Recognizer"""

    def __init__(self, spans: list[RecognizedSpan], variant: str = "fake") -> None:
        self._spans = spans
        self._variant = variant
        self.calls = 0

    @property
    def variant(self) -> str:
        return self._variant

    @property
    def configured(self) -> bool:
        return True

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        self.calls += 1
        return RecognitionResult(engine="fake", spans=self._spans)


class FakeProvider:
    """user_prompt → 응답 함수로 동작하는 TranslationProvider

    reply가 TranslationError를 raise하면 그대로 전파된다.
    """

    name = "fake"

    def __init__(self, reply: Callable[[str, str], str]) -> None:
        self._reply = reply
        self.calls: list[tuple[str, str]] = []

    @property
    def configured(self) -> bool:
        return True

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        return self._reply(system_prompt, user_prompt)


def failing_reply(system_prompt: str, user_prompt: str) -> str:
    raise TranslationError("provider down")


@pytest.fixture
def temp_upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def local_storage(temp_upload_dir: Path) -> LocalStorage:
    return LocalStorage(base_dir=temp_upload_dir, base_url="/static")


@pytest.fixture
def fake_redis() -> Generator[fakeredis.FakeRedis, None, None]:
    r = fakeredis.FakeRedis(decode_responses=True)
    set_redis(r)
    yield r
    set_redis(None)


@pytest.fixture(autouse=True)
def reset_backends() -> Generator[None, None, None]:
    """모듈 전역 백엔드 초기화"""
    yield
    set_recognizer(None)
    set_translation_provider(None)
    set_coordinator(None)
    set_renderer(None)
    set_result_cache(None)


@pytest.fixture
def client(
    local_storage: LocalStorage, fake_redis: fakeredis.FakeRedis
) -> Generator[TestClient, None, None]:
    set_storage(local_storage)
    yield TestClient(app)
    set_storage(None)
