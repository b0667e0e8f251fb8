from collections.abc import Generator
from pathlib import Path

import pytest

from imgtrans.infra.storage import set_storage
from imgtrans.infra.storage.local import LocalStorage
from imgtrans.services.recognition import set_recognizer
from imgtrans.services.recognition.schemas import RecognizedSpan
from imgtrans.services.translate import translate_image
from imgtrans.services.translation import (
    BatchTranslationCoordinator,
    TranslationCache,
    set_coordinator,
)
from tests.conftest import FakeProvider, FakeRecognizer, make_text_image_bytes


class FullDiskStorage(LocalStorage):
    """result 저장만 실패하는 저장소"""

    def save_bytes(
        self, content: bytes, subdir: str = "result", filename: str | None = None, ext: str = ".png"
    ) -> str:
        if subdir == "result":
            raise OSError("No space left on device")
        return super().save_bytes(content, subdir, filename, ext)


@pytest.fixture
def fakes() -> None:
    set_recognizer(FakeRecognizer([RecognizedSpan(text="Agent", box=(20, 20, 81, 21))]))
    provider = FakeProvider(lambda s, u: "\n".join(f"{line.split('. ', 1)[0]}. 智能体" for line in u.split("\n")))
    set_coordinator(BatchTranslationCoordinator(provider, TranslationCache()))


@pytest.fixture
def full_disk(temp_upload_dir: Path) -> Generator[FullDiskStorage, None, None]:
    storage = FullDiskStorage(base_dir=temp_upload_dir)
    set_storage(storage)
    yield storage
    set_storage(None)


@pytest.mark.usefixtures("fakes", "fake_redis")
class TestTranslateImageStorage:
    async def test_failed_result_save_removes_original(self, full_disk: FullDiskStorage) -> None:
        with pytest.raises(OSError):
            await translate_image(make_text_image_bytes(), "image/png", "zh")

        assert list((full_disk.base_dir / "original").glob("*")) == []
