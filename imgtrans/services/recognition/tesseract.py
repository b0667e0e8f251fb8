"""Tesseract 기반 텍스트 인식 구현체

image_to_data는 단어 단위 결과를 주므로 (block, paragraph, line) 기준으로 줄 단위로 묶는다.
"""

# pyright: reportMissingTypeStubs=false

import io
import logging
import unicodedata
from typing import Any

import pytesseract
from PIL import Image

from imgtrans.services.recognition.base import RecognitionError
from imgtrans.services.recognition.schemas import ImageSize, RecognitionResult, RecognizedSpan

logger = logging.getLogger(__name__)


def _is_cjk(char: str) -> bool:
    return unicodedata.east_asian_width(char) in ("W", "F")


def join_words(words: list[str]) -> str:
    """단어 결합 (CJK 글자끼리는 공백 없이)"""
    joined = ""
    for word in words:
        if joined and not (_is_cjk(joined[-1]) and _is_cjk(word[0])):
            joined += " "
        joined += word
    return joined


def _confidence(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return -1.0


def group_words(
    data: dict[str, list[Any]], min_confidence: float, min_size: int
) -> list[RecognizedSpan]:
    """image_to_data(Output.DICT) 결과 → 줄 단위 span

    신뢰도 미달 단어는 버리고, 묶은 뒤 가로/세로가 min_size 미만인 줄도 버린다.
    """
    lines: dict[tuple[int, int, int], list[int]] = {}
    for i, text in enumerate(data["text"]):
        if not text or not str(text).strip():
            continue
        if _confidence(data["conf"][i]) < min_confidence:
            continue
        key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
        lines.setdefault(key, []).append(i)

    spans: list[RecognizedSpan] = []
    for indices in lines.values():
        left = min(int(data["left"][i]) for i in indices)
        top = min(int(data["top"][i]) for i in indices)
        right = max(int(data["left"][i]) + int(data["width"][i]) for i in indices)
        bottom = max(int(data["top"][i]) + int(data["height"][i]) for i in indices)

        if right - left < min_size or bottom - top < min_size:
            continue

        confs = [_confidence(data["conf"][i]) for i in indices]
        spans.append(
            RecognizedSpan(
                text=join_words([str(data["text"][i]).strip() for i in indices]),
                box=(left, top, right - left, bottom - top),
                confidence=sum(confs) / len(confs),
            )
        )
    return spans


class TesseractRecognition:
    def __init__(self, lang: str = "eng+chi_sim", min_confidence: float = 60.0, min_size: int = 5):
        self._lang = lang
        self._min_confidence = min_confidence
        self._min_size = min_size

    @property
    def variant(self) -> str:
        return f"tesseract-{self._lang}"

    @property
    def configured(self) -> bool:
        return True

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                image.load()
                size = ImageSize(width=image.width, height=image.height)
                data = pytesseract.image_to_data(
                    image.convert("RGB"),
                    lang=self._lang,
                    output_type=pytesseract.Output.DICT,
                )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as e:
            raise RecognitionError(f"Tesseract 인식 실패: {e}") from e

        spans = group_words(data, self._min_confidence, self._min_size)
        logger.info(f"Tesseract 인식 완료: {len(spans)}개 줄")
        return RecognitionResult(engine="tesseract", spans=spans, image_size=size)
