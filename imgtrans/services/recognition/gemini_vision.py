"""Gemini 비전 모델 기반 텍스트 인식 구현체"""

# pyright: reportMissingTypeStubs=false

import io
import logging
import re

from google import genai
from google.genai import types
from PIL import Image, UnidentifiedImageError

from imgtrans.services.recognition.base import RecognitionError
from imgtrans.services.recognition.schemas import ImageSize, RecognitionResult, RecognizedSpan

logger = logging.getLogger(__name__)

RECOGNIZE_PROMPT = """이 이미지의 모든 텍스트를 인식해주세요. 이미지 크기는 {width}x{height}px 입니다.

규칙:
- 논리적으로 이어진 단어 묶음('Vector DB', 'Task Queue' 등)은 하나의 텍스트로 취급
- 각 텍스트마다 내용과 픽셀 좌표 바운딩 박스를 제공
- 한 줄에 하나씩 다음 형식으로만 응답: "텍스트" [x_min, y_min, x_max, y_max]

예시:
"SuperAGI Architecture" [10, 20, 200, 50]
"Vector DB" [30, 100, 100, 130]

다른 설명은 포함하지 마세요."""

# "text" [x1, y1, x2, y2] 또는 (x1, y1, x2, y2)
_LINE_RE = re.compile(r'"([^"]+)"\s*[\[(](\d+)[\s,]+(\d+)[\s,]+(\d+)[\s,]+(\d+)[\])]')


def parse_vision_response(text: str) -> list[RecognizedSpan]:
    """응답 줄마다 "text" [x1, y1, x2, y2] 추출 (형식이 맞지 않는 줄은 무시)"""
    spans: list[RecognizedSpan] = []
    for line in text.replace("\\n", "\n").split("\n"):
        match = _LINE_RE.search(line)
        if not match:
            continue
        content = match.group(1)
        x1, y1, x2, y2 = (int(v) for v in match.groups()[1:])
        spans.append(
            RecognizedSpan(text=content, box=(x1, y1, max(1, x2 - x1), max(1, y2 - y1)))
        )
    return spans


class GeminiVisionRecognition:
    def __init__(self, api_key: str, model: str) -> None:
        self._api_key = api_key
        self._model = model

    @property
    def variant(self) -> str:
        return f"gemini-vision-{self._model}"

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        if not self._api_key:
            raise RecognitionError("GEMINI_API_KEY가 설정되지 않았습니다")

        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                size = ImageSize(width=image.width, height=image.height)
                mime_type = Image.MIME.get(image.format or "", "image/png")
        except UnidentifiedImageError as e:
            raise RecognitionError(f"이미지를 열 수 없습니다: {e}") from e

        client = genai.Client(api_key=self._api_key)
        try:
            response = client.models.generate_content(
                model=self._model,
                contents=[
                    RECOGNIZE_PROMPT.format(width=size.width, height=size.height),
                    types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                ],
            )
        except Exception as e:
            raise RecognitionError(f"Gemini 비전 호출 실패: {e}") from e

        if not response.text:
            raise RecognitionError("빈 응답")

        spans = parse_vision_response(response.text)
        if not spans:
            logger.warning(f"비전 응답에서 텍스트 영역을 찾지 못함: {response.text[:200]!r}")
        logger.info(f"Gemini 비전 인식 완료: {len(spans)}개 영역")
        return RecognitionResult(engine="gemini_vision", spans=spans, image_size=size)
