"""Recognition Protocol

교체 가능한 OCR 구현을 위한 인터페이스 정의.
모든 좌표는 원본 이미지 기준 절대 좌표(px).
"""

from typing import Protocol

from imgtrans.services.recognition.schemas import RecognitionResult


class RecognitionError(Exception):
    pass


class Recognizer(Protocol):
    """텍스트 인식 인터페이스

    구현체:
    - TesseractRecognition: 로컬 Tesseract
    - GeminiVisionRecognition: Google Gemini 비전 모델
    """

    @property
    def variant(self) -> str:
        """결과 캐시 키에 들어가는 인식기 식별자 (엔진 + 주요 설정)"""
        ...

    @property
    def configured(self) -> bool: ...

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        """이미지에서 텍스트 영역 인식

        Raises:
            RecognitionError: 이미지 로드 실패, 엔진 호출 실패
        """
        ...
