"""Recognition 모듈

사용법:
    from imgtrans.services.recognition import get_recognizer

    recognizer = get_recognizer()
    result = recognizer.recognize(image_bytes)

백엔드 선택 (.env RECOGNITION_PROVIDER):
    - "tesseract": 로컬 Tesseract (기본값)
    - "gemini_vision": Google Gemini 비전 모델
"""

from imgtrans.config import get_settings
from imgtrans.services.recognition.base import RecognitionError, Recognizer
from imgtrans.services.recognition.gemini_vision import GeminiVisionRecognition
from imgtrans.services.recognition.schemas import RecognitionResult, RecognizedSpan
from imgtrans.services.recognition.tesseract import TesseractRecognition

__all__ = [
    "RecognitionError",
    "RecognitionResult",
    "RecognizedSpan",
    "Recognizer",
    "get_recognizer",
    "set_recognizer",
]

_recognizer: Recognizer | None = None


def get_recognizer() -> Recognizer:
    """설정에 따라 recognition 백엔드 반환"""
    global _recognizer
    if _recognizer is None:
        settings = get_settings()
        if settings.recognition_provider == "tesseract":
            _recognizer = TesseractRecognition(
                lang=settings.tesseract_lang,
                min_confidence=settings.min_confidence,
                min_size=settings.min_region_size,
            )
        elif settings.recognition_provider == "gemini_vision":
            _recognizer = GeminiVisionRecognition(
                api_key=settings.gemini_api_key,
                model=settings.gemini_model,
            )
        else:
            raise ValueError(f"Unknown recognition provider: {settings.recognition_provider!r}")
    return _recognizer


def set_recognizer(recognizer: Recognizer | None) -> None:
    """recognition 백엔드 설정 (테스트용)"""
    global _recognizer
    _recognizer = recognizer
