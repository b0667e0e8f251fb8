"""Gemini 기반 번역 구현체"""

# pyright: reportMissingTypeStubs=false

import logging

from google import genai
from google.genai import types

from imgtrans.services.translation.base import TranslationError

logger = logging.getLogger(__name__)


class GeminiTranslation:
    """Google Gemini API를 사용한 텍스트 번역"""

    name = "gemini"

    def __init__(self, api_key: str, model: str, timeout: int = 60) -> None:
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        if not self._api_key:
            raise TranslationError("GEMINI_API_KEY가 설정되지 않았습니다")
        if self._client is None:
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=self._timeout * 1000),
            )
        return self._client

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        client = self._get_client()
        try:
            response = await client.aio.models.generate_content(
                model=self._model,
                contents=user_prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    temperature=0,
                ),
            )
        except Exception as e:
            raise TranslationError(f"Gemini API 호출 실패: {e}") from e

        if not response.text:
            raise TranslationError("빈 응답")

        return response.text.strip()
