"""OpenAI 호환 Chat Completions 번역 구현체

base_url만 바꾸면 DeepSeek 등 호환 API에도 그대로 사용된다.
"""

import logging

from openai import AsyncOpenAI, OpenAIError

from imgtrans.services.translation.base import TranslationError

logger = logging.getLogger(__name__)


class OpenAICompatibleTranslation:
    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout: int = 60,
        max_tokens: int = 4000,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url or None
        self._timeout = timeout
        self._max_tokens = max_tokens
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if not self._api_key:
            raise TranslationError("OPENAI_API_KEY가 설정되지 않았습니다")
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._api_key, base_url=self._base_url, timeout=self._timeout
            )
        return self._client

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=0,
                max_tokens=self._max_tokens,
            )
        except OpenAIError as e:
            raise TranslationError(f"API 호출 실패: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            raise TranslationError("응답 형식이 올바르지 않습니다")

        return response.choices[0].message.content.strip()
