"""Translation Protocol

교체 가능한 LLM 번역 백엔드 인터페이스.
프롬프트 구성과 응답 파싱은 coordinator 책임이고, 백엔드는 텍스트 완성만 담당한다.
"""

from typing import Protocol


class TranslationError(Exception):
    pass


class TranslationProvider(Protocol):
    """LLM 텍스트 완성 인터페이스

    구현체:
    - GeminiTranslation: Google Gemini API
    - OpenAICompatibleTranslation: OpenAI 호환 Chat Completions (DeepSeek 등)
    """

    name: str

    @property
    def configured(self) -> bool:
        """API 키 등 호출에 필요한 설정이 있는지"""
        ...

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """system 지시 + user 페이로드로 한 번 호출하고 응답 텍스트 반환

        Raises:
            TranslationError: API 키 누락, 호출 실패, 빈 응답
        """
        ...
