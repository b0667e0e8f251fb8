"""번역 캐시

(정규화된 원문, 대상 언어) → 번역문. 프로세스당 하나를 만들어 coordinator에 주입하고,
clear()를 명시적으로 호출할 때만 비운다. 같은 키의 동시 쓰기는 값이 같으므로 마지막 쓰기가 유지된다.
"""

from imgtrans.services.translation.cleanup import normalize_text


class TranslationCache:
    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], str] = {}

    @staticmethod
    def key(text: str, target_lang: str) -> tuple[str, str]:
        return (normalize_text(text), target_lang)

    def get(self, text: str, target_lang: str) -> str | None:
        return self._entries.get(self.key(text, target_lang))

    def put(self, text: str, target_lang: str, translated: str) -> None:
        self._entries[self.key(text, target_lang)] = translated

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: tuple[str, str]) -> bool:
        text, target_lang = item
        return self.key(text, target_lang) in self._entries
