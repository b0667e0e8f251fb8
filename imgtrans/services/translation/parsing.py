"""일괄 번역 요청/응답 형식

LLM 응답은 형식을 완벽히 지키지 않으므로 결과를 태그된 타입으로 돌려준다.
- Ok: 요청 개수와 같은 번역 목록
- ParseError: 응답은 왔지만 형식/개수 불일치
- ProviderFailure: 호출 자체 실패
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Protocol

_ORDINAL_RE = re.compile(r"^\s*\d+\.\s*")
_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


class FormatMismatchError(Exception):
    """응답 개수 불일치 또는 파싱 실패"""

    def __init__(self, message: str, expected: int | None = None, received: int | None = None):
        super().__init__(message)
        self.expected = expected
        self.received = received


@dataclass(frozen=True)
class Ok:
    value: list[str]


@dataclass(frozen=True)
class ParseError:
    raw: str
    error: FormatMismatchError


@dataclass(frozen=True)
class ProviderFailure:
    cause: Exception


ProviderReply = Ok | ParseError | ProviderFailure


class BatchFormat(Protocol):
    name: str
    reply_instruction: str

    def build_payload(self, texts: list[str]) -> str: ...

    def parse(self, raw: str, expected: int) -> list[str]:
        """Raises: FormatMismatchError"""
        ...


def _single_line(text: str) -> str:
    return " ".join(text.split())


def _check_count(received: int, expected: int) -> None:
    if received != expected:
        raise FormatMismatchError(
            f"응답 개수({received})가 요청 개수({expected})와 다릅니다",
            expected=expected,
            received=received,
        )


class NumberedListFormat:
    """`1. text` 줄 단위 입출력

    두 번역이 한 줄로 합쳐진 응답도 개수 불일치로 처리한다 (보정하지 않음).
    """

    name = "numbered"
    reply_instruction = (
        "The input is a numbered list. You MUST reply with a numbered list of the translations, "
        "in the exact same order."
    )

    def build_payload(self, texts: list[str]) -> str:
        return "\n".join(f"{i}. {_single_line(text)}" for i, text in enumerate(texts, start=1))

    def parse(self, raw: str, expected: int) -> list[str]:
        lines = [line for line in raw.split("\n") if line.strip()]
        _check_count(len(lines), expected)
        return [_ORDINAL_RE.sub("", line).strip() for line in lines]


class JsonArrayFormat:
    """`[{"id": 0, "text": "..."}]` 입력, 문자열 배열 또는 {id, text} 배열 응답"""

    name = "json"
    reply_instruction = (
        'The input is a JSON array of {"id", "text"} objects. You MUST reply with a JSON array of '
        'objects {"id": <same id>, "text": <translation>} in the exact same order.'
    )

    def build_payload(self, texts: list[str]) -> str:
        items = [{"id": i, "text": text} for i, text in enumerate(texts)]
        return json.dumps(items, ensure_ascii=False)

    def parse(self, raw: str, expected: int) -> list[str]:
        match = _JSON_ARRAY_RE.search(raw)
        if not match:
            raise FormatMismatchError("응답에서 JSON 배열을 찾을 수 없습니다", expected=expected)

        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise FormatMismatchError(f"JSON 파싱 실패: {e}", expected=expected) from e

        if not isinstance(data, list):
            raise FormatMismatchError("응답이 리스트가 아님", expected=expected)

        _check_count(len(data), expected)
        if all(isinstance(item, dict) and "id" in item for item in data):
            return self._by_id(data, expected)
        return [self._item_text(item) for item in data]

    def _by_id(self, data: list[dict[str, Any]], expected: int) -> list[str]:
        by_id: dict[int, str] = {}
        for item in data:
            try:
                by_id[int(item["id"])] = self._item_text(item)
            except (TypeError, ValueError) as e:
                raise FormatMismatchError(f"잘못된 id: {item.get('id')!r}") from e

        if sorted(by_id) != list(range(expected)):
            raise FormatMismatchError(
                f"id 집합 불일치: {sorted(by_id)}", expected=expected, received=len(by_id)
            )
        return [by_id[i] for i in range(expected)]

    @staticmethod
    def _item_text(item: Any) -> str:
        if isinstance(item, str):
            return item
        if isinstance(item, dict) and isinstance(item.get("text"), str):
            return item["text"]
        raise FormatMismatchError(f"번역 항목 형식 오류: {item!r}")


BATCH_FORMATS: dict[str, BatchFormat] = {
    NumberedListFormat.name: NumberedListFormat(),
    JsonArrayFormat.name: JsonArrayFormat(),
}


def get_batch_format(name: str) -> BatchFormat:
    try:
        return BATCH_FORMATS[name]
    except KeyError:
        raise ValueError(f"Unknown batch format: {name!r}") from None


def parse_reply(batch_format: BatchFormat, raw: str, expected: int) -> Ok | ParseError:
    try:
        return Ok(batch_format.parse(raw, expected))
    except FormatMismatchError as e:
        return ParseError(raw=raw, error=e)
