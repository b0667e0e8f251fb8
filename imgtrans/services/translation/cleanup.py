"""LLM 응답 후처리 (순수 함수)"""

import re
from collections.abc import Iterable

from imgtrans.constants import BOILERPLATE_MARKERS

# "Translation:", "翻译结果：", "以下是中文的翻译：" 등 응답 앞머리
_PREAMBLE_RE = re.compile(
    r"^\s*(?:翻译结果\s*[:：]?|(?:Translated Text|Translation)\s*[:：]|以下是.*?的翻译\s*[:：])\s*",
    re.IGNORECASE | re.DOTALL,
)
# 프롬프트의 작업 설명 블록이 응답에 섞여 나오는 경우
_TASK_BLOCK_RE = re.compile(r"【[^】]*?翻译任务[^】]*?】.*?【", re.DOTALL)
_RULES_BLOCK_RE = re.compile(r"【[^】]*?处理原则[^】]*?】.*", re.DOTALL)

_QUOTE_PAIRS = (
    ('"', '"'),
    ("'", "'"),
    ("“", "”"),
    ("‘", "’"),
    ("「", "」"),
    ("『", "』"),
)


def strip_translation(result: str | None) -> str | None:
    """머리말/작업 설명/감싸는 따옴표 제거

    정리 후 남는 내용이 없으면 None (번역 실패로 취급).
    """
    if not result:
        return None

    cleaned = _PREAMBLE_RE.sub("", result, count=1)
    cleaned = _TASK_BLOCK_RE.sub("【", cleaned)
    cleaned = _RULES_BLOCK_RE.sub("", cleaned)
    cleaned = _strip_quotes(cleaned.strip()).strip()
    return cleaned or None


def _strip_quotes(text: str) -> str:
    if len(text) < 2:
        return text
    for opening, closing in _QUOTE_PAIRS:
        if text.startswith(opening) and text.endswith(closing):
            return text[1:-1]
    return text


def is_boilerplate(text: str, markers: Iterable[str] = BOILERPLATE_MARKERS) -> bool:
    """워터마크/저작권 문구 여부"""
    return any(marker in text for marker in markers)


def normalize_text(text: str) -> str:
    """캐시 키용 정규화 (앞뒤 공백 제거, 연속 공백 축약)"""
    return " ".join(text.split())
