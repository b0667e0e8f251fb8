"""LLM 응답 후처리 테스트"""

import pytest

from imgtrans.services.translation.cleanup import (
    strip_translation,
    is_boilerplate,
    normalize_text,
)


class TestStripTranslation:
    @pytest.mark.parametrize(
        "raw",
        [
            "Translation: 你好",
            "translation：你好",
            "Translated Text: 你好",
            "翻译结果：你好",
            "翻译结果 你好",
            "以下是中文的翻译：你好",
            '"你好"',
            "“你好”",
            "「你好」",
            "  你好  ",
        ],
    )
    def test_strips_wrappers(self, raw: str) -> None:
        assert strip_translation(raw) == "你好"

    def test_plain_text_unchanged(self) -> None:
        assert strip_translation("智能体") == "智能体"

    def test_english_word_without_colon_is_kept(self) -> None:
        assert strip_translation("Translation memory") == "Translation memory"

    def test_removes_leaked_rules_block(self) -> None:
        raw = "你好\n【处理原则】保持术语一致"
        assert strip_translation(raw) == "你好"

    def test_removes_leaked_task_block(self) -> None:
        raw = "【翻译任务】把下面的文本翻译成中文【你好】"
        assert strip_translation(raw) == "【你好】"

    @pytest.mark.parametrize("raw", [None, "", "Translation:", '""', "   "])
    def test_empty_result_is_none(self, raw: str | None) -> None:
        assert strip_translation(raw) is None

    def test_single_quote_char_not_stripped(self) -> None:
        assert strip_translation('"') == '"'

    def test_mismatched_quotes_kept(self) -> None:
        assert strip_translation('"你好」') == '"你好」'


class TestIsBoilerplate:
    def test_detects_marker(self) -> None:
        assert is_boilerplate("关注公众号获取更多")
        assert is_boilerplate("Copyright 2024")

    def test_normal_text(self) -> None:
        assert not is_boilerplate("Agent Workflow")

    def test_custom_markers(self) -> None:
        assert is_boilerplate("@watermark", markers=("@",))
        assert not is_boilerplate("公众号", markers=("@",))


class TestNormalizeText:
    def test_collapses_whitespace(self) -> None:
        assert normalize_text("  Hello \n  world ") == "Hello world"
