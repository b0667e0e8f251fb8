"""GeminiVisionRecognition 구현체 테스트"""

from unittest.mock import MagicMock, patch

import pytest

from imgtrans.services.recognition.base import RecognitionError
from imgtrans.services.recognition.gemini_vision import (
    GeminiVisionRecognition,
    parse_vision_response,
)
from tests.conftest import make_test_image

GEMINI_MODULE = "imgtrans.services.recognition.gemini_vision"

MOCK_RESPONSE = '"SuperAGI Architecture" [10, 20, 200, 50]\n"Vector DB" [30, 100, 100, 130]'


class TestParseVisionResponse:
    def test_parses_lines(self) -> None:
        spans = parse_vision_response(MOCK_RESPONSE)

        assert [s.text for s in spans] == ["SuperAGI Architecture", "Vector DB"]
        assert spans[0].box == (10, 20, 190, 30)

    def test_accepts_parentheses_and_escaped_newlines(self) -> None:
        spans = parse_vision_response('"A" (1, 2, 11, 12)\\n"B" [5 5 15 25]')
        assert [s.text for s in spans] == ["A", "B"]

    def test_ignores_malformed_lines(self) -> None:
        spans = parse_vision_response('Here is the result:\n"A" [1, 2, 11, 12]\n"B" [oops]')
        assert [s.text for s in spans] == ["A"]

    def test_degenerate_box_gets_min_size(self) -> None:
        span = parse_vision_response('"A" [10, 10, 10, 10]')[0]
        assert span.box == (10, 10, 1, 1)


class TestGeminiVisionRecognition:
    def setup_method(self) -> None:
        self.recognizer = GeminiVisionRecognition(api_key="test-key", model="test-model")

    def test_variant_includes_model(self) -> None:
        assert self.recognizer.variant == "gemini-vision-test-model"

    def test_recognize(self) -> None:
        with patch(f"{GEMINI_MODULE}.genai") as mock_genai:
            mock_response = MagicMock()
            mock_response.text = MOCK_RESPONSE
            generate = mock_genai.Client.return_value.models.generate_content
            generate.return_value = mock_response

            result = self.recognizer.recognize(make_test_image(320, 240).getvalue())

        assert result.engine == "gemini_vision"
        assert len(result.spans) == 2
        prompt = generate.call_args.kwargs["contents"][0]
        assert "320x240" in prompt

    def test_no_api_key_raises(self) -> None:
        recognizer = GeminiVisionRecognition(api_key="", model="test-model")

        with pytest.raises(RecognitionError):
            recognizer.recognize(make_test_image().getvalue())

        assert not recognizer.configured

    def test_invalid_image_raises(self) -> None:
        with pytest.raises(RecognitionError, match="이미지"):
            self.recognizer.recognize(b"not an image")

    def test_api_error_is_wrapped(self) -> None:
        with patch(f"{GEMINI_MODULE}.genai") as mock_genai:
            mock_genai.Client.return_value.models.generate_content.side_effect = RuntimeError("503")

            with pytest.raises(RecognitionError, match="503"):
                self.recognizer.recognize(make_test_image().getvalue())

    def test_empty_response_raises(self) -> None:
        with patch(f"{GEMINI_MODULE}.genai") as mock_genai:
            mock_response = MagicMock()
            mock_response.text = ""
            mock_genai.Client.return_value.models.generate_content.return_value = mock_response

            with pytest.raises(RecognitionError, match="빈 응답"):
                self.recognizer.recognize(make_test_image().getvalue())

    def test_unparseable_response_returns_no_spans(self) -> None:
        with patch(f"{GEMINI_MODULE}.genai") as mock_genai:
            mock_response = MagicMock()
            mock_response.text = "I cannot see any text."
            mock_genai.Client.return_value.models.generate_content.return_value = mock_response

            result = self.recognizer.recognize(make_test_image().getvalue())

        assert result.spans == []
