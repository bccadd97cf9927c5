"""Tests for AI provider implementations.

Shared behaviour (_parse, _build_system_prompt, _build_user_prompt, review)
lives in BaseReviewModel and is tested once via a lightweight stub — not
duplicated per provider. Provider-specific tests cover only what differs
between implementations: the SDK client setup and _call_api.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from vibereview_core.models import Finding
from vibereview_core.providers.anthropic import AnthropicReviewModel
from vibereview_core.providers.base import BaseReviewModel, ReviewModelError
from vibereview_core.providers.openai import OpenAIReviewModel
from vibereview_core.providers.registry import PROVIDERS, create_review_model

VALID_JSON = json.dumps(
    {
        "summary": "Mostly fine.",
        "comments": [{"line": 3, "severity": "warning", "message": "Missing error handling"}],
    }
)


class _StubModel(BaseReviewModel):
    DEFAULT_MODEL = "stub-1"

    def __init__(self, raw=VALID_JSON, model=None):
        super().__init__(model)
        self.raw = raw
        self.calls = []

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        return self.raw


# ---------------------------------------------------------------------------
# Shared behaviour — tested once through the stub, not per provider
# ---------------------------------------------------------------------------


class TestParse:
    def test_parses_valid_json(self):
        result = _StubModel()._parse(VALID_JSON)
        assert result.summary == "Mostly fine."
        assert result.findings == [Finding(line=3, severity="warning", message="Missing error handling")]

    def test_strips_markdown_code_fences(self):
        result = _StubModel()._parse(f"```json\n{VALID_JSON}\n```")
        assert len(result.findings) == 1

    def test_preserves_code_blocks_inside_messages(self):
        payload = json.dumps(
            {
                "summary": "s",
                "comments": [{"line": 5, "severity": "suggestion", "message": "Use:\n```python\nfoo()\n```"}],
            }
        )
        result = _StubModel()._parse(f"```json\n{payload}\n```")
        assert "```python" in result.findings[0].message

    def test_empty_comments_list(self):
        result = _StubModel()._parse(json.dumps({"summary": "LGTM", "comments": []}))
        assert result.summary == "LGTM"
        assert result.findings == []

    def test_missing_comments_means_no_findings(self):
        assert _StubModel()._parse(json.dumps({"summary": "LGTM"})).findings == []

    def test_unknown_severity_becomes_info(self):
        payload = json.dumps({"summary": "s", "comments": [{"line": 1, "severity": "blocker", "message": "m"}]})
        assert _StubModel()._parse(payload).findings[0].severity == "info"

    @pytest.mark.parametrize(
        "raw",
        [
            "not json at all",
            "[]",
            json.dumps({"comments": []}),
            json.dumps({"summary": "s", "comments": {}}),
            json.dumps({"summary": "s", "comments": ["oops"]}),
            json.dumps({"summary": "s", "comments": [{"severity": "info", "message": "m"}]}),
            json.dumps({"summary": "s", "comments": [{"line": "3", "severity": "info", "message": "m"}]}),
            json.dumps({"summary": "s", "comments": [{"line": True, "severity": "info", "message": "m"}]}),
            json.dumps({"summary": "s", "comments": [{"line": 3, "severity": "info"}]}),
        ],
    )
    def test_non_conforming_response_raises(self, raw):
        with pytest.raises(ReviewModelError):
            _StubModel()._parse(raw)


class TestPrompts:
    def test_system_prompt_carries_depth_language_and_instruction(self):
        prompt = _StubModel()._build_system_prompt("quick", "german", "Check for SQL injection")
        assert "Review Level: QUICK" in prompt
        assert "Focus only on critical bugs" in prompt
        assert "Provide feedback in german" in prompt
        assert "Additional Instructions: Check for SQL injection" in prompt

    def test_system_prompt_without_custom_instruction(self):
        prompt = _StubModel()._build_system_prompt("comprehensive", "english")
        assert "Additional Instructions" not in prompt
        assert "Perform a thorough review" in prompt

    def test_system_prompt_describes_schema(self):
        prompt = _StubModel()._build_system_prompt("standard", "english")
        assert '"summary"' in prompt
        assert '"comments"' in prompt
        assert "critical" in prompt

    def test_user_prompt_contains_filename_and_diff(self):
        prompt = _StubModel()._build_user_prompt("src/foo.py", "+x = 1")
        assert "src/foo.py" in prompt
        assert "```diff\n+x = 1\n```" in prompt


class TestReview:
    def test_review_builds_prompts_and_parses(self):
        model = _StubModel()
        result = model.review("f.py", "+x", "standard", "english", "")
        assert result.summary == "Mostly fine."
        system, user = model.calls[0]
        assert "STANDARD" in system
        assert "f.py" in user

    def test_api_failure_is_not_retried(self):
        class _AlwaysFail(_StubModel):
            def _call_api(self, system_prompt, user_prompt):
                self.calls.append(1)
                raise ConnectionError("network down")

        model = _AlwaysFail()
        with pytest.raises(ReviewModelError, match="network down"):
            model.review("f.py", "+x", "standard", "english")
        assert len(model.calls) == 1

    def test_empty_reply_raises(self):
        with pytest.raises(ReviewModelError):
            _StubModel(raw="").review("f.py", "+x", "standard", "english")

    def test_default_model_used_when_none_given(self):
        assert _StubModel().model == "stub-1"
        assert _StubModel(model="custom").model == "custom"


# ---------------------------------------------------------------------------
# Provider-specific — only what differs between Anthropic and OpenAI
# ---------------------------------------------------------------------------


class TestAnthropicReviewModel:
    def test_raises_import_error_without_sdk(self):
        with patch.dict("sys.modules", {"anthropic": None}):
            with pytest.raises(ImportError):
                AnthropicReviewModel(api_key="key")

    def test_default_model_is_claude(self):
        assert "claude" in AnthropicReviewModel.DEFAULT_MODEL

    def test_call_api_joins_text_blocks(self):
        pytest.importorskip("anthropic")
        from anthropic.types import TextBlock

        model = AnthropicReviewModel(api_key="key", model="claude-test")
        model.client = MagicMock()
        model.client.messages.create.return_value.content = [
            TextBlock(type="text", text=VALID_JSON),
        ]
        assert model._call_api("sys", "user") == VALID_JSON
        kwargs = model.client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["system"] == "sys"
        assert kwargs["max_tokens"] == 2000

    def test_call_api_without_text_raises(self):
        pytest.importorskip("anthropic")
        model = AnthropicReviewModel(api_key="key")
        model.client = MagicMock()
        model.client.messages.create.return_value.content = []
        with pytest.raises(ReviewModelError):
            model._call_api("sys", "user")


class TestOpenAIReviewModel:
    def test_raises_import_error_without_sdk(self):
        import vibereview_core.providers.openai as openai_mod

        real_openai = openai_mod._OpenAI
        openai_mod._OpenAI = None
        try:
            with pytest.raises(ImportError):
                OpenAIReviewModel(api_key="key")
        finally:
            openai_mod._OpenAI = real_openai

    def test_default_model_is_gpt(self):
        assert "gpt" in OpenAIReviewModel.DEFAULT_MODEL

    def test_call_api_requests_json_mode(self, mocker):
        mocker.patch("vibereview_core.providers.openai._OpenAI", MagicMock())
        model = OpenAIReviewModel(api_key="key")
        message = MagicMock()
        message.content = VALID_JSON
        model.client.chat.completions.create.return_value.choices = [MagicMock(message=message)]

        assert model._call_api("sys", "user") == VALID_JSON
        kwargs = model.client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.3

    def test_call_api_empty_choice_raises(self, mocker):
        mocker.patch("vibereview_core.providers.openai._OpenAI", MagicMock())
        model = OpenAIReviewModel(api_key="key")
        model.client.chat.completions.create.return_value.choices = []
        with pytest.raises(ReviewModelError):
            model._call_api("sys", "user")


class TestRegistry:
    def test_known_providers(self):
        assert set(PROVIDERS) == {"anthropic", "openai"}

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match="Unknown model provider"):
            create_review_model("llama", "key")

    def test_creates_configured_provider(self, mocker):
        mocker.patch("vibereview_core.providers.openai._OpenAI", MagicMock())
        model = create_review_model("openai", "key", "gpt-4o")
        assert isinstance(model, OpenAIReviewModel)
        assert model.model == "gpt-4o"
