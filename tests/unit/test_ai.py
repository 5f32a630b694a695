"""
Unit tests for AI module.

Tests the template summary, LLM error mapping and summary fallback.
"""

import pytest
from unittest.mock import patch

from litellm.exceptions import RateLimitError, Timeout

from dayboard.ai import (
    DayboardAI, DaySummaryContext, SummaryResult, TodoItem, template_summary
)
from dayboard.errors import (
    AIError, AINotConfigured, AIQuotaExceeded, AIRateLimited, AITimeout
)


@pytest.fixture
def context():
    return DaySummaryContext(
        date="2025-01-15",
        daily_note="Bought milk and fixed the bike",
        todos=[
            TodoItem(title="Buy milk", is_completed=True),
            TodoItem(title="Fix bike", is_completed=True),
            TodoItem(title="Call mum", is_completed=False),
        ]
    )


@pytest.fixture
def ai():
    return DayboardAI(model="test-model", api_key="test-key", timeout=1)


class TestDaySummaryContext:
    """Tests for DaySummaryContext."""

    def test_counts(self, context):
        assert context.completed == 2
        assert context.pending == 1

    def test_empty_defaults(self):
        empty = DaySummaryContext(date="2025-01-15")

        assert empty.todos == []
        assert empty.completed == 0
        assert empty.pending == 0


class TestTemplateSummary:
    """Tests for the model-free summary."""

    def test_with_tasks_and_note(self, context):
        summary = template_summary(context)

        assert summary.startswith("Summary for 2025-01-15:")
        assert "3 tasks: 2 completed, 1 pending" in summary
        assert "You wrote 6 words in your notes." in summary

    def test_single_word_note(self):
        summary = template_summary(DaySummaryContext(date="2025-01-15", daily_note="Rested"))

        assert "You wrote 1 word in your notes." in summary

    def test_empty_day(self):
        summary = template_summary(DaySummaryContext(date="2025-01-15", daily_note="   "))

        assert "No tasks for the day" in summary
        assert "No notes recorded" in summary


class TestCallLLM:
    """Tests for completion calls and error mapping."""

    def test_not_configured(self):
        engine = DayboardAI(model="test-model", api_key="", timeout=1)

        assert not engine.configured
        with pytest.raises(AINotConfigured):
            engine.chat([{"role": "user", "content": "hi"}])

    @patch('dayboard.ai.completion')
    def test_chat_prepends_system_prompt(self, mock_completion, ai, mock_completion_response):
        mock_completion.return_value = mock_completion_response("Plan the morning first.")

        reply = ai.chat([{"role": "user", "content": "How should I start?"}])

        assert reply == "Plan the morning first."
        kwargs = mock_completion.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["timeout"] == 1
        assert kwargs["messages"][0]["role"] == "system"
        assert kwargs["messages"][1] == {"role": "user", "content": "How should I start?"}

    @patch('dayboard.ai.completion')
    def test_timeout(self, mock_completion, ai):
        mock_completion.side_effect = Timeout(message="timed out", model="test-model", llm_provider="openai")

        with pytest.raises(AITimeout):
            ai.chat([{"role": "user", "content": "hi"}])

    @patch('dayboard.ai.completion')
    def test_rate_limited(self, mock_completion, ai):
        mock_completion.side_effect = RateLimitError(
            message="Too many requests", llm_provider="openai", model="test-model"
        )

        with pytest.raises(AIRateLimited):
            ai.chat([{"role": "user", "content": "hi"}])

    @patch('dayboard.ai.completion')
    def test_quota_exceeded(self, mock_completion, ai):
        mock_completion.side_effect = RateLimitError(
            message="You exceeded your current quota", llm_provider="openai", model="test-model"
        )

        with pytest.raises(AIQuotaExceeded):
            ai.chat([{"role": "user", "content": "hi"}])

    @patch('dayboard.ai.completion')
    def test_unexpected_failure(self, mock_completion, ai):
        mock_completion.side_effect = RuntimeError("boom")

        with pytest.raises(AIError):
            ai.chat([{"role": "user", "content": "hi"}])


class TestGenerateSummary:
    """Tests for DayboardAI.generate_summary."""

    def test_unconfigured_uses_template(self, context):
        engine = DayboardAI(model="test-model", api_key="", timeout=1)

        result = engine.generate_summary(context)

        assert isinstance(result, SummaryResult)
        assert result.generated_by == "template"
        assert result.content == template_summary(context)

    @patch('dayboard.ai.completion')
    def test_uses_model_reply(self, mock_completion, ai, context, mock_completion_response):
        mock_completion.return_value = mock_completion_response("  Two chores done, one call left.  ", 77)

        result = ai.generate_summary(context)

        assert result.content == "Two chores done, one call left."
        assert result.generated_by == "test-model"
        assert result.tokens_used == 77
        prompt = mock_completion.call_args.kwargs["messages"][1]["content"]
        assert "- [x] Buy milk" in prompt
        assert "- [ ] Call mum" in prompt

    @patch('dayboard.ai.completion')
    def test_failure_falls_back_to_template(self, mock_completion, ai, context):
        mock_completion.side_effect = RuntimeError("boom")

        result = ai.generate_summary(context)

        assert result.generated_by == "template"
        assert "3 tasks" in result.content

    @patch('dayboard.ai.completion')
    def test_empty_reply_falls_back_to_template(self, mock_completion, ai, context, mock_completion_response):
        mock_completion.return_value = mock_completion_response("")

        result = ai.generate_summary(context)

        assert result.generated_by == "template"


    @patch('dayboard.ai.completion')
    def test_fallback_is_recorded(self, mock_completion, ai, context):
        """A failed model call still shows up in the health report."""
        from dayboard.health import get_health_monitor

        monitor = get_health_monitor()
        monitor.clear_errors()
        mock_completion.side_effect = Timeout(message="slow", model="test-model", llm_provider="openai")

        ai.generate_summary(context)

        errors = monitor.get_recent_errors()
        monitor.clear_errors()
        assert [(e["type"], e["context"]["kind"]) for e in errors] == [("ai", "AITimeout")]
        assert errors[0]["context"]["date"] == "2025-01-15"
