"""
Dayboard AI Engine

LiteLLM-powered chat and day summaries. Summaries fall back to a plain
template when no model is configured or the call fails.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from litellm import completion
from litellm.exceptions import APIError, RateLimitError, Timeout

from .config import settings
from .errors import AIError, AINotConfigured, AIQuotaExceeded, AIRateLimited, AITimeout
from .health import get_health_monitor

logger = logging.getLogger(__name__)


@dataclass
class TodoItem:
    """A to-do as seen by the summariser."""
    title: str
    is_completed: bool


@dataclass
class DaySummaryContext:
    """Everything the summary is built from."""
    date: str
    daily_note: Optional[str] = None
    todos: List[TodoItem] = field(default_factory=list)

    @property
    def completed(self) -> int:
        return sum(1 for t in self.todos if t.is_completed)

    @property
    def pending(self) -> int:
        return len(self.todos) - self.completed


@dataclass
class SummaryResult:
    """Result of summary generation."""
    content: str
    generated_by: str  # model name, or "template"
    tokens_used: int = 0


def template_summary(context: DaySummaryContext) -> str:
    """Summary built without a model: task counts and note length."""
    if context.todos:
        todo_line = f"{len(context.todos)} tasks: {context.completed} completed, {context.pending} pending"
    else:
        todo_line = "No tasks for the day"

    if context.daily_note and context.daily_note.strip():
        words = len(context.daily_note.split())
        note_line = f"You wrote {words} word{'s' if words != 1 else ''} in your notes."
    else:
        note_line = "No notes recorded"

    return f"Summary for {context.date}:\n\n• {todo_line}\n• {note_line}"


class DayboardAI:
    """
    AI engine for Dayboard.

    Uses LiteLLM for model-agnostic AI calls.
    """

    SYSTEM_PROMPT_SUMMARY = """You are the assistant inside a personal day planner.

Given the user's note and to-do list for one day, write a short summary of the day: what got done, what is still open, and anything notable from the note.

Keep it under 100 words. Plain prose, no headings. Be specific and do not invent facts."""

    SYSTEM_PROMPT_CHAT = """You are the assistant inside a personal day planner. Help the user plan, reflect on and organise their day. Be concise and practical."""

    def __init__(
        self,
        model: str = None,
        api_key: str = None,
        timeout: float = None
    ):
        self.model = model or settings.litellm_model
        self.api_key = api_key if api_key is not None else settings.get_ai_api_key()
        self.timeout = timeout or settings.ai_timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _call_llm(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 500
    ):
        """
        Make a completion call.

        Returns: (response_text, total_tokens)

        Raises:
            AINotConfigured, AITimeout, AIRateLimited, AIQuotaExceeded, AIError
        """
        if not self.configured:
            raise AINotConfigured("No AI API key configured")

        try:
            response = completion(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=self.timeout,
                api_key=self.api_key
            )
        except Timeout as e:
            raise AITimeout(str(e)) from e
        except RateLimitError as e:
            if "quota" in str(e).lower():
                raise AIQuotaExceeded(str(e)) from e
            raise AIRateLimited(str(e)) from e
        except APIError as e:
            raise AIError(f"LiteLLM API error: {e}") from e
        except Exception as e:
            raise AIError(f"AI call failed: {e}") from e

        content = response.choices[0].message.content or ""
        total_tokens = response.usage.total_tokens if getattr(response, "usage", None) else 0
        return content, total_tokens

    def chat(self, messages: List[Dict[str, str]]) -> str:
        """Answer a conversation of user/assistant turns."""
        content, _ = self._call_llm(
            [{"role": "system", "content": self.SYSTEM_PROMPT_CHAT}] + messages,
            temperature=0.7,
            max_tokens=500
        )
        return content

    def generate_summary(self, context: DaySummaryContext) -> SummaryResult:
        """Summarise a day, falling back to the template on any AI failure."""
        if not self.configured:
            return SummaryResult(content=template_summary(context), generated_by="template")

        lines = [f"Date: {context.date}", ""]
        if context.todos:
            lines.append("To-dos:")
            for todo in context.todos:
                lines.append(f"- [{'x' if todo.is_completed else ' '}] {todo.title}")
        else:
            lines.append("To-dos: none")
        lines.append("")
        lines.append(f"Note: {context.daily_note.strip() if context.daily_note else '(empty)'}")

        try:
            content, tokens = self._call_llm(
                [
                    {"role": "system", "content": self.SYSTEM_PROMPT_SUMMARY},
                    {"role": "user", "content": "\n".join(lines)}
                ],
                temperature=0.5,
                max_tokens=250
            )
        except AIError as e:
            logger.warning("AI summary for %s failed, using template: %s", context.date, e)
            get_health_monitor().record_error("ai", str(e), {"date": context.date, "kind": type(e).__name__})
            return SummaryResult(content=template_summary(context), generated_by="template")

        if not content.strip():
            return SummaryResult(content=template_summary(context), generated_by="template")
        return SummaryResult(content=content.strip(), generated_by=self.model, tokens_used=tokens)


# Singleton instance
_ai_instance: Optional[DayboardAI] = None


def get_ai() -> DayboardAI:
    """Get or create the AI engine singleton."""
    global _ai_instance
    if _ai_instance is None:
        _ai_instance = DayboardAI()
    return _ai_instance
