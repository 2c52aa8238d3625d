"""OpenAI access for the summarizer, configured from the environment.

``OPENAI_API_KEY`` is required; ``OPENAI_MODEL`` and ``OPENAI_ORG`` are
optional. Responses are flattened to plain dicts so callers and tests never
depend on SDK response classes.
"""
from __future__ import annotations

import importlib
import os
import types
from typing import Any, Dict, List, Optional

DEFAULT_MODEL = "gpt-4.1"


class OpenAIClientError(RuntimeError):
    """The OpenAI client cannot be configured."""


def default_model() -> str:
    return os.getenv("OPENAI_MODEL", "").strip() or DEFAULT_MODEL


def get_openai_client() -> types.ModuleType:
    """Return the ``openai`` module with credentials applied.

    Imported on first use, so tests can put a stub in ``sys.modules``.
    """

    openai = importlib.import_module("openai")
    if getattr(openai, "api_key", None):
        return openai

    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise OpenAIClientError("OPENAI_API_KEY is not set")
    openai.api_key = api_key
    if os.getenv("OPENAI_ORG"):
        openai.organization = os.getenv("OPENAI_ORG")
    return openai


def chat_completion(
    messages: List[Dict[str, str]],
    *,
    model: Optional[str] = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Run one chat completion and return ``{"choices": [...], "model": ...}``.

    Extra keyword arguments (``temperature``, ``timeout``) go straight to
    ``chat.completions.create``.
    """

    openai = get_openai_client()
    completion = openai.chat.completions.create(
        model=model or default_model(), messages=messages, **kwargs
    )
    if isinstance(completion, dict):
        return completion

    return {
        "choices": [
            {"message": {"content": choice.message.content}}
            for choice in completion.choices
        ],
        "model": completion.model,
    }
