"""Base utilities for prompts module.

Contains shared helper functions used across prompt modules.
"""

import re

_FENCE_PATTERN = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


def strip_markdown_code_blocks(text: str) -> str:
    """Strip markdown code fences from AI response text.

    Removes every ```json / ``` marker, not only leading and trailing ones,
    so a fenced block wrapped in stray whitespace still parses.

    Args:
        text: Raw text that may contain markdown code blocks

    Returns:
        Cleaned text with markdown code fences removed
    """
    return _FENCE_PATTERN.sub("", text).strip()
