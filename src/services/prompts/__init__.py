"""Prompts module - centralized prompt templates for AI services.

Re-exports all prompt constants and utilities for easy importing:
    from services.prompts import PROMPT_VERSIONS, strip_markdown_code_blocks
    from services.prompts import OUTLINE_GENERATOR, STORYBOARD_PAGE
"""

from services.prompts._base import strip_markdown_code_blocks
from services.prompts.outline import (
    OUTLINE_GENERATOR,
    OUTLINE_GENERATOR_CHARACTER,
    STEP_CHARACTER_RULE,
    STEP_REGENERATOR,
)
from services.prompts.storyboard import (
    AD_PHOTO_STYLE_GUIDE,
    AD_STYLE_GUIDE,
    NARRATIVE_PHOTO_STYLE_GUIDE,
    NARRATIVE_STYLE_GUIDE,
    REAL_PERSON_DIRECTIVE,
    STORYBOARD_PAGE,
)

# Prompt version identifiers, logged with every provider call
# IMPORTANT: Increment these when prompts change
PROMPT_VERSIONS = {
    "generate_outline": "v2",  # v2: at least N scenes instead of exactly 5
    "generate_outline_character": "v1",
    "regenerate_step": "v1",
    "storyboard_page": "v2",  # v2: photorealistic branch for character focus
}

__all__ = [
    # Utilities
    "strip_markdown_code_blocks",
    # Version tracking
    "PROMPT_VERSIONS",
    # Outline prompts
    "OUTLINE_GENERATOR",
    "OUTLINE_GENERATOR_CHARACTER",
    "STEP_REGENERATOR",
    "STEP_CHARACTER_RULE",
    # Storyboard prompts
    "STORYBOARD_PAGE",
    "AD_STYLE_GUIDE",
    "NARRATIVE_STYLE_GUIDE",
    "AD_PHOTO_STYLE_GUIDE",
    "NARRATIVE_PHOTO_STYLE_GUIDE",
    "REAL_PERSON_DIRECTIVE",
]
