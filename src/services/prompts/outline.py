"""Outline prompt templates.

Contains prompts for:
- OUTLINE_GENERATOR: classify the idea and expand it into scenes
- OUTLINE_GENERATOR_CHARACTER: same, with a named character focus per scene
- STEP_REGENERATOR: rewrite a single scene in context of the whole outline
"""

# Outline generator prompt
# Template placeholders: {idea}, {min_scenes}
OUTLINE_GENERATOR = """You are a creative story writer. Given the following idea, first determine if this is an advertisement/promotional content or a narrative story, then expand it into a detailed outline with at least {min_scenes} steps/scenes.

User's Idea: "{idea}"

First, analyze the content type:
- If it mentions products, services, brands, marketing, sales, promotion, advertisement, or commercial purposes -> classify as "ad"
- If it tells a story with characters, plot, narrative, or creative storytelling -> classify as "story"

Return your response as a JSON object with this exact structure:
{{
  "contentType": "ad" or "story",
  "steps": [
    {{"number": 1, "title": "...", "description": "..."}},
    {{"number": 2, "title": "...", "description": "..."}},
    {{"number": 3, "title": "...", "description": "..."}},
    {{"number": 4, "title": "...", "description": "..."}},
    {{"number": 5, "title": "...", "description": "..."}}
  ]
}}

Make the outline engaging, cinematic, and appropriate for visual storytelling."""


# Character-focused outline generator prompt
# Template placeholders: {idea}, {min_scenes}
OUTLINE_GENERATOR_CHARACTER = """You are a creative story writer who builds every scene around its characters. Given the following idea, first determine if this is an advertisement/promotional content or a narrative story, then expand it into a detailed outline with at least {min_scenes} steps/scenes.

User's Idea: "{idea}"

First, analyze the content type:
- If it mentions products, services, brands, marketing, sales, promotion, advertisement, or commercial purposes -> classify as "ad"
- If it tells a story with characters, plot, narrative, or creative storytelling -> classify as "story"

CHARACTER RULES:
- Every scene names the character it centers on in "characterFocus"
- If the idea mentions real, named people, they are the main characters: use their real names and describe them doing the action in the foreground
- Describe each scene so the character is prominent in the frame (close-ups, medium shots, clear faces)

Return your response as a JSON object with this exact structure:
{{
  "contentType": "ad" or "story",
  "steps": [
    {{"number": 1, "title": "...", "description": "...", "characterFocus": "..."}},
    {{"number": 2, "title": "...", "description": "...", "characterFocus": "..."}},
    {{"number": 3, "title": "...", "description": "...", "characterFocus": "..."}},
    {{"number": 4, "title": "...", "description": "...", "characterFocus": "..."}},
    {{"number": 5, "title": "...", "description": "...", "characterFocus": "..."}}
  ]
}}

Make the outline engaging, cinematic, and appropriate for visual storytelling."""


# Single-step regeneration prompt
# Template placeholders: {idea}, {step_number}, {outline}, {character_rule}
STEP_REGENERATOR = """You are a creative story writer revising one scene of an existing outline.

Original idea: "{idea}"

Current outline:
{outline}

TASK: Rewrite step {step_number} only. Keep it consistent with the steps before and after it so the story still flows, but take the scene in a fresh direction.
{character_rule}
Return ONLY a JSON object with this exact structure:
{{
  "step": {{"number": {step_number}, "title": "...", "description": "..."{character_field}}}
}}"""

STEP_CHARACTER_RULE = (
    "Name the character the scene centers on in \"characterFocus\"; keep real, "
    "named people from the idea as the main characters.\n"
)
