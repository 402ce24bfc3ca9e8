"""Deterministic stand-ins used when a provider cannot deliver."""

from urllib.parse import quote

from models.story import (
    MIN_SCENE_COUNT,
    ContentClassification,
    SceneStep,
)

QUOTA_EXCEEDED_MESSAGE = (
    "Quota limit reached. Please increase your Google Cloud quota or wait "
    "before generating more images."
)
STORYBOARD_FAILED_MESSAGE = "Failed to generate storyboard. Using placeholder image."
LOCAL_SYNTHESIS_MESSAGE = "Using browser text-to-speech for narration."

# Shown by the wizard next to a placeholder storyboard on quota exhaustion
QUOTA_WARNING = (
    "Google Cloud quota limit reached. The image shown is a placeholder. "
    "To generate the actual storyboard:\n"
    "1. Visit Google Cloud Console\n"
    "2. Request a quota increase for Imagen API\n"
    "3. Wait a few minutes and try again"
)

FILLER_DESCRIPTION = (
    "The story continues as events unfold, carrying the journey toward its "
    "next turning point."
)

_PLACEHOLDER_OUTLINE = [
    (
        "The Awakening",
        "Our story begins in an unexpected place. The protagonist discovers "
        "something that will change everything, a spark of curiosity that "
        "cannot be ignored.",
    ),
    (
        "The Journey Begins",
        "With newfound purpose, the adventure truly starts. Challenges emerge, "
        "but so does determination. Every step forward reveals new wonders and "
        "obstacles.",
    ),
    (
        "The Great Challenge",
        "The most difficult moment arrives. Doubt creeps in, but resilience "
        "prevails. This is where true character is forged in the fires of "
        "adversity.",
    ),
    (
        "The Revelation",
        "Everything becomes clear. The pieces of the puzzle fall into place, "
        "revealing a truth that was hidden all along. Understanding dawns like "
        "a sunrise.",
    ),
    (
        "The Triumph",
        "The journey reaches its climax. All struggles, lessons, and growth "
        "culminate in a breathtaking finale. The story comes full circle, "
        "transformed and complete.",
    ),
]

REPLACEMENT_DESCRIPTIONS = [
    "A fresh perspective emerges, revealing hidden depths in the story. The "
    "narrative takes an unexpected turn that captivates and intrigues.",
    "The plot thickens with new developments. Characters face fresh "
    "challenges that test their resolve in surprising ways.",
    "An alternative path unfolds, rich with possibility. The story evolves in "
    "directions previously unimagined.",
    "New insights illuminate the journey. The narrative deepens, revealing "
    "layers of meaning and emotion.",
    "The story transforms, taking on new dimensions. What seemed certain "
    "becomes fluid, dynamic, alive.",
]


def placeholder_outline(idea: str) -> list[SceneStep]:
    """Five generic scenes; the first one opens with the idea itself."""
    steps = []
    for index, (title, description) in enumerate(_PLACEHOLDER_OUTLINE):
        if index == 0 and idea.strip():
            description = f"{idea.strip()}\n\n{description}"
        steps.append(SceneStep(sequence_number=index + 1, title=title, description=description))
    return steps


def filler_step(sequence_number: int) -> SceneStep:
    """Generic step used to pad a short provider outline."""
    return SceneStep(
        sequence_number=sequence_number,
        title=f"Scene {sequence_number}",
        description=FILLER_DESCRIPTION,
    )


def pad_steps(steps: list[SceneStep], minimum: int = MIN_SCENE_COUNT) -> list[SceneStep]:
    """Append filler steps after the real ones until ``minimum`` is met."""
    padded = list(steps)
    while len(padded) < minimum:
        padded.append(filler_step(len(padded) + 1))
    return padded


def replacement_description(step_index: int) -> str:
    """Rotating generic description for a step that failed to regenerate."""
    return REPLACEMENT_DESCRIPTIONS[step_index % len(REPLACEMENT_DESCRIPTIONS)]


def storyboard_placeholder_url(
    classification: ContentClassification,
    panel_count: int,
) -> str:
    """Placeholder image reference describing the storyboard that is missing."""
    label = "Modern advertisement" if classification == ContentClassification.ADVERTISEMENT else "Comic"
    query = quote(f"{label} storyboard with {panel_count} panels", safe="")
    return f"/placeholder.svg?height=1200&width=900&query={query}"
