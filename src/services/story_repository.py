"""Story persistence boundary.

Saving a finished story is an external collaborator. ``StoryRepository``
is the interface the wizard talks to; ``InMemoryStoryRepository`` keeps
snapshots for the lifetime of the process.
"""

import copy
import logging
import uuid
from datetime import datetime
from typing import Any, Protocol

from models.story import Story

logger = logging.getLogger(__name__)

StoryId = str


class StoryRepository(Protocol):
    """Anything that can persist a story snapshot."""

    async def save(self, story: Story) -> StoryId: ...

    async def get(self, story_id: StoryId) -> dict[str, Any] | None: ...


class InMemoryStoryRepository:
    """Process-local story storage."""

    def __init__(self):
        self.stories: dict[StoryId, dict[str, Any]] = {}

    async def save(self, story: Story) -> StoryId:
        """Store a snapshot of the story and return its new ID."""
        story_id = str(uuid.uuid4())
        record = copy.deepcopy(story.to_dict())
        record["id"] = story_id
        record["saved_at"] = datetime.now().isoformat()
        self.stories[story_id] = record
        logger.info(f"Saved story {story_id} ({len(story.steps)} scenes)")
        return story_id

    async def get(self, story_id: StoryId) -> dict[str, Any] | None:
        """Return the stored snapshot, or None if unknown."""
        return self.stories.get(story_id)
