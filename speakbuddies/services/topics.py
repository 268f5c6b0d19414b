"""Conversation prompts handed to each freshly paired channel."""
from __future__ import annotations

import random
from typing import Sequence

TOPICS: tuple[str, ...] = (
    "Talk about your favorite book and why you love it",
    "Describe your dream vacation destination",
    "Share a memorable childhood experience",
    "Discuss your hobbies and interests",
    "Talk about your favorite movie or TV show",
    "Describe your ideal weekend",
    "Share what you're passionate about",
    "Discuss your goals for the future",
    "Talk about your favorite food or cuisine",
    "Describe a person who inspires you",
    "Talk about a skill you'd like to learn",
    "Discuss your favorite season and why",
    "Share an interesting fact you recently learned",
    "Talk about your hometown or city",
    "Describe your perfect day",
)


class TopicSelector:
    """Uniform random pick, with replacement, over a fixed catalog."""

    def __init__(self, catalog: Sequence[str] = TOPICS, rng: random.Random | None = None) -> None:
        if not catalog:
            raise ValueError("Topic catalog must not be empty")
        self._catalog = tuple(catalog)
        self._rng = rng or random.Random()

    @property
    def catalog(self) -> tuple[str, ...]:
        return self._catalog

    def pick(self) -> str:
        return self._rng.choice(self._catalog)
