"""
Chapter structure seeding.

A paper's chapters come from its assignment's PaperTemplate: every template
page carrying a ``structure`` list contributes its chapters, in page order.
When there is no usable template the paper gets the default skeleton from
settings, so a paper never starts without chapters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from setukpa.core.config import settings
from setukpa.models.assignment import PaperTemplate


@dataclass(frozen=True)
class ChapterSeed:
    title: str
    min_words: int = 0


def _structured_pages(template: Optional[PaperTemplate]) -> List[dict]:
    if template is None or not isinstance(template.pages, list):
        return []
    return [
        page
        for page in template.pages
        if isinstance(page, dict) and isinstance(page.get("structure"), list)
    ]


def total_words_target(items: Iterable[dict]) -> int:
    """Sum of ``minWords`` over chapters and their nested subsections."""
    total = 0
    for item in items:
        if not isinstance(item, dict):
            continue
        total += int(item.get("minWords") or 0)
        subsections = item.get("subsections")
        if isinstance(subsections, list):
            total += total_words_target(subsections)
    return total


def initialize_structure(template: Optional[PaperTemplate]) -> List[ChapterSeed]:
    seeds: List[ChapterSeed] = []
    for page in _structured_pages(template):
        for item in page["structure"]:
            if not isinstance(item, dict):
                continue
            # chapter title falls back to the page name
            title = item.get("title") or page.get("name") or f"BAB {len(seeds) + 1}"
            seeds.append(ChapterSeed(title=title, min_words=total_words_target([item])))

    if not seeds:
        seeds = [ChapterSeed(title=title) for title in settings.DEFAULT_CHAPTER_TITLES]
    return seeds


def template_word_target(template: Optional[PaperTemplate]) -> int:
    items: List[Any] = []
    for page in _structured_pages(template):
        items.extend(page["structure"])
    return total_words_target(items)


def missing_chapters(
    existing_titles: Iterable[str],
    template: Optional[PaperTemplate],
) -> List[ChapterSeed]:
    """Template chapters a paper does not have yet, matched by title."""
    if not _structured_pages(template):
        return []
    existing = set(existing_titles)
    missing = []
    for seed in initialize_structure(template):
        if seed.title not in existing:
            existing.add(seed.title)
            missing.append(seed)
    return missing
