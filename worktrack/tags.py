#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Tag registry: the ordered, unique list of tags plus the selected tag.

Tags are only ever added. There is no rename or delete path.
"""

from typing import List, Optional

from worktrack.debug_logger import get_logger
from worktrack.models import DEFAULT_VALUE_SEPARATOR, InvariantViolation
from worktrack.parsing import is_storable_text
from worktrack.store import Store


class TagRegistry:
    """Ordered unique tags with a selection cursor."""

    def __init__(self, store: Store, tags: Optional[List[str]] = None,
                 value_separator: str = DEFAULT_VALUE_SEPARATOR):
        self.store = store
        self.value_separator = value_separator
        self._tags: List[str] = list(tags or [])
        self._selected: Optional[int] = 0 if self._tags else None

    @classmethod
    def load(cls, store: Store, value_separator: str = DEFAULT_VALUE_SEPARATOR) -> "TagRegistry":
        """Load tags from the store, dropping repeated lines."""
        tags: List[str] = []
        for line in store.load_tags():
            tag = line.strip()
            if tag not in tags:
                tags.append(tag)
        return cls(store, tags, value_separator)

    @property
    def tags(self) -> List[str]:
        return list(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __getitem__(self, index: int) -> str:
        return self._tags[index]

    def index_of(self, tag: str) -> int:
        """Position of ``tag``.

        Raises:
            InvariantViolation: The tag is not registered.
        """
        try:
            return self._tags.index(tag)
        except ValueError:
            raise InvariantViolation(f"Tag {tag!r} is not registered") from None

    def store_tag(self, candidate: str) -> bool:
        """Add a tag, persist it and select it.

        Empty (after trimming), duplicate or unstorable candidates are
        rejected silently.

        Returns:
            True if the tag was added.
        """
        tag = candidate.strip()
        if not is_storable_text(tag, self.value_separator) or tag in self._tags:
            return False

        # Persist first so a failed write leaves the registry unchanged
        self.store.append_tag(tag)
        self._tags.append(tag)
        self._selected = len(self._tags) - 1

        get_logger().tag_added(tag, len(self._tags))
        return True

    def select(self, index: int) -> None:
        """Select the tag at ``index``.

        Raises:
            InvariantViolation: ``index`` is out of range.
        """
        if not 0 <= index < len(self._tags):
            raise InvariantViolation(
                f"Tag index {index} out of range for {len(self._tags)} tags"
            )
        self._selected = index

    def selected(self) -> Optional[int]:
        """Index of the selected tag, or None when there are no tags."""
        return self._selected

    def selected_tag(self) -> Optional[str]:
        if self._selected is None:
            return None
        return self._tags[self._selected]
