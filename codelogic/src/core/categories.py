"""
CodeLogic - Category Resolution & Source Filters
=================================================
Turns the caller's category selection (``["IBC", "IFC"]``) into the
retrieval-time filter over the ``source`` metadata field.

``CategoryResolver``
    Code → document file names, union over the selection.  Unknown
    codes contribute nothing and raise nothing.

``SourceFilterBuilder``
    File names → ``SourceFilter`` by prefixing the corpus root.  The
    meaning of an *empty* selection is the explicit
    ``EmptySelectionPolicy`` passed at construction.

``SourceFilter``
    Immutable "source ∈ {locators}" predicate for one retrieval call.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from codelogic.config.categories import CategoryMap
from codelogic.src.utils.logger import get_logger

logger = get_logger(__name__)


class EmptySelectionPolicy(str, Enum):
    """What retrieval does when no document is selected."""

    MATCH_NOTHING = "match_nothing"
    MATCH_ALL = "match_all"


@dataclass(frozen=True, slots=True)
class SourceFilter:
    """``source`` must be one of ``locators``.  Empty → matches nothing."""

    locators: frozenset[str]

    @property
    def matches_nothing(self) -> bool:
        return not self.locators


    def matches(self, metadata: Mapping[str, Any]) -> bool:
        return metadata.get("source") in self.locators


    def to_metadata_filter(self) -> dict[str, dict[str, list[str]]]:
        """Mongo/Pinecone-style mapping, e.g. ``{"source": {"$in": [...]}}``."""
        return {"source": {"$in": sorted(self.locators)}}


    def to_where_clause(self, column: str = "source") -> str:
        """
        SQL predicate for LanceDB pre-filtering.

        Raises
        ------
        ValueError
            For an empty filter (``IN ()`` is not valid SQL); callers
            check ``matches_nothing`` first.
        """
        if self.matches_nothing:
            raise ValueError("An empty SourceFilter has no WHERE clause; it matches nothing.")
        quoted = ", ".join("'" + loc.replace("'", "''") + "'" for loc in sorted(self.locators))
        return f"{column} IN ({quoted})"


class CategoryResolver:
    """
    Resolve category codes against an injected code → file-names table.

    Parameters
    ----------
    category_map
        ``{"IBC": ["International_Building_Code_2021.pdf"], ...}``.
    """

    __slots__ = ("_map",)

    def __init__(self, category_map: CategoryMap) -> None:
        self._map: dict[str, tuple[str, ...]] = {code: tuple(files) for code, files in category_map.items()}


    @property
    def categories(self) -> dict[str, list[str]]:
        return {code: list(files) for code, files in self._map.items()}


    def resolve(self, codes: Iterable[str]) -> list[str]:
        """
        Return the deduplicated union of file names for the recognised
        codes, in first-seen order.
        """
        identifiers: dict[str, None] = {}
        for code in codes:
            files = self._map.get(code)
            if files is None:
                logger.debug("[FILTER] Ignoring unknown category code '%s'.", code)
                continue
            identifiers.update(dict.fromkeys(files))
        return list(identifiers)


class SourceFilterBuilder:
    """
    Build a ``SourceFilter`` from resolved document identifiers.

    Parameters
    ----------
    corpus_root
        Prefix the indexer stored before every file name.
    empty_policy
        ``MATCH_NOTHING`` → empty filter; ``MATCH_ALL`` → ``None``
        (search the whole corpus).
    """

    __slots__ = ("_root", "_policy")

    def __init__(self, corpus_root: str, empty_policy: EmptySelectionPolicy = EmptySelectionPolicy.MATCH_NOTHING) -> None:
        self._root = corpus_root
        self._policy = EmptySelectionPolicy(empty_policy)


    @property
    def empty_policy(self) -> EmptySelectionPolicy:
        return self._policy


    def locator_for(self, identifier: str) -> str:
        return self._root + identifier


    def build(self, identifiers: Iterable[str]) -> SourceFilter | None:
        locators = frozenset(self.locator_for(i) for i in identifiers)
        if not locators and self._policy is EmptySelectionPolicy.MATCH_ALL:
            return None
        return SourceFilter(locators)
