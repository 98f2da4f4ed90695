"""Search and sort over the record collection."""

from __future__ import annotations

import locale
import logging
from typing import Callable, Dict, List, Literal

from ..data import Record, RecordRepository

logger = logging.getLogger(__name__)

SortKey = Literal["date", "title", "model"]

TAG_PREFIX = "tag:"


def _collation_key(value: str) -> tuple:
    # strxfrm honours LC_COLLATE; under the C locale it is a no-op.
    # It rejects embedded NULs, which are legal in stored strings.
    return (locale.strxfrm(value.casefold().replace("\x00", "")), value)


def matches_query(record: Record, query: str) -> bool:
    """Return True if *record* passes the search filter for *query*.

    ``tag:<name>`` keeps records carrying a tag equal to ``<name>``
    (case-insensitive). Any other query is a case-insensitive substring
    test against title, content, model and each tag.
    """

    if not query:
        return True

    needle = query.casefold()
    if needle.startswith(TAG_PREFIX):
        wanted = needle[len(TAG_PREFIX):].strip()
        return any(tag.casefold() == wanted for tag in record.tags)

    return (
        needle in record.title.casefold()
        or needle in record.content.casefold()
        or needle in record.model.casefold()
        or any(needle in tag.casefold() for tag in record.tags)
    )


_SORTERS: Dict[str, Callable[[List[Record]], List[Record]]] = {
    "date": lambda records: sorted(records, key=lambda r: r.created_at, reverse=True),
    "title": lambda records: sorted(records, key=lambda r: _collation_key(r.title or "")),
    "model": lambda records: sorted(records, key=lambda r: _collation_key(r.model or "")),
}


class SearchService:
    """Filters and orders the output of ``RecordRepository.get_all``."""

    def __init__(self, repository: RecordRepository) -> None:
        self._repository = repository

    def search(self, query: str = "", sort_by: SortKey = "date") -> List[Record]:
        """Return records matching *query*, ordered by *sort_by*.

        Equal sort keys keep their ``get_all`` order. Unknown sort keys fall
        back to date order.
        """

        sorter = _SORTERS.get(sort_by)
        if sorter is None:
            logger.warning("Unknown sort key %r; sorting by date", sort_by)
            sorter = _SORTERS["date"]

        records = [record for record in self._repository.get_all() if matches_query(record, query)]
        return sorter(records)

