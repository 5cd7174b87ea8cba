"""Lazy, restartable paged reads over a repository."""

from itertools import islice

from protean.utils.globals import current_domain

DEFAULT_PAGE_SIZE = 50


class PagedQuery:
    """An iterable over ``element_cls`` rows that fetches one page at a time.

    ``filters`` go to the repository query; ``predicate`` is applied in
    Python to each fetched row; ``stop`` ends the iteration early (useful
    when rows are ordered and the rest cannot match). Every ``iter()`` starts
    a fresh pass from offset 0.
    """

    def __init__(
        self,
        element_cls,
        filters: dict | None = None,
        order_by: str | None = None,
        predicate=None,
        stop=None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.element_cls = element_cls
        self.filters = {key: value for key, value in (filters or {}).items() if value is not None}
        self.order_by = order_by
        self.predicate = predicate
        self.stop = stop
        self.page_size = page_size

    def _queryset(self):
        queryset = current_domain.repository_for(self.element_cls)._dao.query
        if self.filters:
            queryset = queryset.filter(**self.filters)
        if self.order_by:
            queryset = queryset.order_by(self.order_by)
        return queryset

    def __iter__(self):
        offset = 0
        while True:
            rows = self._queryset().offset(offset).limit(self.page_size).all().items
            for row in rows:
                if self.stop is not None and self.stop(row):
                    return
                if self.predicate is None or self.predicate(row):
                    yield row
            if len(rows) < self.page_size:
                return
            offset += self.page_size

    def page(self, offset: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> list:
        """Materialize one window of the (filtered) sequence."""
        return list(islice(iter(self), offset, offset + limit))

    def first(self):
        return next(iter(self), None)

    def count(self) -> int:
        return sum(1 for _ in self)
