from math import ceil
from typing import Generic, List, TypeVar

import attrs


T = TypeVar('T')


@attrs.frozen
class Page(Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        return ceil(self.total_elements / self.size) if self.size else 0
