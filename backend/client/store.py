"""
In-memory collection with a derived filtered / sorted / paginated view.

The store is filled from a full list fetch and never patched
incrementally. Every change of filter, search or sort re-derives the
view from the whole collection and goes back to the first page.
"""
import locale
import math
from collections import namedtuple
from datetime import date

from utils.validation import parse_date

PAGE_SIZE = 10

STRING = 'string'
NUMBER = 'number'
DATE = 'date'

ASC = 'asc'
DESC = 'desc'

EPOCH = date(1970, 1, 1)

Page = namedtuple(
    'Page',
    ['items', 'current_page', 'total_pages', 'total_items', 'has_previous', 'has_next']
)


def string_key(value):
    return locale.strxfrm(str(value).lower()) if value else ''


def number_key(value):
    return value or 0


def date_key(value):
    try:
        return parse_date(value) or EPOCH
    except (TypeError, ValueError):
        return EPOCH


SORT_KEYS = {
    STRING: string_key,
    NUMBER: number_key,
    DATE: date_key,
}


class CollectionStore:
    """Holds one resource collection and derives pages from it"""

    def __init__(self, page_size=PAGE_SIZE):
        if page_size < 1:
            raise ValueError('page_size must be positive')

        self.page_size = page_size
        self.items = []
        self.filters = {}
        self.search_text = ''
        self.search_fields = ()
        self.sort_field = None
        self.sort_direction = ASC
        self.sort_kind = STRING
        self.current_page = 1

    # ============ COLLECTION ============
    def load(self, items):
        self.items = list(items)
        self.current_page = 1

    def find(self, field, value):
        for item in self.items:
            if item.get(field) == value:
                return item
        return None

    # ============ FILTERS ============
    def set_filter(self, name, predicate):
        """Install a named predicate; None removes it"""
        if predicate is None:
            self.filters.pop(name, None)
        else:
            self.filters[name] = predicate
        self.current_page = 1

    def set_search(self, text, fields):
        self.search_text = (text or '').strip().lower()
        self.search_fields = tuple(fields)
        self.current_page = 1

    def clear_filters(self):
        self.filters = {}
        self.search_text = ''
        self.search_fields = ()
        self.current_page = 1

    def matches_search(self, item):
        if not self.search_text:
            return True
        return any(
            self.search_text in str(item.get(field) or '').lower()
            for field in self.search_fields
        )

    # ============ SORTING ============
    def sort_by(self, field, direction=ASC, kind=STRING):
        if direction not in (ASC, DESC):
            raise ValueError(f'Unknown sort direction: {direction}')
        if kind not in SORT_KEYS:
            raise ValueError(f'Unknown sort kind: {kind}')

        self.sort_field = field
        self.sort_direction = direction
        self.sort_kind = kind
        self.current_page = 1

    def toggle_sort(self, field, kind=STRING):
        """Header click: same field flips the direction, a new field starts ascending"""
        if self.sort_field == field:
            direction = DESC if self.sort_direction == ASC else ASC
        else:
            direction = ASC
        self.sort_by(field, direction, kind)

    # ============ VIEW ============
    def filtered(self):
        result = [
            item for item in self.items
            if self.matches_search(item)
            and all(predicate(item) for predicate in self.filters.values())
        ]

        if self.sort_field:
            key = SORT_KEYS[self.sort_kind]
            result.sort(
                key=lambda item: key(item.get(self.sort_field)),
                reverse=self.sort_direction == DESC
            )

        return result

    def view(self):
        result = self.filtered()
        total_items = len(result)
        total_pages = math.ceil(total_items / self.page_size)

        start = (self.current_page - 1) * self.page_size
        items = tuple(result[start:start + self.page_size])

        return Page(
            items=items,
            current_page=self.current_page,
            total_pages=total_pages,
            total_items=total_items,
            has_previous=self.current_page > 1,
            has_next=self.current_page < total_pages
        )

    def total_pages(self):
        return math.ceil(len(self.filtered()) / self.page_size)

    def next_page(self):
        if self.current_page < self.total_pages():
            self.current_page += 1
        return self.view()

    def previous_page(self):
        if self.current_page > 1:
            self.current_page -= 1
        return self.view()
