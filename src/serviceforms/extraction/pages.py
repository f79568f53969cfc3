"""Page (step) registry built during one service extraction pass."""

from __future__ import annotations

import math
from typing import Any

from serviceforms.extraction.text import first_present, sentence_case, slugify
from serviceforms.typing.models import ServicePage

ROOT_PAGE_COLLECTION_KEYS = ("pages", "steps", "sections", "groups")

_PAGE_ID_KEYS = ("id", "slug", "key", "code", "name", "title", "page", "step", "section", "group")
_PAGE_TITLE_KEYS = ("title", "name", "heading", "question")
_PAGE_DESCRIPTION_KEYS = ("description", "summary", "hint", "text")
_PAGE_ORDER_KEYS = ("order", "position", "index", "weight")


def _as_entries(value: object) -> list[Any]:
    """Normalise a page collection (list, or mapping keyed by id) into a list."""
    if not value:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        entries: list[Any] = []
        for page_id, entry in value.items():
            if isinstance(entry, dict):
                entries.append({"id": page_id, **entry})
            elif isinstance(entry, str):
                entries.append({"id": page_id, "title": entry})
            else:
                entries.append({"id": page_id})
        return entries
    return []


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _non_blank(value: object) -> str | None:
    return value if isinstance(value, str) and value.strip() else None


class PageRegistry:
    """Catalogue of pages referenced by field metadata, keyed by page id.

    One registry is created per operation and threaded through the question
    walk. The first registration of an id fixes its order.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._pages: dict[str, ServicePage] = {}

    @classmethod
    def from_meta(cls, meta: object) -> PageRegistry:
        """Seed a registry from the pages declared in root-level metadata.

        Args:
            meta (object): Root `x-gds` metadata of a request body schema.

        Returns:
            PageRegistry: Seeded registry.
        """
        registry = cls()
        if not isinstance(meta, dict):
            return registry

        for collection_key in ROOT_PAGE_COLLECTION_KEYS:
            noun = sentence_case(collection_key.removesuffix("s"))
            for index, entry in enumerate(_as_entries(meta.get(collection_key))):
                registry.register(entry, fallback_title=f"{noun} {index + 1}", fallback_order=index)
        return registry

    def __len__(self) -> int:
        return len(self._pages)

    def __contains__(self, page_id: object) -> bool:
        return page_id in self._pages

    def get(self, page_id: str | None) -> ServicePage | None:
        """Return the registered page with `page_id`, if any."""
        if page_id is None:
            return None
        return self._pages.get(page_id)

    @property
    def sole_page_id(self) -> str | None:
        """Return the page id when exactly one page is registered."""
        if len(self._pages) != 1:
            return None
        return next(iter(self._pages))

    def _next_placeholder_id(self) -> str:
        return f"page-{len(self._pages) + 1}"

    def _apply_overrides(self, page: ServicePage, title: str | None, description: str | None) -> ServicePage:
        if title is None and description is None:
            return page
        updated = page.model_copy(
            update={
                "title": title or page.title,
                "description": description if description is not None else page.description,
            },
        )
        self._pages[updated.id] = updated
        return updated

    def register(
        self,
        ref: object,
        *,
        fallback_title: str | None = None,
        fallback_order: int | float | None = None,
        title_override: str | None = None,
        description_override: str | None = None,
    ) -> ServicePage | None:
        """Register a page reference and return the resulting page.

        A string reference is a display title whose slug becomes the id. A
        mapping reference carries its own id, title, description and order
        under synonym keys. An already known id keeps its order and is only
        updated by explicit title/description overrides.

        Args:
            ref (object): Page reference.
            fallback_title (str | None): Title used when the reference has none.
            fallback_order (int | float | None): Order used when the reference has none.
            title_override (str | None): Explicit title supplied by field metadata.
            description_override (str | None): Explicit description supplied by field metadata.

        Returns:
            ServicePage | None: Registered page, or None for an empty or unsupported reference.
        """
        if not ref:
            return None

        title_override = _non_blank(title_override)

        if isinstance(ref, str):
            page_id = slugify(ref) or self._next_placeholder_id()
            existing = self._pages.get(page_id)
            if existing is not None:
                return self._apply_overrides(existing, title_override, description_override)

            page = ServicePage(
                id=page_id,
                title=title_override or _non_blank(ref) or sentence_case(page_id),
                description=description_override,
                order=fallback_order if fallback_order is not None else len(self._pages),
            )
            self._pages[page_id] = page
            return page

        if isinstance(ref, dict):
            id_source = first_present(ref, _PAGE_ID_KEYS)
            page_id = (slugify(str(id_source)) if id_source else "") or self._next_placeholder_id()
            existing = self._pages.get(page_id)
            if existing is not None:
                return self._apply_overrides(existing, title_override, description_override)

            title = (
                title_override
                or first_present(ref, _PAGE_TITLE_KEYS)
                or _non_blank(id_source)
                or fallback_title
                or sentence_case(page_id)
            )
            description = description_override or first_present(ref, _PAGE_DESCRIPTION_KEYS)
            order = first_present(ref, _PAGE_ORDER_KEYS)
            if not _is_number(order):
                order = fallback_order if fallback_order is not None else len(self._pages)

            page = ServicePage(
                id=page_id,
                title=str(title),
                description=str(description) if description else None,
                order=order,
            )
            self._pages[page_id] = page
            return page

        return None

    def published(
        self,
        used_page_ids: set[str],
        questions_by_page: dict[str, list[str]] | None = None,
    ) -> list[ServicePage]:
        """Return referenced pages sorted by order, then title.

        Args:
            used_page_ids (set[str]): Ids referenced by at least one surviving question.
            questions_by_page (dict[str, list[str]] | None): Ordered question ids per page.

        Returns:
            list[ServicePage]: Pruned, sorted pages.
        """
        questions_by_page = questions_by_page or {}
        pages = [
            page.model_copy(update={"questions": list(questions_by_page.get(page.id, []))})
            for page in self._pages.values()
            if page.id in used_page_ids
        ]
        return sorted(pages, key=page_sort_key)


def page_sort_key(page: ServicePage) -> tuple[float, str, str]:
    """Sort key placing pages without an order last, ties broken by title."""
    order = page.order if page.order is not None else math.inf
    return order, page.title.casefold(), page.title
