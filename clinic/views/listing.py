"""
Query helpers shared by the list endpoints: ``q`` search and
``page``/``pageSize`` pagination.
"""
from __future__ import annotations

from django.db.models import Q


class BadListParams(ValueError):
    pass


def page_params(request) -> tuple[int | None, int | None]:
    try:
        page = int(request.query_params.get('page')) if request.query_params.get('page') else None
        page_size = int(request.query_params.get('pageSize')) if request.query_params.get('pageSize') else None
    except ValueError:
        raise BadListParams('page and pageSize must be integers')
    if (page is not None and page < 1) or (page_size is not None and not 1 <= page_size <= 200):
        raise BadListParams('page out of range')
    return page, page_size


def search(qs, request, fields):
    q = (request.query_params.get('q') or '').strip()
    if not q:
        return qs
    cond = Q()
    for field in fields:
        cond |= Q(**{f'{field}__icontains': q})
    return qs.filter(cond)


def paginate(qs, request):
    """Return ``(items, pagination)`` for a queryset."""
    page, page_size = page_params(request)
    total = qs.count()
    if page and page_size:
        start = (page - 1) * page_size
        qs = qs[start:start + page_size]
    return list(qs), {'total': total, 'page': page or 1, 'pageSize': page_size or total}
