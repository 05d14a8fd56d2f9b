"""Shared plumbing for the endpoint wrappers."""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, TypeVar

from fleetdash.data.api_client import FleetApiClient, unwrap
from fleetdash.domain.models import PaginatedResult, Pagination
from fleetdash.infra.exceptions import handle_errors
from fleetdash.infra.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@handle_errors(logger)
def parse_list(payload: Any, factory: Callable[[Dict[str, Any]], T]) -> List[T]:
    """Parse the ``data`` list of an envelope; bare lists are accepted too."""
    data = unwrap(payload, default=[])
    if isinstance(data, dict):
        # paginated Laravel resources nest the rows one level deeper
        data = data.get("data") or data.get("items") or []
    return [factory(item) for item in data if isinstance(item, dict)]


@handle_errors(logger)
def parse_one(payload: Any, factory: Callable[[Dict[str, Any]], T]) -> T:
    data = unwrap(payload, default={})
    return factory(data if isinstance(data, dict) else {})


@handle_errors(logger)
def parse_paginated(
    payload: Any,
    factory: Callable[[Dict[str, Any]], T],
    list_key: Optional[str] = None,
    total_key: Optional[str] = None,
) -> PaginatedResult[T]:
    """
    Parse ``{data: [...], pagination: {...}}``.

    Some dashboard endpoints wrap the rows (``data: {vehicles: [...], total_at_risk: n}``);
    ``list_key`` and ``total_key`` pick them out.
    """
    payload = payload if isinstance(payload, dict) else {}
    data = payload.get("data")
    total = None
    if isinstance(data, dict):
        if total_key is not None and data.get(total_key) is not None:
            total = int(data[total_key])
        pagination_raw = data.get("pagination") or payload.get("pagination")
        data = data.get(list_key or "data") or []
    else:
        pagination_raw = payload.get("pagination")
    items = [factory(item) for item in (data or []) if isinstance(item, dict)]
    pagination = Pagination.from_dict(pagination_raw or {"total": len(items)})
    return PaginatedResult(items=items, pagination=pagination, total=total)


class BaseService:
    def __init__(self, client: FleetApiClient):
        self.client = client
