"""BaseService — abstract foundation for all defquery services.

Every service receives a :class:`Store` at construction time and reads or
writes only through it. Query-layer exceptions are translated into
``ServiceResult`` failures by :meth:`BaseService._guard`, the one place
where error codes are assigned.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import SQLAlchemyError

from defquery.domain.errors import AmbiguousResultError, InvalidArgumentError
from defquery.services.result import ServiceResult

if TYPE_CHECKING:
    from defquery.infrastructure.store import Store

log = structlog.get_logger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class DefinitionService(BaseService):
            def count_definitions(self, ...) -> ServiceResult:
                return self._guard("count_definitions", lambda: ...)
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    def _guard(self, op: str, func: Callable[[], ServiceResult]) -> ServiceResult:
        """Run *func*, mapping query-layer failures onto error codes."""
        try:
            return func()
        except InvalidArgumentError as exc:
            log.debug("service.invalid_argument", op=op, error=str(exc))
            return ServiceResult.failure(op, "INVALID_ARGUMENT", str(exc))
        except AmbiguousResultError as exc:
            log.debug("service.ambiguous_result", op=op, error=str(exc))
            return ServiceResult.failure(op, "AMBIGUOUS_RESULT", str(exc))
        except SQLAlchemyError as exc:
            log.debug("service.store_error", op=op, error=str(exc))
            return ServiceResult.failure(
                op, "STORE_ERROR", str(exc), error_type=type(exc).__name__
            )
