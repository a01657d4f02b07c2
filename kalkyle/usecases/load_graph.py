"""Initial graph load for one principal.

The four table listings are independent of each other, so they run on a
small thread pool and are awaited together under a single client-side
timeout. The use case only returns the assembled ``Graph``; the caller
decides whether to dispatch it, so a failed load never touches the store.
"""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Dict

from kalkyle.domain.entities import Graph
from kalkyle.domain.errors import LoadError
from kalkyle.domain.ports import RemoteGateway

from .error_mapping import map_api_error

DEFAULT_LOAD_TIMEOUT_S = 15.0

_TABLES = ("organizations", "customers", "projects", "calculators")


@dataclass
class LoadEntityGraph:
    """Fetch every table and assemble a ``Graph``.

    ``current_organization_id`` is left unset here; the ``LoadGraph``
    transition selects the first organization.
    """

    gateway: RemoteGateway
    timeout_s: float = DEFAULT_LOAD_TIMEOUT_S

    def __call__(self) -> Graph:
        pool = ThreadPoolExecutor(max_workers=len(_TABLES), thread_name_prefix="kalkyle-load")
        try:
            futures: Dict[str, Future] = {
                table: pool.submit(getattr(self.gateway, table).list) for table in _TABLES
            }
            done, pending = wait(
                futures.values(), timeout=self.timeout_s, return_when=FIRST_EXCEPTION
            )
            for table in _TABLES:
                future = futures[table]
                if future in done and future.exception() is not None:
                    cause = map_api_error(future.exception(), default_code="LOAD_FAILED")
                    raise LoadError(
                        f"Loading {table} failed: {cause.message}", cause=cause
                    ) from future.exception()
            if pending:
                missing = [t for t in _TABLES if futures[t] in pending]
                raise LoadError(
                    f"Loading timed out after {self.timeout_s:g}s waiting for {', '.join(missing)}"
                )
            return Graph(
                organizations=futures["organizations"].result(),
                customers=futures["customers"].result(),
                projects=futures["projects"].result(),
                calculators=futures["calculators"].result(),
            )
        finally:
            # Do not block on a listing that is still hanging past the timeout.
            pool.shutdown(wait=False, cancel_futures=True)
