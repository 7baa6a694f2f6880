"""Background rendering with "last request wins" delivery."""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any

import numpy as np

from temsim.model import UNKNOWN_BONDS, RenderConfig
from temsim.rendering.compositor import render_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """A finished render.

    Attributes:
        request_id: The id :meth:`RenderWorker.submit` assigned.
        image: The ``uint8`` image of shape ``(H, W)``.
    """

    request_id: int
    image: np.ndarray


class RenderWorker:
    """Run :func:`~temsim.rendering.render_image` off the calling thread.

    Requests are queued on a single background thread, so renders
    never overlap.  Each request gets an increasing id.  When a render
    finishes after a newer request has been submitted it is stale: its
    future still resolves, but *on_result* is not called and
    :meth:`latest` keeps the newest result.  In-flight renders are not
    cancelled.

    Inputs are deep-copied at submission, so the caller may mutate its
    atoms or bonds straight away.  The future, the callback and each
    call to :meth:`latest` get separate image arrays.  Painting onto a
    caller-owned *surface* is not supported here, since it would race
    with the caller's thread; paint from *on_result* instead.

    Args:
        on_result: Optional callback, invoked on the worker thread with
            each :class:`RenderResult` that is still the newest request
            when it completes.

    Example::

        with RenderWorker(on_result=show) as worker:
            worker.submit(atoms, config=config)
    """

    def __init__(
        self,
        on_result: Callable[[RenderResult], None] | None = None,
    ) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="temsim-render",
        )
        self._lock = threading.Lock()
        self._on_result = on_result
        self._last_submitted = 0
        self._latest: RenderResult | None = None

    def submit(
        self,
        atoms: Any,
        bonds: Any = UNKNOWN_BONDS,
        config: RenderConfig | None = None,
        **kwargs: Any,
    ) -> Future[RenderResult]:
        """Queue a render and return a future for its result.

        Arguments are as for :func:`~temsim.rendering.render_image`,
        except *surface*.

        Raises:
            TypeError: If *surface* is given.
        """
        if "surface" in kwargs:
            raise TypeError(
                "RenderWorker does not paint onto surfaces; "
                "use paint_surface in on_result instead"
            )
        atoms = copy.deepcopy(atoms)
        bonds = copy.deepcopy(bonds)
        with self._lock:
            self._last_submitted += 1
            request_id = self._last_submitted
        logger.debug("queued render request %d", request_id)
        return self._executor.submit(
            self._run, request_id, atoms, bonds, config, kwargs,
        )

    def _run(
        self,
        request_id: int,
        atoms: Any,
        bonds: Any,
        config: RenderConfig | None,
        kwargs: dict[str, Any],
    ) -> RenderResult:
        image = render_image(atoms, bonds, config, **kwargs)
        result = RenderResult(request_id=request_id, image=image)

        with self._lock:
            newest = request_id == self._last_submitted
            if self._latest is None or request_id > self._latest.request_id:
                self._latest = _detached(result)

        if not newest:
            logger.debug(
                "discarding stale render %d (newest request is %d)",
                request_id, self._last_submitted,
            )
        elif self._on_result is not None:
            self._on_result(_detached(result))
        return result

    def latest(self) -> RenderResult | None:
        """The most recently requested render that has completed."""
        with self._lock:
            latest = self._latest
        return None if latest is None else _detached(latest)

    def close(self, wait: bool = True) -> None:
        """Stop accepting requests and release the worker thread."""
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> RenderWorker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _detached(result: RenderResult) -> RenderResult:
    return replace(result, image=result.image.copy())
