"""Asynchronous front for a session: background diffing and toggle debouncing."""

from __future__ import annotations

import asyncio
import contextlib
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

import structlog

from split_diff.core.errors import DiffComputationError

if TYPE_CHECKING:
    from concurrent.futures import Future

    from split_diff.core.models import EditSegment, TextRevision
    from split_diff.core.session import DiffSession

logger = structlog.get_logger()

DEFAULT_DEBOUNCE_SECONDS = 0.05


class DiffController:
    """Runs diffs off the interactive thread and coalesces toggles.

    At most one diff computation per session is active: the worker pool has
    a single thread, a newer request cancels queued work and asks a running
    diff to stop, and results of superseded requests are discarded when
    they arrive. Everything else is
    applied to the session on the event loop thread.
    """

    def __init__(
        self,
        session: DiffSession,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._session = session
        self._debounce_seconds = debounce_seconds
        self._executor: ThreadPoolExecutor | None = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="split-diff-differ",
        )
        self._generation = 0
        self._pending: Future[tuple[EditSegment, ...]] | None = None
        self._cancel: threading.Event | None = None
        self._desired_collapse: bool | None = None
        self._toggle_task: asyncio.Task[None] | None = None

    @property
    def session(self) -> DiffSession:
        return self._session

    @property
    def generation(self) -> int:
        return self._generation

    async def request_diff(
        self,
        base: TextRevision,
        target: TextRevision,
        *,
        timeout: float | None = None,
    ) -> bool:
        """Diff a revision pair in the background and load it into the session.

        Returns:
            True if this request's result was applied, False if it was
            superseded by a newer request, failed or timed out.
        """
        if self._executor is None:
            msg = "DiffController is closed"
            raise RuntimeError(msg)

        self._generation += 1
        generation = self._generation
        self._stop_pending()

        cancel = threading.Event()
        self._cancel = cancel
        future = self._executor.submit(self._session.differ.diff, base, target, cancel=cancel)
        self._pending = future
        logger.debug("diff_requested", generation=generation)

        try:
            segments = await asyncio.wait_for(asyncio.wrap_future(future), timeout)
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("stale_diff_discarded", generation=generation)
                return False
            raise
        except TimeoutError:
            cancel.set()
            if generation != self._generation:
                return False
            self._session.mark_unavailable(
                f"Diff did not finish within {timeout:g}s",
                base=base,
                target=target,
            )
            return False
        except DiffComputationError as exc:
            if generation != self._generation:
                return False
            self._session.mark_unavailable(str(exc), base=base, target=target)
            return False
        finally:
            if self._pending is future:
                self._pending = None
                self._cancel = None

        if generation != self._generation:
            logger.debug("stale_diff_discarded", generation=generation)
            return False
        self._session.apply_segments(base, target, segments)
        return True

    def request_toggle(self) -> None:
        """Ask for the global collapse flag to flip.

        Requests arriving within the debounce window coalesce; only the
        final requested state is applied.
        """
        current = (
            self._desired_collapse
            if self._desired_collapse is not None
            else self._session.collapse_enabled
        )
        self.request_collapse(not current)

    def request_collapse(self, enabled: bool) -> None:
        """Debounced form of :meth:`DiffSession.set_collapse_enabled`."""
        self._desired_collapse = enabled
        if self._toggle_task is not None and not self._toggle_task.done():
            self._toggle_task.cancel()
        self._toggle_task = asyncio.get_running_loop().create_task(self._debounced_apply())

    async def flush(self) -> None:
        """Wait for a pending debounced toggle to be applied."""
        task = self._toggle_task
        if task is not None and not task.done():
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def close(self) -> None:
        """Cancel pending work and stop the worker thread.

        A diff that is already running is asked to stop and gives up at its
        next sub-problem; the thread is not joined.
        """
        if self._toggle_task is not None and not self._toggle_task.done():
            self._toggle_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._toggle_task
        self._generation += 1
        self._stop_pending()
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def _stop_pending(self) -> None:
        if self._cancel is not None:
            self._cancel.set()
        if self._pending is not None:
            self._pending.cancel()

    async def _debounced_apply(self) -> None:
        await asyncio.sleep(self._debounce_seconds)
        desired = self._desired_collapse
        self._desired_collapse = None
        if desired is None:
            return
        self._session.set_collapse_enabled(desired)
        logger.debug("toggle_applied", enabled=desired)
