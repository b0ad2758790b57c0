"""
Deferred batching of calls into a single bulk round trip.

The collector acts as a queue: each ``add_request`` returns a future right
away and ``execute`` drains the queue into one ``API.getBulkRequest`` call,
then settles every future with its own slice of the combined response.
"""

from __future__ import annotations

import asyncio
import threading
import typing as t
import uuid
from dataclasses import dataclass

import structlog

from reporting_client.bulk import BULK_METHOD, Call, CallResult, decode_job, encode_call, job_params
from reporting_client.utils.logging import logging_context

if t.TYPE_CHECKING:
    from reporting_client.transport import TransportClient

log = structlog.get_logger(__name__)

BatchState = t.Literal["open", "executing"]


@dataclass
class _PendingCall:
    """A call waiting for the next ``execute``."""

    position: int
    call: Call
    encoded: str
    future: asyncio.Future[t.Any]


class BatchCollector:
    """
    Accumulate calls and send them as one physical request.

    Calls added while a previous job is still in flight belong to the next
    job: ``execute`` swaps the pending list out atomically before touching
    the network, so two jobs never share a pending call.

    Parameters
    ----------
    transport : TransportClient
        Client performing the physical bulk request.
    """

    def __init__(self, transport: "TransportClient") -> None:
        self._transport = transport
        self._job: list[_PendingCall] = []
        # guards append and swap when used from several threads
        self._job_lock = threading.Lock()
        self._executing = 0

    @property
    def transport(self) -> "TransportClient":
        return self._transport

    @property
    def state(self) -> BatchState:
        return "executing" if self._executing else "open"

    @property
    def pending_count(self) -> int:
        """Number of calls queued for the next ``execute``."""
        return len(self._job)

    def add_request(
        self, method: str, params: t.Mapping[str, t.Any] | None = None
    ) -> asyncio.Future[t.Any]:
        """
        Queue a call without any network activity.

        Must be called from a running event loop; the returned future is
        bound to it.

        Parameters
        ----------
        method : str
            Remote ``Module.action`` name.
        params : typing.Mapping[str, typing.Any] | None, optional
            Call parameters. They are encoded immediately, so an
            unencodable value raises here and nothing is queued.

        Returns
        -------
        asyncio.Future[typing.Any]
            Settled with this call's result once the job is executed.

        Raises
        ------
        ParameterEncodingError
            If a parameter cannot be encoded.
        """
        call = Call(method=method, params=params or {})
        encoded = encode_call(call, defaults=self._transport.call_defaults)
        future: asyncio.Future[t.Any] = asyncio.get_running_loop().create_future()
        with self._job_lock:
            pending = _PendingCall(
                position=len(self._job),
                call=call,
                encoded=encoded,
                future=future,
            )
            self._job.append(pending)
            pending_count = len(self._job)
        log.debug(
            event="Queued call for batch",
            method=method,
            position=pending.position,
            pending_count=pending_count,
            state=self.state,
        )
        return future

    def invoke(
        self, method: str, params: t.Mapping[str, t.Any] | None = None
    ) -> asyncio.Future[t.Any]:
        """
        Deferred implementation of the ``Caller`` interface.

        The call is queued as soon as this returns, not when the returned
        future is first awaited.
        """
        return self.add_request(method, params)

    def _drain_job(self) -> list[_PendingCall]:
        """
        Swap the current job for an empty one.

        Returns
        -------
        list[_PendingCall]
            The drained job, in queue order.
        """
        with self._job_lock:
            job, self._job = self._job, []
        log.debug(event="Drained batch job", drained_count=len(job))
        return job

    async def execute(self) -> list[CallResult]:
        """
        Send every queued call in one physical request and settle them.

        Errors are delivered twice: through each call's future and through
        the returned results (or the raised exception for whole-batch
        failures). Futures are marked as retrieved, so callers that only
        read the results never see "exception was never retrieved" noise.

        Returns
        -------
        list[CallResult]
            Per-call results in queue order; empty when nothing was queued.

        Raises
        ------
        TransportError
            If the physical request failed. Every future of the job is
            rejected with the same error.
        EnvelopeShapeError
            If the response cannot be matched to the job positionally.
            Every future of the job is rejected with the same error.
        """
        job = self._drain_job()
        if not job:
            return []

        batch_id = str(uuid.uuid4())
        self._executing += 1
        try:
            with logging_context(batch_id=batch_id):
                log.debug(event="Executing batch", call_count=len(job))
                try:
                    envelope = await self._transport.request(
                        BULK_METHOD,
                        {"format": "json", **job_params([pending.encoded for pending in job])},
                    )
                    results = decode_job(
                        envelope,
                        len(job),
                        calls=[pending.call for pending in job],
                    )
                except asyncio.CancelledError:
                    self._cancel_pending(job=job)
                    raise
                except Exception as error:
                    log.debug(
                        event="Batch failed as a whole",
                        call_count=len(job),
                        error=str(object=error),
                    )
                    self._fail_pending(job=job, error=error)
                    raise

                self._settle_pending(job=job, results=results)
                log.debug(
                    event="Batch settled",
                    call_count=len(job),
                    error_count=sum(1 for result in results if not result.ok),
                )
                return results
        finally:
            self._executing -= 1

    def reset(self) -> int:
        """
        Abandon the current job, cancelling its futures.

        Returns
        -------
        int
            Number of abandoned calls.
        """
        job = self._drain_job()
        self._cancel_pending(job=job)
        return len(job)

    @staticmethod
    def _settle_pending(*, job: list[_PendingCall], results: list[CallResult]) -> None:
        for pending, result in zip(job, results):
            if pending.future.done():
                continue
            if result.ok:
                pending.future.set_result(result.value)
            else:
                pending.future.set_exception(t.cast(BaseException, result.error))
                pending.future.exception()

    @staticmethod
    def _fail_pending(*, job: list[_PendingCall], error: BaseException) -> None:
        for pending in job:
            if not pending.future.done():
                pending.future.set_exception(error)
                pending.future.exception()

    @staticmethod
    def _cancel_pending(*, job: list[_PendingCall]) -> None:
        for pending in job:
            if not pending.future.done():
                pending.future.cancel()

    async def __aenter__(self) -> "BatchCollector":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: t.Any,
    ) -> None:
        """
        Execute the pending job on a clean exit, abandon it otherwise.
        """
        if exc_type is None:
            await self.execute()
        else:
            self.reset()
