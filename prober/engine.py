"""
Pipelining Probe Engine

Runs a ProbeStrategy against one connection:

1. A writer thread writes every request back to back and flushes once,
   so all requests reach the wire before any response is read.
2. The calling thread waits for that flush, then reads the responses
   strictly in request order.

The verdict is True only if every response was the expected one. Write
and parse failures abort the probe with an exception; they never turn
into a False verdict.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Optional

from core.connection import PipelineStream
from core.errors import WriteFailure
from prober.strategy import OptionsStrategy, ProbeStrategy

logger = logging.getLogger(__name__)


@dataclass
class WriteOutcome:
    """Result of writing one request, handed from writer to reader"""
    request_id: int
    error: Optional[BaseException] = None


def _write_requests(
    strategy: ProbeStrategy,
    stream: PipelineStream,
    count: int,
    outcomes: "queue.Queue[WriteOutcome]",
    flushed: threading.Event
):
    """Writer thread body. Stops at the first failed write."""
    try:
        for request_id in range(count):
            try:
                strategy.write_request(request_id, stream.writer)
                if request_id == count - 1:
                    stream.writer.flush()
            except WriteFailure as e:
                outcomes.put(WriteOutcome(request_id, e))
                return
            except OSError as e:
                failure = WriteFailure(request_id, f"write failed: {e}")
                failure.__cause__ = e
                outcomes.put(WriteOutcome(request_id, failure))
                return
            except Exception as e:
                outcomes.put(WriteOutcome(request_id, e))
                return
            outcomes.put(WriteOutcome(request_id))
    finally:
        flushed.set()


def _read_responses(
    strategy: ProbeStrategy,
    stream: PipelineStream,
    count: int,
    outcomes: "queue.Queue[WriteOutcome]",
    flushed: threading.Event
) -> bool:
    flushed.wait()

    # Complete after the barrier: the writer has put every outcome up to
    # and including the first failure. A failed write means the earlier
    # requests may never have been flushed, so nothing is read.
    for _ in range(count):
        outcome = outcomes.get_nowait()
        if outcome.error is not None:
            raise outcome.error

    available = True
    for request_id in range(count):
        expected = strategy.read_response(request_id, stream.reader)
        available = available and expected
    return available


def probe(stream, strategy: ProbeStrategy) -> bool:
    """
    Probe a connection for HTTP pipelining support.

    Args:
        stream: Connected socket, (reader, writer) pair of binary file
            objects, or PipelineStream. Not closed by the probe.
        strategy: Policy deciding requests and expected responses

    Returns:
        True if every response arrived in order and was the expected one

    Raises:
        WriteFailure: A request could not be written or flushed
        MalformedResponse: A response could not be parsed or read
    """
    count = strategy.request_count()
    if count < 0:
        raise ValueError(f"invalid request count: {count}")

    pipe = PipelineStream.wrap(stream)
    outcomes: "queue.Queue[WriteOutcome]" = queue.Queue(maxsize=max(count, 1))
    flushed = threading.Event()

    writer = threading.Thread(
        target=_write_requests,
        args=(strategy, pipe, count, outcomes, flushed),
        name="pipeline-writer",
        daemon=True,
    )
    writer.start()
    try:
        available = _read_responses(strategy, pipe, count, outcomes, flushed)
    finally:
        writer.join()
        if pipe is not stream:
            pipe.release()

    logger.debug("probe with %s: %d requests, available=%s", type(strategy).__name__, count, available)
    return available


def supported(stream, host: str) -> bool:
    """
    Check if stream supports HTTP pipelining using the default strategy.

    Args:
        stream: Connected socket or (reader, writer) pair
        host: Value for the Host header, must not be empty

    Returns:
        Pipelining verdict
    """
    if not host:
        raise ValueError("host is empty")
    return probe(stream, OptionsStrategy(host))
