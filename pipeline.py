# pipeline.py

import logging
import os
import queue
import time
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import constants
from errors import ConfigurationError, PipelineTimeoutError

logger = logging.getLogger(constants.LOGGER_NAME)

# Output of one worker task: its private vertex buffer and how often it bounced.
Strip = namedtuple('Strip', ['vertices', 'bounces'])


def default_workers() -> int:
    return max(1, (os.cpu_count() or 2) - 1)


@dataclass
class PipelineStats:
    launches: int = 0
    vertices: int = 0
    bounces: int = 0
    chunks: int = 0
    elapsed: float = 0.0


class RenderPipeline:
    """
    Produces strips on a worker pool and draws them on a single consumer.

    Workers run Tracer + Sampler for one launch each and only read shared
    state (the packed mirror table, trace options, sampler settings). The
    calling thread is the only consumer: it owns the canvas and histogram,
    draws results in completion order and folds the canvas into the
    histogram after exactly chunk_size strips.

    Data Contract:
    - Inputs:
        - tracer (Tracer), sampler (Sampler), render_options (RenderOptions).
        - launch_height (float): world y of every launch point.
        - workers (int | None): pool size, defaults to cpu_count - 1 (>= 1).
        - result_timeout (float): seconds to wait for any single result.
    - Raises: PipelineTimeoutError when no result arrives in time; worker
      exceptions are re-raised on the consumer.
    """
    def __init__(self, tracer, sampler, render_options, launch_height: float,
                 workers: Optional[int] = None, result_timeout: float = constants.RESULT_TIMEOUT):
        if workers is not None and workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {workers}")
        if not result_timeout > 0:
            raise ConfigurationError(f"result_timeout must be positive, got {result_timeout}")

        self.tracer = tracer
        self.sampler = sampler
        self.render_options = render_options
        self.launch_height = float(launch_height)
        self.workers = workers if workers is not None else default_workers()
        self.result_timeout = float(result_timeout)

    def produce(self, position) -> Strip:
        """Worker task: trace one launch and sample it into a private buffer."""
        bounces, _ = self.tracer.trace(position)
        return Strip(self.sampler.sample(bounces), len(bounces) - 1)

    def render(self, canvas, histogram) -> PipelineStats:
        ro = self.render_options
        stats = PipelineStats()
        start = time.perf_counter()
        logger.info(f"Rendering {ro.samples} launches in {ro.chunks} chunks on {self.workers} worker(s).")

        pool = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="tracer")
        try:
            for chunk in range(ro.chunks):
                canvas.clear()
                self._render_chunk(pool, chunk, canvas, stats)
                histogram.add(canvas.read())
                stats.chunks += 1
                logger.debug(f"Chunk {chunk + 1}/{ro.chunks} folded, {stats.launches} launches drawn.")
        except BaseException:
            # Don't wait on tasks that may never finish.
            pool.shutdown(wait=False, cancel_futures=True)
            raise
        pool.shutdown(wait=True)

        stats.elapsed = time.perf_counter() - start
        logger.info(
            f"Rendered {stats.launches} launches: {stats.vertices} vertices, "
            f"{stats.bounces} bounces in {stats.elapsed:.2f}s."
        )
        return stats

    def _render_chunk(self, pool, chunk: int, canvas, stats: PipelineStats):
        completed = queue.Queue()
        for position in self.render_options.launch_positions(chunk, self.launch_height):
            future = pool.submit(self.produce, position)
            future.add_done_callback(completed.put)

        drawn = 0
        while drawn < self.render_options.chunk_size:
            try:
                future = completed.get(timeout=self.result_timeout)
            except queue.Empty:
                raise PipelineTimeoutError(
                    f"no result within {self.result_timeout}s in chunk {chunk} "
                    f"({drawn}/{self.render_options.chunk_size} drawn)"
                ) from None

            strip = future.result()
            canvas.draw_strip(strip.vertices, self.render_options.color)
            drawn += 1
            stats.launches += 1
            stats.vertices += len(strip.vertices)
            stats.bounces += strip.bounces

