"""
Batch drainage analysis with per-item failure isolation.

A batch is an ordered list of independent requests. The whole batch is
rejected up front when it is empty or too large; after that, every item runs
to completion or failure on its own, and a failing item is recorded in the
result instead of aborting the rest. Results always mirror input order.
"""

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from tqdm import tqdm

from src import config
from src.drainage.analysis import (
    AnalysisOptions,
    AnalysisRequest,
    AnalysisResult,
    analyze_water_flow,
)
from src.drainage.errors import BatchSizeExceededError, ItemAnalysisError, error_code

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchItemResult:
    """Outcome of one batch item."""

    index: int
    success: bool
    processing_time_ms: float
    result: Optional[AnalysisResult] = None
    error: Optional[ItemAnalysisError] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        entry: Dict[str, Any] = {
            "index": self.index,
            "success": self.success,
            "processingTimeMs": self.processing_time_ms,
        }
        if self.success:
            entry["result"] = self.result.to_dict()
        else:
            entry["error"] = self.error.cause_message
            entry["errorCode"] = error_code(self.error.cause)
        return entry


@dataclass(frozen=True)
class BatchResult:
    """Ordered item outcomes plus aggregate batch statistics."""

    batch_id: str
    results: List[BatchItemResult]
    total_processing_time_ms: float
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def total_items(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def average_time_per_item_ms(self) -> float:
        return round(self.total_processing_time_ms / self.total_items, 3)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "batchId": self.batch_id,
            "totalItems": self.total_items,
            "successful": self.successful,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
            "batchStats": {
                "totalProcessingTimeMs": self.total_processing_time_ms,
                "averageTimePerItemMs": self.average_time_per_item_ms,
                "timestamp": self.timestamp,
            },
        }


def generate_batch_id() -> str:
    """Unique, time-prefixed identifier for tracing a batch."""
    return f"batch_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


def _to_request(item: Any, shared: Optional[Mapping[str, Any]]) -> AnalysisRequest:
    # Per-item options take precedence over the shared ones
    if isinstance(item, AnalysisRequest):
        return item
    if isinstance(item, Mapping):
        merged = dict(shared or {})
        merged.update({k: v for k, v in item.items() if k not in ("grid", "options")})
        merged.update(item.get("options") or {})
        return AnalysisRequest(grid=item.get("grid"), options=AnalysisOptions.from_dict(merged))
    return AnalysisRequest(grid=item, options=AnalysisOptions.from_dict(shared))


def _run_item(
    index: int, item: Any, shared: Optional[Mapping[str, Any]]
) -> BatchItemResult:
    start = time.perf_counter()
    try:
        request = _to_request(item, shared)
        result = analyze_water_flow(request.grid, request.options)
    except Exception as e:
        elapsed_ms = round((time.perf_counter() - start) * 1000.0, 3)
        failure = ItemAnalysisError(index, e)
        logger.warning("Batch item %d failed [%s]: %s", index, error_code(e), e)
        return BatchItemResult(
            index=index, success=False, processing_time_ms=elapsed_ms, error=failure
        )

    elapsed_ms = round((time.perf_counter() - start) * 1000.0, 3)
    return BatchItemResult(
        index=index, success=True, processing_time_ms=elapsed_ms, result=result
    )


def run_batch(
    items: Sequence[Any],
    options: Union[AnalysisOptions, Mapping[str, Any], None] = None,
    max_items: int = config.MAX_BATCH_ITEMS,
    max_workers: Optional[int] = None,
    show_progress: bool = False,
) -> BatchResult:
    """
    Analyze an ordered list of grids, isolating per-item failures.

    Args:
        items: Batch items. Each is an AnalysisRequest, a dict
            ``{"grid": ..., "options": {...}}``, or a bare grid
        options: Options shared by all items (per-item options override)
        max_items: Maximum batch size
        max_workers: Process items on this many threads (None or 1 = sequential)
        show_progress: Display a tqdm progress bar

    Returns:
        BatchResult with one entry per item, in input order

    Raises:
        BatchSizeExceededError: If the batch is empty or larger than max_items.
            Raised before any item is processed.
    """
    items = list(items) if items is not None else []
    if not items or len(items) > max_items:
        raise BatchSizeExceededError(len(items), max_items)

    if isinstance(options, AnalysisOptions):
        options = options.to_dict()

    batch_id = generate_batch_id()
    logger.info("Starting batch analysis %s for %d items", batch_id, len(items))
    start = time.perf_counter()

    indexed: List[Tuple[int, Any]] = list(enumerate(items))
    with tqdm(total=len(items), desc="Analyzing grids", disable=not show_progress) as pbar:
        if max_workers is not None and max_workers > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = [executor.submit(_run_item, i, item, options) for i, item in indexed]
                results = []
                # Collected in submission order, so results mirror input order
                for future in futures:
                    results.append(future.result())
                    pbar.update(1)
        else:
            results = []
            for i, item in indexed:
                results.append(_run_item(i, item, options))
                pbar.update(1)

    total_ms = round((time.perf_counter() - start) * 1000.0, 3)
    batch = BatchResult(batch_id=batch_id, results=results, total_processing_time_ms=total_ms)

    logger.info(
        "Completed batch analysis %s in %.3f ms: %d successful, %d failed",
        batch_id,
        total_ms,
        batch.successful,
        batch.failed,
    )
    return batch
