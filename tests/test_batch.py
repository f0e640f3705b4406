"""Tests for batch analysis with per-item failure isolation."""

import re

import pytest

from src.drainage import batch as batch_module
from src.drainage.analysis import AnalysisOptions, AnalysisRequest
from src.drainage.batch import BatchItemResult, BatchResult, generate_batch_id, run_batch
from src.drainage.errors import BatchSizeExceededError, ItemAnalysisError

VALID = [[1, 2], [2, 1]]
RAGGED = [[1, 2], [3]]


class TestRunBatch:
    """Test suite for run_batch."""

    def test_mixed_batch_isolates_failures(self, five_by_five):
        """A malformed item fails alone; the others still succeed."""
        batch = run_batch([{"grid": five_by_five}, {"grid": RAGGED}, {"grid": VALID}])

        assert isinstance(batch, BatchResult)
        assert batch.total_items == 3
        assert batch.successful == 2
        assert batch.failed == 1
        assert [r.index for r in batch.results] == [0, 1, 2]
        assert [r.success for r in batch.results] == [True, False, True]
        assert len(batch.results[0].result.cells) == 7
        assert batch.results[2].result.coordinates() == [(0, 1), (1, 0)]

    def test_failed_item_records_error(self):
        """The failure keeps the item index and the underlying error."""
        batch = run_batch([VALID, RAGGED])

        failed = batch.results[1]
        assert failed.result is None
        assert isinstance(failed.error, ItemAnalysisError)
        assert failed.error.index == 1
        assert "same length" in failed.error.cause_message
        assert failed.error.details["cause_code"] == "INVALID_GRID"

    def test_bare_grids_accepted(self):
        """Items may be bare grids."""
        batch = run_batch([VALID, [[7]]])

        assert batch.successful == 2

    def test_request_objects_accepted(self):
        """Items may be AnalysisRequest objects."""
        request = AnalysisRequest(grid=VALID, options=AnalysisOptions(include_stats=False))

        batch = run_batch([request])

        assert batch.results[0].result.stats is None

    def test_exactly_max_items_accepted(self):
        """A batch of exactly the limit is processed."""
        batch = run_batch([VALID] * 10)

        assert batch.total_items == 10
        assert batch.successful == 10

    def test_too_many_items_rejected(self, monkeypatch):
        """One over the limit rejects the whole batch before any work."""
        calls = []
        monkeypatch.setattr(batch_module, "_run_item", lambda *args: calls.append(args))

        with pytest.raises(BatchSizeExceededError) as exc_info:
            run_batch([VALID] * 11)

        assert exc_info.value.count == 11
        assert exc_info.value.limit == 10
        assert "limited to 10" in str(exc_info.value)
        assert calls == []

    def test_integer_beyond_float_range_is_not_internal_error(self):
        """Huge integer cells are analyzed rather than failing as internal errors."""
        batch = run_batch([[[10**400]], RAGGED])

        assert batch.results[0].success is True
        assert batch.results[1].to_dict()["errorCode"] == "INVALID_GRID"

    @pytest.mark.parametrize("items", [[], None])
    def test_empty_batch_rejected(self, items):
        """An empty batch is rejected."""
        with pytest.raises(BatchSizeExceededError, match="at least one item"):
            run_batch(items)

    def test_custom_max_items(self):
        """max_items overrides the default limit."""
        with pytest.raises(BatchSizeExceededError):
            run_batch([VALID] * 3, max_items=2)

    def test_item_options_override_shared(self, monotonic_grid):
        """Per-item options win over shared batch options."""
        batch = run_batch(
            [
                {"grid": monotonic_grid},
                {"grid": monotonic_grid, "options": {"includeStats": True}},
            ],
            options={"includeStats": False},
        )

        assert batch.results[0].result.stats is None
        assert batch.results[1].result.stats is not None

    def test_shared_options_object(self, monotonic_grid):
        """Shared options may be an AnalysisOptions instance."""
        options = AnalysisOptions(group_a_edges=["top"], group_b_edges=["bottom"])

        batch = run_batch([monotonic_grid], options=options)

        assert batch.results[0].result.coordinates() == [(2, 0), (2, 1), (2, 2)]

    def test_invalid_item_options_fail_item_only(self):
        """Bad per-item options are a per-item failure."""
        batch = run_batch([{"grid": VALID, "options": {"groupAEdges": ["north"]}}, VALID])

        assert batch.results[0].success is False
        assert batch.results[0].error.details["cause_code"] == "INVALID_BOUNDARY"
        assert batch.results[1].success is True

    def test_item_without_grid_fails(self):
        """A dict item with no grid fails with an invalid-grid error."""
        batch = run_batch([{"options": {}}])

        assert batch.failed == 1
        assert "Grid data is required" in batch.results[0].error.cause_message

    def test_threaded_preserves_order(self, rng):
        """With worker threads, results still mirror input order."""
        grids = [rng.integers(0, 5, size=(n + 3, n + 3)).tolist() for n in range(8)]
        items = grids[:4] + [RAGGED] + grids[4:]

        sequential = run_batch(items)
        threaded = run_batch(items, max_workers=4)

        assert [r.index for r in threaded.results] == list(range(9))
        assert [r.success for r in threaded.results] == [r.success for r in sequential.results]
        for seq, par in zip(sequential.results, threaded.results):
            if seq.success:
                assert par.result.cells == seq.result.cells

    def test_progress_bar(self):
        """show_progress does not affect results."""
        batch = run_batch([VALID, VALID], show_progress=True)

        assert batch.successful == 2

    def test_failure_logged(self, caplog):
        """A failing item is logged at WARNING with its index and code."""
        with caplog.at_level("WARNING"):
            run_batch([RAGGED])

        assert any(
            "Batch item 0 failed [INVALID_GRID]" in record.message for record in caplog.records
        )


class TestBatchSerialization:
    """Test suite for BatchResult/BatchItemResult.to_dict."""

    def test_batch_to_dict(self):
        """Aggregate counts, per-item entries and batch stats are present."""
        data = run_batch([VALID, RAGGED]).to_dict()

        assert data["batchId"].startswith("batch_")
        assert data["totalItems"] == 2
        assert data["successful"] == 1
        assert data["failed"] == 1
        assert len(data["results"]) == 2
        assert set(data["batchStats"]) == {
            "totalProcessingTimeMs",
            "averageTimePerItemMs",
            "timestamp",
        }

    def test_successful_item_to_dict(self):
        """A successful entry carries the analysis result."""
        entry = run_batch([VALID]).results[0].to_dict()

        assert entry["index"] == 0
        assert entry["success"] is True
        assert "processingTimeMs" in entry
        assert len(entry["result"]["cells"]) == 2
        assert "error" not in entry

    def test_failed_item_to_dict(self):
        """A failed entry carries the error message and code."""
        entry = run_batch([RAGGED]).results[0].to_dict()

        assert entry["success"] is False
        assert entry["errorCode"] == "INVALID_GRID"
        assert "same length" in entry["error"]
        assert "result" not in entry

    def test_non_analysis_error_code(self):
        """Unexpected errors are reported as INTERNAL_ERROR."""
        item = BatchItemResult(
            index=3,
            success=False,
            processing_time_ms=0.1,
            error=ItemAnalysisError(3, RuntimeError("boom")),
        )

        assert item.to_dict()["errorCode"] == "INTERNAL_ERROR"
        assert item.to_dict()["error"] == "boom"

    def test_average_time_per_item(self):
        """Average time divides total time by item count."""
        batch = BatchResult(batch_id="b", results=[
            BatchItemResult(index=0, success=True, processing_time_ms=1.0),
            BatchItemResult(index=1, success=True, processing_time_ms=1.0),
        ], total_processing_time_ms=5.0)

        assert batch.average_time_per_item_ms == 2.5


class TestGenerateBatchId:
    """Test suite for generate_batch_id."""

    def test_format(self):
        """IDs are batch_<millis>_<hex>."""
        assert re.fullmatch(r"batch_\d+_[0-9a-f]{6}", generate_batch_id())

    def test_unique(self):
        """Consecutive IDs differ."""
        assert len({generate_batch_id() for _ in range(50)}) == 50
