"""
Metrics Collection for the Reference Synchronizer

Collects and exposes in-memory metrics for:
- Fetches per collection (started, succeeded, failed)
- Form submissions (sent, succeeded, failed, rejected by validation)
- Fetch durations (average, p95)
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional, Any
import statistics


# =============================================================================
# Metric Data Classes
# =============================================================================

@dataclass
class FetchCounters:
    """Counters for collection fetches."""
    started: int = 0
    succeeded: int = 0
    failed: int = 0

    # By collection name
    by_collection: Dict[str, Dict[str, int]] = field(default_factory=lambda: defaultdict(lambda: {"started": 0, "succeeded": 0, "failed": 0}))

    # Last successful refresh per collection
    last_success: Dict[str, datetime] = field(default_factory=dict)

    # Last failure message per collection
    last_error: Dict[str, str] = field(default_factory=dict)


@dataclass
class SubmissionCounters:
    """Counters for form submissions."""
    sent: int = 0
    succeeded: int = 0
    failed: int = 0
    rejected: int = 0

    by_form: Dict[str, Dict[str, int]] = field(default_factory=lambda: defaultdict(lambda: {"sent": 0, "succeeded": 0, "failed": 0, "rejected": 0}))


@dataclass
class TimingMetrics:
    """Fetch duration metrics."""
    # Raw timing samples (keep last N for percentile calculations)
    samples: List[float] = field(default_factory=list)
    max_samples: int = 1000

    by_stage: Dict[str, List[float]] = field(default_factory=lambda: defaultdict(list))

    def add_sample(self, duration_ms: float, stage: str = None):
        """Add a timing sample."""
        self.samples.append(duration_ms)
        if len(self.samples) > self.max_samples:
            self.samples = self.samples[-self.max_samples:]

        if stage:
            self.by_stage[stage].append(duration_ms)
            if len(self.by_stage[stage]) > self.max_samples:
                self.by_stage[stage] = self.by_stage[stage][-self.max_samples:]

    def get_average(self, stage: str = None) -> float:
        samples = self.by_stage.get(stage, []) if stage else self.samples
        return statistics.mean(samples) if samples else 0.0

    def get_p95(self, stage: str = None) -> float:
        samples = self.by_stage.get(stage, []) if stage else self.samples
        if not samples:
            return 0.0
        sorted_samples = sorted(samples)
        idx = int(len(sorted_samples) * 0.95)
        return sorted_samples[min(idx, len(sorted_samples) - 1)]


# =============================================================================
# Metrics Collector (Singleton)
# =============================================================================

class FetchMetrics:
    """
    Thread-safe metrics collector for backend fetches and submissions.

    Usage:
        metrics = FetchMetrics.instance()
        metrics.record_fetch_started("reference_data")
        metrics.record_fetch_succeeded("reference_data", duration_ms=42)
    """

    _instance: Optional["FetchMetrics"] = None
    _instance_lock = Lock()

    def __init__(self):
        self.fetches = FetchCounters()
        self.submissions = SubmissionCounters()
        self.timings = TimingMetrics()
        self._lock = Lock()

    @classmethod
    def instance(cls) -> "FetchMetrics":
        """Get singleton instance."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    # =========================================================================
    # Fetches
    # =========================================================================

    def record_fetch_started(self, collection: str):
        with self._lock:
            self.fetches.started += 1
            self.fetches.by_collection[collection]["started"] += 1

    def record_fetch_succeeded(self, collection: str, duration_ms: float = None):
        with self._lock:
            self.fetches.succeeded += 1
            self.fetches.by_collection[collection]["succeeded"] += 1
            self.fetches.last_success[collection] = datetime.now(timezone.utc)

            if duration_ms is not None:
                self.timings.add_sample(duration_ms, f"fetch.{collection}")

    def record_fetch_failed(self, collection: str, error: str = None):
        with self._lock:
            self.fetches.failed += 1
            self.fetches.by_collection[collection]["failed"] += 1
            if error:
                self.fetches.last_error[collection] = error

    # =========================================================================
    # Submissions
    # =========================================================================

    def record_submission(self, form: str, outcome: str):
        """Record a submission outcome: sent, succeeded, failed or rejected."""
        with self._lock:
            setattr(self.submissions, outcome, getattr(self.submissions, outcome) + 1)
            self.submissions.by_form[form][outcome] += 1

    # =========================================================================
    # Timing
    # =========================================================================

    def get_timing_stats(self, stage: str = None) -> Dict[str, float]:
        """Get timing statistics for a stage."""
        with self._lock:
            return {
                "average_ms": self.timings.get_average(stage),
                "p95_ms": self.timings.get_p95(stage),
                "sample_count": len(self.timings.by_stage.get(stage, []) if stage else self.timings.samples),
            }

    # =========================================================================
    # Summary
    # =========================================================================

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        with self._lock:
            return {
                "fetches": {
                    "started": self.fetches.started,
                    "succeeded": self.fetches.succeeded,
                    "failed": self.fetches.failed,
                    "by_collection": {k: dict(v) for k, v in self.fetches.by_collection.items()},
                    "last_success": {k: v.isoformat() for k, v in self.fetches.last_success.items()},
                    "last_error": dict(self.fetches.last_error),
                },
                "submissions": {
                    "sent": self.submissions.sent,
                    "succeeded": self.submissions.succeeded,
                    "failed": self.submissions.failed,
                    "rejected": self.submissions.rejected,
                    "by_form": {k: dict(v) for k, v in self.submissions.by_form.items()},
                },
                "timings": {
                    "overall": {
                        "average_ms": self.timings.get_average(),
                        "p95_ms": self.timings.get_p95(),
                    },
                    "by_stage": {
                        stage: {
                            "average_ms": self.timings.get_average(stage),
                            "p95_ms": self.timings.get_p95(stage),
                        }
                        for stage in self.timings.by_stage.keys()
                    },
                },
            }


# =============================================================================
# Module-level convenience functions
# =============================================================================

def get_metrics() -> FetchMetrics:
    """Get the global metrics collector."""
    return FetchMetrics.instance()


def record_fetch_started(collection: str):
    get_metrics().record_fetch_started(collection)


def record_fetch_succeeded(collection: str, duration_ms: float = None):
    get_metrics().record_fetch_succeeded(collection, duration_ms)


def record_fetch_failed(collection: str, error: str = None):
    get_metrics().record_fetch_failed(collection, error)


def record_submission(form: str, outcome: str):
    get_metrics().record_submission(form, outcome)
