"""
Observability & Audit Layer

RESPONSIBILITY: Audit logging and metrics for every analysis stage
ALLOWED INPUTS: Audit entries and metric points from other stages
OUTPUTS: Stage logs, metric series, audit reports

WHAT THIS LAYER MUST NOT DO:
============================
- Modify engine behavior
- Filter or interpret events (only record them)
- Make decisions based on logged data

BOUNDARY ENFORCEMENT:
=====================
- Entries are immutable once collected
- Collectors are append-only
- Provides read-only access to logs and metrics
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple
import hashlib
import itertools


STAGES = ("extraction", "classification", "matching", "prediction", "cache", "pipeline")


# =============================================================================
# RECORDS
# =============================================================================

class AuditOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    CACHE_HIT = "cache_hit"


@dataclass(frozen=True)
class AuditLogEntry:
    """One immutable audit record."""
    entry_id: str
    timestamp: datetime
    stage: str
    action: str
    entity_id: Optional[str] = None
    outcome: AuditOutcome = AuditOutcome.SUCCESS
    details: str = ""


@dataclass(frozen=True)
class MetricPoint:
    """One immutable metric sample."""
    metric_name: str
    value: float
    timestamp: datetime
    labels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)


# =============================================================================
# LOG COLLECTORS (One per stage)
# =============================================================================

class LogCollector:
    """
    Append-only audit collector for one stage.
    """

    def __init__(self, stage_name: str):
        self._stage_name = stage_name
        self._entries: List[AuditLogEntry] = []

    def collect(self, entry: AuditLogEntry):
        """Collect an audit entry (append-only)."""
        self._entries.append(entry)

    def get_entries(
        self,
        outcome: Optional[AuditOutcome] = None,
        entity_id: Optional[str] = None
    ) -> List[AuditLogEntry]:
        """Get entries, optionally filtered."""
        entries = self._entries
        if outcome is not None:
            entries = [e for e in entries if e.outcome == outcome]
        if entity_id is not None:
            entries = [e for e in entries if e.entity_id == entity_id]
        return list(entries)

    @property
    def stage_name(self) -> str:
        return self._stage_name

    @property
    def entry_count(self) -> int:
        return len(self._entries)


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

class MetricType(Enum):
    """Types of metrics collected."""
    COUNTER = "counter"
    GAUGE = "gauge"
    TIMING = "timing"


@dataclass
class MetricDefinition:
    """Definition of a metric to collect."""
    name: str
    metric_type: MetricType
    description: str
    labels: Tuple[str, ...] = field(default_factory=tuple)


class MetricsCollector:
    """
    Collect and aggregate metrics from all stages.

    Metrics are append-only time series data points.
    """

    def __init__(self):
        self._metrics: Dict[str, List[MetricPoint]] = {}
        self._definitions: Dict[str, MetricDefinition] = {}
        self._register_default_metrics()

    def _register_default_metrics(self):
        """Register standard metrics."""
        defaults = [
            MetricDefinition(
                name="extraction_duration_ms",
                metric_type=MetricType.TIMING,
                description="Signature extraction time in milliseconds"
            ),
            MetricDefinition(
                name="matching_duration_ms",
                metric_type=MetricType.TIMING,
                description="Pattern matching time in milliseconds"
            ),
            MetricDefinition(
                name="prediction_duration_ms",
                metric_type=MetricType.TIMING,
                description="Trajectory prediction time in milliseconds"
            ),
            MetricDefinition(
                name="pipeline_duration_ms",
                metric_type=MetricType.TIMING,
                description="End-to-end pipeline run time in milliseconds"
            ),
            MetricDefinition(
                name="cache_hits_total",
                metric_type=MetricType.COUNTER,
                description="Cache lookups served from cache",
                labels=("cache",)
            ),
            MetricDefinition(
                name="cache_misses_total",
                metric_type=MetricType.COUNTER,
                description="Cache lookups that had to compute",
                labels=("cache",)
            ),
            MetricDefinition(
                name="corpus_size",
                metric_type=MetricType.GAUGE,
                description="Historical patterns considered per match run"
            ),
        ]

        for definition in defaults:
            self.register_metric(definition)

    def register_metric(self, definition: MetricDefinition):
        """Register a new metric definition."""
        self._definitions[definition.name] = definition
        if definition.name not in self._metrics:
            self._metrics[definition.name] = []

    def definition(self, metric_name: str) -> Optional[MetricDefinition]:
        return self._definitions.get(metric_name)

    def record(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ):
        """Record a metric data point."""
        if metric_name not in self._metrics:
            self._metrics[metric_name] = []

        label_tuple = tuple(sorted(labels.items())) if labels else ()

        point = MetricPoint(
            metric_name=metric_name,
            value=value,
            timestamp=datetime.now(timezone.utc),
            labels=label_tuple
        )
        self._metrics[metric_name].append(point)

    def get_metric(
        self,
        metric_name: str,
        labels: Optional[Dict[str, str]] = None
    ) -> List[MetricPoint]:
        """Get metric data points, optionally filtered by labels."""
        points = self._metrics.get(metric_name, [])
        if labels:
            wanted = set(labels.items())
            points = [p for p in points if wanted.issubset(set(p.labels))]
        return list(points)

    def compute_aggregates(
        self,
        metric_name: str,
        labels: Optional[Dict[str, str]] = None
    ) -> Dict[str, float]:
        """Compute aggregate statistics for a metric."""
        points = self.get_metric(metric_name, labels)

        if not points:
            return {}

        values = [p.value for p in points]

        return {
            'count': len(values),
            'sum': sum(values),
            'min': min(values),
            'max': max(values),
            'avg': sum(values) / len(values),
        }


# =============================================================================
# OBSERVABILITY ENGINE
# =============================================================================

@dataclass
class ObservabilityConfig:
    """Configuration for observability engine."""
    enable_metrics: bool = True
    enable_audit: bool = True


class ObservabilityEngine:
    """
    Central Observability Engine.

    BOUNDARY ENFORCEMENT:
    - ONLY observes, never modifies
    - Provides read-only access to collected data
    """

    def __init__(self, config: Optional[ObservabilityConfig] = None):
        self._config = config or ObservabilityConfig()
        self._collectors: Dict[str, LogCollector] = {
            stage: LogCollector(stage) for stage in STAGES
        }
        self._metrics = MetricsCollector() if self._config.enable_metrics else None
        self._sequence = itertools.count()

    def collect_audit(self, entry: AuditLogEntry):
        """Collect an audit log entry from any stage."""
        if not self._config.enable_audit:
            return
        collector = self._collectors.get(entry.stage)
        if collector:
            collector.collect(entry)

    def log_audit(
        self,
        action: str,
        entity_id: Optional[str] = None,
        outcome: AuditOutcome = AuditOutcome.SUCCESS,
        details: str = "",
        stage: str = "pipeline"
    ):
        """Helper to log audit entry directly."""
        now = datetime.now(timezone.utc)
        entry_id = hashlib.sha256(
            f"{stage}_{action}|{now.timestamp()}|{next(self._sequence)}".encode()
        ).hexdigest()[:16]

        self.collect_audit(AuditLogEntry(
            entry_id=f"audit_{entry_id}",
            timestamp=now,
            stage=stage,
            action=action,
            entity_id=entity_id,
            outcome=AuditOutcome(outcome),
            details=details
        ))

    def collect_metric(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ):
        """Collect a metric data point."""
        if self._metrics:
            self._metrics.record(metric_name, value, labels)

    def get_unified_log(self, stages: Optional[List[str]] = None) -> List[AuditLogEntry]:
        """Get unified log from all or specified stages, oldest first."""
        target_stages = stages or list(self._collectors.keys())

        all_entries = []
        for stage_name in target_stages:
            collector = self._collectors.get(stage_name)
            if collector:
                all_entries.extend(collector.get_entries())

        all_entries.sort(key=lambda e: e.timestamp)
        return all_entries

    def get_stage_log(self, stage_name: str) -> List[AuditLogEntry]:
        """Get log for a specific stage."""
        collector = self._collectors.get(stage_name)
        if not collector:
            return []
        return collector.get_entries()

    def get_metrics(self) -> Optional[MetricsCollector]:
        """Get metrics collector (read-only access)."""
        return self._metrics

    def generate_audit_report(self) -> Dict:
        """Summarize collected entries by stage and outcome."""
        entries = self.get_unified_log()

        by_stage: Dict[str, int] = {}
        by_outcome: Dict[str, int] = {}
        for entry in entries:
            by_stage[entry.stage] = by_stage.get(entry.stage, 0) + 1
            by_outcome[entry.outcome.value] = by_outcome.get(entry.outcome.value, 0) + 1

        return {
            'total_entries': len(entries),
            'by_stage': by_stage,
            'by_outcome': by_outcome,
            'time_range': {
                'start': entries[0].timestamp.isoformat() if entries else None,
                'end': entries[-1].timestamp.isoformat() if entries else None,
            },
            'generated_at': datetime.now(timezone.utc).isoformat()
        }
