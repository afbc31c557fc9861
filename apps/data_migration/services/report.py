"""
Reporte de la corrida: conteos por entidad, fallos por registro y warnings.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from django.utils import timezone

logger = logging.getLogger(__name__)

STATUS_PENDING = 'pending'
STATUS_COMPLETED = 'completed'
STATUS_ABORTED = 'aborted'
STATUS_CANCELLED = 'cancelled'


@dataclass
class EntityStats:
    """attempted = succeeded + failed + skipped"""

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0


@dataclass
class RecordFailure:
    entity: str
    source_id: str
    error: str


@dataclass
class MigrationReport:
    order: List[str] = field(default_factory=list)
    entities: Dict[str, EntityStats] = field(default_factory=dict)
    failures: List[RecordFailure] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    status: str = STATUS_PENDING
    fatal_error: Optional[str] = None
    dry_run: bool = False
    started_at: datetime = field(default_factory=timezone.now)
    finished_at: Optional[datetime] = None

    def stats(self, entity_name) -> EntityStats:
        if entity_name not in self.entities:
            self.entities[entity_name] = EntityStats()
        return self.entities[entity_name]

    def record_success(self, entity_name):
        stats = self.stats(entity_name)
        stats.attempted += 1
        stats.succeeded += 1

    def record_skip(self, entity_name):
        stats = self.stats(entity_name)
        stats.attempted += 1
        stats.skipped += 1

    def record_failure(self, entity_name, source_id, error):
        stats = self.stats(entity_name)
        stats.attempted += 1
        stats.failed += 1
        self.failures.append(RecordFailure(entity_name, str(source_id), str(error)))

    def add_warning(self, message):
        self.warnings.append(str(message))

    def abort(self, error):
        self.status = STATUS_ABORTED
        self.fatal_error = str(error)

    def finish(self):
        self.finished_at = timezone.now()

    @property
    def succeeded(self):
        return self.status == STATUS_COMPLETED

    @property
    def total_attempted(self):
        return sum(stats.attempted for stats in self.entities.values())

    @property
    def total_migrated(self):
        return sum(stats.succeeded for stats in self.entities.values())

    @property
    def total_failed(self):
        return sum(stats.failed for stats in self.entities.values())

    @property
    def duration_seconds(self):
        if not self.finished_at:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def summary_lines(self):
        """Bloque de resumen final, una línea por entidad."""
        lines = [
            '=' * 70,
            f"MIGRATION SUMMARY - status: {self.status}{' (dry run)' if self.dry_run else ''}",
            '=' * 70,
            f"{'Entity':<18}{'Attempted':>11}{'Migrated':>11}{'Failed':>9}{'Skipped':>9}",
        ]
        for name, stats in self.entities.items():
            lines.append(
                f"{name:<18}{stats.attempted:>11}{stats.succeeded:>11}{stats.failed:>9}{stats.skipped:>9}"
            )
        lines.append('-' * 70)
        lines.append(
            f"{'TOTAL':<18}{self.total_attempted:>11}{self.total_migrated:>11}"
            f"{self.total_failed:>9}{sum(s.skipped for s in self.entities.values()):>9}"
        )
        if self.duration_seconds is not None:
            lines.append(f"Duration: {self.duration_seconds:.2f}s")
        if self.fatal_error:
            lines.append(f"Fatal error: {self.fatal_error}")
        for warning in self.warnings:
            lines.append(f"Warning: {warning}")
        for failure in self.failures:
            lines.append(f"Failed: {failure.entity} id={failure.source_id}: {failure.error}")
        lines.append('=' * 70)
        return lines

    def log_summary(self):
        for line in self.summary_lines():
            logger.info(line)

    def to_dict(self):
        data = asdict(self)
        data['started_at'] = self.started_at.isoformat()
        data['finished_at'] = self.finished_at.isoformat() if self.finished_at else None
        data['duration_seconds'] = self.duration_seconds
        return data

    def save(self, path):
        """Guarda el reporte como JSON."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Reporte guardado en: {path}")
