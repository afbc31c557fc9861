"""
🚀 STORE DATA MIGRATION SERVICE

Orquesta la migración completa origen (PostgreSQL) -> destino (MySQL):
reset del destino, recorrido de entidades en orden de dependencias,
composición padre + hijos, aislamiento de fallos por registro y reporte final.
"""

import logging
from enum import Enum

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS

from ..entities import EntityRegistry
from ..exceptions import FatalMigrationError, RecordError, TransformError
from ..utils import migration_order, reset_order
from .destination_writer import DestinationWriter
from .integrity import IntegrityVerificationService
from .report import STATUS_CANCELLED, STATUS_COMPLETED, MigrationReport
from .source_reader import SourceReader
from .transformer import FieldTransformer

logger = logging.getLogger(__name__)


class MigrationState(Enum):
    IDLE = 'idle'
    RESETTING = 'resetting'
    MIGRATING = 'migrating'
    COMPLETED = 'completed'
    ABORTED = 'aborted'
    FINALIZING = 'finalizing'


class MigrationContext:
    """
    Conexiones de una corrida, pasadas explícitamente a cada componente.

    Args:
        source_url: connection string del origen (si no se entrega source_reader)
        using: alias de base destino en settings.DATABASES
        source_reader: lector ya construido (tests, otros drivers)
        destination_writer: writer ya construido
    """

    def __init__(self, source_url=None, using=DEFAULT_DB_ALIAS, source_reader=None, destination_writer=None):
        self.source_url = source_url
        self.source_reader = source_reader
        self.destination_writer = destination_writer or DestinationWriter(using=using)

    def open(self):
        """
        Raises:
            StoreConnectionError: origen o destino inalcanzable
        """
        if self.source_reader is None:
            self.source_reader = SourceReader.connect(self.source_url)
        self.destination_writer.ensure_connection()

    def close(self):
        """Libera ambas conexiones; un error al cerrar una no impide cerrar la otra."""
        if self.source_reader is not None:
            try:
                self.source_reader.close()
            except Exception as e:
                logger.error(f"Error cerrando conexión origen: {e}")
        try:
            self.destination_writer.close()
        except Exception as e:
            logger.error(f"Error cerrando conexión destino: {e}")


class DataMigrationService:
    """
    Máquina de estados de la corrida:

        Idle -> Resetting -> Migrating(E)... -> Completed
                    \\______________\\__________-> Aborted
        Finalizing siempre corre al final (cierra conexiones).

    - Cada fila: transform + write; un TransformError/WriteError se loguea,
      se cuenta y se sigue con la siguiente fila
    - Entidades compuestas: los hijos se migran justo después de que el padre
      se escribe; si el padre falla, sus hijos no se intentan
    - Un error fatal (conexión, reset, configuración) aborta la corrida
    """

    def __init__(self, context, registry=None, transformer=None, dry_run=False, verify=True,
                 child_fetch_workers=None, cancel_event=None):
        """
        Args:
            context: MigrationContext
            registry: EntityRegistry (por defecto las entidades de la tienda)
            transformer: FieldTransformer
            dry_run: leer y transformar sin resetear ni escribir
            verify: verificar integridad del destino al completar
            child_fetch_workers: lecturas concurrentes de hijos (1 = secuencial)
            cancel_event: threading.Event revisado entre tipos de entidad
        """
        self.context = context
        self.registry = registry or EntityRegistry()
        self.transformer = transformer or FieldTransformer(self.registry)
        self.dry_run = dry_run
        self.verify = verify
        if child_fetch_workers is None:
            child_fetch_workers = getattr(settings, 'DATA_MIGRATION', {}).get('CHILD_FETCH_WORKERS', 1)
        self.child_fetch_workers = max(1, child_fetch_workers)
        self.cancel_event = cancel_event

        self.state = MigrationState.IDLE
        self.current_entity = None
        self.history = [(MigrationState.IDLE, None)]
        self.report = None

    def _transition(self, state, entity_name=None):
        self.state = state
        self.current_entity = entity_name
        self.history.append((state, entity_name))
        logger.debug(f"[Migración] Estado: {state.value}{f' ({entity_name})' if entity_name else ''}")

    def _cancelled(self):
        return self.cancel_event is not None and self.cancel_event.is_set()

    def plan(self):
        """
        Returns:
            (orden de migración de nivel superior, orden de reset)

        Raises:
            ConfigurationError / DependencyCycleError
        """
        return migration_order(self.registry), reset_order(self.registry)

    def run(self):
        """
        Ejecuta la corrida completa.

        Returns:
            MigrationReport (status completed / aborted / cancelled)
        """
        report = MigrationReport(dry_run=self.dry_run)
        self.report = report
        logger.info(f"[Migración] Iniciando migración de datos{' [DRY RUN]' if self.dry_run else ''}")

        try:
            order, reset = self.plan()
            report.order = order

            self._transition(MigrationState.RESETTING)
            self.context.open()
            if self.dry_run:
                logger.info("[DRY RUN] Reset del destino omitido")
            else:
                self.context.destination_writer.reset([self.registry.get(name) for name in reset])

            for entity_name in order:
                if self._cancelled():
                    logger.warning(f"[Migración] Cancelada antes de {entity_name}")
                    report.status = STATUS_CANCELLED
                    self._transition(MigrationState.ABORTED, entity_name)
                    break

                self._transition(MigrationState.MIGRATING, entity_name)
                self._migrate_entity(self.registry.get(entity_name), report)
            else:
                self._transition(MigrationState.COMPLETED)
                report.status = STATUS_COMPLETED
                if self.verify and not self.dry_run:
                    self._verify(report)

        except FatalMigrationError as e:
            logger.error(f"[Migración] Error fatal: {e}")
            self._transition(MigrationState.ABORTED, self.current_entity)
            report.abort(e)
        except Exception as e:
            logger.exception("[Migración] Error inesperado")
            self._transition(MigrationState.ABORTED, self.current_entity)
            report.abort(e)
            raise
        finally:
            self._transition(MigrationState.FINALIZING)
            self._collect_schema_warnings(report)
            self.context.close()
            report.finish()
            report.log_summary()

        return report

    def _collect_schema_warnings(self, report):
        reader = self.context.source_reader
        if reader is None:
            return
        for mismatch in getattr(reader, 'schema_mismatches', []):
            if str(mismatch) not in report.warnings:
                report.add_warning(mismatch)
        reader.schema_mismatches = []

    def _migrate_entity(self, entity, report):
        reader = self.context.source_reader
        children = self.registry.children_of(entity.name)

        logger.info(f"[Migración] Migrando {entity.name}...")
        report.stats(entity.name)
        for child in children:
            report.stats(child.name)

        rows = reader.fetch_all(entity)
        prefetched = self._prefetch_children(children, entity, rows)

        for raw_row in rows:
            if not self._migrate_row(entity, raw_row, report) or not children:
                continue

            parent_id = entity.source_id(raw_row)
            for child in children:
                if prefetched is not None:
                    child_rows = prefetched[child.name].get(parent_id, [])
                else:
                    child_rows = reader.fetch_children(child, parent_id)
                for child_row in child_rows:
                    self._migrate_row(child, child_row, report)

        self._collect_schema_warnings(report)

        stats = report.stats(entity.name)
        logger.info(f"[Migración] Migrados {stats.succeeded}/{stats.attempted} registros de {entity.name}")
        for child in children:
            child_stats = report.stats(child.name)
            logger.info(
                f"[Migración] Migrados {child_stats.succeeded}/{child_stats.attempted} registros de {child.name}"
            )

    def _prefetch_children(self, children, entity, rows):
        """Lectura concurrente de hijos de todos los padres (solo si workers > 1)."""
        if not children or self.child_fetch_workers <= 1:
            return None

        parent_ids = [entity.source_id(row) for row in rows]
        return {
            child.name: self.context.source_reader.fetch_children_many(
                child, parent_ids, max_workers=self.child_fetch_workers
            )
            for child in children
        }

    def _migrate_row(self, entity, raw_row, report):
        """
        Transforma y escribe una fila.

        Returns:
            True si la fila quedó escrita (o transformada, en dry run)
        """
        source_id = entity.source_id(raw_row)

        try:
            try:
                row = self.transformer.transform(entity, raw_row)
            except RecordError:
                raise
            except Exception as e:
                raise TransformError(entity.name, source_id, e) from e

            if row is None:
                report.record_skip(entity.name)
                return False

            if not self.dry_run:
                self.context.destination_writer.write(entity, row, source_id=source_id)

        except RecordError as e:
            report.record_failure(entity.name, source_id, f"{e.stage}: {e.cause}")
            logger.error(f"[Migración] Error migrando {entity.name} id={source_id}: {e.cause}")
            return False

        report.record_success(entity.name)
        return True

    def _verify(self, report):
        writer = self.context.destination_writer
        verification = IntegrityVerificationService(self.registry, using=writer.using).verify_all(report)
        for error in verification['errors']:
            report.add_warning(f"Integrity: {error}")
        for warning in verification['warnings']:
            report.add_warning(f"Integrity: {warning}")
