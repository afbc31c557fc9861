"""
🚀 INTEGRITY VERIFICATION SERVICE

Verificación post-migración del destino: counts contra el reporte y
referencias FK rotas.
"""

import logging

from django.db import DEFAULT_DB_ALIAS, DatabaseError

logger = logging.getLogger(__name__)


class IntegrityVerificationService:
    """
    Verifica:
    - Counts de filas en destino vs filas migradas según el reporte
    - Relaciones de ForeignKey (ninguna referencia colgante)
    """

    def __init__(self, registry, using=DEFAULT_DB_ALIAS):
        self.registry = registry
        self.using = using
        self.errors = []
        self.warnings = []

    def verify_all(self, report=None):
        """
        Ejecuta todas las verificaciones.

        Returns:
            dict con success, errors y warnings
        """
        logger.info("Iniciando verificación de integridad")

        self.errors = []
        self.warnings = []

        if report is not None:
            self.verify_counts(report)
        self.verify_relationships()

        if self.errors:
            logger.error(f"Verificación falló con {len(self.errors)} errores")
        else:
            logger.info("Verificación de integridad exitosa")

        return {
            'success': not self.errors,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }

    def verify_counts(self, report):
        """Filas en destino == filas migradas con éxito en esta corrida."""
        for entity in self.registry:
            stats = report.entities.get(entity.name)
            if stats is None:
                continue

            actual = entity.model._base_manager.using(self.using).count()
            if actual < stats.succeeded:
                self.errors.append(f"{entity.name}: esperados {stats.succeeded}, actual {actual}")
            elif actual > stats.succeeded:
                # Solo posible si el reset no vació la tabla (upsert de maestras)
                self.warnings.append(f"{entity.name}: más filas de lo esperado ({actual} vs {stats.succeeded})")

    def verify_relationships(self):
        """Detecta FKs que apuntan a filas inexistentes."""
        for entity in self.registry:
            model = entity.model
            for field in model._meta.concrete_fields:
                if not field.is_relation:
                    continue

                related_ids = field.related_model._base_manager.using(self.using).values('pk')
                try:
                    broken = (
                        model._base_manager.using(self.using)
                        .exclude(**{f"{field.attname}__isnull": True})
                        .exclude(**{f"{field.attname}__in": related_ids})
                        .count()
                    )
                except DatabaseError as e:
                    self.warnings.append(f"Error verificando {entity.name}.{field.name}: {e}")
                    continue

                if broken:
                    message = f"{entity.name}.{field.name}: {broken} referencias rotas"
                    self.errors.append(message)
                    logger.error(message)
