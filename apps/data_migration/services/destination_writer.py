"""
🚀 DESTINATION WRITER

Escribe filas transformadas en la base destino (MySQL) preservando los IDs
del origen, para que los FKs copiados sigan siendo válidos.
"""

import logging
from collections import defaultdict

from django.core.exceptions import ImproperlyConfigured
from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections, transaction

from ..exceptions import ResetError, StoreConnectionError, WriteError

logger = logging.getLogger(__name__)


class DestinationWriter:
    """
    - reset(): vacía tablas en orden inverso de dependencias con FK checks
      suspendidos solo durante el reset
    - write_master(): upsert por identidad (User, Category, Tag, Size)
    - write_detail(): insert-only, el destino se asume recién reseteado

    Cada escritura corre en su propio savepoint: un registro fallido no
    contamina la transacción de los siguientes.
    """

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using
        # IDs confirmados en destino por modelo, para no re-consultar FKs
        self._known_ids = defaultdict(set)

    @property
    def connection(self):
        return connections[self.using]

    def ensure_connection(self):
        """
        Raises:
            StoreConnectionError: destino inalcanzable o mal configurado
        """
        try:
            self.connection.ensure_connection()
        except (DatabaseError, ImproperlyConfigured) as e:
            raise StoreConnectionError('destination', e) from e
        logger.info(f"Conectado a base destino ({self.connection.vendor}, alias={self.using})")

    def reset(self, entities):
        """
        Vacía las tablas destino.

        Args:
            entities: EntitySpec en orden inverso de dependencias (hijas primero)

        Raises:
            ResetError: el destino queda en estado indeterminado
        """
        self._known_ids.clear()
        current = None
        try:
            with transaction.atomic(using=self.using):
                with self.connection.constraint_checks_disabled():
                    for entity in entities:
                        current = entity.name
                        deleted, _ = entity.model._base_manager.using(self.using).all().delete()
                        logger.debug(f"[Reset] {entity.name}: {deleted} filas eliminadas")
        except DatabaseError as e:
            raise ResetError(current, e) from e

        logger.info(f"Destino reseteado: {len(entities)} tablas vaciadas")

    def write_master(self, entity, row, source_id=None):
        """Upsert por identidad: crea si no existe, si no actualiza."""
        return self._write(entity, row, source_id, upsert=True)

    def write_detail(self, entity, row, source_id=None):
        """Insert-only."""
        return self._write(entity, row, source_id, upsert=False)

    def write(self, entity, row, source_id=None):
        if entity.upsert:
            return self.write_master(entity, row, source_id)
        return self.write_detail(entity, row, source_id)

    def _write(self, entity, row, source_id, upsert):
        model = entity.model
        pk_attname = model._meta.pk.attname
        if source_id is None:
            source_id = row.get(pk_attname)

        try:
            with transaction.atomic(using=self.using):
                self._check_references(entity, model, row, source_id)
                manager = model._base_manager.db_manager(self.using)

                if upsert:
                    defaults = {key: value for key, value in row.items() if key != pk_attname}
                    instance, _ = manager.update_or_create(defaults=defaults, **{pk_attname: row[pk_attname]})
                else:
                    instance = manager.create(**row)
        except WriteError:
            raise
        except Exception as e:
            # Cualquier fallo al guardar (DB, validación, conversión decimal) es del registro
            raise WriteError(entity.name, source_id, e) from e

        self._known_ids[model].add(instance.pk)
        return instance

    def _check_references(self, entity, model, row, source_id):
        """
        Verifica que cada FK apunte a una fila existente en destino.

        MySQL lo rechaza solo, pero otros backends difieren la verificación
        hasta el commit; así el fallo queda en el registro que lo causa.
        """
        for field in model._meta.concrete_fields:
            if not field.is_relation:
                continue

            value = row.get(field.attname)
            if value is None:
                continue

            related_model = field.related_model
            if value in self._known_ids[related_model]:
                continue

            if related_model._base_manager.using(self.using).filter(pk=value).exists():
                self._known_ids[related_model].add(value)
                continue

            raise WriteError(
                entity.name,
                source_id,
                f"{field.column}={value} references missing {related_model._meta.db_table}"
            )

    def close(self):
        """Libera la conexión destino."""
        self.connection.close()
        logger.info("Conexión destino cerrada")
