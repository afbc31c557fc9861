"""
🚀 SOURCE READER

Adaptador de solo lectura sobre la base origen (PostgreSQL).
Consultas parametrizadas, filas devueltas como dicts {columna: valor}.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import psycopg2
import psycopg2.errors
import psycopg2.extensions

from ..exceptions import SchemaMismatchError, StoreConnectionError, sanitize_error

logger = logging.getLogger(__name__)


def quote_identifier(identifier: str) -> str:
    """Quote identifier for the source dialect ("User", "cartId")."""
    return '"{}"'.format(identifier.replace('"', '""'))


class SourceReader:
    """
    Lector del origen.

    - fetch_all(entity): todas las filas de la relación de la entidad
    - fetch_children(entity, parent_id): filas hijas de un padre
    - Relación/columna inexistente = SchemaMismatchError recuperable:
      warning + cero filas (queda registrado en schema_mismatches)
    """

    def __init__(self, connection, placeholder='%s', missing_relation_errors=None):
        """
        Args:
            connection: conexión DB-API ya abierta
            placeholder: marcador de parámetros del driver (%s psycopg2, ? sqlite3)
            missing_relation_errors: tupla de excepciones del driver que indican
                tabla/columna inexistente
        """
        self.connection = connection
        self.placeholder = placeholder
        self.missing_relation_errors = tuple(missing_relation_errors or ())
        self.schema_mismatches = []

    @classmethod
    def connect(cls, url):
        """
        Abre una conexión PostgreSQL de solo lectura.

        Raises:
            StoreConnectionError: URL vacía o conexión rechazada
        """
        if not url:
            raise StoreConnectionError('source', 'SOURCE_DATABASE_URL is not configured')

        logger.info("Conectando a base origen...")
        try:
            connection = psycopg2.connect(url)
            connection.set_session(
                isolation_level=psycopg2.extensions.ISOLATION_LEVEL_REPEATABLE_READ,
                readonly=True
            )
        except psycopg2.Error as e:
            raise StoreConnectionError('source', e) from e

        logger.info("Conectado a PostgreSQL origen (READ ONLY)")
        return cls(
            connection,
            placeholder='%s',
            missing_relation_errors=(psycopg2.errors.UndefinedTable, psycopg2.errors.UndefinedColumn)
        )

    def _query(self, entity, sql, params=()):
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, params)
            columns = [column[0] for column in cursor.description]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]
        except self.missing_relation_errors as e:
            # Una transacción abortada no acepta más queries
            self.connection.rollback()
            mismatch = SchemaMismatchError(entity.name, entity.source_table, sanitize_error(e))
            self.schema_mismatches.append(mismatch)
            logger.warning(f"[Source] {mismatch}. Se asumen 0 filas.")
            return []
        finally:
            cursor.close()

    def fetch_all(self, entity):
        sql = f"SELECT * FROM {quote_identifier(entity.source_table)}"
        return self._query(entity, sql)

    def fetch_children(self, entity, parent_id):
        sql = (
            f"SELECT * FROM {quote_identifier(entity.source_table)} "
            f"WHERE {quote_identifier(entity.parent_column)} = {self.placeholder}"
        )
        return self._query(entity, sql, (parent_id,))

    def fetch_children_many(self, entity, parent_ids, max_workers=1):
        """
        Filas hijas para muchos padres, con concurrencia acotada.

        Los conjuntos de hijos son disjuntos por padre, así que el resultado no
        depende del orden de ejecución.

        Returns:
            dict {parent_id: [rows]}
        """
        parent_ids = list(parent_ids)
        if max_workers <= 1 or len(parent_ids) <= 1:
            return {parent_id: self.fetch_children(entity, parent_id) for parent_id in parent_ids}

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = executor.map(lambda parent_id: self.fetch_children(entity, parent_id), parent_ids)
            return dict(zip(parent_ids, results))

    def close(self):
        """Cierra la conexión al origen."""
        if self.connection is None:
            return
        try:
            self.connection.close()
            logger.info("Conexión origen cerrada")
        finally:
            self.connection = None
