"""
🚀 FIELD TRANSFORMER

Normaliza una fila cruda del origen a los kwargs que acepta el modelo destino.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.utils.dateparse import parse_datetime

from ..exceptions import TransformError

logger = logging.getLogger(__name__)

INTEGER_TYPES = ('IntegerField', 'BigIntegerField', 'SmallIntegerField', 'PositiveIntegerField')
TEXT_TYPES = ('CharField', 'TextField')


class FieldTransformer:
    """
    Reglas por entidad, en este orden:

    1. Columna origen = column_map[campo] o el db_column del destino
    2. Columna ausente en el origen -> se omite (null / default del modelo)
    3. null o vacío con default declarado -> default (role -> "USER")
    4. Coerción por tipo destino (Decimal, int, bool, datetime);
       JSONField pasa opaco, sin reinterpretar
    5. Campos declarados en truncate -> cortados al max_length destino
    6. Identidad compuesta (relaciones sin id propio) -> pk "A:B"

    transform() devuelve None cuando la fila no trae su identidad (skip).
    """

    def __init__(self, registry):
        self.registry = registry
        self._field_cache = {}

    def _writable_fields(self, entity):
        """[(field, source_column), ...] para los campos concretos del modelo."""
        if entity.name not in self._field_cache:
            fields = []
            for field in entity.model._meta.concrete_fields:
                source_column = entity.column_map.get(field.name, field.column)
                fields.append((field, source_column))
            self._field_cache[entity.name] = fields
        return self._field_cache[entity.name]

    def transform(self, entity, raw_row):
        """
        Args:
            entity: EntitySpec
            raw_row: dict {columna_origen: valor}

        Returns:
            dict {attname: valor} listo para el writer, o None (skip)

        Raises:
            TransformError: un valor no se puede convertir al tipo destino
        """
        source_id = entity.source_id(raw_row)

        if any(raw_row.get(column) in (None, '') for column in entity.identity):
            logger.warning(f"[Transform] {entity.name}: fila sin identidad {entity.identity}, se omite")
            return None

        row = {}
        for field, source_column in self._writable_fields(entity):
            if source_column not in raw_row and field.name not in entity.defaults:
                continue

            value = raw_row.get(source_column)

            if value in (None, '') and field.name in entity.defaults:
                value = entity.defaults[field.name]

            try:
                value = self._coerce(field, value)
            except (TypeError, ValueError, InvalidOperation) as e:
                raise TransformError(entity.name, source_id, f"{field.name}={value!r}: {e}") from e

            if field.name in entity.truncate and isinstance(value, str) and field.max_length:
                value = value[:field.max_length]

            row[field.attname] = value

        pk_attname = entity.model._meta.pk.attname
        if len(entity.identity) > 1 and pk_attname not in row:
            row[pk_attname] = source_id

        return row

    def _coerce(self, field, value):
        if value is None:
            return None

        internal_type = field.get_internal_type()

        if internal_type == 'JSONField':
            return value

        if internal_type == 'DecimalField':
            if isinstance(value, Decimal):
                number = value
            elif isinstance(value, float):
                number = Decimal(str(value))
            else:
                number = Decimal(str(value).strip())
            # Parte entera limitada por max_digits - decimal_places del destino
            if abs(number) >= Decimal(10) ** (field.max_digits - field.decimal_places):
                raise ValueError(f"exceeds {field.max_digits} digits")
            return number

        if internal_type in INTEGER_TYPES:
            if isinstance(value, bool):
                return int(value)
            if isinstance(value, (str, float, Decimal)):
                number = Decimal(str(value).strip())
                if number != number.to_integral_value():
                    raise ValueError("not an integer")
                return int(number)
            return value

        if internal_type == 'BooleanField':
            if isinstance(value, str):
                return value.strip().lower() in ('true', '1', 'yes', 't')
            return bool(value)

        if internal_type == 'DateTimeField':
            if isinstance(value, str):
                parsed = parse_datetime(value)
                if parsed is None:
                    raise ValueError("invalid datetime")
                return parsed
            return value

        if internal_type in TEXT_TYPES or field.is_relation:
            if isinstance(value, (dict, list)):
                raise TypeError("structured value for a text column")
            return value if isinstance(value, str) else str(value)

        return value
