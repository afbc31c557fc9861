"""
🚀 STORE DATA MIGRATION

Migración one-shot de la tienda desde PostgreSQL (origen) a MySQL (destino).

Features:
- Orden de entidades calculado desde sus dependencias FK
- Reset del destino en orden inverso
- IDs del origen preservados
- Fallos aislados por registro, con reporte final
- Herramientas de media: relocalización, huérfanos y compresión
"""
