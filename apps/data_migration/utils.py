"""
Utilidades comunes para la migración de datos.

Incluye el grafo de dependencias entre entidades (aristas FK declaradas en
entities.py) y el ordenamiento topológico que define el orden de migración
y el orden de reset.
"""

import heapq
import logging
from collections import defaultdict

from .exceptions import ConfigurationError, DependencyCycleError

logger = logging.getLogger(__name__)


def build_dependency_graph(registry):
    """
    Construye grafo de dependencias entre entidades.

    Returns:
        dict {entity_name: set(dependency_names)}

    Raises:
        ConfigurationError: dependencia hacia una entidad no declarada,
            o entidad hija mal declarada
    """
    graph = {}

    for spec in registry:
        dependencies = set(spec.depends_on)

        if spec.is_child:
            if spec.parent not in registry:
                raise ConfigurationError(f"{spec.name}: unknown parent entity {spec.parent}")
            if not spec.parent_column:
                raise ConfigurationError(f"{spec.name}: child entity without parent_column")
            # Un hijo siempre depende de su padre
            dependencies.add(spec.parent)

        unknown = [dep for dep in dependencies if dep not in registry]
        if unknown:
            raise ConfigurationError(f"{spec.name} depends on undeclared entities: {', '.join(sorted(unknown))}")
        if spec.name in dependencies:
            raise DependencyCycleError([spec.name])

        graph[spec.name] = dependencies

    logger.debug(
        f"Grafo de dependencias construido: {len(graph)} entidades, "
        f"{sum(len(deps) for deps in graph.values())} relaciones FK"
    )
    return graph


def topological_sort(graph, priority):
    """
    Ordena entidades topológicamente (algoritmo de Kahn).

    Entre entidades listas al mismo tiempo gana la de menor prioridad
    (orden de declaración), así el resultado es determinista.

    Args:
        graph: dict {entity: set(dependencies)}
        priority: dict {entity: int}

    Raises:
        DependencyCycleError: si quedan entidades sin ordenar
    """
    in_degree = {name: 0 for name in graph}
    reverse_graph = defaultdict(set)  # {dependency: set(dependents)}

    for name, dependencies in graph.items():
        for dep in dependencies:
            in_degree[name] += 1
            reverse_graph[dep].add(name)

    queue = [(priority[name], name) for name, degree in in_degree.items() if degree == 0]
    heapq.heapify(queue)
    sorted_order = []

    while queue:
        _, current = heapq.heappop(queue)
        sorted_order.append(current)

        for dependent in reverse_graph[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(queue, (priority[dependent], dependent))

    if len(sorted_order) != len(graph):
        remaining = sorted((name for name in graph if name not in sorted_order), key=priority.get)
        raise DependencyCycleError(remaining)

    return sorted_order


def _priorities(registry):
    return {name: index for index, name in enumerate(registry.names())}


def _root_of(registry, name):
    """Entidad de nivel superior que arrastra a `name` (ella misma si no es hija)."""
    spec = registry.get(name)
    seen = set()
    while spec.is_child:
        if spec.name in seen:
            raise DependencyCycleError(sorted(seen))
        seen.add(spec.name)
        spec = registry.get(spec.parent)
    return spec.name


def fold_child_dependencies(registry, graph):
    """
    Grafo solo de entidades de nivel superior.

    Las hijas se migran dentro de su padre, por lo que el padre hereda las
    dependencias de sus hijas (CartItem -> Product hace que Cart dependa de Product).
    """
    folded = {spec.name: set() for spec in registry if not spec.is_child}

    for name, dependencies in graph.items():
        root = _root_of(registry, name)
        for dep in dependencies:
            dep_root = _root_of(registry, dep)
            if dep_root != root:
                folded[root].add(dep_root)

    return folded


def migration_order(registry):
    """
    Orden de migración de entidades de nivel superior.

    Valida primero el grafo completo (hijas incluidas); un ciclo es fatal.
    """
    graph = build_dependency_graph(registry)
    priority = _priorities(registry)
    topological_sort(graph, priority)
    order = topological_sort(fold_child_dependencies(registry, graph), priority)
    logger.info(f"Orden de migración generado: {' -> '.join(order)}")
    return order


def reset_order(registry):
    """Todas las entidades en orden inverso de dependencias (hijas antes que padres)."""
    graph = build_dependency_graph(registry)
    return list(reversed(topological_sort(graph, _priorities(registry))))
