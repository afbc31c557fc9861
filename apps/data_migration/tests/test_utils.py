"""
Tests for dependency graph ordering.
"""

from django.test import SimpleTestCase

from apps.data_migration.entities import EntityRegistry, EntitySpec
from apps.data_migration.exceptions import ConfigurationError, DependencyCycleError
from apps.data_migration.utils import (
    build_dependency_graph,
    fold_child_dependencies,
    migration_order,
    reset_order,
    topological_sort,
)

STORE_ORDER = [
    'User', 'Category', 'Tag', 'Size', 'Product', 'Media', 'Cart',
    'Offer', 'Order', 'Review', 'HomePageImage', 'TopPickProduct',
]


def spec(name, depends_on=(), parent=None, parent_column=None):
    return EntitySpec(name, f'store.{name}', name, depends_on=depends_on, parent=parent, parent_column=parent_column)


class MigrationOrderTestCase(SimpleTestCase):
    """Tests para el orden de migración de la tienda."""

    def setUp(self):
        self.registry = EntityRegistry()

    def test_store_migration_order(self):
        """Test orden de nivel superior de la tienda."""
        self.assertEqual(migration_order(self.registry), STORE_ORDER)

    def test_every_dependency_precedes_its_dependent(self):
        """Test que cada FK apunta a una entidad ya migrada."""
        order = migration_order(self.registry)
        graph = fold_child_dependencies(self.registry, build_dependency_graph(self.registry))

        for name, dependencies in graph.items():
            for dep in dependencies:
                self.assertLess(order.index(dep), order.index(name), f"{dep} debe ir antes que {name}")

    def test_children_excluded_from_top_level_order(self):
        """Test que las hijas se migran dentro de su padre."""
        order = migration_order(self.registry)

        for child in ('ProductTag', 'ProductSize', 'CartItem', 'OrderItem'):
            self.assertNotIn(child, order)

    def test_child_dependencies_fold_into_parent(self):
        """Test que el padre hereda las dependencias de sus hijas."""
        folded = fold_child_dependencies(self.registry, build_dependency_graph(self.registry))

        self.assertIn('Product', folded['Cart'])
        self.assertIn('Product', folded['Order'])
        self.assertEqual(folded['Product'], {'Category', 'Tag', 'Size'})

    def test_reset_order_is_reverse_of_dependencies(self):
        """Test que el reset vacía hijas antes que padres."""
        order = reset_order(self.registry)

        self.assertEqual(len(order), len(self.registry))
        self.assertEqual(order[0], 'TopPickProduct')
        self.assertEqual(order[-1], 'User')
        self.assertLess(order.index('OrderItem'), order.index('Order'))
        self.assertLess(order.index('CartItem'), order.index('Product'))
        self.assertLess(order.index('ProductTag'), order.index('Tag'))


class DependencyGraphTestCase(SimpleTestCase):
    """Tests para validación del grafo."""

    def test_cycle_is_detected(self):
        """Test que un ciclo es error de configuración."""
        registry = EntityRegistry([spec('A', depends_on=('B',)), spec('B', depends_on=('A',))])

        with self.assertRaises(DependencyCycleError) as ctx:
            migration_order(registry)

        self.assertEqual(ctx.exception.entities, ['A', 'B'])

    def test_self_dependency_is_a_cycle(self):
        """Test dependencia de una entidad consigo misma."""
        registry = EntityRegistry([spec('A', depends_on=('A',))])

        with self.assertRaises(DependencyCycleError):
            build_dependency_graph(registry)

    def test_unknown_dependency(self):
        """Test dependencia hacia entidad no declarada."""
        registry = EntityRegistry([spec('A', depends_on=('Missing',))])

        with self.assertRaises(ConfigurationError):
            build_dependency_graph(registry)

    def test_child_requires_parent_column(self):
        """Test hija declarada sin columna de padre."""
        registry = EntityRegistry([spec('A'), spec('B', parent='A')])

        with self.assertRaises(ConfigurationError):
            build_dependency_graph(registry)

    def test_duplicate_entity(self):
        """Test entidad declarada dos veces."""
        with self.assertRaises(ConfigurationError):
            EntityRegistry([spec('A'), spec('A')])

    def test_ties_follow_declaration_order(self):
        """Test orden determinista entre entidades independientes."""
        graph = {'C': set(), 'A': set(), 'B': {'C'}}
        priority = {'C': 0, 'A': 1, 'B': 2}

        self.assertEqual(topological_sort(graph, priority), ['C', 'A', 'B'])
