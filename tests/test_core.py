"""
Testes do otimizador de cortes
"""

import unittest
from unittest.mock import patch

from pydantic import ValidationError

from layplanner import CutPlanOptimizer, CutPriority, InvalidInput, NonConvergence, PlanAnalyzer
from layplanner.models import Cut, OrderItem


def production_of(plan):
    """Peças produzidas por tamanho"""
    produced = {}
    for cut in plan.cuts:
        for size, blocks in cut.blocks.items():
            produced[size] = produced.get(size, 0) + blocks * cut.stack_size
    return produced


def describe(plan):
    return [(cut.cut_number, cut.stack_size, cut.blocks) for cut in plan.cuts]


class TestScenarios(unittest.TestCase):
    """Cenários de referência do planejador"""

    def setUp(self):
        self.optimizer = CutPlanOptimizer()

    def test_two_sizes_respect_capacity(self):
        for priority in CutPriority:
            with self.subTest(priority=priority):
                plan = CutPlanOptimizer(priority).allocate({"S": 5, "M": 3}, 2, 3)

                self.assertEqual(describe(plan), [(1, 3, {"S": 2}), (2, 3, {"M": 1})])
                produced = production_of(plan)
                self.assertGreaterEqual(produced["S"], 5)
                self.assertGreaterEqual(produced["M"], 3)

    def test_single_piece_order(self):
        plan = self.optimizer.allocate({"S": 1}, 5, 5)

        self.assertEqual(describe(plan), [(1, 1, {"S": 1})])

    def test_empty_order_is_rejected(self):
        with self.assertRaises(InvalidInput):
            self.optimizer.allocate({}, 2, 3)

    def test_unit_capacity_produces_one_cut_per_piece(self):
        plan = self.optimizer.allocate({"S": 10}, 1, 1)

        self.assertEqual(plan.cut_count, 10)
        for number, cut in enumerate(plan.cuts, 1):
            self.assertEqual(cut.cut_number, number)
            self.assertEqual(cut.stack_size, 1)
            self.assertEqual(cut.blocks, {"S": 1})

        self.assertEqual(PlanAnalyzer().analyze({"S": 10}, plan, 1, 1).total_waste, 0)


class TestPriorities(unittest.TestCase):
    """Troca entre menos desperdício e menos cortes"""

    def test_min_waste_lowers_stack_to_fit_smallest_size(self):
        plan = CutPlanOptimizer(CutPriority.MIN_WASTE).allocate({"S": 7, "M": 2}, 3, 5)

        self.assertEqual(describe(plan), [(1, 2, {"S": 2, "M": 1}), (2, 3, {"S": 1})])
        self.assertEqual(production_of(plan), {"S": 7, "M": 2})

    def test_min_cuts_keeps_full_stack(self):
        plan = CutPlanOptimizer(CutPriority.MIN_CUTS).allocate({"S": 7, "M": 2}, 3, 5)

        self.assertEqual(describe(plan), [(1, 5, {"S": 2, "M": 1})])
        self.assertEqual(production_of(plan), {"S": 10, "M": 5})

    def test_priority_accepts_string_value(self):
        self.assertEqual(CutPlanOptimizer("min_cuts").priority, CutPriority.MIN_CUTS)

    def test_stack_shrinks_for_small_orders(self):
        plan = CutPlanOptimizer(CutPriority.MIN_CUTS).allocate({"S": 2, "M": 1}, 5, 10)

        self.assertEqual(describe(plan), [(1, 2, {"S": 1, "M": 1})])

        plan = CutPlanOptimizer(CutPriority.MIN_WASTE).allocate({"S": 2, "M": 1}, 5, 10)

        self.assertEqual(describe(plan), [(1, 1, {"S": 1, "M": 1}), (2, 1, {"S": 1})])


class TestAllocation(unittest.TestCase):
    """Regras de alocação e desempate"""

    def setUp(self):
        self.optimizer = CutPlanOptimizer()

    def test_ties_follow_order_sequence(self):
        plan = self.optimizer.allocate({"A": 4, "B": 4, "C": 4}, 1, 4)
        self.assertEqual([list(cut.blocks) for cut in plan.cuts], [["A"], ["B"], ["C"]])

        plan = self.optimizer.allocate({"C": 4, "A": 4}, 1, 4)
        self.assertEqual([list(cut.blocks) for cut in plan.cuts], [["C"], ["A"]])

    def test_single_block_per_cut_has_one_size(self):
        plan = self.optimizer.allocate({"S": 9, "M": 4, "L": 6}, 1, 3)

        for cut in plan.cuts:
            self.assertEqual(len(cut.blocks), 1)
            self.assertEqual(cut.total_blocks, 1)

    def test_unit_stack_produces_exact_quantities(self):
        plan = self.optimizer.allocate({"S": 3, "M": 2, "L": 1}, 2, 1)

        self.assertEqual(
            describe(plan),
            [(1, 1, {"S": 2}), (2, 1, {"M": 2}), (3, 1, {"S": 1, "L": 1})]
        )
        self.assertEqual(production_of(plan), {"S": 3, "M": 2, "L": 1})

    def test_next_cut_returns_new_snapshot(self):
        items = (
            OrderItem(size="S", quantity=5, remaining=5),
            OrderItem(size="M", quantity=3, remaining=3),
        )

        cut, updated = self.optimizer.next_cut(items, 1, 2, 3)

        self.assertEqual(cut.blocks, {"S": 2})
        self.assertEqual([item.remaining for item in items], [5, 3])
        self.assertEqual([item.remaining for item in updated], [0, 3])

    def test_every_cut_reduces_remaining_demand(self):
        items = (
            OrderItem(size="S", quantity=23, remaining=23),
            OrderItem(size="M", quantity=17, remaining=17),
            OrderItem(size="L", quantity=4, remaining=4),
        )
        number = 0
        while any(item.remaining for item in items):
            number += 1
            before = sum(item.remaining for item in items)
            _, items = self.optimizer.next_cut(items, number, 2, 6)
            self.assertLess(sum(item.remaining for item in items), before)

    def test_fallback_picks_smallest_remaining(self):
        items = (
            OrderItem(size="S", quantity=5, remaining=5),
            OrderItem(size="M", quantity=3, remaining=2),
            OrderItem(size="L", quantity=4, remaining=0),
        )

        self.assertEqual(self.optimizer._fallback_allocation(items, 10), ({"M": 1}, 2))
        self.assertEqual(self.optimizer._fallback_allocation(items, 1), ({"M": 1}, 1))


class TestProperties(unittest.TestCase):
    """Propriedades gerais sobre uma grade de entradas"""

    ORDERS = [
        {"S": 5, "M": 3},
        {"XS": 1, "S": 13, "M": 40, "L": 27, "XL": 8},
        {"P": 100},
        {"34": 7, "36": 7, "38": 7, "40": 2},
        {"S": 120, "M": 200, "L": 180, "XL": 60},
    ]
    CONSTRAINTS = [(1, 1), (1, 7), (2, 3), (4, 10), (6, 40), (10, 2)]

    def test_plans_fulfill_orders_within_capacity(self):
        for priority in CutPriority:
            optimizer = CutPlanOptimizer(priority)
            for orders in self.ORDERS:
                for max_blocks, max_stack in self.CONSTRAINTS:
                    with self.subTest(priority=priority, orders=orders, blocks=max_blocks, stack=max_stack):
                        plan = optimizer.allocate(orders, max_blocks, max_stack)
                        produced = production_of(plan)

                        for size, quantity in orders.items():
                            self.assertGreaterEqual(produced[size], quantity)

                        self.assertLessEqual(plan.cut_count, sum(orders.values()))
                        for number, cut in enumerate(plan.cuts, 1):
                            self.assertEqual(cut.cut_number, number)
                            self.assertLessEqual(cut.total_blocks, max_blocks)
                            self.assertGreaterEqual(cut.stack_size, 1)
                            self.assertLessEqual(cut.stack_size, max_stack)
                            self.assertTrue(all(count > 0 for count in cut.blocks.values()))

    def test_identical_input_gives_identical_plan(self):
        orders = {"XS": 1, "S": 13, "M": 40, "L": 27, "XL": 8}
        first = CutPlanOptimizer().allocate(orders, 4, 10)
        second = CutPlanOptimizer().allocate(dict(orders), 4, 10)

        self.assertEqual(first, second)


class TestValidation(unittest.TestCase):
    """Pré-condições do otimizador"""

    def setUp(self):
        self.optimizer = CutPlanOptimizer()

    def test_invalid_orders(self):
        cases = [
            {"S": 0},
            {"S": -3},
            {"S": 2.5},
            {"S": True},
            {"S": "4"},
            {"": 4},
            {7: 4},
            [("S", 4)],
        ]
        for orders in cases:
            with self.subTest(orders=orders):
                with self.assertRaises(InvalidInput):
                    self.optimizer.allocate(orders, 2, 3)

    def test_invalid_constraints(self):
        for max_blocks, max_stack in [(0, 3), (2, 0), (-1, 3), (2.0, 3), (2, None), (True, 3)]:
            with self.subTest(blocks=max_blocks, stack=max_stack):
                with self.assertRaises(InvalidInput) as ctx:
                    self.optimizer.allocate({"S": 5}, max_blocks, max_stack)
                self.assertIn(ctx.exception.field, ("maxBlocksPerCut", "maxStackingCloth"))

    def test_iteration_cap_raises_non_convergence(self):
        def stalled(items, cut_number, max_blocks, max_stack):
            return Cut(cut_number=cut_number, stack_size=1, blocks={}), items

        with patch.object(self.optimizer, "next_cut", side_effect=stalled):
            with self.assertRaises(NonConvergence) as ctx:
                self.optimizer.allocate({"S": 2, "M": 1}, 2, 3)

        self.assertEqual(ctx.exception.max_iterations, 3)
        self.assertEqual(ctx.exception.remaining, {"S": 2, "M": 1})


class TestOrderItem(unittest.TestCase):

    def test_consume_clamps_at_zero(self):
        item = OrderItem(size="S", quantity=5, remaining=2)

        self.assertEqual(item.consume(6).remaining, 0)
        self.assertEqual(item.remaining, 2)

    def test_remaining_cannot_exceed_quantity(self):
        with self.assertRaises(ValidationError):
            OrderItem(size="S", quantity=5, remaining=6)

    def test_item_is_immutable(self):
        item = OrderItem(size="S", quantity=5, remaining=5)

        with self.assertRaises(ValidationError):
            item.remaining = 1


if __name__ == "__main__":
    unittest.main()
