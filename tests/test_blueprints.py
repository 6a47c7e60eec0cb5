# tests/test_blueprints.py
import unittest
import numpy as np

from alg.bound_search import SearchParams, run_bound_search
from alg.exhaustive_search import exhaustive_search
from puzzles.blueprints import (
    CLAY,
    GEODE,
    OBSIDIAN,
    ORE,
    Blueprint,
    BlueprintProblem,
    FactoryState,
    geode_product,
    max_geodes,
    quality_level_sum,
)
from puzzles.library import example_blueprints


class TestBlueprint(unittest.TestCase):
    def test_from_costs_layout(self):
        bp = Blueprint.from_costs(1, 4, 2, 3, 14, 2, 7)
        expected = np.zeros((4, 4), dtype=np.int64)
        expected[ORE, ORE] = 4
        expected[CLAY, ORE] = 2
        expected[OBSIDIAN, ORE] = 3
        expected[OBSIDIAN, CLAY] = 14
        expected[GEODE, ORE] = 2
        expected[GEODE, OBSIDIAN] = 7
        np.testing.assert_array_equal(bp.costs, expected)
        self.assertEqual(bp.max_robots_needed(24), (4, 14, 7, 24))

    def test_invalid_costs(self):
        with self.assertRaises(ValueError):
            Blueprint(id=1, costs=np.zeros((3, 4)))
        with self.assertRaises(ValueError):
            Blueprint.from_costs(1, -1, 2, 3, 14, 2, 7)

    def test_expand_waits_until_affordable(self):
        bp = Blueprint.from_costs(1, 4, 2, 3, 14, 2, 7)
        problem = BlueprintProblem(bp, 24)
        children = problem.expand(problem.initial_state())
        # clay robot after 2 minutes of mining, ore robot after 4, or idle to the end
        self.assertIn(FactoryState(minute=3, robots=(1, 1, 0, 0), resources=(1, 0, 0, 0)), children)
        self.assertIn(FactoryState(minute=5, robots=(2, 0, 0, 0), resources=(1, 0, 0, 0)), children)
        self.assertIn(FactoryState(minute=24, robots=(1, 0, 0, 0), resources=(24, 0, 0, 0)), children)
        self.assertEqual(len(children), 3)

    def test_bound_is_optimistic(self):
        bp = Blueprint.from_costs(1, 2, 2, 2, 3, 2, 2)
        problem = BlueprintProblem(bp, 10)
        stack = [problem.initial_state()]
        while stack:
            state = stack.pop()
            best_below = exhaustive_search(problem, initial_state=state)["best_score"]
            self.assertGreaterEqual(problem.bound(state), best_below)
            if state.minute < 5:
                stack.extend(problem.expand(state))


    def test_signature_clamps_unspendable_stock(self):
        bp = Blueprint.from_costs(1, 4, 2, 3, 14, 2, 7)
        problem = BlueprintProblem(bp, 24)
        # 4 minutes left, ore cap 4 and 4 ore robots: any stock of 4 or more covers every plan
        a = FactoryState(minute=20, robots=(4, 2, 1, 0), resources=(10, 5, 3, 0))
        b = FactoryState(minute=20, robots=(4, 2, 1, 0), resources=(30, 5, 3, 2))
        c = FactoryState(minute=20, robots=(4, 2, 1, 0), resources=(3, 5, 3, 0))
        self.assertEqual(problem.signature(a), problem.signature(b))
        self.assertNotEqual(problem.signature(a), problem.signature(c))

        done = FactoryState(minute=24, robots=(4, 2, 1, 0), resources=(9, 9, 9, 1))
        self.assertEqual(problem.signature(done), (24, (4, 2, 1, 0), (0, 0, 0)))

    def test_memo_alone_matches_exhaustive(self):
        rng = np.random.default_rng(23)
        for trial in range(5):
            c = rng.integers(1, 4, size=6)
            bp = Blueprint.from_costs(trial + 1, *[int(x) for x in c])
            problem = BlueprintProblem(bp, int(rng.integers(6, 10)))
            expected = exhaustive_search(problem)["best_score"]
            res = run_bound_search(problem, SearchParams(order="lifo", enable_pruning=False))
            self.assertEqual(res["best_score"], expected, msg=f"trial={trial}")


class TestMaxGeodes(unittest.TestCase):
    def test_example_blueprints_24_minutes(self):
        bp1, bp2 = example_blueprints()
        self.assertEqual(max_geodes(bp1, 24), 9)
        self.assertEqual(max_geodes(bp2, 24), 12)
        self.assertEqual(quality_level_sum([bp1, bp2], 24), 33)

    def test_example_blueprint_32_minutes(self):
        bp1, _ = example_blueprints()
        self.assertEqual(max_geodes(bp1, 32), 56)

    def test_geode_product_uses_first_blueprints(self):
        bp1, bp2 = example_blueprints()
        self.assertEqual(geode_product([bp1, bp2], 24, count=1), 9)
        self.assertEqual(geode_product([bp1, bp2], 24, count=3), 9 * 12)

    def test_cheap_blueprints_match_exhaustive(self):
        rng = np.random.default_rng(19)
        for trial in range(6):
            c = rng.integers(1, 4, size=6)
            bp = Blueprint.from_costs(trial + 1, *[int(x) for x in c])
            T = int(rng.integers(6, 10))
            problem = BlueprintProblem(bp, T)
            expected = exhaustive_search(problem)["best_score"]
            for order in ("best_first", "lifo"):
                got = run_bound_search(problem, SearchParams(order=order))["best_score"]
                self.assertEqual(got, expected, msg=f"trial={trial} T={T} order={order}")

    def test_zero_minutes(self):
        bp1, _ = example_blueprints()
        self.assertEqual(max_geodes(bp1, 0), 0)


if __name__ == "__main__":
    unittest.main()
