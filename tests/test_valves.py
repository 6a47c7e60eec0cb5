# tests/test_valves.py
import unittest
import numpy as np

from alg.bound_search import SearchParams, run_bound_search
from alg.exhaustive_search import exhaustive_search
from puzzles.library import EXAMPLE_VALVES
from puzzles.valves import (
    DuoValveProblem,
    ValveNetwork,
    ValveProblem,
    max_pressure,
    max_pressure_by_partition,
    max_pressure_with_helper,
)


def make_random_network(rng: np.random.Generator, n_nodes: int, extra_edges: int = 2) -> ValveNetwork:
    """Connected random tunnel graph; V0 is the start and has no flow."""
    names = [f"V{i}" for i in range(n_nodes)]
    adj = {name: set() for name in names}
    for i in range(1, n_nodes):
        j = int(rng.integers(0, i))
        adj[names[i]].add(names[j])
        adj[names[j]].add(names[i])
    for _ in range(extra_edges):
        a, b = rng.choice(n_nodes, size=2, replace=False)
        adj[names[int(a)]].add(names[int(b)])
        adj[names[int(b)]].add(names[int(a)])

    rates = rng.integers(0, 25, size=n_nodes)
    rates[0] = 0
    table = {name: (int(rates[i]), sorted(adj[name])) for i, name in enumerate(names)}
    return ValveNetwork.from_table(table, start="V0")


class TestValveNetwork(unittest.TestCase):
    def test_distances_and_useful_valves(self):
        net = ValveNetwork.from_table(EXAMPLE_VALVES)
        self.assertEqual(net.useful_valves, ("HH", "JJ", "DD", "BB", "EE", "CC"))
        self.assertEqual(net.distance("AA", "HH"), 5)
        self.assertEqual(net.distance("AA", "JJ"), 2)
        self.assertEqual(net.distance("BB", "BB"), 0)

    def test_unreachable_valve_has_no_distance(self):
        net = ValveNetwork.from_table({"AA": (0, []), "BB": (5, [])})
        self.assertIsNone(net.distance("AA", "BB"))
        self.assertEqual(max_pressure(net, 10), 0)

    def test_invalid_networks(self):
        with self.assertRaises(ValueError):
            ValveNetwork.from_table({"AA": (-1, [])})
        with self.assertRaises(ValueError):
            ValveNetwork.from_table({"BB": (3, [])})
        net = ValveNetwork.from_table({"AA": (0, [])})
        with self.assertRaises(KeyError):
            net.valve("ZZ")

    def test_unknown_tunnel_target_is_fatal(self):
        net = ValveNetwork.from_table({"AA": (0, ["BB"]), "BB": (5, ["ZZ"])})
        with self.assertRaises(KeyError):
            max_pressure(net, 10)


class TestSingleActor(unittest.TestCase):
    def test_two_node_scenario(self):
        net = ValveNetwork.from_table({"A": (0, ["B"]), "B": (10, ["A"])}, start="A")
        self.assertEqual(max_pressure(net, 3), 10)
        # reaching B and opening it takes both minutes
        self.assertEqual(max_pressure(net, 2), 0)
        self.assertEqual(max_pressure(net, 0), 0)

    def test_example_network(self):
        net = ValveNetwork.from_table(EXAMPLE_VALVES)
        self.assertEqual(max_pressure(net, 30), 1651)
        for order in ("lifo", "fifo"):
            self.assertEqual(max_pressure(net, 30, SearchParams(order=order)), 1651, msg=order)
        self.assertEqual(max_pressure(net, 30, SearchParams(use_memo=False)), 1651)

    def test_example_network_exhaustive(self):
        net = ValveNetwork.from_table(EXAMPLE_VALVES)
        self.assertEqual(exhaustive_search(ValveProblem(net, 30))["best_score"], 1651)

    def test_random_networks_match_exhaustive(self):
        rng = np.random.default_rng(2022)
        for trial in range(25):
            net = make_random_network(rng, int(rng.integers(2, 7)))
            T = int(rng.integers(4, 15))
            problem = ValveProblem(net, T)
            expected = exhaustive_search(problem)["best_score"]
            for order in ("best_first", "lifo"):
                got = run_bound_search(problem, SearchParams(order=order))["best_score"]
                self.assertEqual(got, expected, msg=f"trial={trial} T={T} order={order}")

    def test_bound_dominates_every_successor_score(self):
        rng = np.random.default_rng(7)
        for _ in range(10):
            net = make_random_network(rng, 6)
            problem = ValveProblem(net, 12)
            stack = [problem.initial_state()]
            while stack:
                state = stack.pop()
                best_below = exhaustive_search(problem, initial_state=state)["best_score"]
                self.assertGreaterEqual(problem.bound(state), best_below)
                if state.minute < 6:
                    stack.extend(problem.expand(state))

    def test_valve_subset(self):
        net = ValveNetwork.from_table(EXAMPLE_VALVES)
        problem = ValveProblem(net, 26, valves=["DD", "HH", "EE"])
        self.assertEqual(problem.initial_state().closed, ("HH", "DD", "EE"))
        with self.assertRaises(KeyError):
            ValveProblem(net, 26, valves=["QQ"])

    def test_deterministic(self):
        net = ValveNetwork.from_table(EXAMPLE_VALVES)
        a = run_bound_search(ValveProblem(net, 30))
        b = run_bound_search(ValveProblem(net, 30))
        self.assertEqual(a["best_state"], b["best_state"])
        self.assertEqual(a["visited_nodes"], b["visited_nodes"])


class TestTwoActors(unittest.TestCase):
    def test_example_network(self):
        net = ValveNetwork.from_table(EXAMPLE_VALVES)
        self.assertEqual(max_pressure_with_helper(net, 26), 1707)

    def test_example_network_by_partition(self):
        net = ValveNetwork.from_table(EXAMPLE_VALVES)
        res = max_pressure_by_partition(net, 26)
        self.assertEqual(res.best_score, 1707)
        # 6 useful valves: 32 splits, 7 with a side smaller than 2
        self.assertEqual(res.partitions_evaluated, 25)
        self.assertEqual(res.partitions_skipped, 7)

    def test_expand_keeps_distinct_assignments_only(self):
        net = ValveNetwork.from_table({"AA": (0, ["BB", "CC"]), "BB": (5, ["AA"]), "CC": (7, ["AA"])})
        problem = DuoValveProblem(net, 10)
        children = problem.expand(problem.initial_state())
        # {BB, CC}, {BB, retire}, {CC, retire}, {retire, retire}
        self.assertEqual(len(children), 4)
        self.assertEqual(len(set(children)), 4)
        for child in children:
            targets = [pos for pos, ready, _ in child.actors if ready < 10]
            self.assertEqual(len(targets), len(set(targets)))

        both = [c for c in children if c.closed == ()]
        self.assertEqual(len(both), 1)
        self.assertEqual(both[0].minute, 2)
        self.assertEqual(both[0].flow, 12)

    def test_random_networks_agree(self):
        """Joint search, exhaustive joint search and unrestricted partition search agree."""
        rng = np.random.default_rng(16)
        for trial in range(12):
            net = make_random_network(rng, int(rng.integers(2, 6)))
            T = int(rng.integers(4, 10))
            expected = exhaustive_search(DuoValveProblem(net, T))["best_score"]
            self.assertEqual(max_pressure_with_helper(net, T), expected, msg=f"trial={trial} T={T}")
            self.assertEqual(max_pressure_by_partition(net, T, slack=None).best_score, expected, msg=f"trial={trial}")
            self.assertGreaterEqual(expected, max_pressure(net, T))


if __name__ == "__main__":
    unittest.main()
