# tests/test_library.py
import unittest

from puzzles.library import EXAMPLES, run_example


class TestExampleLibrary(unittest.TestCase):
    def test_fast_examples_match_expected(self):
        for name in (
            "valves_two_node",
            "valves_30",
            "valves_duo_26",
            "valves_partition_26",
            "blueprints_24",
            "rocks_2022",
            "rocks_trillion",
            "sequence_123",
            "hiking_from_start",
            "hiking_from_lowest",
            "blizzards_crossing",
            "blizzards_round_trip",
        ):
            res = run_example(name)
            self.assertTrue(res["ok"], msg=f"{name}: answer={res['answer']} expected={res['expected']}")

    def test_order_and_memo_knobs(self):
        for order in ("lifo", "fifo"):
            res = run_example("valves_30", order=order, use_memo=False)
            self.assertEqual(res["answer"], 1651)
            self.assertEqual(res["order"], order)

    def test_partition_details(self):
        res = run_example("valves_partition_26")
        self.assertEqual(res["partitions_evaluated"] + res["partitions_skipped"], 32)

    def test_every_builder_has_expected_answer(self):
        for name, build in EXAMPLES.items():
            inst = build()
            self.assertIn("kind", inst, msg=name)
            self.assertIsNotNone(inst.get("expected"), msg=name)

    def test_unknown_example(self):
        with self.assertRaises(ValueError):
            run_example("no_such_example")


if __name__ == "__main__":
    unittest.main()
