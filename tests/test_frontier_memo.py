# tests/test_frontier_memo.py
import unittest

from core.frontier import Frontier
from core.memo import MemoTable


class TestFrontier(unittest.TestCase):
    def test_best_first_pops_highest_bound(self):
        f = Frontier("best_first")
        for state, bound in [("a", 3), ("b", 9), ("c", 5), ("d", 1)]:
            f.push(state, bound)
        self.assertEqual(f.peek_bound(), 9)
        popped = [f.pop() for _ in range(4)]
        self.assertEqual(popped, [("b", 9), ("c", 5), ("a", 3), ("d", 1)])
        self.assertFalse(f)

    def test_best_first_ties_keep_insertion_order(self):
        """States themselves are never compared, so unorderable states are fine."""
        f = Frontier("best_first")
        s1, s2, s3 = {"id": 1}, {"id": 2}, {"id": 3}
        f.push(s1, 4)
        f.push(s2, 4)
        f.push(s3, 4)
        self.assertIs(f.pop()[0], s1)
        self.assertIs(f.pop()[0], s2)
        self.assertIs(f.pop()[0], s3)

    def test_lifo_and_fifo(self):
        lifo, fifo = Frontier("lifo"), Frontier("fifo")
        for i in range(4):
            lifo.push(i, 10 - i)
            fifo.push(i, 10 - i)
        self.assertEqual([lifo.pop()[0] for _ in range(4)], [3, 2, 1, 0])
        self.assertEqual([fifo.pop()[0] for _ in range(4)], [0, 1, 2, 3])
        self.assertIsNone(lifo.peek_bound())

    def test_compact_drops_entries_below_threshold(self):
        for order in ("best_first", "lifo", "fifo"):
            f = Frontier(order)
            for i, bound in enumerate([7, 2, 9, 4, 5]):
                f.push(i, bound)
            removed = f.compact(5)
            self.assertEqual(removed, 2, msg=order)
            self.assertEqual(len(f), 3, msg=order)
            remaining = sorted(f.pop()[1] for _ in range(3))
            self.assertEqual(remaining, [5, 7, 9], msg=order)

    def test_pop_empty_raises(self):
        f = Frontier("fifo")
        with self.assertRaises(IndexError):
            f.pop()

    def test_unknown_order(self):
        with self.assertRaises(ValueError):
            Frontier("random")


class TestMemoTable(unittest.TestCase):
    def test_strict_improvement(self):
        memo = MemoTable()
        self.assertTrue(memo.admits("s", 5))
        memo.record("s", 5)
        self.assertFalse(memo.admits("s", 5))
        self.assertFalse(memo.admits("s", 4))
        self.assertTrue(memo.admits("s", 6))
        self.assertIn("s", memo)
        self.assertEqual(len(memo), 1)

    def test_ties_allowed(self):
        memo = MemoTable(allow_ties=True)
        memo.record("s", 5, state="x")
        self.assertTrue(memo.admits("s", 5, state="y"))
        self.assertFalse(memo.admits("s", 4, state="y"))

    def test_ties_never_readmit_the_same_state(self):
        memo = MemoTable(allow_ties=True)
        memo.record("s", 5, state="x")
        self.assertFalse(memo.admits("s", 5, state="x"))
        memo.record("s", 5, state="y")
        self.assertFalse(memo.admits("s", 5, state="y"))
        self.assertTrue(memo.admits("s", 6, state="x"))

    def test_record_keeps_maximum(self):
        memo = MemoTable()
        memo.record("s", 8)
        memo.record("s", 3)
        self.assertEqual(memo.get("s"), 8)
        self.assertIsNone(memo.get("t"))


if __name__ == "__main__":
    unittest.main()
