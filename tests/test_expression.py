import unittest

from ell1.errors import ValidationError
from ell1.expression import (
    ALT,
    GROUP_CLOSE,
    GROUP_OPEN,
    REPEAT_CLOSE,
    REPEAT_OPEN,
    Alternation,
    Repetition,
    Sequence,
    Symbol,
    build,
    display,
    node_at,
    split_alternatives,
    to_tokens,
    walk,
)


class TestBuild(unittest.TestCase):

    def test_symbol(self):
        self.assertEqual(build(["a"]), Symbol("a"))

    def test_sequence(self):
        self.assertEqual(build(["a", "b"]), Sequence((Symbol("a"), Symbol("b"))))

    def test_empty_is_empty_sequence(self):
        self.assertEqual(build([]), Sequence(()))

    def test_alternation(self):
        self.assertEqual(
            build(["a", ALT, "b", "c"]),
            Alternation((Symbol("a"), Sequence((Symbol("b"), Symbol("c"))))),
        )

    def test_repetition(self):
        self.assertEqual(
            build(["T", REPEAT_OPEN, "+", "T", REPEAT_CLOSE]),
            Sequence((Symbol("T"), Repetition(Sequence((Symbol("+"), Symbol("T")))))),
        )

    def test_group(self):
        self.assertEqual(
            build([GROUP_OPEN, "a", ALT, "b", GROUP_CLOSE, "c"]),
            Sequence((Alternation((Symbol("a"), Symbol("b"))), Symbol("c"))),
        )

    def test_alternation_inside_repetition(self):
        self.assertEqual(
            build([REPEAT_OPEN, "a", ALT, "b", REPEAT_CLOSE]),
            Repetition(Alternation((Symbol("a"), Symbol("b")))),
        )

    def test_literal_brackets_are_symbols(self):
        self.assertEqual(
            build(["(", "E", ")", "|", "{"]),
            Sequence(tuple(Symbol(s) for s in ["(", "E", ")", "|", "{"])),
        )

    def test_malformed(self):
        cases = [
            [GROUP_OPEN, "a"],
            ["a", GROUP_CLOSE],
            [REPEAT_OPEN, "a", GROUP_CLOSE],
            [GROUP_OPEN, "a", REPEAT_CLOSE],
            [REPEAT_CLOSE],
            [ALT, "a"],
            ["a", ALT],
            ["a", ALT, ALT, "b"],
            [ALT],
            [GROUP_OPEN, GROUP_CLOSE],
            [REPEAT_OPEN, REPEAT_CLOSE],
            [REPEAT_OPEN, "a", ALT, REPEAT_CLOSE],
        ]
        for tokens in cases:
            with self.subTest(tokens=tokens):
                with self.assertRaises(ValidationError):
                    build(tokens)

    def test_unmatched_message_names_token(self):
        with self.assertRaisesRegex(ValidationError, r"Unmatched '\\\{' at position 1"):
            build(["a", REPEAT_OPEN, "b"])


class TestTreeHelpers(unittest.TestCase):

    def test_split_alternatives(self):
        tokens = ["a", ALT, GROUP_OPEN, "b", ALT, "c", GROUP_CLOSE, ALT, REPEAT_OPEN, "d", REPEAT_CLOSE]
        self.assertEqual(
            split_alternatives(tokens),
            [["a"], [GROUP_OPEN, "b", ALT, "c", GROUP_CLOSE], [REPEAT_OPEN, "d", REPEAT_CLOSE]],
        )
        self.assertEqual(split_alternatives([]), [[]])

    def test_walk_paths(self):
        expr = build(["a", REPEAT_OPEN, "b", "c", REPEAT_CLOSE])
        self.assertEqual(
            [path for path, _ in walk(expr)],
            [(), (0,), (1,), (1, 0), (1, 0, 0), (1, 0, 1)],
        )
        self.assertEqual(node_at(expr, (1, 0, 1)), Symbol("c"))
        self.assertEqual(node_at(expr, ()), expr)

    def test_to_tokens_rebuilds_same_tree(self):
        cases = [
            [],
            ["a"],
            ["T", REPEAT_OPEN, "+", "T", REPEAT_CLOSE],
            ["(", "E", ")", ALT, "i"],
            [GROUP_OPEN, "a", ALT, "b", GROUP_CLOSE, ALT, "c"],
            ["x", GROUP_OPEN, "a", "b", GROUP_CLOSE, "y"],
            [REPEAT_OPEN, GROUP_OPEN, "a", ALT, "b", GROUP_CLOSE, "c", REPEAT_CLOSE],
        ]
        for tokens in cases:
            with self.subTest(tokens=tokens):
                expr = build(tokens)
                self.assertEqual(build(to_tokens(expr)), expr)

    def test_display(self):
        self.assertEqual(display([REPEAT_OPEN, "a", ALT, "b", REPEAT_CLOSE]), "{ a | b }")
        self.assertEqual(display([]), "ε")
        self.assertEqual(str(build(["F", REPEAT_OPEN, "*", "F", REPEAT_CLOSE])), "F { * F }")


if __name__ == '__main__':
    unittest.main()
