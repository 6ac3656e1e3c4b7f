import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from ell1.__main__ import main

from grammars import ARITH, ARITH_AMBIGUOUS


def as_form(description: dict) -> dict:
    return {
        "terminals": description["terminals"],
        "nonTerminals": description["non_terminals"],
        "productions": description["productions"],
        "startSymbol": description["start_symbol"],
    }


class TestCLI(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, name: str, data) -> str:
        path = self.dir / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    def run_main(self, *argv) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            status = main(["-q", *argv])
        return status, out.getvalue(), err.getvalue()

    def test_ell1(self):
        status, out, _ = self.run_main(self.write("arith.json", as_form(ARITH)))
        self.assertEqual(status, 0)
        self.assertIn("ELL(1): yes", out)

    def test_not_ell1(self):
        status, out, _ = self.run_main(self.write("bad.json", as_form(ARITH_AMBIGUOUS)))
        self.assertEqual(status, 1)
        self.assertIn("ELL(1): no", out)
        self.assertIn("conflict: F at []", out)

    def test_queries(self):
        path = self.write("arith.json", as_form(ARITH))
        status, out, _ = self.run_main(
            path, "--nullable", "", "--first", "\\{ E \\}", "--follow", "E", "--director", "F"
        )
        self.assertEqual(status, 0)
        self.assertIn("Nullable(ε): True", out)
        self.assertIn("First({ E }): {(, i}", out)
        self.assertIn("Follow(E): {$, )}", out)
        self.assertIn("Director(F → ( E )): {(}", out)
        self.assertIn("Director(F → i): {i}", out)

    def test_table(self):
        status, out, _ = self.run_main(self.write("arith.json", as_form(ARITH)), "--table")
        self.assertEqual(status, 0)
        self.assertIn("Nullable", out)
        self.assertIn("repeat", out)

    def test_saved_record(self):
        record = {"name": "arith", "updatedAt": 1, "data": as_form(ARITH)}
        status, _, _ = self.run_main(self.write("record.json", record))
        self.assertEqual(status, 0)

    def test_store(self):
        grammar = self.write("arith.json", as_form(ARITH))
        store = str(self.dir / "store.json")

        status, out, _ = self.run_main(grammar, "--store", store, "--save", "arith")
        self.assertEqual(status, 0)
        self.assertIn("Saved as ecfg_", out)

        status, out, _ = self.run_main("--store", store, "--name", "arith", "--follow", "T")
        self.assertEqual(status, 0)
        self.assertIn("Follow(T): {$, ), +}", out)

    def test_errors(self):
        grammar = self.write("arith.json", as_form(ARITH))
        cases = [
            [str(self.dir / "missing.json")],
            [self.write("broken.json", {"terminals": []})],
            [grammar, "--follow", "X"],
            [grammar, "--first", "\\("],
            [grammar, "--save", "x"],
            ["--store", str(self.dir / "store.json"), "--name", "nothing"],
            [],
        ]
        for argv in cases:
            with self.subTest(argv=argv):
                status, _, err = self.run_main(*argv)
                self.assertEqual(status, 2)
                self.assertTrue(err.startswith("error: "))


if __name__ == '__main__':
    unittest.main()
