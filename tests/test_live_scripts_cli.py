import importlib.util
import unittest
from pathlib import Path


def _load_module(name: str, path: Path):
    spec = importlib.util.spec_from_file_location(name, str(path))
    if spec is None or spec.loader is None:
        raise RuntimeError(f"failed to load module: {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class LiveScriptsCLITests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        repo_root = Path(__file__).resolve().parents[1]
        cls._script = _load_module(
            "run_live_advocacy",
            repo_root / "scripts" / "run_live_advocacy.py",
        )

    def test_defaults_to_questions(self) -> None:
        args = self._script.build_parser().parse_args([])
        self.assertEqual(args.task, "questions")
        self.assertIsNone(args.order)
        self.assertFalse(args.status)

    def test_accepts_task_and_context(self) -> None:
        args = self._script.build_parser().parse_args(
            ["talking-points", "--symptoms", "fatigue", "--order", "gemini,openai", "--status"]
        )
        self.assertEqual(args.task, "talking-points")
        self.assertEqual(args.symptoms, "fatigue")
        self.assertEqual(args.order, "gemini,openai")
        self.assertTrue(args.status)

    def test_rejects_unknown_task(self) -> None:
        with self.assertRaises(SystemExit):
            self._script.build_parser().parse_args(["summarize"])


if __name__ == "__main__":
    unittest.main()
