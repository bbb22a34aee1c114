import os
import unittest

from path_setup import ensure_src_path

ensure_src_path()

from orchestration import AdvocacyOrchestrator


def _require_live_api_or_skip(test_case: unittest.TestCase) -> None:
    if os.getenv("RUN_LIVE_LLM_TESTS", "").strip() != "1":
        test_case.skipTest("set RUN_LIVE_LLM_TESTS=1 to run live API integration tests")
    if not (os.getenv("OPENAI_API_KEY", "").strip() or os.getenv("GEMINI_API_KEY", "").strip()):
        test_case.skipTest("set OPENAI_API_KEY or GEMINI_API_KEY to run live API integration tests")


class LiveBackendTests(unittest.TestCase):
    def test_questions_with_real_backends(self) -> None:
        _require_live_api_or_skip(self)

        orchestrator = AdvocacyOrchestrator()
        questions = orchestrator.generate_questions(
            "persistent fatigue and joint pain", "primary care", "being dismissed"
        )

        self.assertIsInstance(questions, list)
        self.assertGreater(len(questions), 0)
        self.assertTrue(all(q.text for q in questions))

    def test_note_analysis_with_real_backends(self) -> None:
        _require_live_api_or_skip(self)

        analysis = AdvocacyOrchestrator().analyze_note(
            "Pt reports fatigue x3 months. BP 150/95. Labs pending. Follow up PRN."
        )

        self.assertTrue(analysis.summary)


if __name__ == "__main__":
    unittest.main()
