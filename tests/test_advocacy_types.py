import unittest

from path_setup import ensure_src_path

ensure_src_path()

from advocacy_types import (
    NoteAnalysis,
    extract_json_payload,
    parse_note_analysis,
    parse_questions,
    parse_talking_points,
)


class JsonExtractionTests(unittest.TestCase):
    def test_fenced_array(self) -> None:
        raw = '```json\n[{"text": "What tests?"}]\n```'
        self.assertEqual(extract_json_payload(raw), [{"text": "What tests?"}])

    def test_reasoning_tags_and_trailing_text(self) -> None:
        raw = '<think>planning {"not": "this"}</think>Here you go: {"summary": "ok"} Thanks!'
        self.assertEqual(extract_json_payload(raw), {"summary": "ok"})

    def test_braces_inside_strings(self) -> None:
        raw = 'Result: {"summary": "uses } and ] inside"} done'
        self.assertEqual(extract_json_payload(raw), {"summary": "uses } and ] inside"})

    def test_bracketed_prose_before_payload_is_skipped(self) -> None:
        raw = 'Note [1]: {"questions": [{"text": "Why?"}]}'
        self.assertEqual(extract_json_payload(raw), {"questions": [{"text": "Why?"}]})

        questions = parse_questions(raw)
        self.assertEqual([question.text for question in questions], ["Why?"])

    def test_unbalanced_prefix_falls_through_to_next_span(self) -> None:
        raw = 'See [draft} then [{"point": "Bring a log"}]'
        self.assertEqual(extract_json_payload(raw), [{"point": "Bring a log"}])

    def test_no_json_raises_value_error(self) -> None:
        with self.assertRaises(ValueError):
            extract_json_payload("I cannot help with that.")
        with self.assertRaises(ValueError):
            extract_json_payload("   ")


class QuestionParsingTests(unittest.TestCase):
    def test_wrapped_object_and_normalisation(self) -> None:
        raw = (
            '{"questions": ['
            '{"text": "What tests do you recommend?", "category": "testing", "priority": "HIGH"},'
            '{"text": "  ", "category": "Diagnosis"},'
            '{"text": "Could this be thyroid related?", "category": "Lifestyle", "priority": "urgent"},'
            '"not an object"'
            "]}"
        )

        questions = parse_questions(raw)

        self.assertEqual(len(questions), 2)
        self.assertEqual(questions[0].id, "q-0")
        self.assertEqual(questions[0].category, "Testing")
        self.assertEqual(questions[0].priority, "high")
        self.assertEqual(questions[1].id, "q-1")
        self.assertEqual(questions[1].category, "Advocacy")
        self.assertEqual(questions[1].priority, "medium")

    def test_object_without_list_gives_empty(self) -> None:
        self.assertEqual(parse_questions('{"answer": "none"}'), [])

    def test_to_dict_wire_shape(self) -> None:
        question = parse_questions('[{"text": "Why?", "category": "Follow-up", "priority": "low"}]')[0]
        self.assertEqual(
            question.to_dict(),
            {"id": "q-0", "text": "Why?", "category": "Follow-up", "priority": "low"},
        )


class TalkingPointParsingTests(unittest.TestCase):
    def test_camel_and_snake_case_keys(self) -> None:
        raw = (
            '{"talkingPoints": ['
            '{"point": "Please document this.", "category": "general advocacy",'
            ' "context": "Creates a record", "whenToUse": "End of visit"},'
            '{"point": "This has lasted 3 months.", "category": "Symptom Documentation",'
            ' "context": "Shows duration", "when_to_use": "Opening"}'
            "]}"
        )

        points = parse_talking_points(raw)

        self.assertEqual([p.id for p in points], ["tp-0", "tp-1"])
        self.assertEqual(points[0].category, "General Advocacy")
        self.assertEqual(points[0].when_to_use, "End of visit")
        self.assertEqual(points[1].when_to_use, "Opening")
        self.assertEqual(points[0].to_dict()["whenToUse"], "End of visit")


class NoteAnalysisParsingTests(unittest.TestCase):
    def test_missing_fields_default(self) -> None:
        analysis = parse_note_analysis('{"concerns": ["BP elevated", ""], "missing": "No follow-up date"}')

        self.assertEqual(analysis.concerns, ["BP elevated"])
        self.assertEqual(analysis.missing, ["No follow-up date"])
        self.assertEqual(analysis.recommendations, [])
        self.assertEqual(analysis.summary, "Analysis completed.")

    def test_array_payload_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            parse_note_analysis('["a", "b"]')

    def test_empty_analysis(self) -> None:
        self.assertEqual(
            NoteAnalysis.empty().to_dict(),
            {"concerns": [], "missing": [], "recommendations": [], "summary": "Analysis completed."},
        )


if __name__ == "__main__":
    unittest.main()
