import json
import unittest

from core.schema.decoder import decode
from core.schema.descriptor import ObjectSchema, array_of, enum, number, object_of, string
from exceptions.exceptions import SchemaViolationError
from runtime.models.result_models import (
    RESUME_ANALYSIS_SCHEMA,
    VIDEO_ANALYSIS_SCHEMA,
    ResumeAnalysis,
    VideoAnalysisResult,
)


RESUME_PAYLOAD = {
    "score": 72,
    "passProbability": "Medium",
    "strengths": ["Go services", "Postgres tuning", "On-call ownership"],
    "redFlags": ["Short tenures", "No tests mentioned", "Vague impact"],
    "summary": "Solid backend fundamentals, unclear ownership.",
    "interviewFocus": ["Incident response", "API design", "Testing"],
}


class TestSchemaDescriptor(unittest.TestCase):
    def test_renders_json_schema_with_all_fields_required(self):
        rendered = RESUME_ANALYSIS_SCHEMA.to_json_schema()

        self.assertEqual(rendered["type"], "object")
        self.assertEqual(
            rendered["required"],
            ["score", "passProbability", "strengths", "redFlags", "summary", "interviewFocus"],
        )
        self.assertEqual(
            rendered["properties"]["passProbability"],
            {"type": "string", "enum": ["Low", "Medium", "High"]},
        )
        self.assertEqual(rendered["properties"]["strengths"]["items"], {"type": "string"})
        self.assertEqual(rendered["properties"]["score"]["maximum"], 100)

    def test_response_format_names_the_schema(self):
        fmt = VIDEO_ANALYSIS_SCHEMA.to_response_format()

        self.assertEqual(fmt["type"], "json_schema")
        self.assertEqual(fmt["json_schema"]["name"], "video_analysis")
        self.assertIn("transcript", fmt["json_schema"]["schema"]["properties"])

    def test_tree_survives_dump_and_reload(self):
        schema = object_of(
            "nested",
            title=string(),
            meta=object_of("meta", level=enum("a", "b"), tags=array_of()),
        )

        reloaded = ObjectSchema.model_validate(schema.model_dump())

        self.assertEqual(reloaded, schema)
        self.assertEqual(reloaded.to_json_schema(), schema.to_json_schema())


class TestDecode(unittest.TestCase):
    def test_conforming_payload_round_trips(self):
        analysis = decode(json.dumps(RESUME_PAYLOAD), RESUME_ANALYSIS_SCHEMA, ResumeAnalysis)

        self.assertEqual(analysis.pass_probability, "Medium")
        self.assertEqual(analysis.red_flags[0], "Short tenures")
        again = decode(
            analysis.model_dump_json(by_alias=True), RESUME_ANALYSIS_SCHEMA, ResumeAnalysis
        )
        self.assertEqual(again, analysis)

    def test_without_model_returns_validated_dict(self):
        data = decode(json.dumps(RESUME_PAYLOAD), RESUME_ANALYSIS_SCHEMA)
        self.assertEqual(data, RESUME_PAYLOAD)

    def test_strips_markdown_fences_and_prose(self):
        fenced = "```json\n" + json.dumps(RESUME_PAYLOAD) + "\n```"
        chatty = "Here you go: " + json.dumps(RESUME_PAYLOAD) + " Good luck!"

        self.assertEqual(decode(fenced, RESUME_ANALYSIS_SCHEMA), RESUME_PAYLOAD)
        self.assertEqual(decode(chatty, RESUME_ANALYSIS_SCHEMA), RESUME_PAYLOAD)

    def test_missing_field_is_rejected(self):
        payload = {"summary": "A cat", "objects": ["cat"], "actions": ["sleeping"]}

        with self.assertRaises(SchemaViolationError) as ctx:
            decode(json.dumps(payload), VIDEO_ANALYSIS_SCHEMA, VideoAnalysisResult)

        self.assertEqual(ctx.exception.path, "transcript")
        self.assertIn("missing", str(ctx.exception))

    def test_enum_outside_declared_values_is_rejected(self):
        payload = dict(RESUME_PAYLOAD, passProbability="Certain")

        with self.assertRaises(SchemaViolationError) as ctx:
            decode(json.dumps(payload), RESUME_ANALYSIS_SCHEMA, ResumeAnalysis)

        self.assertEqual(ctx.exception.path, "passProbability")

    def test_type_mismatches_are_rejected(self):
        cases = {
            "score": "72",
            "strengths": "Go services",
            "summary": None,
        }
        for field, bad in cases.items():
            with self.subTest(field=field):
                payload = dict(RESUME_PAYLOAD, **{field: bad})
                with self.assertRaises(SchemaViolationError) as ctx:
                    decode(json.dumps(payload), RESUME_ANALYSIS_SCHEMA)
                self.assertEqual(ctx.exception.path, field)

    def test_boolean_is_not_a_number(self):
        schema = object_of("flag", value=number())
        with self.assertRaises(SchemaViolationError):
            decode('{"value": true}', schema)

    def test_score_bounds_are_enforced(self):
        payload = dict(RESUME_PAYLOAD, score=140)
        with self.assertRaises(SchemaViolationError) as ctx:
            decode(json.dumps(payload), RESUME_ANALYSIS_SCHEMA)
        self.assertIn("maximum", str(ctx.exception))

    def test_array_items_report_their_index(self):
        payload = dict(RESUME_PAYLOAD, redFlags=["fine", 3])
        with self.assertRaises(SchemaViolationError) as ctx:
            decode(json.dumps(payload), RESUME_ANALYSIS_SCHEMA)
        self.assertEqual(ctx.exception.path, "redFlags[1]")

    def test_empty_focus_list_is_rejected(self):
        payload = dict(RESUME_PAYLOAD, interviewFocus=[])
        with self.assertRaises(SchemaViolationError):
            decode(json.dumps(payload), RESUME_ANALYSIS_SCHEMA)

    def test_nested_object_paths(self):
        schema = object_of("outer", inner=object_of("inner", level=enum("a", "b")))
        with self.assertRaises(SchemaViolationError) as ctx:
            decode('{"inner": {"level": "c"}}', schema)
        self.assertEqual(ctx.exception.path, "inner.level")

    def test_unparseable_and_empty_payloads(self):
        for raw in ["", "   ", "not json at all", "{broken"]:
            with self.subTest(raw=raw):
                with self.assertRaises(SchemaViolationError) as ctx:
                    decode(raw, VIDEO_ANALYSIS_SCHEMA)
                self.assertEqual(ctx.exception.path, "$")

    def test_nan_score_is_rejected(self):
        raw = json.dumps(dict(RESUME_PAYLOAD, score=float("nan")))
        self.assertIn("NaN", raw)
        with self.assertRaises(SchemaViolationError) as ctx:
            decode(raw, RESUME_ANALYSIS_SCHEMA, ResumeAnalysis)
        self.assertEqual(ctx.exception.raw_text, raw)

    def test_infinity_in_unbounded_number_is_rejected(self):
        schema = object_of("measure", value=number())
        for raw in ['{"value": Infinity}', '{"value": -Infinity}']:
            with self.subTest(raw=raw):
                with self.assertRaises(SchemaViolationError) as ctx:
                    decode(raw, schema)
                self.assertEqual(ctx.exception.path, "$")

    def test_number_node_rejects_non_finite_values(self):
        for value in [float("nan"), float("inf"), float("-inf")]:
            with self.subTest(value=value):
                with self.assertRaises(SchemaViolationError) as ctx:
                    number().check(value, "value")
                self.assertEqual(ctx.exception.path, "value")
                self.assertIn("finite", str(ctx.exception))

    def test_top_level_array_is_rejected(self):
        with self.assertRaises(SchemaViolationError):
            decode("[1, 2, 3]", VIDEO_ANALYSIS_SCHEMA)


if __name__ == "__main__":
    unittest.main()
