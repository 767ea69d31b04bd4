# User value: This test keeps operation forms honest so users only submit parameter values the processor accepts.
import unittest

from schemas.common import ParameterType
from schemas.operations import OperationDefinition, parse_parameter_schema
from services.parameter_validation import (
    DEFAULT_FACTORIES,
    UNSET,
    VALIDATORS,
    build_default_parameters,
    get_parameter_default,
    has_range_constraints,
    parameter_label,
    validate_parameter,
    validate_parameters,
)


def _schema(**kwargs):
    data = {"param_name": "width", "required": False, "description": ""}
    data.update(kwargs)
    return parse_parameter_schema(data)


class ParameterValidationUnitTests(unittest.TestCase):
    # User value: a new parameter kind can never silently skip validation or defaults.
    def test_dispatch_tables_cover_every_parameter_type(self):
        self.assertEqual(set(VALIDATORS), set(ParameterType))
        self.assertEqual(set(DEFAULT_FACTORIES), set(ParameterType))

    def test_required_rejects_absent_null_and_empty(self):
        for kind in ("integer", "float", "string", "boolean"):
            schema = _schema(type=kind, required=True)
            for value in (UNSET, None, ""):
                out = validate_parameter(schema, value)
                self.assertFalse(out["valid"], (kind, value))
                self.assertEqual(out["error"], "width is required")

        choice = _schema(type="choice", required=True, choices=["a", "b"])
        self.assertFalse(validate_parameter(choice)["valid"])

    # User value: optional fields left blank never block a submission.
    def test_optional_blank_is_valid(self):
        for kind in ("integer", "float", "string", "boolean"):
            schema = _schema(type=kind)
            self.assertTrue(validate_parameter(schema, None)["valid"])
            self.assertTrue(validate_parameter(schema)["valid"])
            self.assertTrue(validate_parameter(schema, "")["valid"])

    def test_integer_bounds_and_integrality(self):
        schema = _schema(type="integer", min=0, max=10)
        low = validate_parameter(schema, -1)
        high = validate_parameter(schema, 11)
        self.assertFalse(low["valid"])
        self.assertIn("at least", low["error"])
        self.assertEqual(low["error"], "width must be at least 0")
        self.assertFalse(high["valid"])
        self.assertEqual(high["error"], "width must be at most 10")
        self.assertTrue(validate_parameter(schema, 5)["valid"])
        self.assertTrue(validate_parameter(schema, "7")["valid"])

        fractional = validate_parameter(schema, 5.5)
        self.assertFalse(fractional["valid"])
        self.assertEqual(fractional["error"], "width must be an integer")

    def test_integer_rejects_non_numeric_and_bool(self):
        schema = _schema(type="integer")
        self.assertEqual(validate_parameter(schema, "abc")["error"], "width must be an integer")
        self.assertFalse(validate_parameter(schema, True)["valid"])

    def test_float_accepts_numbers_and_checks_bounds(self):
        schema = _schema(type="float", min=0.5, max=2)
        self.assertTrue(validate_parameter(schema, 1.25)["valid"])
        self.assertTrue(validate_parameter(schema, "1.5")["valid"])
        self.assertEqual(validate_parameter(schema, 0.1)["error"], "width must be at least 0.5")
        self.assertEqual(validate_parameter(schema, 3)["error"], "width must be at most 2")
        self.assertEqual(validate_parameter(schema, "fast")["error"], "width must be a number")
        self.assertFalse(validate_parameter(schema, float("nan"))["valid"])

    def test_choice_lists_allowed_values(self):
        schema = _schema(type="choice", choices=["a", "b"])
        bad = validate_parameter(schema, "c")
        self.assertFalse(bad["valid"])
        self.assertIn("a, b", bad["error"])
        self.assertEqual(bad["error"], "width must be one of: a, b")
        self.assertTrue(validate_parameter(schema, "a")["valid"])

    def test_choice_matches_booleans_in_lowercase(self):
        schema = _schema(type="choice", choices=["true", "false"])
        self.assertTrue(validate_parameter(schema, True)["valid"])
        self.assertTrue(validate_parameter(schema, False)["valid"])
        self.assertFalse(validate_parameter(_schema(type="choice", choices=["True"]), True)["valid"])

    def test_boolean_and_string_type_checks(self):
        self.assertTrue(validate_parameter(_schema(type="boolean"), False)["valid"])
        self.assertEqual(
            validate_parameter(_schema(type="boolean"), "yes")["error"],
            "width must be true or false",
        )
        self.assertTrue(validate_parameter(_schema(type="string"), "hello")["valid"])
        self.assertEqual(validate_parameter(_schema(type="string"), 3)["error"], "width must be a string")

    # User value: defaults come from the schema first, then a safe type-specific fallback.
    def test_parameter_default_fallbacks(self):
        self.assertEqual(get_parameter_default(_schema(type="integer", min=3)), 3)
        self.assertEqual(get_parameter_default(_schema(type="integer")), 0)
        self.assertEqual(get_parameter_default(_schema(type="float")), 0.0)
        self.assertEqual(get_parameter_default(_schema(type="float", min=1)), 1.0)
        self.assertEqual(get_parameter_default(_schema(type="string")), "")
        self.assertIs(get_parameter_default(_schema(type="boolean")), False)
        self.assertEqual(get_parameter_default(_schema(type="choice", choices=["x", "y"])), "x")
        self.assertEqual(get_parameter_default(_schema(type="integer", default=7, min=3)), 7)

    def test_explicit_null_default_is_kept(self):
        schema = _schema(type="string", default=None)
        self.assertTrue(schema.has_default)
        self.assertIsNone(get_parameter_default(schema))
        self.assertFalse(_schema(type="string").has_default)

    def test_choice_default_must_be_a_choice(self):
        with self.assertRaises(ValueError):
            _schema(type="choice", choices=["a"], default="z")

    def test_build_default_parameters_covers_every_parameter(self):
        operation = OperationDefinition.model_validate(
            {
                "operation_name": "image_resize",
                "media_type": "image",
                "parameters": [
                    {"param_name": "width", "type": "integer", "min": 1},
                    {"param_name": "keep_ratio", "type": "boolean"},
                    {"param_name": "format", "type": "choice", "choices": ["png", "jpg"]},
                    {"param_name": "label", "type": "string"},
                ],
            }
        )
        defaults = build_default_parameters(operation)
        self.assertEqual(set(defaults), {"width", "keep_ratio", "format", "label"})
        self.assertEqual(defaults, {"width": 1, "keep_ratio": False, "format": "png", "label": ""})

    def test_validate_parameters_collects_errors_per_field(self):
        operation = OperationDefinition.model_validate(
            {
                "operation_name": "video_compress",
                "media_type": "video",
                "parameters": [
                    {"param_name": "crf", "type": "integer", "min": 18, "max": 28, "required": True},
                    {"param_name": "preset", "type": "choice", "choices": ["fast", "slow"]},
                ],
            }
        )
        out = validate_parameters(operation, {"preset": "medium"})
        self.assertFalse(out["valid"])
        self.assertEqual(out["errors"]["crf"], "crf is required")
        self.assertEqual(out["errors"]["preset"], "preset must be one of: fast, slow")

        ok = validate_parameters(operation, {"crf": 23, "preset": "fast"})
        self.assertEqual(ok, {"valid": True, "errors": {}})

    def test_duplicate_parameter_names_are_rejected(self):
        with self.assertRaises(ValueError):
            OperationDefinition.model_validate(
                {
                    "operation_name": "dup",
                    "media_type": "audio",
                    "parameters": [
                        {"param_name": "x", "type": "string"},
                        {"param_name": "x", "type": "integer"},
                    ],
                }
            )

    def test_range_constraints_only_for_numeric(self):
        self.assertTrue(has_range_constraints(_schema(type="integer", max=4)))
        self.assertFalse(has_range_constraints(_schema(type="integer")))
        self.assertFalse(has_range_constraints(_schema(type="string")))

    def test_parameter_label_replaces_underscores(self):
        self.assertEqual(parameter_label(_schema(type="string", param_name="output_format")), "output format")


if __name__ == "__main__":
    unittest.main()
