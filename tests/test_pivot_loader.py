"""
Unit tests for pivot_loader.py
Tests single-matrix and bundle files, payload warnings and the API route.
"""

import json
import os
import tempfile
import unittest

from pivot_loader import (
    LoadResult,
    is_bundle,
    load_pivot_json,
    parse_pivot_payload,
    pivot_api_path,
)
from pivot_matrix import MatrixIntegrityError

PAYLOAD = {
    "rows": ["Fatigue", "Cough"],
    "columns": ["01/01/24", "01/02/24"],
    "data": {"Fatigue": {"01/01/24": 2}, "Cough": {"01/02/24": 1}},
    "maxValue": 2,
}


def _write(d, payload, name="pivot.json"):
    path = os.path.join(d, name)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f)
    return path


class TestApiPath(unittest.TestCase):
    def test_symptom(self):
        self.assertEqual(pivot_api_path("symptom", "P-001"), "/api/pivot/symptom/P-001")

    def test_category_endpoint(self):
        self.assertEqual(pivot_api_path("category", 7), "/api/pivot/diagnostic-category/7")

    def test_subject_quoted(self):
        self.assertEqual(pivot_api_path("hrsn", "a/b c"), "/api/pivot/hrsn/a%2Fb%20c")

    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            pivot_api_path("labs", "P-001")


class TestParsePayload(unittest.TestCase):
    def test_clean(self):
        matrix, warnings = parse_pivot_payload(PAYLOAD)
        self.assertEqual(matrix.rows, ("Fatigue", "Cough"))
        self.assertEqual(warnings, [])

    def test_missing_max(self):
        payload = dict(PAYLOAD)
        del payload["maxValue"]
        _, warnings = parse_pivot_payload(payload)
        self.assertEqual(len(warnings), 1)
        self.assertIn("missing", warnings[0])

    def test_inconsistent_max(self):
        with self.assertLogs("MatrixViewer.PivotLoader", level="WARNING"):
            _, warnings = parse_pivot_payload(dict(PAYLOAD, maxValue=9))
        self.assertIn("inconsistent", warnings[0])

    def test_empty_matrix_warning(self):
        _, warnings = parse_pivot_payload({"rows": [], "columns": [], "data": {}, "maxValue": 0})
        self.assertEqual(warnings, ["Matrix has no non-zero cells"])


class TestLoadPivotJson(unittest.TestCase):
    def test_single_matrix(self):
        with tempfile.TemporaryDirectory() as d:
            results = load_pivot_json(_write(d, PAYLOAD), data_type="diagnosis", subject="P-9")
            self.assertEqual(list(results), ["diagnosis"])
            result = results["diagnosis"]
            self.assertIsInstance(result, LoadResult)
            self.assertEqual(result.subject, "P-9")
            self.assertEqual(result.matrix.observed_max(), 2)

    def test_single_matrix_default_type(self):
        with tempfile.TemporaryDirectory() as d:
            self.assertEqual(list(load_pivot_json(_write(d, PAYLOAD))), ["symptom"])

    def test_bundle(self):
        bundle = {"subject": "P-001", "hrsn": PAYLOAD, "symptom": PAYLOAD, "notes": {}}
        self.assertTrue(is_bundle(bundle))
        with tempfile.TemporaryDirectory() as d:
            with self.assertLogs("MatrixViewer.PivotLoader", level="WARNING"):
                results = load_pivot_json(_write(d, bundle))
            self.assertEqual(list(results), ["symptom", "hrsn"])
            self.assertEqual(results["hrsn"].subject, "P-001")

    def test_bundle_subject_override(self):
        with tempfile.TemporaryDirectory() as d:
            results = load_pivot_json(_write(d, {"subject": "P-001", "symptom": PAYLOAD}), subject="X")
            self.assertEqual(results["symptom"].subject, "X")

    def test_invalid_matrix_names_type(self):
        bad = {"symptom": {"rows": ["A"], "columns": ["01/01/24"], "data": {"B": {"01/01/24": 1}}}}
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(MatrixIntegrityError) as ctx:
                load_pivot_json(_write(d, bad))
            self.assertIn("symptom", str(ctx.exception))

    def test_not_json(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "pivot.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("rows,columns")
            with self.assertRaises(ValueError):
                load_pivot_json(path)

    def test_unknown_type(self):
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(ValueError):
                load_pivot_json(_write(d, PAYLOAD), data_type="labs")

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_pivot_json("/nonexistent/pivot.json")


if __name__ == "__main__":
    unittest.main()
