"""
HTTP API tests for the /compile endpoint
"""

import json
import sys
import unittest
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent / "backend"))

from app import create_app


class TestCompileAPI(unittest.TestCase):

    def setUp(self):
        self.app = create_app({"TESTING": True, "MAX_SOURCE_LENGTH": 200})
        self.client = self.app.test_client()

    def post_code(self, code):
        return self.client.post("/compile", json={"code": code})

    def test_health_check(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(json.loads(response.data), {"status": "healthy"})

    def test_compile_success(self):
        response = self.post_code("int a = 3;\nint b = a + 2;\nprint b;")
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data["errors"], [])
        self.assertEqual(data["tac"], ["a = 3", "t0 = a + 2", "b = t0", "PRINT b"])
        self.assertEqual(data["tokens"][0], {"kind": "Keyword", "text": "int", "lineno": 1})
        self.assertEqual(data["symbol_table"], [
            {"name": "a", "type": "int", "value": "3"},
            {"name": "b", "type": "int", "value": "3 + 2"},
        ])

    def test_ast_serialization(self):
        data = self.post_code("float f = x * 2;").get_json()
        ast = data["ast"]
        self.assertEqual(ast["root"], 0)
        self.assertEqual(ast["nodes"], [
            {"type": "Program", "value": "", "children": [1]},
            {"type": "Declaration", "value": "float", "children": [2, 3]},
            {"type": "Identifier", "value": "f", "children": []},
            {"type": "BinaryOp", "value": "*", "children": [4, 5]},
            {"type": "Identifier", "value": "x", "children": []},
            {"type": "Number", "value": "2", "children": []},
        ])

    def test_long_expression(self):
        client = create_app({"TESTING": True}).test_client()
        terms = 5000
        source = "int x = " + "1 + " * (terms - 1) + "1;"
        response = client.post("/compile", json={"code": source})
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data["errors"], [])
        self.assertEqual(len(data["tac"]), terms)
        self.assertEqual(data["tac"][-1], f"x = t{terms - 2}")
        self.assertEqual(len(data["ast"]["nodes"]), 2 + 2 * terms)

    def test_uninitialized_value_is_null(self):
        data = self.post_code("int x; print x;").get_json()
        self.assertEqual(data["symbol_table"], [{"name": "x", "type": "int", "value": None}])
        self.assertEqual(data["tac"], ["DECLARE x as int", "PRINT x"])

    def test_compile_error_reported(self):
        response = self.post_code("x = 5;")
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data["errors"], ["Undeclared variable 'x'"])
        self.assertEqual(data["tac"], [])
        self.assertEqual(data["ast"]["nodes"][0]["type"], "Program")

    def test_syntax_error_has_no_ast(self):
        data = self.post_code("int = 1;").get_json()
        self.assertEqual(data["ast"], {})
        self.assertTrue(data["errors"][0].startswith("Syntax error at position 1"))

    def test_missing_code(self):
        response = self.client.post("/compile", json={})
        self.assertEqual(response.status_code, 400)

    def test_source_too_large(self):
        response = self.post_code("int a;" * 100)
        self.assertEqual(response.status_code, 400)


if __name__ == "__main__":
    unittest.main()
