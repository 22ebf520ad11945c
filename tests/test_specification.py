from openapi_audit.analysis.specification import Specification


class TestFromOpenapi:
    def test_keeps_declaration_order(self, openapi_document):
        spec = Specification.from_openapi(openapi_document)
        assert spec.templates() == ["/items", "/items/{id}", "/health"]

    def test_ignores_path_level_keys(self, openapi_document):
        spec = Specification.from_openapi(openapi_document)
        assert list(spec.paths["/items/{id}"]) == ["get"]

    def test_status_codes_are_ints(self, openapi_document):
        spec = Specification.from_openapi(openapi_document)
        assert spec.declared("/items", "post") == (201, 400)

    def test_skips_non_numeric_responses(self):
        doc = {"paths": {"/x": {"get": {"responses": {"200": {}, "default": {}, "5XX": {}}}}}}
        spec = Specification.from_openapi(doc)
        assert spec.declared("/x", "get") == (200,)

    def test_method_keys_lowercased(self):
        doc = {"paths": {"/x": {"GET": {"responses": {"200": {}}}}}}
        assert Specification.from_openapi(doc).declared("/x", "get") == (200,)

    def test_missing_paths(self):
        spec = Specification.from_openapi({"openapi": "3.0.0"})
        assert spec.total_paths == 0
        assert spec.total_combos == 0


class TestCombos:
    def test_totals(self, openapi_document):
        spec = Specification.from_openapi(openapi_document)
        assert spec.total_paths == 3
        assert spec.total_combos == 6

    def test_combos_for_one_template(self):
        spec = Specification.from_mapping({"/x": {"get": [200, 404]}, "/y": {"get": [200]}})
        assert list(spec.combos("/x")) == [("/x", "get", 200), ("/x", "get", 404)]

    def test_declared_unknown(self):
        spec = Specification.from_mapping({"/x": {"get": [200]}})
        assert spec.declared("/x", "post") == ()
        assert spec.declared("/nope", "get") == ()
