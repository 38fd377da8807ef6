"""Tests for the PathClassifier class."""

import pytest

from openapi_terraform_analyser.errors import ResourceComplianceError
from openapi_terraform_analyser.path_classifier import PathClassifier
from openapi_terraform_analyser.schema_types import SchemaTypeResolver


def make_classifier(document):
    resolver = SchemaTypeResolver(document.get("definitions"))
    return PathClassifier(document["paths"], resolver, document.get("parameters"))


class TestIsResourceInstanceEndPoint:
    @pytest.fixture
    def classifier(self):
        return PathClassifier({}, SchemaTypeResolver())

    @pytest.mark.parametrize(
        "path",
        ["/resource/{id}", "/very/long/path/{id}", "/resource/{name}/subresource/{id}"],
    )
    def test_instance_paths(self, classifier, path):
        assert classifier.is_resource_instance_endpoint(path)

    @pytest.mark.parametrize(
        "path",
        ["/resource/not/valid/instance/path", "/resource", "/resource/{id}/", "", "/{id}"],
    )
    def test_non_instance_paths(self, classifier, path):
        assert not classifier.is_resource_instance_endpoint(path)


class TestFindMatchingResourceRootPath:
    def test_root_with_trailing_slash(self):
        classifier = PathClassifier({"/users/": {}, "/users/{id}": {}}, SchemaTypeResolver())
        assert classifier.find_matching_resource_root_path("/users/{id}") == "/users/"

    def test_root_without_trailing_slash(self):
        classifier = PathClassifier({"/users": {}, "/users/{id}": {}}, SchemaTypeResolver())
        assert classifier.find_matching_resource_root_path("/users/{id}") == "/users"

    def test_versioned_sub_resource_root(self):
        classifier = PathClassifier(
            {"/v1/cdns/{id}/v1/firewalls": {}}, SchemaTypeResolver()
        )
        assert (
            classifier.find_matching_resource_root_path("/v1/cdns/{id}/v1/firewalls/{fw_id}")
            == "/v1/cdns/{id}/v1/firewalls"
        )

    def test_missing_root(self):
        classifier = PathClassifier({"/users/{id}": {}}, SchemaTypeResolver())
        with pytest.raises(ResourceComplianceError) as e:
            classifier.find_matching_resource_root_path("/users/{id}")
        assert str(e.value) == "resource instance path '/users/{id}' missing resource root path"


class TestPathClassifier:
    """Test suite for the validation steps of the PathClassifier."""

    def test_validate_instance_path(self, sample_document):
        make_classifier(sample_document).validate_instance_path("/users/{id}")

    def test_validate_instance_path_not_instance(self, sample_document):
        with pytest.raises(ResourceComplianceError, match="path '/health' is not a resource instance path"):
            make_classifier(sample_document).validate_instance_path("/health")

    def test_validate_instance_path_missing_get(self, make_document):
        document = make_document({"/users": {"post": {}}, "/users/{id}": {"put": {}}})
        with pytest.raises(ResourceComplianceError, match="missing required GET operation"):
            make_classifier(document).validate_instance_path("/users/{id}")

    def test_validate_root_path(self, sample_document):
        root_path, root_item, schema = make_classifier(sample_document).validate_root_path(
            "/v1/cdns/{id}"
        )
        assert root_path == "/v1/cdns"
        assert root_item is sample_document["paths"]["/v1/cdns"]
        assert "label" in schema["properties"]

    def test_validate_root_path_missing_post(self, make_document):
        document = make_document({"/users": {"get": {}}, "/users/{id}": {"get": {}}})
        with pytest.raises(ResourceComplianceError) as e:
            make_classifier(document).validate_root_path("/users/{id}")
        assert str(e.value) == "resource root path '/users' missing required POST operation"

    def test_validate_root_path_missing_definition(self, sample_document):
        with pytest.raises(ResourceComplianceError) as e:
            make_classifier(sample_document).validate_root_path("/broken/{id}")
        assert "resource root path '/broken' POST operation validation error" in str(e.value)
        assert "'#/definitions/NonExisting'" in str(e.value)

    def test_missing_body_parameter(self, sample_document):
        classifier = make_classifier(sample_document)
        with pytest.raises(ResourceComplianceError, match="missing the body parameter"):
            classifier.get_body_parameter_schema({"parameters": []})

    def test_multiple_body_parameters(self, sample_document):
        classifier = make_classifier(sample_document)
        body = {"in": "body", "name": "body", "schema": {"$ref": "#/definitions/User"}}
        with pytest.raises(ResourceComplianceError, match="contains multiple 'body' parameters"):
            classifier.get_body_parameter_schema({"parameters": [body, dict(body)]})

    def test_body_parameter_without_schema(self, sample_document):
        classifier = make_classifier(sample_document)
        with pytest.raises(ResourceComplianceError, match="missing the schema for the POST operation body parameter"):
            classifier.get_body_parameter_schema({"parameters": [{"in": "body", "name": "body"}]})

    def test_body_parameter_with_unexpanded_ref(self, sample_document):
        classifier = make_classifier(sample_document)
        operation = {
            "parameters": [
                {"in": "body", "name": "body", "schema": {"$ref": "other.json#/definitions/User"}}
            ]
        }
        with pytest.raises(ResourceComplianceError, match="the operation ref was not expanded properly"):
            classifier.get_body_parameter_schema(operation)

    def test_body_parameter_with_inline_schema(self, sample_document):
        classifier = make_classifier(sample_document)
        schema = {"type": "object", "properties": {"id": {"type": "string"}}}
        operation = {"parameters": [{"in": "body", "name": "body", "schema": schema}]}
        assert classifier.get_body_parameter_schema(operation) is schema

    def test_body_parameter_with_empty_schema(self, sample_document):
        classifier = make_classifier(sample_document)
        operation = {"parameters": [{"in": "body", "name": "body", "schema": {"type": "object"}}]}
        with pytest.raises(ResourceComplianceError, match="schema with no properties"):
            classifier.get_body_parameter_schema(operation)

    def test_body_parameter_through_parameter_ref(self, make_document):
        document = make_document(
            {},
            {"User": {"properties": {"id": {"type": "string"}}}},
            parameters={
                "UserBody": {"in": "body", "name": "body", "schema": {"$ref": "#/definitions/User"}}
            },
        )
        operation = {"parameters": [{"$ref": "#/parameters/UserBody"}]}
        schema = make_classifier(document).get_body_parameter_schema(operation)
        assert "id" in schema["properties"]

    def test_validate_resource_schema_definition_with_id(self, sample_document):
        classifier = make_classifier(sample_document)
        classifier.validate_resource_schema_definition({"properties": {"id": {"type": "string"}}})

    def test_validate_resource_schema_definition_with_id_extension(self, sample_document):
        classifier = make_classifier(sample_document)
        classifier.validate_resource_schema_definition(
            {"properties": {"name": {"type": "string", "x-terraform-id": True}}}
        )

    def test_validate_resource_schema_definition_missing_identifier(self, sample_document):
        classifier = make_classifier(sample_document)
        with pytest.raises(ResourceComplianceError) as e:
            classifier.validate_resource_schema_definition(
                {"properties": {"name": {"type": "string", "x-terraform-id": False}}}
            )
        assert "either a property named 'id' or a property with the extension 'x-terraform-id' set to true" in str(e.value)

    def test_is_endpoint_fully_resource_compliant(self, sample_document):
        root_path, _, schema = make_classifier(
            sample_document
        ).is_endpoint_fully_resource_compliant("/users/{id}")
        assert root_path == "/users/"
        assert "username" in schema["properties"]

    @pytest.mark.parametrize("path", ["/health", "/v1/cdns", "/broken/{id}"])
    def test_non_compliant_endpoints(self, sample_document, path):
        with pytest.raises(ResourceComplianceError):
            make_classifier(sample_document).is_endpoint_fully_resource_compliant(path)

    def test_path_exists_falls_back_to_trailing_slash(self, sample_document):
        classifier = make_classifier(sample_document)
        exists, path_item = classifier.path_exists("/users")
        assert exists
        assert "post" in path_item
        assert classifier.path_exists("/nope") == (False, {})

    def test_post_defined(self, sample_document):
        classifier = make_classifier(sample_document)
        assert classifier.post_defined("/v1/cdns")
        assert not classifier.post_defined("/v1/cdns/{id}")
        assert not classifier.post_defined("/missing")
