import copy

import pytest

CDN_DEFINITION = {
    "type": "object",
    "required": ["label", "ips", "hostnames"],
    "properties": {
        "id": {"type": "string", "readOnly": True},
        "label": {"type": "string", "x-terraform-force-new": True},
        "ips": {"type": "array", "items": {"type": "string"}},
        "hostnames": {"type": "array", "items": {"type": "string"}},
        "exampleInt": {"type": "integer", "x-terraform-immutable": True},
        "better_example_number_field_name": {
            "type": "number",
            "x-terraform-field-name": "betterExampleNumberFieldName",
        },
        "example_boolean": {"type": "boolean", "default": False},
        "secret": {"type": "string", "x-terraform-sensitive": True},
        "status": {
            "type": "string",
            "readOnly": True,
            "x-terraform-field-status": True,
        },
        "computed_value": {"type": "string", "x-terraform-computed": True},
        "object_property": {"$ref": "#/definitions/ObjectProperty"},
    },
}

OBJECT_PROPERTY_DEFINITION = {
    "type": "object",
    "required": ["message"],
    "properties": {
        "message": {"type": "string"},
        "detailed_message": {"type": "string", "readOnly": True},
    },
}

FIREWALL_DEFINITION = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "id": {"type": "string", "readOnly": True},
        "name": {"type": "string"},
    },
}

LB_DEFINITION = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "id": {"type": "string", "readOnly": True},
        "name": {"type": "string"},
    },
}

USER_DEFINITION = {
    "type": "object",
    "required": ["username"],
    "properties": {
        "id": {"type": "string", "readOnly": True},
        "username": {"type": "string"},
    },
}


def body_parameter(ref):
    """Builds a POST body parameter referencing a definition."""
    return {"in": "body", "name": "body", "required": True, "schema": {"$ref": ref}}


def instance_get(ref):
    return {
        "parameters": [{"in": "path", "name": "id", "type": "string", "required": True}],
        "responses": {"200": {"description": "OK", "schema": {"$ref": ref}}},
    }


SAMPLE_DOCUMENT = {
    "swagger": "2.0",
    "host": "api.example.com",
    "basePath": "/",
    "schemes": ["http", "https"],
    "x-terraform-resource-regions-region": "rst1, dub1",
    "paths": {
        "/v1/cdns": {
            "post": {
                "parameters": [body_parameter("#/definitions/ContentDeliveryNetworkV1")],
                "x-terraform-resource-timeout": "30s",
                "responses": {
                    "201": {"description": "Created"},
                    "202": {
                        "description": "Accepted",
                        "x-terraform-resource-poll-enabled": True,
                        "x-terraform-resource-poll-completed-statuses": "deployed",
                        "x-terraform-resource-poll-pending-statuses": "deploy_pending, deploy_in_progress",
                    },
                },
            }
        },
        "/v1/cdns/{id}": {
            "get": instance_get("#/definitions/ContentDeliveryNetworkV1"),
            "put": {
                "parameters": [body_parameter("#/definitions/ContentDeliveryNetworkV1")],
                "x-terraform-resource-timeout": "20.5m",
                "responses": {"200": {"description": "OK"}},
            },
            "delete": {
                "x-terraform-resource-timeout": "1h",
                "responses": {
                    "204": {"description": "Deleted"},
                    "202": {
                        "description": "Accepted",
                        "x-terraform-resource-poll-enabled": True,
                        "x-terraform-resource-poll-completed-statuses": "destroyed",
                        "x-terraform-resource-poll-pending-statuses": "delete_pending",
                    },
                },
            },
        },
        "/v1/cdns/{id}/v1/firewalls": {
            "post": {
                "parameters": [
                    {"in": "path", "name": "id", "type": "string", "required": True},
                    body_parameter("#/definitions/FirewallV1"),
                ],
                "responses": {"201": {"description": "Created"}},
            }
        },
        "/v1/cdns/{id}/v1/firewalls/{fw_id}": {
            "get": instance_get("#/definitions/FirewallV1"),
        },
        "/v1/lbs": {
            "post": {
                "x-terraform-resource-host": "some.api.${region}.domain.com",
                "parameters": [body_parameter("#/definitions/LBV1")],
                "responses": {"201": {"description": "Created"}},
            }
        },
        "/v1/lbs/{id}": {"get": instance_get("#/definitions/LBV1")},
        "/users/": {
            "post": {
                "parameters": [body_parameter("#/definitions/User")],
                "responses": {"201": {"description": "Created"}},
            }
        },
        "/users/{id}": {"get": instance_get("#/definitions/User")},
        "/excluded": {
            "post": {
                "x-terraform-exclude-resource": True,
                "parameters": [body_parameter("#/definitions/User")],
                "responses": {"201": {"description": "Created"}},
            }
        },
        "/excluded/{id}": {"get": instance_get("#/definitions/User")},
        "/broken": {
            "post": {
                "parameters": [body_parameter("#/definitions/NonExisting")],
                "responses": {"201": {"description": "Created"}},
            }
        },
        "/broken/{id}": {"get": instance_get("#/definitions/User")},
        "/health": {"get": {"responses": {"200": {"description": "OK"}}}},
    },
    "definitions": {
        "ContentDeliveryNetworkV1": CDN_DEFINITION,
        "ObjectProperty": OBJECT_PROPERTY_DEFINITION,
        "FirewallV1": FIREWALL_DEFINITION,
        "LBV1": LB_DEFINITION,
        "User": USER_DEFINITION,
    },
}


@pytest.fixture
def sample_document():
    """A Swagger 2.0 document exposing root, sub, multi-region and broken resources."""
    return copy.deepcopy(SAMPLE_DOCUMENT)


@pytest.fixture
def make_document():
    """Factory building a minimal document from paths and definitions."""

    def _make(paths, definitions=None, **root):
        document = {"swagger": "2.0", "paths": paths, "definitions": definitions or {}}
        document.update(root)
        return copy.deepcopy(document)

    return _make
