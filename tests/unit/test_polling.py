from openapi_terraform_analyser.models import PollingConfig, ResourceOperations
from openapi_terraform_analyser.polling import (
    create_polling_config,
    create_responses,
    get_polling_config,
)

ACCEPTED_RESPONSE = {
    "description": "Accepted",
    "x-terraform-resource-poll-enabled": True,
    "x-terraform-resource-poll-completed-statuses": "deployed",
    "x-terraform-resource-poll-pending-statuses": "deploy_pending, deploy_in_progress",
}


class TestPolling:
    """Test suite for the response polling configuration."""

    def test_create_polling_config(self):
        config = create_polling_config(ACCEPTED_RESPONSE)
        assert config.enabled
        assert config.target_statuses == ("deployed",)
        assert config.pending_statuses == ("deploy_pending", "deploy_in_progress")

    def test_response_without_extensions(self):
        assert create_polling_config({"description": "OK"}) == PollingConfig()

    def test_statuses_given_as_list(self):
        config = create_polling_config(
            {
                "x-terraform-resource-poll-enabled": True,
                "x-terraform-resource-poll-completed-statuses": ["done"],
            }
        )
        assert config.target_statuses == ("done",)
        assert config.pending_statuses == ()

    def test_create_responses_normalises_status_codes(self):
        operation = {
            "responses": {
                202: ACCEPTED_RESPONSE,
                "201": {"description": "Created"},
                "default": {"description": "Error"},
            }
        }
        responses = create_responses(operation)
        assert set(responses) == {"202", "201"}
        assert responses["202"].enabled
        assert not responses["201"].enabled

    def test_create_responses_without_responses(self):
        assert create_responses({}) == {}
        assert create_responses(None) == {}

    def test_get_polling_config_skips_missing_operations(self):
        operations = ResourceOperations(
            post={"responses": {"202": ACCEPTED_RESPONSE}}, get={"responses": {}}
        )
        polling = get_polling_config(operations)
        assert set(polling) == {"post", "get"}
        assert polling["post"]["202"].target_statuses == ("deployed",)
        assert polling["get"] == {}
