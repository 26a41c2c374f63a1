"""Test cases for PipelineServiceProxy over a mocked boto3 client."""

from unittest.mock import Mock

import pytest
from botocore.exceptions import EndpointConnectionError

from pipedeploy.config.global_config_loader import AwsConfig
from pipedeploy.core.exceptions import RemoteOperationFailed
from pipedeploy.definition.pipeline_definition import PipelineDefinition
from pipedeploy.remote.pipeline_proxy import PipelineServiceProxy
from tests._helpers import client_error, list_page, validation_response


@pytest.fixture
def proxy(mock_datapipeline_client):
    return PipelineServiceProxy(mock_datapipeline_client)


class TestFindPipelineId:
    """Pipeline lookup by name pattern across pages"""

    def test_pattern_is_matched_not_compared_as_prefix(self, proxy):
        assert proxy.find_pipeline_id("p1-this-is-a-test-pipeline-2") == ""

    def test_returns_first_match_in_listing_order(self, proxy):
        assert proxy.find_pipeline_id(r"^.*-this-is-a-test-pipeline-\d+$") == "test1"
        assert proxy.find_pipeline_id(r"d2-.*") == "test2"

    def test_no_match_returns_empty_string(self, proxy):
        assert proxy.find_pipeline_id(r"^p1-this-is-another-pipeline-\d+$") == ""

    def test_follows_continuation_markers(self, mock_datapipeline_client, proxy):
        mock_datapipeline_client.list_pipelines.side_effect = [
            list_page([{'id': 'a', 'name': 'orders-1'}], marker='m1'),
            list_page([{'id': 'b', 'name': 'users-1'}], marker='m2'),
            list_page([{'id': 'c', 'name': 'events-4'}, {'id': 'd', 'name': 'events-5'}]),
        ]

        assert proxy.find_pipeline_id(r"events-\d+") == "c"

        calls = mock_datapipeline_client.list_pipelines.call_args_list
        assert [call.kwargs for call in calls] == [{}, {'marker': 'm1'}, {'marker': 'm2'}]

    def test_stops_paging_once_a_match_is_found(self, mock_datapipeline_client, proxy):
        mock_datapipeline_client.list_pipelines.side_effect = [
            list_page([{'id': 'a', 'name': 'orders-1'}], marker='m1'),
            list_page([{'id': 'b', 'name': 'orders-2'}]),
        ]

        assert proxy.find_pipeline_id(r"orders-\d+") == "a"
        assert mock_datapipeline_client.list_pipelines.call_count == 1

    def test_no_match_on_any_page(self, mock_datapipeline_client, proxy):
        mock_datapipeline_client.list_pipelines.side_effect = [
            list_page([{'id': 'a', 'name': 'orders-1'}], marker='m1'),
            list_page([]),
        ]

        assert proxy.find_pipeline_id(r"users-\d+") == ""
        assert mock_datapipeline_client.list_pipelines.call_count == 2

    def test_listing_failure_is_normalized(self, mock_datapipeline_client, proxy):
        mock_datapipeline_client.list_pipelines.side_effect = client_error("ListPipelines")

        with pytest.raises(RemoteOperationFailed) as exc_info:
            proxy.find_pipeline_id("anything")

        assert exc_info.value.operation == 'list_pipelines'

    def test_long_listings_are_walked_without_recursion(self, mock_datapipeline_client, proxy):
        pages = [
            list_page([{'id': f"df-{i}", 'name': f"p2-other-{i}"}], marker=f"m{i}")
            for i in range(1500)
        ]
        pages.append(list_page([{'id': 'df-orders', 'name': 'p1-orders-1'}]))
        mock_datapipeline_client.list_pipelines.side_effect = pages

        assert proxy.find_pipeline_id(r"^p1-orders-\d+$") == "df-orders"
        assert mock_datapipeline_client.list_pipelines.call_count == 1501

    def test_more_results_without_marker_stops_paging(self, mock_datapipeline_client, proxy):
        mock_datapipeline_client.list_pipelines.return_value = {
            'pipelineIdList': [{'id': 'a', 'name': 'orders-1'}],
            'hasMoreResults': True,
        }

        assert proxy.find_pipeline_id(r"users-\d+") == ""
        assert [(h.id, h.name) for h in proxy.list_pipelines()] == [('a', 'orders-1')]
        assert mock_datapipeline_client.list_pipelines.call_count == 2

    def test_list_pipelines_walks_every_page(self, mock_datapipeline_client, proxy):
        mock_datapipeline_client.list_pipelines.side_effect = [
            list_page([{'id': 'a', 'name': 'orders-1'}], marker='m1'),
            list_page([{'id': 'b', 'name': 'users-1'}]),
        ]

        handles = proxy.list_pipelines()

        assert [(h.id, h.name) for h in handles] == [('a', 'orders-1'), ('b', 'users-1')]


class TestPipelineLifecycle:
    """Create, remove, validate, put and activate"""

    def test_create_returns_pipeline_id(self, mock_datapipeline_client, proxy):
        assert proxy.create_pipeline("p1-test-pipeline-name-34") == "df-new1234"

        kwargs = mock_datapipeline_client.create_pipeline.call_args.kwargs
        assert kwargs['name'] == "p1-test-pipeline-name-34"
        assert kwargs['description'] == ""
        assert kwargs['uniqueId']

    def test_create_uses_a_fresh_token_per_call(self, mock_datapipeline_client, proxy):
        proxy.create_pipeline("one")
        proxy.create_pipeline("one")

        tokens = [c.kwargs['uniqueId'] for c in mock_datapipeline_client.create_pipeline.call_args_list]
        assert tokens[0] != tokens[1]

    def test_create_uses_given_token(self, mock_datapipeline_client, proxy):
        proxy.create_pipeline("one", "desc", unique_id="token-1")

        kwargs = mock_datapipeline_client.create_pipeline.call_args.kwargs
        assert kwargs['uniqueId'] == "token-1"
        assert kwargs['description'] == "desc"

    def test_create_failure_carries_cause(self, mock_datapipeline_client, proxy):
        error = client_error("CreatePipeline")
        mock_datapipeline_client.create_pipeline.side_effect = error

        with pytest.raises(RemoteOperationFailed) as exc_info:
            proxy.create_pipeline("one")

        assert exc_info.value.cause is error
        assert exc_info.value.kind == "RemoteOperationFailed"

    def test_remove_returns_true_on_success(self, mock_datapipeline_client, proxy):
        assert proxy.remove_pipeline("test") is True
        mock_datapipeline_client.delete_pipeline.assert_called_once_with(pipelineId="test")

    @pytest.mark.parametrize("error", [
        client_error("DeletePipeline", "PipelineNotFoundException"),
        EndpointConnectionError(endpoint_url="https://datapipeline.example"),
    ])
    def test_remove_never_raises(self, mock_datapipeline_client, proxy, error):
        mock_datapipeline_client.delete_pipeline.side_effect = error

        assert proxy.remove_pipeline("test") is False

    def test_validate_flattens_errors_and_warnings_in_order(
        self, mock_datapipeline_client, proxy, sample_definition
    ):
        mock_datapipeline_client.validate_pipeline_definition.return_value = validation_response(
            errors=[["4", "5"], ["6"]], warnings=[["1", "2", "3"]], errored=False
        )

        report = proxy.validate_definition("test1234", sample_definition)

        assert report.errors == ["4", "5", "6"]
        assert report.warnings == ["1", "2", "3"]
        assert report.has_blocking_errors is False

    def test_validate_blocking_comes_from_errored_flag(
        self, mock_datapipeline_client, proxy, sample_definition
    ):
        mock_datapipeline_client.validate_pipeline_definition.return_value = validation_response(
            errors=[], warnings=[], errored=True
        )

        assert proxy.validate_definition("test1234", sample_definition).has_blocking_errors is True

    def test_validate_sends_objects_parameters_and_values(
        self, mock_datapipeline_client, proxy, sample_definition
    ):
        proxy.validate_definition("test1234", sample_definition)

        kwargs = mock_datapipeline_client.validate_pipeline_definition.call_args.kwargs
        assert kwargs['pipelineId'] == "test1234"
        assert kwargs['pipelineObjects'] == sample_definition.to_remote_objects()
        assert kwargs['parameterObjects'] == sample_definition.to_remote_parameters()
        assert kwargs['parameterValues'] == sample_definition.to_remote_values()

    def test_validate_omits_empty_parameters(self, mock_datapipeline_client, proxy):
        definition = PipelineDefinition.from_dict({'objects': [{'id': 'Default'}]})
        proxy.validate_definition("test1234", definition)

        kwargs = mock_datapipeline_client.validate_pipeline_definition.call_args.kwargs
        assert 'parameterObjects' not in kwargs
        assert 'parameterValues' not in kwargs

    def test_put_returns_false_when_errored(self, mock_datapipeline_client, proxy, sample_definition):
        mock_datapipeline_client.put_pipeline_definition.return_value = {'errored': True}

        assert proxy.put_definition("test1234", sample_definition) is False

    def test_put_returns_true_when_accepted(self, mock_datapipeline_client, proxy, sample_definition):
        assert proxy.put_definition("test1234", sample_definition) is True
        mock_datapipeline_client.put_pipeline_definition.assert_called_once()

    def test_put_exception_is_normalized(self, mock_datapipeline_client, proxy, sample_definition):
        mock_datapipeline_client.put_pipeline_definition.side_effect = client_error("PutPipelineDefinition")

        with pytest.raises(RemoteOperationFailed):
            proxy.put_definition("test1234", sample_definition)

    def test_activate_calls_service(self, mock_datapipeline_client, proxy):
        proxy.activate("test1234")

        mock_datapipeline_client.activate_pipeline.assert_called_once_with(pipelineId="test1234")

    def test_activate_failure_is_normalized(self, mock_datapipeline_client, proxy):
        mock_datapipeline_client.activate_pipeline.side_effect = client_error("ActivatePipeline")

        with pytest.raises(RemoteOperationFailed) as exc_info:
            proxy.activate("test1234")

        assert exc_info.value.operation == 'activate_pipeline'


class TestFromConfig:
    """Client construction from the AWS config section"""

    def test_builds_datapipeline_client_from_session(self):
        session = Mock()
        proxy = PipelineServiceProxy.from_config(AwsConfig(region="eu-west-1", read_timeout=5), session=session)

        args, kwargs = session.client.call_args
        assert args == ('datapipeline',)
        assert kwargs['config'].read_timeout == 5
        assert proxy.client is session.client.return_value
