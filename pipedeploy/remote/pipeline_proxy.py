"""
Facade over the boto3 Data Pipeline client.

Simplifies the calls the deployment needs and wraps every botocore failure
into RemoteOperationFailed.
"""
import logging
import re
import uuid
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config.global_config_loader import AwsConfig
from ..core.exceptions import RemoteOperationFailed
from ..definition.pipeline_definition import PipelineDefinition
from .models import RemotePipelineHandle, ValidationReport


REMOTE_ERRORS = (ClientError, BotoCoreError)


def create_boto3_session(aws_config: AwsConfig) -> boto3.session.Session:
    """Session honouring the configured profile and region"""
    return boto3.session.Session(
        profile_name=aws_config.profile,
        region_name=aws_config.region,
    )


def client_config(aws_config: AwsConfig) -> Config:
    return Config(
        connect_timeout=aws_config.connect_timeout,
        read_timeout=aws_config.read_timeout,
        retries={'max_attempts': aws_config.max_attempts},
    )


class PipelineServiceProxy:
    """Proxy for the pipeline service operations used by a deployment"""

    def __init__(self, client: Any):
        self.client = client
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, aws_config: AwsConfig,
                    session: Optional[boto3.session.Session] = None) -> 'PipelineServiceProxy':
        session = session or create_boto3_session(aws_config)
        return cls(session.client('datapipeline', config=client_config(aws_config)))

    def create_pipeline(self, name: str, description: str = "",
                        unique_id: Optional[str] = None) -> str:
        """
        Create an empty pipeline.

        Args:
            name: Pipeline name
            description: Pipeline description
            unique_id: Idempotency token; a fresh one is generated when omitted

        Returns:
            Id of the created pipeline
        """
        token = unique_id or str(uuid.uuid4())
        try:
            response = self.client.create_pipeline(
                name=name,
                uniqueId=token,
                description=description,
            )
        except REMOTE_ERRORS as e:
            raise RemoteOperationFailed('create_pipeline', e) from e

        pipeline_id = response['pipelineId']
        self.logger.debug(f"Created pipeline {name} as {pipeline_id} (token {token})")
        return pipeline_id

    def remove_pipeline(self, pipeline_id: str) -> bool:
        """Delete a pipeline. Returns False instead of raising on failure."""
        try:
            self.client.delete_pipeline(pipelineId=pipeline_id)
            return True
        except REMOTE_ERRORS as e:
            self.logger.warning(f"Failed to delete pipeline {pipeline_id}: {e}")
            return False

    def validate_definition(self, pipeline_id: str,
                            definition: PipelineDefinition) -> ValidationReport:
        """
        Validate a definition against a pipeline.

        Errors and warnings are flattened in the order returned by the service.
        Only the service's 'errored' flag makes the result blocking.
        """
        try:
            response = self.client.validate_pipeline_definition(
                **self._definition_request(pipeline_id, definition)
            )
        except REMOTE_ERRORS as e:
            raise RemoteOperationFailed('validate_pipeline_definition', e) from e

        errors = [
            error
            for group in response.get('validationErrors') or []
            for error in group.get('errors') or []
        ]
        warnings = [
            warning
            for group in response.get('validationWarnings') or []
            for warning in group.get('warnings') or []
        ]
        return ValidationReport(
            errors=errors,
            warnings=warnings,
            has_blocking_errors=bool(response.get('errored', False)),
        )

    def put_definition(self, pipeline_id: str, definition: PipelineDefinition) -> bool:
        """Upload a definition. Returns False when the service reports it as errored."""
        try:
            response = self.client.put_pipeline_definition(
                **self._definition_request(pipeline_id, definition)
            )
        except REMOTE_ERRORS as e:
            raise RemoteOperationFailed('put_pipeline_definition', e) from e

        return not response.get('errored', False)

    def activate(self, pipeline_id: str) -> None:
        try:
            self.client.activate_pipeline(pipelineId=pipeline_id)
        except REMOTE_ERRORS as e:
            raise RemoteOperationFailed('activate_pipeline', e) from e

    def find_pipeline_id(self, name_pattern: str, marker: Optional[str] = None) -> str:
        """
        Find the first pipeline whose name matches a regular expression.

        Pages are walked in order using the service's continuation marker.

        Returns:
            Pipeline id, or an empty string when nothing matches
        """
        regex = re.compile(name_pattern)
        while True:
            page = self._list_page(marker)

            for entry in page.get('pipelineIdList') or []:
                if regex.fullmatch(entry['name']):
                    return entry['id']

            marker = self._next_marker(page)
            if marker is None:
                return ""

    def list_pipelines(self) -> List[RemotePipelineHandle]:
        """All pipelines visible to the account, across every page"""
        handles = []
        marker = None
        while True:
            page = self._list_page(marker)
            handles.extend(
                RemotePipelineHandle(id=entry['id'], name=entry['name'])
                for entry in page.get('pipelineIdList') or []
            )
            marker = self._next_marker(page)
            if marker is None:
                return handles

    def _next_marker(self, page: Dict[str, Any]) -> Optional[str]:
        """Continuation marker of a page, None once there is nothing left to read"""
        if not page.get('hasMoreResults'):
            return None
        marker = page.get('marker')
        if not marker:
            self.logger.warning("Pipeline listing reported more results without a marker, stopping")
            return None
        return marker

    def _list_page(self, marker: Optional[str]) -> Dict[str, Any]:
        request = {}
        if marker is not None:
            request['marker'] = marker
        try:
            return self.client.list_pipelines(**request)
        except REMOTE_ERRORS as e:
            raise RemoteOperationFailed('list_pipelines', e) from e

    @staticmethod
    def _definition_request(pipeline_id: str, definition: PipelineDefinition) -> Dict[str, Any]:
        request = {
            'pipelineId': pipeline_id,
            'pipelineObjects': definition.to_remote_objects(),
        }
        parameters = definition.to_remote_parameters()
        if parameters:
            request['parameterObjects'] = parameters
        values = definition.to_remote_values()
        if values:
            request['parameterValues'] = values
        return request
