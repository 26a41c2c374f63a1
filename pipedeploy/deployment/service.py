"""
Deployment orchestrator for pipeline definition files.
"""
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from ..core.enums import DeploymentState
from ..core.exceptions import DefinitionRejected, DeploymentError, ValidationFailed
from ..core.message_log import MessageLog
from ..definition.pipeline_definition import PipelineDefinition
from ..remote.models import ValidationReport
from ..remote.pipeline_proxy import PipelineServiceProxy
from .models import DeploymentResult, DeploymentStatus, ScriptEnvironment
from .report_writer import ReportWriter, now_utc
from .script_deployer import ScriptDeployer
from .token_store import IdempotencyTokenStore


_VERSION_SUFFIX = re.compile(r'^(?P<base>.+)-\d+$')


def pipeline_name_from_file(pipeline_file: str) -> str:
    """'p1-orders-3.json' -> 'p1-orders-3'"""
    name = Path(pipeline_file).name
    if name.lower().endswith('.json'):
        name = name[:-len('.json')]
    return name


def pipeline_name_pattern(pipeline_name: str) -> str:
    """
    Regular expression matching every version of a pipeline name.

    The pattern built for 'p1-orders-3' matches 'p1-orders-1' but not
    'p1-orders-archive-1'. A name without a numeric suffix only
    matches itself.
    """
    match = _VERSION_SUFFIX.match(pipeline_name)
    if match:
        return f"^{re.escape(match.group('base'))}-\\d+$"
    return f"^{re.escape(pipeline_name)}$"


class DeploymentOrchestrator:
    """
    Replaces a remote pipeline with the one described by a definition file.

    States run in a fixed order: locate, retire, create, validate, deploy
    scripts, put definition, activate, report. Retiring the old pipeline is
    best-effort; every other failure aborts the deployment. The report is
    written whatever the outcome. Nothing is rolled back.
    """

    def __init__(
        self,
        proxy: PipelineServiceProxy,
        script_deployer: ScriptDeployer,
        report_writer: ReportWriter,
        script_mappings: Optional[Dict[ScriptEnvironment, str]] = None,
        description: str = "",
        username: Optional[str] = None,
        retire_after_activation: bool = False,
        token_store: Optional[IdempotencyTokenStore] = None,
        build_id: Optional[str] = None,
        sink: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize deployment orchestrator.

        Args:
            proxy: Pipeline service proxy
            script_deployer: Uploads scripts referenced by the definition
            report_writer: Appends the deployment record
            script_mappings: (pipeline file, script) -> destination URL prefix
            description: Description given to created pipelines
            username: Invoking user, the report's default is used when None
            retire_after_activation: Remove the old pipeline only once the new one is active
            token_store: Persists creation tokens per build and file
            build_id: Build identity used to key creation tokens
            sink: Receives every rendered message as it is produced
        """
        self.proxy = proxy
        self.script_deployer = script_deployer
        self.report_writer = report_writer
        self.script_mappings = dict(script_mappings or {})
        self.description = description
        self.username = username
        self.retire_after_activation = retire_after_activation
        self.token_store = token_store
        self.build_id = build_id
        self.sink = sink
        self.logger = logging.getLogger(__name__)

    async def deploy(self, definition_path: Union[str, Path]) -> DeploymentResult:
        """
        Deploy a single pipeline definition file.

        Args:
            definition_path: Path to the pipeline definition JSON

        Returns:
            DeploymentResult with the ordered messages of this deployment
        """
        definition_path = Path(definition_path)
        pipeline_file = definition_path.name
        pipeline_name = pipeline_name_from_file(pipeline_file)
        messages = MessageLog(sink=self.sink, logger=self.logger)
        result = DeploymentResult(pipeline_file=pipeline_file, status=DeploymentStatus.FAILED)
        started_at = now_utc()

        self.logger.info(f"Deploying pipeline definition: {definition_path}")
        try:
            result.state = DeploymentState.LOAD
            definition = PipelineDefinition.from_file(definition_path)

            result.state = DeploymentState.LOCATE
            old_pipeline_id = self.locate(pipeline_name, messages)

            if old_pipeline_id and not self.retire_after_activation:
                result.state = DeploymentState.RETIRE
                if self.retire(old_pipeline_id, messages):
                    result.removed_pipeline_id = old_pipeline_id

            result.state = DeploymentState.CREATE
            result.pipeline_id = self.create(pipeline_name, pipeline_file, messages)

            result.state = DeploymentState.VALIDATE
            self.validate(result.pipeline_id, definition, messages)

            result.state = DeploymentState.DEPLOY_SCRIPTS
            result.uploaded_scripts = await self.deploy_scripts(pipeline_file, messages)

            result.state = DeploymentState.PUT_DEFINITION
            self.put(result.pipeline_id, definition, messages)

            result.state = DeploymentState.ACTIVATE
            self.activate(result.pipeline_id, messages)

            if old_pipeline_id and self.retire_after_activation:
                result.state = DeploymentState.RETIRE
                if self.retire(old_pipeline_id, messages):
                    result.removed_pipeline_id = old_pipeline_id

            result.status = DeploymentStatus.SUCCESS
            messages.info(f"Pipeline {result.pipeline_id} ({pipeline_name}) deployed successfully")

        except DeploymentError as e:
            result.error_kind = e.kind
            result.error = str(e)
            messages.error(f"{e.kind}: {e}")

        finally:
            self.report(started_at, result, messages)
            result.messages = messages.rendered()

        return result

    async def deploy_all(self, definition_paths: List[Union[str, Path]]) -> List[DeploymentResult]:
        """Deploy several definition files one after another"""
        results = []
        for definition_path in definition_paths:
            results.append(await self.deploy(definition_path))
        return results

    def locate(self, pipeline_name: str, messages: MessageLog) -> str:
        pattern = pipeline_name_pattern(pipeline_name)
        pipeline_id = self.proxy.find_pipeline_id(pattern)
        if pipeline_id:
            messages.info(f"Found existing pipeline {pipeline_id} matching {pattern}")
        else:
            messages.info(f"No existing pipeline matches {pattern}")
        return pipeline_id

    def retire(self, pipeline_id: str, messages: MessageLog) -> bool:
        removed = self.proxy.remove_pipeline(pipeline_id)
        if removed:
            messages.info(f"Old pipeline {pipeline_id} removed")
        else:
            messages.warn(f"Unable to remove old pipeline {pipeline_id}, it must be removed manually")
        return removed

    def create(self, pipeline_name: str, pipeline_file: str, messages: MessageLog) -> str:
        unique_id = None
        if self.token_store is not None and self.build_id:
            unique_id = self.token_store.get_or_create(self.build_id, pipeline_file)

        pipeline_id = self.proxy.create_pipeline(pipeline_name, self.description, unique_id=unique_id)
        messages.info(f"Created pipeline {pipeline_id} ({pipeline_name})")
        return pipeline_id

    def validate(self, pipeline_id: str, definition: PipelineDefinition,
                 messages: MessageLog) -> ValidationReport:
        """
        Validate the definition remotely. Errors are logged before warnings,
        each in the order returned by the service.

        Raises:
            ValidationFailed: the service flagged the definition as errored
        """
        report = self.proxy.validate_definition(pipeline_id, definition)
        for error in report.errors:
            messages.error(f"Validation error: {error}")
        for warning in report.warnings:
            messages.warn(f"Validation warning: {warning}")
        messages.info(
            f"Validation of pipeline {pipeline_id} finished with "
            f"{len(report.errors)} error(s) and {len(report.warnings)} warning(s)"
        )

        if report.has_blocking_errors:
            raise ValidationFailed(pipeline_id, report.errors)
        return report

    async def deploy_scripts(self, pipeline_file: str, messages: MessageLog) -> List[str]:
        return await self.script_deployer.deploy(pipeline_file, self.script_mappings, messages)

    def put(self, pipeline_id: str, definition: PipelineDefinition, messages: MessageLog) -> None:
        if not self.proxy.put_definition(pipeline_id, definition):
            raise DefinitionRejected(pipeline_id)
        messages.info(f"Pipeline definition uploaded to {pipeline_id}")

    def activate(self, pipeline_id: str, messages: MessageLog) -> None:
        self.proxy.activate(pipeline_id)
        messages.info(f"Pipeline {pipeline_id} activated")

    def report(self, date: datetime, result: DeploymentResult, messages: MessageLog) -> None:
        """Append the deployment record; a write failure only produces a warning"""
        try:
            self.report_writer.write(date, result.pipeline_id, result.succeeded, self.username)
        except OSError as e:
            messages.warn(f"Unable to write deployment report {self.report_writer.report_path}: {e}")
            return
        messages.info(f"Deployment recorded in {self.report_writer.report_path.name}")
