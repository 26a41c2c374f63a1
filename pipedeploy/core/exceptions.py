"""
Error kinds raised during a pipeline deployment.

Every error is fatal to the current deployment attempt. The only condition
recovered locally (removing the previous pipeline) never raises.
"""
from typing import List, Optional


class DeploymentError(Exception):
    """Base class for all deployment failures"""

    kind = "DeploymentError"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class RemoteOperationFailed(DeploymentError):
    """A call to the pipeline service raised unexpectedly"""

    kind = "RemoteOperationFailed"

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        super().__init__(f"Remote operation '{operation}' failed", cause)
        self.operation = operation


class ValidationFailed(DeploymentError):
    """The pipeline service reported blocking validation errors"""

    kind = "ValidationFailed"

    def __init__(self, pipeline_id: str, errors: Optional[List[str]] = None):
        self.pipeline_id = pipeline_id
        self.errors = list(errors or [])
        super().__init__(
            f"Validation of pipeline {pipeline_id} failed with {len(self.errors)} error(s)"
        )


class DefinitionRejected(DeploymentError):
    """The pipeline service reported the definition upload as errored"""

    kind = "DefinitionRejected"

    def __init__(self, pipeline_id: str):
        self.pipeline_id = pipeline_id
        super().__init__(f"Pipeline definition for {pipeline_id} was rejected")


class ScriptDeploymentFailed(DeploymentError):
    """A script file was missing or could not be uploaded"""

    kind = "ScriptDeploymentFailed"

    def __init__(self, script_name: str, destination: str, reason: str,
                 cause: Optional[BaseException] = None):
        self.script_name = script_name
        self.destination = destination
        super().__init__(f"Deploying script {script_name} to {destination} failed: {reason}", cause)


class MalformedDefinition(DeploymentError):
    """The pipeline definition JSON has no usable object list"""

    kind = "MalformedDefinition"

    def __init__(self, reason: str, source: Optional[str] = None,
                 cause: Optional[BaseException] = None):
        self.source = source
        prefix = f"Malformed pipeline definition {source}" if source else "Malformed pipeline definition"
        super().__init__(f"{prefix}: {reason}", cause)
