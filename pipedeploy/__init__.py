"""
pipedeploy - deploys pipeline definitions to AWS Data Pipeline

Main modules:
- core: Messages, enums and error kinds
- definition: Pipeline definition model
- remote: Pipeline service proxy and S3 uploads
- deployment: Orchestrator, script deployer and deployment report
- config: Global configuration and script mappings
- cli: Command line entry point
"""

from .core.message_log import Message, MessageLog
from .definition.pipeline_definition import PipelineDefinition
from .remote.pipeline_proxy import PipelineServiceProxy
from .deployment.models import DeploymentResult, DeploymentStatus, ScriptEnvironment
from .deployment.service import DeploymentOrchestrator

__version__ = "1.0.0"
__all__ = [
    'Message',
    'MessageLog',
    'PipelineDefinition',
    'PipelineServiceProxy',
    'DeploymentResult',
    'DeploymentStatus',
    'ScriptEnvironment',
    'DeploymentOrchestrator',
]
