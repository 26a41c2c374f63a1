"""
Deployment of pipeline definition files.
Replaces the previous pipeline, uploads scripts and records the outcome.
"""

from .models import DeploymentRecord, DeploymentResult, DeploymentStatus, ScriptEnvironment
from .report_writer import ReportWriter
from .script_deployer import ScriptDeployer
from .service import DeploymentOrchestrator
from .token_store import IdempotencyTokenStore

__all__ = [
    'DeploymentRecord',
    'DeploymentResult',
    'DeploymentStatus',
    'ScriptEnvironment',
    'ReportWriter',
    'ScriptDeployer',
    'DeploymentOrchestrator',
    'IdempotencyTokenStore',
]
