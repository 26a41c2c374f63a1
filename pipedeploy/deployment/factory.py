"""Factory for creating a DeploymentOrchestrator from GlobalConfig"""
import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from ..config.global_config_loader import GlobalConfig
from ..remote.object_storage import S3Uploader
from ..remote.pipeline_proxy import PipelineServiceProxy, create_boto3_session
from .models import ScriptEnvironment
from .report_writer import ReportWriter
from .script_deployer import ScriptDeployer
from .service import DeploymentOrchestrator
from .token_store import IdempotencyTokenStore


def create_orchestrator_from_global(
    global_config: GlobalConfig,
    artifacts_dir: Path,
    script_mappings: Optional[Dict[ScriptEnvironment, str]] = None,
    username: Optional[str] = None,
    build_id: Optional[str] = None,
    sink: Optional[Callable[[str], None]] = None,
) -> DeploymentOrchestrator:
    """
    Create a DeploymentOrchestrator wired to AWS from GlobalConfig

    Args:
        global_config: The global configuration
        artifacts_dir: Artifact area of the build being deployed
        script_mappings: (pipeline file, script) -> destination URL prefix
        username: Invoking user, None for unattended runs
        build_id: Build identity used to key creation tokens
        sink: Receives every deployment message as it is produced

    Returns:
        Ready to use DeploymentOrchestrator
    """
    logger = logging.getLogger(__name__)
    artifacts_dir = Path(artifacts_dir)
    deployment_cfg = global_config.deployment

    session = create_boto3_session(global_config.aws)
    proxy = PipelineServiceProxy.from_config(global_config.aws, session=session)
    uploader = S3Uploader.from_config(global_config.aws, session=session)

    token_store = None
    if deployment_cfg.persist_idempotency_tokens:
        if build_id:
            token_store = IdempotencyTokenStore(artifacts_dir / deployment_cfg.token_file)
            logger.info(f"Persisting creation tokens in {token_store.token_path}")
        else:
            logger.warning("Creation token persistence is enabled but no build id was given, skipping")

    return DeploymentOrchestrator(
        proxy=proxy,
        script_deployer=ScriptDeployer(
            uploader,
            artifacts_dir,
            scripts_dir=deployment_cfg.scripts_dir,
            max_workers=deployment_cfg.max_upload_workers,
        ),
        report_writer=ReportWriter(
            artifacts_dir / deployment_cfg.report_file,
            default_username=deployment_cfg.default_username,
        ),
        script_mappings=script_mappings,
        description=deployment_cfg.description,
        username=username,
        retire_after_activation=deployment_cfg.retire_after_activation,
        token_store=token_store,
        build_id=build_id,
        sink=sink,
    )
