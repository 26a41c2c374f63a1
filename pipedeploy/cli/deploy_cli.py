"""
CLI for deploying pipeline definitions.
Thin wrapper over DeploymentOrchestrator.
"""
import asyncio
import click
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from ..config.global_config_loader import load_global_config
from ..config.script_map_loader import load_script_mappings, script_mappings_from_tuples
from ..deployment.factory import create_orchestrator_from_global
from ..deployment.models import DeploymentResult
from ..deployment.report_writer import ReportWriter
from ..remote.pipeline_proxy import PipelineServiceProxy


def setup_logging(log_level: str):
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def echo_result(result: DeploymentResult):
    click.echo(f"\n{'='*80}")
    if result.succeeded:
        click.echo("✅ Deployment Successful")
        click.echo(f"{'='*80}")
        click.echo(f"Definition: {result.pipeline_file}")
        click.echo(f"Pipeline ID: {result.pipeline_id}")
        if result.removed_pipeline_id:
            click.echo(f"Replaced: {result.removed_pipeline_id}")
        if result.uploaded_scripts:
            click.echo(f"Scripts: {', '.join(result.uploaded_scripts)}")
    else:
        click.echo("❌ Deployment Failed")
        click.echo(f"{'='*80}")
        click.echo(f"Definition: {result.pipeline_file}")
        click.echo(f"Failed at: {result.state.value if result.state else 'unknown'}")
        click.echo(f"Error kind: {result.error_kind}")
        click.echo(f"Error: {result.error}")
        if result.pipeline_id:
            click.echo(f"Pipeline ID (not active): {result.pipeline_id}")
    click.echo(f"{'='*80}\n")


def run_deployments(definitions: List[Path], artifacts_dir: str, scripts_file: Optional[str],
                    script: Tuple[Tuple[str, str, str], ...], username: Optional[str],
                    build_id: Optional[str], global_config: Optional[str], log_level: str):
    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    async def run_deploy() -> List[DeploymentResult]:
        global_cfg = load_global_config(global_config)

        script_mappings = {}
        if scripts_file:
            script_mappings.update(load_script_mappings(scripts_file))
        script_mappings.update(script_mappings_from_tuples(script))

        orchestrator = create_orchestrator_from_global(
            global_cfg,
            artifacts_dir=Path(artifacts_dir),
            script_mappings=script_mappings,
            username=username,
            build_id=build_id,
            sink=click.echo,
        )

        logger.info(f"Deploying {len(definitions)} pipeline definition(s)")
        return await orchestrator.deploy_all(definitions)

    try:
        results = asyncio.run(run_deploy())
    except Exception as e:
        logger.error(f"Deployment failed: {e}", exc_info=True)
        raise click.ClickException(str(e))

    for result in results:
        echo_result(result)

    failed = [r for r in results if not r.succeeded]
    if failed:
        raise click.ClickException(
            f"{len(failed)} of {len(results)} deployment(s) failed: "
            + ", ".join(f"{r.pipeline_file} ({r.error_kind})" for r in failed)
        )


@click.group()
def deploy():
    """Deploy pipeline definitions"""
    pass


@deploy.command()
@click.option('--definition', 'definitions', required=True, multiple=True,
              type=click.Path(dir_okay=False), help='Pipeline definition JSON file')
@click.option('--artifacts-dir', required=True, type=click.Path(file_okay=False),
              help='Build artifact directory holding scripts and the deployment report')
@click.option('--scripts', 'scripts_file', default=None, type=click.Path(dir_okay=False),
              help='YAML file mapping scripts to S3 destinations')
@click.option('--script', multiple=True, type=(str, str, str),
              help='Script mapping: PIPELINE_FILE SCRIPT S3_URL_PREFIX')
@click.option('--username', default=None, help='User triggering the deployment')
@click.option('--build-id', default=None, help='Build identity used to reuse creation tokens on retry')
@click.option('--global-config', default=None, help='Path to global config YAML')
@click.option('--log-level', default='INFO', help='Log level')
def pipeline(definitions, artifacts_dir, scripts_file, script, username, build_id,
             global_config, log_level):
    """Deploy one or more pipeline definition files"""
    run_deployments([Path(d) for d in definitions], artifacts_dir, scripts_file, script,
                    username, build_id, global_config, log_level)


@deploy.command('all')
@click.option('--artifacts-dir', required=True, type=click.Path(exists=True, file_okay=False),
              help='Build artifact directory; every *.json file in it is deployed')
@click.option('--scripts', 'scripts_file', default=None, type=click.Path(dir_okay=False),
              help='YAML file mapping scripts to S3 destinations')
@click.option('--script', multiple=True, type=(str, str, str),
              help='Script mapping: PIPELINE_FILE SCRIPT S3_URL_PREFIX')
@click.option('--username', default=None, help='User triggering the deployment')
@click.option('--build-id', default=None, help='Build identity used to reuse creation tokens on retry')
@click.option('--global-config', default=None, help='Path to global config YAML')
@click.option('--log-level', default='INFO', help='Log level')
def deploy_all(artifacts_dir, scripts_file, script, username, build_id, global_config, log_level):
    """Deploy every pipeline definition found in the artifact directory"""
    definitions = sorted(Path(artifacts_dir).glob('*.json'))
    if not definitions:
        click.echo("No pipeline definitions found")
        return

    run_deployments(definitions, artifacts_dir, scripts_file, script,
                    username, build_id, global_config, log_level)


@deploy.command('status')
@click.option('--artifacts-dir', required=True, type=click.Path(file_okay=False),
              help='Build artifact directory holding the deployment report')
@click.option('--global-config', default=None, help='Path to global config YAML')
def status(artifacts_dir: str, global_config: Optional[str]):
    """Show recorded deployments"""
    global_cfg = load_global_config(global_config)
    writer = ReportWriter(Path(artifacts_dir) / global_cfg.deployment.report_file)
    history = writer.read_history()

    if not history:
        click.echo("No deployments recorded")
        return

    click.echo(f"\n{'='*80}")
    click.echo(f"Deployment History ({len(history)})")
    click.echo(f"{'='*80}")
    for record in history:
        marker = "✅" if record.status == "true" else "❌"
        click.echo(f"  {marker} {record.date}  {record.username:<16} {record.pipeline_id or '-'}")
    click.echo()


@deploy.command('list')
@click.option('--pattern', default=None, help='Only show the first pipeline matching this regular expression')
@click.option('--global-config', default=None, help='Path to global config YAML')
@click.option('--log-level', default='WARNING', help='Log level')
def list_pipelines(pattern: Optional[str], global_config: Optional[str], log_level: str):
    """List pipelines known to the pipeline service"""
    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    global_cfg = load_global_config(global_config)
    proxy = PipelineServiceProxy.from_config(global_cfg.aws)

    try:
        if pattern:
            pipeline_id = proxy.find_pipeline_id(pattern)
            click.echo(pipeline_id or "No pipeline matches")
            return

        for handle in proxy.list_pipelines():
            click.echo(f"{handle.id}\t{handle.name}")
    except Exception as e:
        logger.error(f"Listing pipelines failed: {e}", exc_info=True)
        raise click.ClickException(str(e))


if __name__ == '__main__':
    deploy()
