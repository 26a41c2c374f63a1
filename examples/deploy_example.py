#!/usr/bin/env python3
"""
Example usage of the DeploymentOrchestrator to deploy a pipeline definition
from a build's artifact directory.
"""

import asyncio
import logging
from pathlib import Path

from pipedeploy.config.global_config_loader import load_global_config
from pipedeploy.config.script_map_loader import load_script_mappings
from pipedeploy.deployment.factory import create_orchestrator_from_global
from pipedeploy.definition.pipeline_definition import PipelineDefinition


EXAMPLES_DIR = Path(__file__).parent


def inspect_definition_example():
    """Parse a definition and show what will be sent to the service"""
    print("\n=== Pipeline Definition ===")

    definition = PipelineDefinition.from_file(EXAMPLES_DIR / "artifacts" / "p1-daily-orders-7.json")
    for pipeline_object in definition.objects:
        print(f"{pipeline_object.id} ({pipeline_object.name}): {len(pipeline_object.fields)} field(s)")
    print(f"Parameters: {[p.id for p in definition.parameters]}")


async def deploy_example():
    """Deploy the example definition with its scripts"""
    print("\n=== Deployment ===")

    global_cfg = load_global_config(str(EXAMPLES_DIR / "configs" / "pipedeploy.yaml"))
    script_mappings = load_script_mappings(str(EXAMPLES_DIR / "configs" / "scripts.yaml"))

    orchestrator = create_orchestrator_from_global(
        global_cfg,
        artifacts_dir=EXAMPLES_DIR / "artifacts",
        script_mappings=script_mappings,
        build_id="example-build-1",
        sink=print,
    )

    result = await orchestrator.deploy(EXAMPLES_DIR / "artifacts" / "p1-daily-orders-7.json")
    print(f"Succeeded: {result.succeeded}, pipeline: {result.pipeline_id or '-'}")
    if not result.succeeded:
        print(f"Failed at {result.state.value}: {result.error_kind}")


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    inspect_definition_example()
    asyncio.run(deploy_example())
