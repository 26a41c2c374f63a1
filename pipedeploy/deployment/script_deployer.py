"""
Uploads the scripts referenced by a pipeline definition to object storage.
"""
import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..core.exceptions import ScriptDeploymentFailed
from ..core.message_log import MessageLog
from ..remote.object_storage import S3Uploader, join_s3_url
from .models import ScriptEnvironment


class ScriptDeployer:
    """
    Deploys the scripts mapped to one pipeline file.

    Uploads run concurrently, bounded by max_workers. Every started upload is
    awaited before the first failure (in mapping order) is raised, so no upload
    is still running once deploy() returns or raises.
    """

    def __init__(self, uploader: S3Uploader, artifacts_dir: Path,
                 scripts_dir: str = "scripts", max_workers: int = 4):
        """
        Initialize script deployer.

        Args:
            uploader: Object storage uploader
            artifacts_dir: Root of the build's artifact area
            scripts_dir: Directory below artifacts_dir holding the scripts
            max_workers: Maximum number of concurrent uploads
        """
        self.uploader = uploader
        self.artifacts_dir = Path(artifacts_dir)
        self.scripts_dir = scripts_dir
        self.max_workers = max(1, max_workers)
        self.logger = logging.getLogger(__name__)

    def script_path(self, script_name: str) -> Path:
        return self.artifacts_dir / self.scripts_dir / script_name

    @staticmethod
    def mappings_for(pipeline_file: str,
                     mappings: Dict[ScriptEnvironment, str]) -> List[Tuple[ScriptEnvironment, str]]:
        """Mappings that belong to the given pipeline file, in declaration order"""
        return [
            (environment, url)
            for environment, url in mappings.items()
            if environment.pipeline_name == pipeline_file
        ]

    async def deploy(self, pipeline_file: str, mappings: Dict[ScriptEnvironment, str],
                     messages: Optional[MessageLog] = None) -> List[str]:
        """
        Upload every script mapped to pipeline_file.

        Returns:
            Destination URLs of the uploaded scripts

        Raises:
            ScriptDeploymentFailed: a script is missing or its upload failed
        """
        messages = messages if messages is not None else MessageLog()
        relevant = self.mappings_for(pipeline_file, mappings)
        if not relevant:
            self.logger.debug(f"No scripts mapped to {pipeline_file}")
            return []

        semaphore = asyncio.Semaphore(self.max_workers)

        async def upload_one(environment: ScriptEnvironment, prefix: str) -> str:
            async with semaphore:
                destination = join_s3_url(prefix, environment.script_name)
                local_path = self.script_path(environment.script_name)
                if not local_path.is_file():
                    raise ScriptDeploymentFailed(environment.script_name, destination,
                                                 f"file not found at {local_path}")

                uploaded = await asyncio.to_thread(self.uploader.upload, local_path, destination)
                if not uploaded:
                    raise ScriptDeploymentFailed(environment.script_name, destination, "upload failed")

                messages.info(f"Uploaded script {environment.script_name} to {destination}")
                return destination

        self.logger.info(
            f"Deploying {len(relevant)} script(s) for {pipeline_file} (max_workers={self.max_workers})"
        )
        results = await asyncio.gather(
            *[upload_one(environment, prefix) for environment, prefix in relevant],
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)
