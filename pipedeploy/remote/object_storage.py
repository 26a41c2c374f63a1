from typing import Any, Tuple
from pathlib import Path
from urllib.parse import urlparse
import logging

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from ..config.global_config_loader import AwsConfig
from .pipeline_proxy import client_config, create_boto3_session


def parse_s3_url(url: str) -> Tuple[str, str]:
    """Split 's3://bucket/some/key' into ('bucket', 'some/key')"""
    parsed = urlparse(url)
    if parsed.scheme != 's3' or not parsed.netloc:
        raise ValueError(f"Not an S3 URL: {url}")
    return parsed.netloc, parsed.path.lstrip('/')


def join_s3_url(prefix: str, name: str) -> str:
    if not prefix.endswith('/'):
        prefix += '/'
    return f"{prefix}{name}"


class S3Uploader:
    """Uploads local files to S3 URLs"""

    def __init__(self, s3_client: Any):
        self.s3_client = s3_client
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, aws_config: AwsConfig, session=None) -> 'S3Uploader':
        session = session or create_boto3_session(aws_config)
        return cls(session.client('s3', config=client_config(aws_config)))

    def upload(self, local_path: Path, destination_url: str) -> bool:
        """
        Upload a file to an S3 URL.

        Returns:
            True if the object was written
        """
        try:
            bucket, key = parse_s3_url(destination_url)
        except ValueError as e:
            self.logger.error(f"S3 object upload failed: {e}")
            return False

        try:
            self.s3_client.upload_file(str(local_path), bucket, key)
            self.logger.debug(f"Uploaded {local_path} to {destination_url}")
            return True
        except (S3UploadFailedError, ClientError, BotoCoreError, OSError) as e:
            self.logger.error(f"S3 object upload failed for {destination_url}: {str(e)}")
            return False
