from .models import RemotePipelineHandle, ValidationReport
from .pipeline_proxy import PipelineServiceProxy
from .object_storage import S3Uploader, parse_s3_url, join_s3_url

__all__ = [
    'RemotePipelineHandle',
    'ValidationReport',
    'PipelineServiceProxy',
    'S3Uploader',
    'parse_s3_url',
    'join_s3_url',
]
