"""Pytest configuration and fixtures for pipedeploy tests."""

import shutil
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
import logging

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pipedeploy.definition.pipeline_definition import PipelineDefinition
from tests._helpers import list_page

# Configure logging
logging.basicConfig(level=logging.INFO)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def definition_file(tmp_path) -> Path:
    """A copy of the sample definition named like a versioned pipeline"""
    target = tmp_path / "p1-this-is-a-test-pipeline-2.json"
    shutil.copy(FIXTURES_DIR / "pipeline3.json", target)
    return target


@pytest.fixture
def sample_definition() -> PipelineDefinition:
    return PipelineDefinition.from_file(FIXTURES_DIR / "pipeline3.json")


@pytest.fixture
def artifacts_dir(tmp_path) -> Path:
    """Artifact area with a scripts directory"""
    artifacts = tmp_path / "artifacts"
    (artifacts / "scripts").mkdir(parents=True)
    return artifacts


@pytest.fixture
def mock_datapipeline_client():
    """A boto3 datapipeline client double where every call succeeds"""
    client = Mock()
    client.list_pipelines.return_value = list_page([
        {'id': 'test1', 'name': 'p1-this-is-a-test-pipeline-1'},
        {'id': 'test2', 'name': 'd2-this-is-a-test-pipeline-1'},
    ])
    client.create_pipeline.return_value = {'pipelineId': 'df-new1234'}
    client.delete_pipeline.return_value = {}
    client.validate_pipeline_definition.return_value = {
        'validationErrors': [],
        'validationWarnings': [],
        'errored': False,
    }
    client.put_pipeline_definition.return_value = {'errored': False}
    client.activate_pipeline.return_value = {}
    return client


@pytest.fixture
def mock_s3_client():
    """A boto3 s3 client double"""
    client = Mock()
    client.upload_file.return_value = None
    return client
