"""
Models for deployment domain.
"""
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Optional, Any
from enum import Enum

from pydantic import BaseModel, Field

from ..core.enums import DeploymentState


class DeploymentStatus(Enum):
    """Status of deployment"""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ScriptEnvironment:
    """A script referenced by a pipeline definition file"""
    pipeline_name: str
    script_name: str


class DeploymentRecord(BaseModel):
    """One entry of the persisted deployment report"""
    date: int
    username: str
    status: str
    pipeline_id: str = Field(alias="pipelineId")

    model_config = {"populate_by_name": True}

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass
class DeploymentResult:
    """Result of deploying a pipeline definition file"""
    pipeline_file: str
    status: DeploymentStatus
    pipeline_id: str = ""
    removed_pipeline_id: Optional[str] = None
    state: Optional[DeploymentState] = None
    error_kind: Optional[str] = None
    error: Optional[str] = None
    uploaded_scripts: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == DeploymentStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = asdict(self)
        result['status'] = self.status.value
        result['state'] = self.state.value if self.state else None
        return result
