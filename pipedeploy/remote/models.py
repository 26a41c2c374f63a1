from typing import List
from pydantic import BaseModel, Field


class RemotePipelineHandle(BaseModel):
    """A pipeline known to the pipeline service"""
    id: str
    name: str


class ValidationReport(BaseModel):
    """Flattened outcome of a remote definition validation"""
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    has_blocking_errors: bool = False
