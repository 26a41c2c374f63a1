from .enums import MessageLevel, DeploymentState
from .message_log import Message, MessageLog
from .exceptions import (
    DeploymentError,
    RemoteOperationFailed,
    ValidationFailed,
    DefinitionRejected,
    ScriptDeploymentFailed,
    MalformedDefinition,
)

__all__ = [
    'MessageLevel',
    'DeploymentState',
    'Message',
    'MessageLog',
    'DeploymentError',
    'RemoteOperationFailed',
    'ValidationFailed',
    'DefinitionRejected',
    'ScriptDeploymentFailed',
    'MalformedDefinition',
]
