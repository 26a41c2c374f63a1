from enum import Enum


class MessageLevel(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class DeploymentState(str, Enum):
    """States of a single deployment, in execution order"""
    LOAD = "load"
    LOCATE = "locate"
    RETIRE = "retire"
    CREATE = "create"
    VALIDATE = "validate"
    DEPLOY_SCRIPTS = "deploy_scripts"
    PUT_DEFINITION = "put_definition"
    ACTIVATE = "activate"
