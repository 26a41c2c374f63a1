from .global_config_loader import GlobalConfig, AwsConfig, DeploymentConfig, load_global_config

__all__ = [
    'GlobalConfig',
    'AwsConfig',
    'DeploymentConfig',
    'load_global_config',
]
