import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass


@dataclass
class AwsConfig:
    """AWS client configuration"""
    region: Optional[str] = None
    profile: Optional[str] = None
    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    max_attempts: int = 3


@dataclass
class DeploymentConfig:
    """Deployment behaviour"""
    report_file: str = "deployment.log"
    scripts_dir: str = "scripts"
    max_upload_workers: int = 4
    default_username: str = "SYSTEM"
    description: str = ""
    retire_after_activation: bool = False
    persist_idempotency_tokens: bool = False
    token_file: str = ".pipedeploy_tokens.json"


@dataclass
class GlobalConfig:
    """Global configuration for pipeline deployments"""
    aws: AwsConfig
    deployment: DeploymentConfig

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GlobalConfig':
        """Create GlobalConfig from dictionary"""
        return cls(
            aws=AwsConfig(**(data.get('aws') or {})),
            deployment=DeploymentConfig(**(data.get('deployment') or {})),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'GlobalConfig':
        """Load GlobalConfig from YAML file"""
        path = Path(yaml_path)
        if not path.exists():
            # Return default config if file doesn't exist
            return cls.default()

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def default(cls) -> 'GlobalConfig':
        """Return default configuration"""
        return cls(
            aws=AwsConfig(),
            deployment=DeploymentConfig(),
        )


# Global instance - can be overridden
_global_config: Optional[GlobalConfig] = None


def load_global_config(config_path: Optional[str] = None) -> GlobalConfig:
    """
    Load global configuration from YAML file.
    If no path provided, looks for pipedeploy.yaml in standard locations.
    """
    global _global_config

    if config_path:
        _global_config = GlobalConfig.from_yaml(config_path)
        return _global_config

    # Try standard locations
    search_paths = [
        Path("./pipedeploy.yaml"),
        Path("./config/pipedeploy.yaml"),
        Path("/etc/pipedeploy/pipedeploy.yaml"),
    ]

    for path in search_paths:
        if path.exists():
            _global_config = GlobalConfig.from_yaml(str(path))
            return _global_config

    # Return default if no config found
    _global_config = GlobalConfig.default()
    return _global_config


def get_global_config() -> GlobalConfig:
    """Get the loaded global configuration"""
    global _global_config
    if _global_config is None:
        _global_config = load_global_config()
    return _global_config
