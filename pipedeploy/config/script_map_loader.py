import yaml
from typing import Dict, Any, Iterable, Tuple

from ..deployment.models import ScriptEnvironment


def script_mappings_from_dict(data: Dict[str, Any]) -> Dict[ScriptEnvironment, str]:
    """
    Build script mappings from a dictionary of the form

        scripts:
          - pipeline: p1-orders-3.json
            script: transform.pig
            url: s3://bucket/scripts/
    """
    mappings: Dict[ScriptEnvironment, str] = {}
    for index, entry in enumerate(data.get('scripts') or []):
        missing = [key for key in ('pipeline', 'script', 'url') if not entry.get(key)]
        if missing:
            raise ValueError(f"Script mapping #{index} is missing: {', '.join(missing)}")
        environment = ScriptEnvironment(pipeline_name=entry['pipeline'], script_name=entry['script'])
        mappings[environment] = entry['url']
    return mappings


def load_script_mappings(file_path: str) -> Dict[ScriptEnvironment, str]:
    """Load script mappings from YAML file"""
    with open(file_path, 'r') as file:
        data = yaml.safe_load(file)

    if data is None:
        raise ValueError(f"Empty or invalid YAML file: {file_path}")

    return script_mappings_from_dict(data)


def script_mappings_from_tuples(entries: Iterable[Tuple[str, str, str]]) -> Dict[ScriptEnvironment, str]:
    """Mappings given as (pipeline file, script, url) triples, e.g. from the command line"""
    return {
        ScriptEnvironment(pipeline_name=pipeline, script_name=script): url
        for pipeline, script, url in entries
    }
