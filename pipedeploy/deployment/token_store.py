"""
Persists pipeline creation tokens so a retried deployment reuses them.
"""
import json
import uuid
from pathlib import Path
from typing import Dict
import logging


class IdempotencyTokenStore:
    """JSON file of creation tokens keyed by build id and pipeline file"""

    def __init__(self, token_path: Path):
        """
        Initialize token store.

        Args:
            token_path: JSON file holding the tokens
        """
        self.token_path = Path(token_path)
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def key(build_id: str, pipeline_file: str) -> str:
        return f"{build_id}:{pipeline_file}"

    def get_or_create(self, build_id: str, pipeline_file: str) -> str:
        """
        Return the stored token for this build and file, creating and saving
        a new one before it is used for the first time.
        """
        tokens = self._load()
        key = self.key(build_id, pipeline_file)
        if key in tokens:
            self.logger.info(f"Reusing creation token for {key}")
            return tokens[key]

        token = str(uuid.uuid4())
        tokens[key] = token
        self._save(tokens)
        return token

    def _load(self) -> Dict[str, str]:
        if not self.token_path.exists():
            return {}

        with open(self.token_path, 'r') as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _save(self, tokens: Dict[str, str]) -> None:
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.token_path.with_suffix(self.token_path.suffix + '.tmp')
        with open(tmp_path, 'w') as f:
            json.dump(tokens, f, indent=2)
        tmp_path.replace(self.token_path)
