import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Dict, Any, Optional
import logging

from pydantic import ValidationError

from .models import DeploymentRecord


class ReportWriter:
    """
    Append-only deployment report (one JSON document per line).

    Each write appends a line holding {"deployments": [...]} with every earlier
    record followed by the new one. Existing lines are never rewritten, so the
    last line always carries the full history.
    """

    def __init__(self, report_path: Path, default_username: str = "SYSTEM"):
        self.report_path = Path(report_path)
        self.default_username = default_username
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def make_record(date: datetime, pipeline_id: str, success: bool,
                    username: Optional[str] = None,
                    default_username: str = "SYSTEM") -> DeploymentRecord:
        return DeploymentRecord(
            date=int(date.timestamp() * 1000),
            username=username or default_username,
            status="true" if success else "false",
            pipeline_id=pipeline_id or "",
        )

    def write(self, date: datetime, pipeline_id: str, success: bool,
              username: Optional[str] = None) -> DeploymentRecord:
        """Append one deployment record to the report file"""
        record = self.make_record(date, pipeline_id, success, username, self.default_username)
        self.append(record)
        return record

    def append(self, record: DeploymentRecord) -> None:
        deployments = self._latest_document().get("deployments", [])
        deployments.append(record.to_json_dict())

        self.report_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.report_path, "a", encoding="utf-8") as f:
            f.write(json.dumps({"deployments": deployments}, ensure_ascii=False) + "\n")

        self.logger.debug(f"Appended deployment record to {self.report_path}")

    def read_history(self) -> List[DeploymentRecord]:
        """All recorded deployments, oldest first"""
        records = []
        for index, entry in enumerate(self._latest_document().get("deployments", [])):
            try:
                records.append(DeploymentRecord(**entry))
            except (TypeError, ValidationError) as e:
                self.logger.warning(f"Ignoring unreadable deployment record #{index} in {self.report_path}: {e}")
        return records

    def _latest_document(self) -> Dict[str, Any]:
        if not self.report_path.exists():
            return {"deployments": []}

        last_line = ""
        with open(self.report_path, "r", encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    last_line = line.strip()

        if not last_line:
            return {"deployments": []}

        try:
            document = json.loads(last_line)
        except ValueError as e:
            self.logger.warning(f"Ignoring unreadable report line in {self.report_path}: {e}")
            return {"deployments": []}

        if not isinstance(document, dict) or not isinstance(document.get("deployments"), list):
            self.logger.warning(f"Ignoring unexpected report line in {self.report_path}")
            return {"deployments": []}
        return document


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
