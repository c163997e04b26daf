"""
Build Tracker Module - Per-repository outcomes and run statistics
"""

import time
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from bunsen_rebuilder.build.artifact_manager import BuildArtifact
from bunsen_rebuilder.common.errors import RebuilderError

logger = logging.getLogger(__name__)


class BuildStatus(Enum):
    BUILT = "built"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class BuildOutcome:
    repository: str
    status: BuildStatus
    reason: str = ""
    error: Optional[RebuilderError] = None
    artifacts: List[BuildArtifact] = field(default_factory=list)

    @classmethod
    def built(cls, repository: str, artifacts: List[BuildArtifact]) -> "BuildOutcome":
        return cls(repository, BuildStatus.BUILT, artifacts=list(artifacts))

    @classmethod
    def skipped(cls, repository: str, error: RebuilderError) -> "BuildOutcome":
        return cls(repository, BuildStatus.SKIPPED, reason=str(error), error=error)

    @classmethod
    def failed(cls, repository: str, error: RebuilderError) -> "BuildOutcome":
        return cls(repository, BuildStatus.FAILED, reason=str(error), error=error)


class BuildReport:
    """Tracks build outcomes in processing order"""

    def __init__(self):
        self.outcomes: List[BuildOutcome] = []
        self.aborted = False
        self.start_time = time.time()

    def record(self, outcome: BuildOutcome):
        self.outcomes.append(outcome)
        logger.info(f"BUILD_OUTCOME repo={outcome.repository} status={outcome.status.value}"
                    + (f" reason={outcome.reason!r}" if outcome.reason else ""))

    def _with_status(self, status: BuildStatus) -> List[BuildOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def built(self) -> List[BuildOutcome]:
        return self._with_status(BuildStatus.BUILT)

    @property
    def skipped(self) -> List[BuildOutcome]:
        return self._with_status(BuildStatus.SKIPPED)

    @property
    def failed(self) -> List[BuildOutcome]:
        return self._with_status(BuildStatus.FAILED)

    @property
    def artifacts(self) -> List[BuildArtifact]:
        return [a for o in self.built for a in o.artifacts]

    @property
    def artifact_names(self) -> List[str]:
        """Distinct logical artifact names, in build order"""
        names: Dict[str, None] = {}
        for artifact in self.artifacts:
            names.setdefault(artifact.base_name, None)
        return list(names)

    def get_elapsed_time(self) -> float:
        return time.time() - self.start_time

    def get_summary(self) -> Dict:
        """Get build summary statistics"""
        return {
            "elapsed": self.get_elapsed_time(),
            "built": len(self.built),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
            "artifacts": len(self.artifacts),
            "aborted": self.aborted,
        }
