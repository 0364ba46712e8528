# FlexiSync Retry Controller
# Repeat whole-object save attempts until success or the attempt limit

from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Optional

from flexisync.config.schema import ObjectConfig
from flexisync.errors import PartialFailureError, RemoteError
from flexisync.sync.results import ObjectSaveResult, RecordSaveResult
from flexisync.utils.records import Record

if TYPE_CHECKING:
    from flexisync.logger import SyncLogger

SaveAttempt = Callable[[ObjectConfig, list[Record]], ObjectSaveResult]


class AttemptState(str, Enum):
    """States of the retry loop."""

    ATTEMPTING = "attempting"
    SUCCESS = "success"
    FAILED = "failed"


class RetryController:
    """
    Runs save attempts for an object's full record set.

    Every attempt resends all records, not only the ones that failed.
    A RemoteError counts as a failed attempt.
    """

    def __init__(
        self,
        attempt: SaveAttempt,
        *,
        max_attempts: int = 1,
        allow_partial: bool = False,
        logger: Optional["SyncLogger"] = None,
    ):
        """
        Initialize controller.

        Args:
            attempt: Function performing one save attempt.
            max_attempts: Attempt limit; values below 1 mean a single attempt.
            allow_partial: Return failed results instead of raising.
            logger: Optional logger for retry messages.
        """
        self.attempt = attempt
        self.max_attempts = max(max_attempts, 1)
        self.allow_partial = allow_partial
        self.logger = logger
        self.state = AttemptState.ATTEMPTING
        self.attempts = 0

    def run(self, object_config: ObjectConfig, records: list[Record], *, path: str = "") -> ObjectSaveResult:
        """
        Save records, retrying while any record fails.

        Args:
            object_config: Object being saved.
            records: Every record of the object.
            path: Source path reported on results built from errors.

        Returns:
            The last attempt's result.

        Raises:
            PartialFailureError: If failures remain and partial success is not allowed.
        """
        self.state = AttemptState.ATTEMPTING
        self.attempts = 0
        result: Optional[ObjectSaveResult] = None
        last_error: Optional[RemoteError] = None

        while self.state == AttemptState.ATTEMPTING:
            self.attempts += 1
            try:
                result = self.attempt(object_config, records)
                last_error = None
            except RemoteError as e:
                last_error = e
                result = _failed_result(object_config, records, path, e)
                if self.logger:
                    self.logger.warning(f"{object_config.object_type} import attempt failed: {e.message}")

            if result.failure == 0:
                self.state = AttemptState.SUCCESS
            elif self.attempts >= self.max_attempts:
                self.state = AttemptState.FAILED
            elif self.logger:
                self.logger.info(
                    f"Retrying {object_config.object_type} import "
                    f"(attempt {self.attempts + 1}/{self.max_attempts}, {result.failure} failed)"
                )

        if self.state == AttemptState.FAILED and not self.allow_partial:
            raise PartialFailureError(
                f"Import of {object_config.object_type} was unsuccessful after {self.attempts} attempts "
                f"({result.failure} of {result.total} records failed)",
                result,
            ) from last_error

        return result


def _failed_result(
    object_config: ObjectConfig,
    records: list[Record],
    path: str,
    error: RemoteError,
) -> ObjectSaveResult:
    """Mark every record failed when an attempt raised."""
    results = []
    for record in records:
        external_id = record.get(object_config.external_id)
        results.append(
            RecordSaveResult(
                external_id=str(external_id) if external_id is not None else None,
                message=error.message,
                success=False,
            )
        )
    return ObjectSaveResult.from_results(object_config.object_type, path, records, results)
