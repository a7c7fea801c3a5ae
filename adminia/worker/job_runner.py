from adminia.documents.exceptions import QueueEntryNotPendingError
from adminia.documents.models import QueueEntry
from adminia.exceptions import ConflictActiveAnalysisError, NotFoundError
from adminia.ingestion.models import IngestionOutcome
from adminia.ingestion.orchestrator import IngestionOrchestrator
from adminia.logging.logger import Log


class JobRunner:
    """Analyze the document behind one pending queue entry."""

    def __init__(self, orchestrator: IngestionOrchestrator) -> None:
        self._orchestrator = orchestrator

    def run(self, entry: QueueEntry) -> IngestionOutcome | None:
        """Execute a single queue entry; never raises so the worker keeps polling.

        Failed analyses are already recorded as `error` by the orchestrator and
        are not retried here.
        """
        Log.info(f"Running queue entry {entry.id} for document {entry.document_id}")
        try:
            outcome = self._orchestrator.analyze_entry(entry)
        except QueueEntryNotPendingError:
            Log.info(f"Queue entry {entry.id} was already picked up, skipping")
            return None
        except ConflictActiveAnalysisError:
            Log.info(f"Document {entry.document_id} is already being analyzed, skipping")
            return None
        except NotFoundError as exc:
            Log.warning(f"Skipping queue entry {entry.id}: {exc}")
            return None
        except Exception as exc:
            Log.error(f"Queue entry {entry.id} crashed: {exc}")
            return None

        if outcome.succeeded:
            Log.info(f"Queue entry {entry.id} completed successfully")
        else:
            Log.warning(f"Queue entry {entry.id} ended in error: {outcome.error}")
        return outcome
