from adminia.config.settings import Settings
from adminia.documents.factory import PersistenceFactory
from adminia.ingestion.orchestrator import build_orchestrator
from adminia.logging.logger import Log
from adminia.worker.job_runner import JobRunner
from adminia.worker.worker import Worker


def main() -> None:
    """Entry point: open the store -> build the orchestrator -> start the worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    persistence = PersistenceFactory.create(settings)
    if settings.store_backend.lower() == "memory":
        Log.warning("Worker uses the in-memory store; documents submitted to the API process are not visible")

    try:
        orchestrator = build_orchestrator(settings, persistence)
        job_runner = JobRunner(orchestrator)
        worker = Worker(persistence.queue, job_runner, settings)
        worker.run()
    finally:
        persistence.close()


if __name__ == "__main__":
    main()
