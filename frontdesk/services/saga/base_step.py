"""Base class for saga steps."""

from abc import ABC, abstractmethod

from structlog import get_logger

from frontdesk.services.saga.context import SagaContext

logger = get_logger(__name__)


class SagaStep(ABC):
    """Abstract base class for saga steps.

    Each step should:
    1. Implement execute() to perform one write
    2. Record in the context what it overwrote
    3. Implement compensate() to undo that write
    """

    def __init__(self, name: str | None = None):
        """Initialize the saga step.

        Args:
            name: Optional custom name for the step. Defaults to class name.
        """
        self.name = name or self.__class__.__name__
        self.logger = logger.bind(step=self.name)

    @abstractmethod
    async def execute(self, context: SagaContext) -> None:
        """Perform the step's write. Raise to abort the saga."""
        pass

    @abstractmethod
    async def compensate(self, context: SagaContext) -> None:
        """Undo the write made by execute()."""
        pass

    async def run(self, context: SagaContext) -> None:
        """Run the step with logging.

        Args:
            context: Saga context

        Raises:
            Exception: Whatever execute() raised, after recording it in the context
        """
        self.logger.info("Step starting", reservation_id=context.reservation_id)
        try:
            await self.execute(context)
        except Exception as e:
            self.logger.warning(
                "Step failed",
                reservation_id=context.reservation_id,
                error=str(e),
            )
            context.add_error(self.name, str(e))
            raise
        context.completed_steps.append(self.name)
        self.logger.info("Step completed successfully", reservation_id=context.reservation_id)

    def get_name(self) -> str:
        return self.name
