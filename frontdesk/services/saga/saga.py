"""Saga executor for multi-record status transitions."""

from structlog import get_logger

from frontdesk.errors import PartialUpdateError
from frontdesk.services.saga.base_step import SagaStep
from frontdesk.services.saga.context import SagaContext

logger = get_logger(__name__)


class Saga:
    """Runs a sequence of writes as one unit.

    The saga:
    1. Executes steps in order
    2. Stops at the first failing step
    3. Compensates completed steps in reverse order
    4. Re-raises the original error once compensation succeeded, or
       raises PartialUpdateError when it did not
    """

    def __init__(self, name: str, steps: list[SagaStep]):
        """Initialize the saga.

        Args:
            name: Saga name for logging
            steps: Steps to execute in order
        """
        self.name = name
        self.steps = steps
        self.logger = logger.bind(saga=name)

    async def execute(self, context: SagaContext) -> SagaContext:
        """Execute the saga.

        Args:
            context: Saga context

        Returns:
            Updated context with results

        Raises:
            PartialUpdateError: If a step failed and a compensation failed too
            Exception: The failing step's error, after successful compensation
        """
        self.logger.info(
            "Saga starting",
            reservation_id=context.reservation_id,
            step_count=len(self.steps),
        )

        completed: list[SagaStep] = []
        for step in self.steps:
            try:
                await step.run(context)
            except Exception as error:
                await self._compensate(context, completed, error)
                raise
            completed.append(step)

        context.success = True
        self.logger.info(
            "Saga completed",
            reservation_id=context.reservation_id,
            completed_steps=context.completed_steps,
        )
        return context

    async def _compensate(
        self,
        context: SagaContext,
        completed: list[SagaStep],
        error: Exception,
    ) -> None:
        if not completed:
            return

        self.logger.warning(
            "Compensating completed steps",
            reservation_id=context.reservation_id,
            steps=[step.get_name() for step in completed],
            error=str(error),
        )
        for step in reversed(completed):
            try:
                await step.compensate(context)
                context.compensated_steps.append(step.get_name())
            except Exception as compensation_error:
                self.logger.error(
                    "Compensation failed, records left inconsistent",
                    reservation_id=context.reservation_id,
                    room_id=context.room_id,
                    step=step.get_name(),
                    error=str(compensation_error),
                    original_error=str(error),
                )
                context.add_error(f"{step.get_name()}.compensate", str(compensation_error))
                raise PartialUpdateError(
                    f"{error}; rollback of {step.get_name()} also failed: {compensation_error}",
                    completed_steps=list(context.completed_steps),
                ) from error

    def get_step_names(self) -> list[str]:
        return [step.get_name() for step in self.steps]
