import csv
from collections import Counter
from typing import Callable, Iterable, Iterator

from outbound_survey.db import ResultStore
from outbound_survey.dialer import Dialer
from outbound_survey.enum import CallStatus, RunState
from outbound_survey.errors import DialError, NumbersSourceError, StoreError, SurveyError
from outbound_survey.logger import get_logger
from outbound_survey.machine import SurveyRunMachine
from outbound_survey.models import CallResult
from outbound_survey.survey.configuration import SurveyConfiguration


logger = get_logger(__name__)


class SurveyOrchestrator:
    """Runs one survey: calls every number that hasn't been reached yet.

    A number counts as reached once the store holds a completed call for it,
    from this or any earlier run. Calls are placed one after the other, in the
    order the numbers were given. A number whose call can't be placed gets a
    failed result and the survey moves on to the next one.

    The orchestrator doesn't store results itself: the status callbacks do,
    once Twilio reports how each call ended.
    """

    def __init__(
        self,
        configuration: SurveyConfiguration,
        dialer: Dialer | None = None,
        store_factory: Callable[[str], ResultStore] = ResultStore.open,
    ):
        self.configuration = configuration
        self.dialer = dialer if dialer is not None else Dialer(configuration)
        self.store_factory = store_factory
        self.run = SurveyRunMachine()
        self.summary: Counter = Counter()

    @property
    def state(self) -> RunState:
        return self.run.state

    def execute(self) -> Iterator[CallResult]:
        """Places the survey calls as the returned iterator is consumed.

        Yields one result per number dialed. If the store or the numbers can't
        be read, nothing is dialed and nothing is yielded. The iterator can only
        be consumed once.
        """
        if self.state != RunState.NOT_STARTED:
            raise SurveyError("This survey was already executed.")

        logger.info("Starting the survey.")
        store = None
        try:
            try:
                store = self.store_factory(self.configuration.database)
                self.run.open_store()
                completed = set(store.completed_destinations())
                logger.debug("Got %d calls made previously.", len(completed))

                numbers = self.get_survey_numbers()
                self.run.resolve_numbers()
                logger.debug("Got %d submitted survey numbers.", len(numbers))
            except (StoreError, NumbersSourceError):
                logger.exception("Unable to prepare the survey, no calls were placed.")
                self.run.fail()
                return

            self.run.start_dialing()
            for number in self.pending_numbers(numbers, completed):
                result = self.handle_dial_result(number)
                self.summary[result.status] += 1
                yield result

            self.run.aggregate()
            logger.info(
                "Successfully queued %d phone calls. There were %d failures.",
                self.summary[CallStatus.QUEUED],
                self.summary[CallStatus.FAILED],
            )
        finally:
            if store is not None:
                store.close()
                logger.debug("Result store closed")
            if self.state == RunState.AGGREGATED:
                self.run.close_store()
                logger.info("Survey ended.")

    def get_survey_numbers(self) -> list[str]:
        """Numbers as submitted, before any prefix is applied.

        Raises:
            NumbersSourceError: the CSV file can't be read
        """
        if not self.configuration.file_based:
            return list(self.configuration.numbers)

        path = self.configuration.numbers_csv
        try:
            with open(path, newline="", encoding="utf-8-sig") as numbers_file:
                return [
                    row[0].strip()
                    for row in csv.reader(numbers_file)
                    if row and row[0].strip()
                ]
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise NumbersSourceError(f"Unable to read the numbers CSV {path}") from e

    def pending_numbers(self, numbers: Iterable[str], completed: set[str]) -> Iterator[str]:
        # Completed destinations are stored as dialed, so the prefix goes on first.
        prefix = self.configuration.international_prefix if self.configuration.prefix_configured else ""
        for number in numbers:
            number = f"{prefix}{number}"
            if number in completed:
                logger.debug("Skipping %s, already completed.", number)
                continue
            yield number

    def handle_dial_result(self, number: str) -> CallResult:
        try:
            return CallResult.from_call(self.dialer.dial(number))
        except DialError:
            logger.exception("An exception occurred calling %s.", number)
            return CallResult.failed_call(number)
