"""
Concurrent comparison pipeline for bio-relatives.

For every panel feature the interval is split into short sub-intervals,
both persons' regions are assembled in parallel, and every positional
pair of regions is compared on a bounded worker pool. Features run in
parallel on an outer pool and their outcomes are fed to one aggregator
as they complete.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from typing import Callable, Iterator, List, Optional, Protocol, Sequence, Tuple

from .analysis.aggregation import ResultAggregator, create_aggregator
from .config import ComparatorType, ComparisonConfig
from .core.distance import compare_regions, has_comparable_bases
from .core.models import AssembledRegion, Interval, MarkerInterval, split_interval
from .core.outcomes import ComparisonOutcome
from .exceptions import (
    ConfigurationError,
    FeatureComparisonError,
    GenomeFileError,
    PipelineError,
    TaskCancelledError,
)

logger = logging.getLogger(__name__)

FIRST_PERSON = "first"
SECOND_PERSON = "second"

# One assembly worker per person
ASSEMBLY_THREADS = 2


class RegionAssembler(Protocol):
    """Anything that can build a person's consensus over an interval.

    Implementations must be safe to call from several threads at once.
    """

    def assemble(self, person: str, interval: Interval) -> Optional[AssembledRegion]:
        ...


class TaskGroup:
    """
    A thread pool scoped to one unit of work.

    Tasks are submitted with submit() and collected with results() or
    futures(). Leaving the group, normally or through an exception, shuts
    the pool down. On the first failure the group cancels every pending
    sibling and flags the running ones through a shared event that tasks
    check before they start; Python threads cannot be interrupted, so a
    task that is already running finishes its current step.

    Example:
        >>> with TaskGroup(max_workers=4, name="compare") as group:
        ...     for pair in pairs:
        ...         group.submit(compare, *pair)
        ...     outcomes = list(group.results())
    """

    def __init__(self, max_workers: int, name: str = "task",
                 parent: Optional[threading.Event] = None):
        self.max_workers = max(1, max_workers)
        self.name = name
        self.parent = parent
        self.cancelled = threading.Event()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures: List[Future] = []

    def __enter__(self) -> 'TaskGroup':
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix=self.name,
        )
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.cancel()
        self._executor.shutdown(wait=True)
        return False

    def is_cancelled(self) -> bool:
        return self.cancelled.is_set() or (self.parent is not None and self.parent.is_set())

    def cancel(self):
        """Cancel pending tasks and flag running ones."""
        self.cancelled.set()
        for future in self._futures:
            future.cancel()

    def _guarded(self, fn: Callable, args, kwargs):
        if self.is_cancelled():
            raise TaskCancelledError(f"{self.name} task cancelled before start")
        return fn(*args, **kwargs)

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        if self._executor is None:
            raise RuntimeError("TaskGroup must be entered before submitting tasks")
        future = self._executor.submit(self._guarded, fn, args, kwargs)
        self._futures.append(future)
        return future

    def futures(self) -> Iterator[Future]:
        """Yield futures as they complete, without inspecting their results."""
        yield from as_completed(self._futures)

    def results(self) -> Iterator:
        """
        Yield task results in completion order.

        The first failing task cancels its siblings and its exception is
        re-raised to the caller.
        """
        for future in as_completed(self._futures):
            try:
                result = future.result()
            except BaseException:
                self.cancel()
                raise
            yield result

    def wait(self) -> List:
        """Block until every task finished; return results in submission order."""
        for _ in self.results():
            pass
        return [future.result() for future in self._futures]


class FeatureComparison:
    """
    Compares two persons over one panel feature.

    Stages: split, assemble (2 workers), validate, compare (bounded pool),
    collect. An assembly mismatch between the persons is tolerated and
    yields no outcomes; any other failure aborts this feature only and
    is raised as FeatureComparisonError.
    """

    def __init__(
        self,
        feature: Interval,
        assembler: RegionAssembler,
        config: ComparisonConfig,
        persons: Tuple[str, str] = (FIRST_PERSON, SECOND_PERSON),
        cancel_event: Optional[threading.Event] = None,
    ):
        if config.mode.is_str and not isinstance(feature, MarkerInterval):
            raise ConfigurationError(
                f"Mode {config.mode.value} requires marker intervals, got {feature}"
            )
        self.feature = feature
        self.assembler = assembler
        self.config = config
        self.persons = persons
        self.cancel_event = cancel_event

    def run(self) -> List[ComparisonOutcome]:
        """Run every stage and return this feature's outcomes."""
        logger.info(f"Processing feature: {self.feature}")

        sub_intervals = split_interval(self.feature, self.config.max_region_length)
        first, second = self._assemble(sub_intervals)

        if not self._validate(first, second):
            return []

        outcomes = self._compare(list(zip(first, second)))

        logger.info(f"End of processing feature: {self.feature} ({len(outcomes)} outcomes)")
        return outcomes

    def _assemble_person(self, person: str, sub_intervals: Sequence[Interval]) -> List[AssembledRegion]:
        regions = []
        for interval in sub_intervals:
            if self.cancel_event is not None and self.cancel_event.is_set():
                raise TaskCancelledError(f"Assembly of {self.feature} cancelled")
            region = self.assembler.assemble(person, interval)
            if region is not None:
                regions.append(region)
        return regions

    def _assemble(self, sub_intervals: Sequence[Interval]) -> Tuple[List[AssembledRegion], List[AssembledRegion]]:
        try:
            with TaskGroup(ASSEMBLY_THREADS, name="assembly", parent=self.cancel_event) as group:
                for person in self.persons:
                    group.submit(self._assemble_person, person, sub_intervals)
                first, second = group.wait()
        except (GenomeFileError, TaskCancelledError):
            raise
        except Exception as e:
            raise FeatureComparisonError(self.feature, "assembly", e) from e

        logger.debug(
            f"Assembled {len(first)} and {len(second)} regions for {self.feature}"
        )
        return first, second

    def _validate(self, first: List[AssembledRegion], second: List[AssembledRegion]) -> bool:
        if len(first) != len(second):
            logger.error(
                f"Error occurred while assembling {self.feature}: "
                f"{len(first)} regions for {self.persons[0]}, "
                f"{len(second)} for {self.persons[1]}; feature skipped"
            )
            return False

        for a, b in zip(first, second):
            if not a.is_paired_with(b):
                logger.error(
                    f"Error occurred while assembling {self.feature}: "
                    f"{a!r} has no counterpart; feature skipped"
                )
                return False

        return True

    def _compare(self, pairs: List[Tuple[AssembledRegion, AssembledRegion]]) -> List[ComparisonOutcome]:
        mode = self.config.mode
        marker = self.feature if mode.is_str else None

        if mode is ComparatorType.LEVENSHTEIN:
            comparable = [(a, b) for a, b in pairs if has_comparable_bases(a, b)]
            if len(comparable) < len(pairs):
                logger.debug(
                    f"Skipped {len(pairs) - len(comparable)} regions of {self.feature} "
                    f"without known bases"
                )
            pairs = comparable

        if not pairs:
            return []

        outcomes = []
        try:
            with TaskGroup(self.config.comparison_threads, name="compare",
                           parent=self.cancel_event) as group:
                for first, second in pairs:
                    group.submit(compare_regions, mode, first, second, marker)
                for outcome in group.results():
                    if self.config.intermediate_output:
                        logger.info(str(outcome))
                    outcomes.append(outcome)
        except TaskCancelledError:
            raise
        except Exception as e:
            raise FeatureComparisonError(self.feature, "comparison", e) from e

        return outcomes


class ComparisonPipeline:
    """
    Runs FeatureComparison for every feature of a panel.

    Features execute on an outer pool of config.threads workers. A
    failing feature is logged and skipped; the run is abandoned only if
    every feature failed or a file-level error occurred.
    """

    def __init__(
        self,
        assembler: RegionAssembler,
        config: Optional[ComparisonConfig] = None,
        persons: Tuple[str, str] = (FIRST_PERSON, SECOND_PERSON),
    ):
        self.assembler = assembler
        self.config = config or ComparisonConfig()
        self.persons = persons

    def run(
        self,
        panel: Sequence[Interval],
        aggregator: Optional[ResultAggregator] = None,
    ) -> ResultAggregator:
        """
        Compare the two persons over every feature of the panel.

        Args:
            panel: Intervals to compare (marker intervals for STR modes)
            aggregator: Aggregator to feed; a new one is created if None

        Returns:
            The aggregator holding every outcome of the run

        Raises:
            PipelineError: If the panel is empty or every feature failed
            GenomeFileError: On file-level errors from the assembler
        """
        if not panel:
            raise PipelineError("Panel contains no features")

        if aggregator is None:
            aggregator = create_aggregator(self.config.mode, self.config.threshold_policy)

        logger.info(
            f"Comparing {self.persons[0]} and {self.persons[1]} over {len(panel)} features "
            f"({self.config.mode.value}, {self.config.threads} feature threads, "
            f"{self.config.comparison_threads} comparison threads per feature)"
        )

        failures: List[FeatureComparisonError] = []
        completed = 0
        with TaskGroup(self.config.threads, name="feature") as group:
            tasks = [
                FeatureComparison(feature, self.assembler, self.config,
                                  self.persons, cancel_event=group.cancelled)
                for feature in panel
            ]
            for task in tasks:
                group.submit(task.run)

            for future in group.futures():
                try:
                    outcomes = future.result()
                except FeatureComparisonError as e:
                    logger.error(f"{e}; feature skipped")
                    failures.append(e)
                    continue
                except BaseException:
                    group.cancel()
                    raise
                aggregator.add_all(outcomes)
                completed += 1

        if failures and len(failures) == len(panel):
            raise PipelineError(
                f"All {len(panel)} features failed; first error: {failures[0]}"
            ) from failures[0]

        logger.info(
            f"Finished {completed}/{len(panel)} features, "
            f"{len(aggregator)} outcomes aggregated"
        )
        return aggregator
