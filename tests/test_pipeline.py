"""Tests for bio_relatives.pipeline module."""

import logging
import threading
import time

import pytest
from bio_relatives.analysis.aggregation import EditDistanceAggregator, MotifAggregator
from bio_relatives.config import ComparatorType, ComparisonConfig
from bio_relatives.core.models import GenomicInterval, MarkerInterval
from bio_relatives.exceptions import (
    ConfigurationError,
    FeatureComparisonError,
    GenomeFileError,
    PipelineError,
    TaskCancelledError,
)
from bio_relatives.pipeline import ComparisonPipeline, FeatureComparison, TaskGroup
from conftest import GENOME_1, FakeAssembler

GENOME_2 = "TTGACCGTAGGCTAACGTTAGCCATGACTGACGGTACCATGG"


def genomes(first=None, second=None):
    first = first or {"1": GENOME_1, "2": GENOME_2}
    second = second or dict(first)
    return {"first": dict(first), "second": dict(second)}


def config(**kwargs):
    kwargs.setdefault("cpu_count", 4)
    return ComparisonConfig(**kwargs)


class TestTaskGroup:
    """Test TaskGroup class."""

    def test_results(self):
        """Test that every result is yielded."""
        with TaskGroup(4) as group:
            for i in range(10):
                group.submit(lambda x: x * x, i)
            assert sorted(group.results()) == [i * i for i in range(10)]

    def test_wait_keeps_submission_order(self):
        """Test that wait returns results in submission order."""
        def delayed(i):
            time.sleep(0.01 * (5 - i))
            return i

        with TaskGroup(5) as group:
            for i in range(5):
                group.submit(delayed, i)
            assert group.wait() == [0, 1, 2, 3, 4]

    def test_first_error_cancels_siblings(self):
        """Test that the first failure is raised and pending tasks are cancelled."""
        finished = []

        def fail():
            raise ValueError("boom")

        def slow(i):
            time.sleep(0.05)
            finished.append(i)

        with pytest.raises(ValueError, match="boom"):
            with TaskGroup(1) as group:
                group.submit(fail)
                futures = [group.submit(slow, i) for i in range(20)]
                list(group.results())

        assert group.cancelled.is_set()
        assert any(f.cancelled() for f in futures)
        assert len(finished) < 20

    def test_parent_cancellation(self):
        """Test that tasks do not start once the parent is cancelled."""
        parent = threading.Event()
        parent.set()
        with TaskGroup(2, parent=parent) as group:
            group.submit(lambda: 1)
            with pytest.raises(TaskCancelledError):
                group.wait()

    def test_submit_outside_context(self):
        """Test that a group must be entered first."""
        with pytest.raises(RuntimeError):
            TaskGroup(1).submit(lambda: 1)


class TestFeatureComparison:
    """Test FeatureComparison class."""

    def test_outcome_per_sub_interval(self):
        """Test that a 45 base feature yields three outcomes."""
        task = FeatureComparison(
            GenomicInterval("1", 0, 45, "GENE"),
            FakeAssembler(genomes()),
            config(),
        )
        outcomes = task.run()
        assert sorted(o.compared_length for o in outcomes) == [5, 20, 20]
        assert all(o.difference_count == 0 for o in outcomes)

    def test_assembly_mismatch_skips_feature(self, caplog):
        """Test that unequal region counts yield no outcomes."""
        assembler = FakeAssembler(genomes(second={"1": GENOME_1[:30]}))
        task = FeatureComparison(GenomicInterval("1", 0, 60, "GENE"), assembler, config())
        assert task.run() == []
        assert "Error occurred while assembling" in caplog.text

    def test_unknown_regions_skipped(self):
        """Test that regions without known bases are not compared."""
        first = {"1": "*" * 20 + GENOME_1[20:]}
        assembler = FakeAssembler(genomes(first=first, second={"1": GENOME_1}))
        task = FeatureComparison(GenomicInterval("1", 0, 40, "GENE"), assembler, config())
        outcomes = task.run()
        assert len(outcomes) == 1
        assert outcomes[0].compared_length == 20

    def test_assembly_failure_wrapped(self):
        """Test that assembler errors abort the feature."""
        assembler = FakeAssembler(genomes(), fail_labels={"BAD"})
        task = FeatureComparison(GenomicInterval("1", 0, 40, "BAD"), assembler, config())
        with pytest.raises(FeatureComparisonError) as excinfo:
            task.run()
        assert excinfo.value.stage == "assembly"
        assert excinfo.value.feature.label == "BAD"

    def test_comparison_failure_wrapped(self):
        """Test that a Hamming length mismatch aborts the feature."""
        assembler = FakeAssembler(genomes(second={"1": GENOME_1[:35]}))
        task = FeatureComparison(
            GenomicInterval("1", 0, 40, "GENE"),
            assembler,
            config(mode=ComparatorType.HAMMING),
        )
        with pytest.raises(FeatureComparisonError) as excinfo:
            task.run()
        assert excinfo.value.stage == "comparison"

    def test_str_mode_needs_markers(self):
        """Test that STR modes reject plain gene intervals."""
        with pytest.raises(ConfigurationError):
            FeatureComparison(
                GenomicInterval("Y", 0, 40, "GENE"),
                FakeAssembler(genomes()),
                config(mode=ComparatorType.Y_STR),
            )

    def test_intermediate_output(self, caplog):
        """Test that each outcome is logged when requested."""
        caplog.set_level(logging.INFO, logger="bio_relatives.pipeline")
        task = FeatureComparison(
            GenomicInterval("1", 0, 20, "GENE"),
            FakeAssembler(genomes()),
            config(intermediate_output=True),
        )
        task.run()
        assert "Chromosome: 1, gene: GENE, differences: 0/20" in caplog.text


class TestComparisonPipeline:
    """Test ComparisonPipeline class."""

    PANEL = [
        GenomicInterval("1", 0, 50, "BRCA1"),
        GenomicInterval("1", 50, 104, "TP53"),
        GenomicInterval("2", 0, 42, "APC"),
    ]

    def test_identical_persons(self):
        """Test that identical genomes are parent and child."""
        aggregator = ComparisonPipeline(FakeAssembler(genomes()), config()).run(self.PANEL)
        analysis = aggregator.analyze()
        assert analysis.get("1").similarity == 100.0
        assert analysis.get("1").length == 104
        assert analysis.get("2").length == 42
        assert analysis.are_parent_and_child

    def test_thread_count_does_not_change_totals(self):
        """Test that parallel features give the same sums."""
        second = {"1": GENOME_1.replace("GCA", "GGA"), "2": GENOME_2[::-1]}
        assembler = FakeAssembler(genomes(second=second))

        single = ComparisonPipeline(assembler, config(threads=1)).run(self.PANEL)
        parallel = ComparisonPipeline(assembler, config(threads=3, cpu_count=6)).run(self.PANEL)
        assert single.totals() == parallel.totals()

    def test_failing_feature_skipped(self, caplog):
        """Test that one failing feature does not abort the run."""
        panel = self.PANEL + [GenomicInterval("2", 0, 20, "BAD")]
        assembler = FakeAssembler(genomes(), fail_labels={"BAD"})
        aggregator = ComparisonPipeline(assembler, config(threads=2)).run(panel)
        assert "BAD" not in aggregator.totals()["2"]
        assert "APC" in aggregator.totals()["2"]
        assert "failed during assembly" in caplog.text

    def test_all_features_failing(self):
        """Test that the run fails when no feature succeeds."""
        assembler = FakeAssembler(genomes(), fail_labels={"BAD"})
        with pytest.raises(PipelineError):
            ComparisonPipeline(assembler, config()).run([GenomicInterval("1", 0, 20, "BAD")])

    def test_file_error_aborts(self):
        """Test that file errors end the run."""
        assembler = FakeAssembler(genomes(), error=GenomeFileError("unreadable", filename="x.bam"))
        with pytest.raises(GenomeFileError):
            ComparisonPipeline(assembler, config(threads=2)).run(self.PANEL)

    def test_empty_panel(self):
        """Test that an empty panel is rejected."""
        with pytest.raises(PipelineError):
            ComparisonPipeline(FakeAssembler(genomes()), config()).run([])

    def test_uses_given_aggregator(self):
        """Test that outcomes go to a supplied aggregator."""
        aggregator = EditDistanceAggregator()
        result = ComparisonPipeline(FakeAssembler(genomes()), config()).run(self.PANEL, aggregator)
        assert result is aggregator
        assert len(aggregator) > 0

    def test_custom_persons(self):
        """Test that the assembler is asked for the configured persons."""
        assembler = FakeAssembler({"dad": {"1": GENOME_1}, "kid": {"1": GENOME_1}})
        pipeline = ComparisonPipeline(assembler, config(), persons=("dad", "kid"))
        aggregator = pipeline.run([GenomicInterval("1", 0, 40, "GENE")])
        assert aggregator.totals() == {"1": {"GENE": (0, 40)}}

    def test_str_markers(self):
        """Test a Y-STR comparison end to end."""
        father = "TAGA" * 10 + "CCCC"
        son = "TAGA" * 9 + "GGGGGGGG"
        assembler = FakeAssembler({"first": {"Y": father}, "second": {"Y": son}})
        panel = [MarkerInterval("Y", 0, 44, marker_name="DYS19", repeat_motif="TAGA")]

        aggregator = ComparisonPipeline(assembler, config(mode=ComparatorType.Y_STR)).run(panel)
        assert isinstance(aggregator, MotifAggregator)
        assert aggregator.totals() == {"DYS19": (10, 9)}
        assert aggregator.analyze().are_father_and_son
