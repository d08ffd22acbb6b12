"""Tests for bio_relatives.runner module."""

import pytest
from bio_relatives.config import ComparatorType, ComparisonConfig, TieredByChromosomeClass
from bio_relatives.core.models import GenomicInterval, MarkerInterval
from bio_relatives.exceptions import ConfigurationError
from bio_relatives.runner import compare_trio, compare_two, run_trio, run_two
from conftest import GENOME_1, FakeAssembler, tile_reads

MUTATED = GENOME_1[:50] + GENOME_1[50:][::-1]

PANEL = [
    GenomicInterval("1", 0, 60, "BRCA1"),
    GenomicInterval("MT", 0, 40, "ND1"),
]


def family():
    return FakeAssembler({
        "father": {"1": MUTATED, "MT": MUTATED},
        "mother": {"1": GENOME_1, "MT": GENOME_1},
        "child": {"1": GENOME_1, "MT": GENOME_1},
    })


class TestCompareTwo:
    """Test two-person comparison."""

    def test_related(self):
        """Test that identical persons are reported as parent and child."""
        result = run_two("mother", "child", PANEL, ComparisonConfig(cpu_count=2), family())
        assert result.analysis.are_parent_and_child
        assert "These persons are parent and child." in result.report

    def test_unrelated(self):
        """Test that a differing person is not parent and child."""
        result = run_two("father", "child", PANEL, ComparisonConfig(cpu_count=2), family())
        assert not result.analysis.are_parent_and_child
        assert "These persons are not parent and child." in result.report

    def test_text_report(self):
        """Test that compare_two returns the report text."""
        report = compare_two("mother", "child", PANEL, ComparisonConfig(cpu_count=2), family())
        assert report.startswith("Similarity percentage for each chromosome:")
        assert report.rstrip().endswith("These persons are parent and child.")

    def test_tsv_export(self, tmp_path):
        """Test writing the similarity table."""
        tsv = tmp_path / "similarity.tsv"
        run_two("mother", "child", PANEL, ComparisonConfig(cpu_count=2), family(), tsv_path=tsv)
        assert tsv.exists()
        assert tsv.read_text().splitlines()[0].startswith("chromosome\tsimilarity")

    def test_panel_file(self, tmp_path):
        """Test loading the panel from a file."""
        panel = tmp_path / "panel.bed"
        panel.write_text("1 0 60 BRCA1\n")
        result = run_two("mother", "child", panel, ComparisonConfig(cpu_count=2), family())
        assert [c.chromosome for c in result.analysis.chromosomes] == ["1"]

    def test_bam_files(self, bam_factory, tmp_path):
        """Test the default BAM-backed assembler."""
        first = bam_factory("first", {"1": 200}, tile_reads("1", GENOME_1))
        second = bam_factory("second", {"1": 200}, tile_reads("1", GENOME_1))
        panel = [GenomicInterval("1", 0, 100, "GENE")]
        result = run_two(first, second, panel, ComparisonConfig(threads=2, cpu_count=2))
        assert result.analysis.get("1").similarity == 100.0
        assert result.analysis.are_parent_and_child


class TestCompareTrio:
    """Test trio comparison."""

    def test_provenance(self):
        """Test that chromosomes are attributed to the closer parent."""
        result = run_trio("father", "mother", "child", PANEL,
                          ComparisonConfig(cpu_count=2), family())
        assert result.provenance.from_mother == ["1", "MT"]
        assert result.provenance.from_father == []
        assert not result.father.are_parent_and_child
        assert result.mother.are_parent_and_child
        assert "Comparison of father and child genomes:" in result.report
        assert "apparently inherited from mother: 2" in result.report

    def test_tiered_policy(self):
        """Test that the configured threshold policy is applied."""
        config = ComparisonConfig(threshold_policy=TieredByChromosomeClass(), cpu_count=2)
        result = run_trio("father", "mother", "child", PANEL, config, family())
        assert result.mother.get("MT").threshold == 98.0

    def test_text_report(self):
        """Test that compare_trio returns the report text."""
        report = compare_trio("father", "mother", "child", PANEL,
                              ComparisonConfig(cpu_count=2), family())
        assert report.startswith("Comparison of father and child genomes:")

    def test_y_str_rejected(self):
        """Test that Y-STR mode is not available for trios."""
        with pytest.raises(ConfigurationError):
            compare_trio("father", "mother", "child", PANEL,
                         ComparisonConfig(mode=ComparatorType.Y_STR), family())

    def test_x_str_without_provenance(self):
        """Test that STR trios report no provenance."""
        x = "CTT" * 10
        assembler = FakeAssembler({
            "father": {"X": x}, "mother": {"X": x}, "child": {"X": x},
        })
        panel = [MarkerInterval("X", 0, 30, marker_name="DXS101", repeat_motif="CTT")]
        result = run_trio("father", "mother", "child", panel,
                          ComparisonConfig(mode=ComparatorType.X_STR, cpu_count=2), assembler)
        assert result.provenance is None
        assert result.father.are_father_and_son
        assert "apparently inherited" not in result.report

    def test_child_is_first_person(self):
        """Test that the child's marker counts are reported as the first person's."""
        assembler = FakeAssembler({
            "father": {"X": "CTT" * 4 + "AAA" * 6},
            "mother": {"X": "CTT" * 10},
            "child": {"X": "CTT" * 10},
        })
        panel = [MarkerInterval("X", 0, 30, marker_name="DXS101", repeat_motif="CTT")]
        result = run_trio("father", "mother", "child", panel,
                          ComparisonConfig(mode=ComparatorType.X_STR, cpu_count=2), assembler)
        marker = result.father.markers[0]
        assert marker.first_count > marker.second_count
        assert result.mother.markers[0].first_count == marker.first_count
