"""Tests for bio_relatives.utils modules."""

import pytest
from bio_relatives.utils.sequence import (
    UNKNOWN_BASE,
    alternate_chromosome_name,
    chromosome_class,
    complement_base,
    is_unknown,
    is_valid_label,
)


class TestComplement:
    """Test strand complement helpers."""

    @pytest.mark.parametrize("base,expected", [
        ("A", "T"), ("T", "A"), ("G", "C"), ("C", "G"),
        ("a", "t"), ("g", "c"),
    ])
    def test_complement_base(self, base, expected):
        """Test complement of every nucleotide."""
        assert complement_base(base) == expected

    def test_unknown_base_has_no_complement(self):
        """Test that the unknown base has no complement."""
        assert complement_base(UNKNOWN_BASE) is None
        assert complement_base("N") is None

    def test_is_unknown(self):
        """Test unknown base detection."""
        assert is_unknown("*")
        assert not is_unknown("A")


class TestLabels:
    """Test gene and marker label validation."""

    @pytest.mark.parametrize("label", ["BRCA1", "DYS19", "HLA-A", "gene_1.2", "A+B", ""])
    def test_valid_labels(self, label):
        """Test accepted label characters."""
        assert is_valid_label(label)

    @pytest.mark.parametrize("label", ["BR CA1", "gene/1", "gene;drop", "BRCA1\n", "BRCA1\r\n"])
    def test_invalid_labels(self, label):
        """Test rejected label characters."""
        assert not is_valid_label(label)


class TestChromosomeNames:
    """Test chromosome naming conventions."""

    @pytest.mark.parametrize("name,expected", [
        ("1", "chr1"), ("chr1", "1"),
        ("22", "chr22"), ("X", "chrX"),
        ("chrY", "Y"), ("MT", "chrMT"), ("chrMT", "MT"),
    ])
    def test_alternate_name(self, name, expected):
        """Test switching between bare and chr-prefixed names."""
        assert alternate_chromosome_name(name) == expected

    def test_unknown_names_unchanged(self):
        """Test that scaffolds keep their name."""
        assert alternate_chromosome_name("GL000220.1") == "GL000220.1"
        assert alternate_chromosome_name("23") == "23"

    @pytest.mark.parametrize("name,expected", [
        ("MT", "mitochondrial"), ("chrM", "mitochondrial"), ("M", "mitochondrial"),
        ("X", "x"), ("chrX", "x"),
        ("1", "autosomal"), ("chr7", "autosomal"), ("Y", "autosomal"),
    ])
    def test_chromosome_class(self, name, expected):
        """Test chromosome classification for tiered thresholds."""
        assert chromosome_class(name) == expected
