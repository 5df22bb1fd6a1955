"""Tests for VCF and 23andMe parsing."""

import pytest

from variant_insight.parsing import (
    InputFormat,
    ParsedVariant,
    Zygosity,
    classify_genotype,
    detect_format,
    parse_23andme,
    parse_genomic_input,
    parse_vcf,
    parse_zygosity_override,
)


VCF_HEADER = (
    "##fileformat=VCFv4.2\n"
    "##source=test\n"
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tSAMPLE\n"
)


@pytest.fixture
def mixed_vcf() -> str:
    """VCF covering every genotype class plus malformed and non-rs lines."""
    return VCF_HEADER + "\n".join([
        "13\t32340301\trs111033441\tT\t.\t50\tPASS\t.\tGT\t0/0",
        "17\t7675088\trs28929474\tC\tT\t50\tPASS\t.\tGT:DP\t0/1:30",
        "7\t140753336\trs113488022\tA\tT\t50\tPASS\t.\tGT\t1|1",
        "1\t1000\t.\tG\tA\t50\tPASS\t.\tGT\t0/1",
        "1\t2000\trs5\tG\tA\t50\tPASS\t.\tGT\t./.",
        "1\t3000\trs6\tG\tA",
        "1\t4000\trs7\tG\tA,C\t50\tPASS\t.\tGT\t1/2",
        "1\t5000\trs8\tG\tA\t50\tPASS\t.\tGT\t.",
    ]) + "\n"


def test_detect_format():
    """Test format detection for VCF, 23andMe and free text."""
    assert detect_format(VCF_HEADER) == InputFormat.VCF
    assert detect_format("#CHROM POS ID REF ALT\n") == InputFormat.VCF
    assert detect_format("# rsid\tchromosome\tposition\tgenotype\n") == InputFormat.TWENTY_THREE_AND_ME
    assert detect_format("patient carries rs762551") == InputFormat.UNSTRUCTURED


@pytest.mark.parametrize(
    "genotype,expected",
    [
        ("0/0", None),
        ("0|0", None),
        ("./.", None),
        (".", None),
        ("0/1", Zygosity.HETEROZYGOUS),
        ("1|0", Zygosity.HETEROZYGOUS),
        ("1/1", Zygosity.HOMOZYGOUS),
        ("1|1", Zygosity.HOMOZYGOUS),
        ("1/2", Zygosity.HETEROZYGOUS),
        ("0/2", Zygosity.HETEROZYGOUS),
        ("0/3", Zygosity.UNKNOWN),
    ],
)
def test_classify_genotype(genotype, expected):
    """Test GT value to zygosity mapping."""
    assert classify_genotype(genotype) == expected


def test_wildtype_and_no_call_records_dropped(mixed_vcf):
    """Test that 0/0, ./. and . genotypes never produce a record."""
    identifiers = [v.identifier for v in parse_vcf(mixed_vcf)]

    assert "rs111033441" not in identifiers
    assert "rs5" not in identifiers
    assert "rs8" not in identifiers


def test_vcf_zygosity_and_columns(mixed_vcf):
    """Test zygosity and column population of kept VCF records."""
    variants = {v.identifier: v for v in parse_vcf(mixed_vcf)}

    assert set(variants) == {"rs28929474", "rs113488022", "rs7"}

    het = variants["rs28929474"]
    assert het.zygosity == Zygosity.HETEROZYGOUS
    assert het.chromosome == "17"
    assert het.position == "7675088"
    assert het.reference_allele == "C"
    assert het.alternate_allele == "T"

    assert variants["rs113488022"].zygosity == Zygosity.HOMOZYGOUS
    assert variants["rs7"].zygosity == Zygosity.HETEROZYGOUS


def test_vcf_wildtype_and_het_pair():
    """Test the two-line case: wildtype BRCA2 dropped, TP53 het kept."""
    vcf = VCF_HEADER + (
        "13\t32340301\trs111033441\tT\t.\t50\tPASS\t.\tGT\t0/0\n"
        "17\t7675088\trs28929474\tC\tT\t50\tPASS\t.\tGT\t0/1\n"
    )

    variants = parse_genomic_input(vcf)

    assert len(variants) == 1
    assert variants[0].identifier == "rs28929474"
    assert variants[0].zygosity == Zygosity.HETEROZYGOUS


def test_vcf_gt_not_first_format_field():
    """Test GT lookup when it is not the first FORMAT sub-field."""
    vcf = VCF_HEADER + "1\t100\trs42\tA\tG\t50\tPASS\t.\tDP:GT\t30:1/1\n"

    variants = parse_vcf(vcf)

    assert variants[0].zygosity == Zygosity.HOMOZYGOUS


def test_vcf_without_sample_column_is_unknown():
    """Test that records without FORMAT/sample columns are kept as UNKNOWN."""
    vcf = (
        "##fileformat=VCFv4.2\n"
        "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"
        "1\t100\trs42\tA\tG\t50\tPASS\t.\n"
    )

    variants = parse_vcf(vcf)

    assert len(variants) == 1
    assert variants[0].zygosity == Zygosity.UNKNOWN


def test_vcf_reordered_columns():
    """Test that the header column map tolerates reordered columns."""
    vcf = (
        "#CHROM\tID\tPOS\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tSAMPLE\n"
        "2\trs99\t555\tT\tC\t50\tPASS\t.\tGT\t0|1\n"
    )

    variants = parse_vcf(vcf)

    assert variants == [
        ParsedVariant(
            identifier="rs99",
            chromosome="2",
            position="555",
            reference_allele="T",
            alternate_allele="C",
            zygosity=Zygosity.HETEROZYGOUS,
        )
    ]


def test_vcf_data_before_header_ignored():
    """Test that data lines before the #CHROM header are skipped."""
    vcf = (
        "1\t100\trs1\tA\tG\t50\tPASS\t.\tGT\t0/1\n"
        "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tSAMPLE\n"
        "1\t200\trs2\tA\tG\t50\tPASS\t.\tGT\t0/1\n"
    )

    assert [v.identifier for v in parse_vcf(vcf)] == ["rs2"]


def test_23andme_line():
    """Test a single 23andMe row: identifier kept, alleles empty, zygosity unknown."""
    variants = parse_23andme("rs762551  15  75041917  CC\n")

    assert variants == [
        ParsedVariant(identifier="rs762551", chromosome="15", position="75041917")
    ]
    assert variants[0].zygosity == Zygosity.UNKNOWN
    assert variants[0].reference_allele == ""
    assert variants[0].alternate_allele == ""


def test_23andme_export():
    """Test a 23andMe export with header, no-calls, internal IDs and short lines."""
    export = (
        "# This data file generated by 23andMe\n"
        "# rsid\tchromosome\tposition\tgenotype\n"
        "rs762551\t15\t75041917\tCC\n"
        "rs4244285\t10\t94781859\t--\n"
        "i3000001\t1\t100\tAG\n"
        "rs104894357\t22\n"
        "\n"
        "rs1801133\t1\t11856378\tAG\n"
    )

    variants = parse_genomic_input(export)

    assert [v.identifier for v in variants] == ["rs762551", "rs1801133"]
    assert all(v.zygosity == Zygosity.UNKNOWN for v in variants)


def test_unstructured_input_yields_nothing():
    """Test that free text is left to identifier extraction."""
    assert parse_genomic_input("Patient has rs28929474 and BRCA2 findings") == []


def test_parse_is_idempotent(mixed_vcf):
    """Test that parsing identical input twice yields identical output."""
    assert parse_genomic_input(mixed_vcf) == parse_genomic_input(mixed_vcf)


def test_zygosity_override_header():
    """Test manual zygosity override header parsing."""
    het = "## OVERRIDE_ZYGOSITY_CONTEXT: 0/1 ##\n\nrs28929474"
    hom = "## OVERRIDE_ZYGOSITY_CONTEXT: 1/1 ##\n\nrs28929474"

    assert parse_zygosity_override(het) == Zygosity.HETEROZYGOUS
    assert parse_zygosity_override(hom) == Zygosity.HOMOZYGOUS
    assert parse_zygosity_override("rs28929474") is None
