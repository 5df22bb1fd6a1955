"""Tests for the command line interface."""

import json

from click.testing import CliRunner

from variant_insight.cli.main import cli


VCF = (
    "##fileformat=VCFv4.2\n"
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tSAMPLE\n"
    "13\t32340301\trs111033441\tT\t.\t50\tPASS\t.\tGT\t0/0\n"
    "17\t7675088\trs28929474\tC\tT\t50\tPASS\t.\tGT\t0/1\n"
)


def write_vcf(tmp_path):
    path = tmp_path / "sample.vcf"
    path.write_text(VCF)
    return path


def test_info():
    result = CliRunner().invoke(cli, ["--config", "config/default.yaml", "info"])

    assert result.exit_code == 0
    assert "Variant Insight v" in result.output
    assert "Config Hash:" in result.output
    assert "https://myvariant.info/v1" in result.output


def test_parse_command(tmp_path):
    result = CliRunner().invoke(cli, ["parse", str(write_vcf(tmp_path))])

    assert result.exit_code == 0
    assert "Format: VCF" in result.output
    assert "Variants: 1" in result.output
    assert "rs28929474" in result.output
    assert "HETEROZYGOUS" in result.output
    assert "rs111033441" not in result.output


def test_analyze_offline(tmp_path):
    """Test an offline analysis end to end, including written outputs."""
    out_dir = tmp_path / "results"

    result = CliRunner().invoke(
        cli,
        ["analyze", str(write_vcf(tmp_path)), "--offline", "--output-dir", str(out_dir)],
    )

    assert result.exit_code == 0, result.output
    assert "[OFFLINE_FALLBACK]" in result.output
    assert "Mode: OFFLINE_FALLBACK" in result.output
    with open(out_dir / "analysis.json") as f:
        data = json.load(f)
    assert data["mode"] == "OFFLINE_FALLBACK"
    assert (out_dir / "analysis.provenance.yaml").exists()


def test_analyze_without_api_key_falls_back(tmp_path, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    result = CliRunner().invoke(
        cli,
        ["analyze", str(write_vcf(tmp_path)), "--output-dir", str(tmp_path / "out")],
    )

    assert result.exit_code == 0, result.output
    assert "No usable API key" in result.output
    assert "Mode: OFFLINE_FALLBACK" in result.output


def test_analyze_missing_input():
    result = CliRunner().invoke(cli, ["analyze", "does-not-exist.vcf"])

    assert result.exit_code != 0
