"""Tests for identifier extraction from free text."""

import asyncio

from variant_insight.parsing import (
    LLMIdentifierExtractor,
    RegexIdentifierExtractor,
    extract_gene_symbols,
    extract_rsids,
    is_valid_identifier,
)

from fakes import FakeProvider


def test_is_valid_identifier():
    assert is_valid_identifier("rs12345")
    assert not is_valid_identifier("notarsid")
    assert not is_valid_identifier("")
    assert not is_valid_identifier(None)


def test_extract_rsids_dedupes_in_order():
    """Test rsID extraction keeps first-occurrence order."""
    text = "Found rs28929474, rs762551 and again rs28929474; also RS999 (not matched)"

    assert extract_rsids(text) == ["rs28929474", "rs762551"]


def test_extract_gene_symbols_watchlist_only():
    """Test that only watchlist genes are reported as gene symbols."""
    text = "BRCA2 carrier, CYP2D6 poor metabolizer, DNA sample from USA, HLA-B typed"

    assert extract_gene_symbols(text) == ["BRCA2", "CYP2D6", "HLA-B"]


def test_regex_extractor():
    extracted = asyncio.run(RegexIdentifierExtractor().extract("TP53 rs28929474"))

    assert extracted.rsids == ["rs28929474"]
    assert extracted.gene_symbols == ["TP53"]
    assert extracted


def test_regex_extractor_empty_text():
    extracted = asyncio.run(RegexIdentifierExtractor().extract("nothing here"))

    assert not extracted


def test_llm_extractor_validates_output():
    """Test that model output is filtered to well-formed identifiers."""
    provider = FakeProvider([
        '```json\n{"rsids": ["rs1", "bogus", "rs1", "rs22"], "geneSymbols": ["brca1", ""]}\n```'
    ])
    extractor = LLMIdentifierExtractor(provider)

    extracted = asyncio.run(extractor.extract("free text"))

    assert extracted.rsids == ["rs1", "rs22"]
    assert extracted.gene_symbols == ["BRCA1"]


def test_llm_extractor_falls_back_to_regex():
    """Test that provider failures fall back to the regex extractor."""
    provider = FakeProvider([RuntimeError("model unavailable")])
    extractor = LLMIdentifierExtractor(provider)

    extracted = asyncio.run(extractor.extract("rs762551 in CYP1A2"))

    assert extracted.rsids == ["rs762551"]


def test_llm_extractor_truncates_input():
    provider = FakeProvider(['{"rsids": [], "geneSymbols": []}'])
    extractor = LLMIdentifierExtractor(provider, max_chars=10)

    asyncio.run(extractor.extract("x" * 100))

    assert provider.prompts == ["x" * 10]
