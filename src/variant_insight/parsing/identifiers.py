"""Identifier extraction from unstructured or semi-structured text.

Used when the format parser finds no VCF or 23andMe structure, e.g. for
pasted rsID lists or clinical notes. The default extractor is a regular
expression scan; an LLM-backed extractor can be plugged in and falls back
to the regex scan whenever the model call fails.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import structlog

from variant_insight.ai.json_repair import parse_model_json
from variant_insight.ai.provider import SummarizationProvider
from variant_insight.knowledge.watchlists import WATCHLIST_GENES
from variant_insight.parsing.models import RSID_PREFIX

logger = structlog.get_logger()

RSID_PATTERN = re.compile(r"rs\d+")
# Gene-symbol shaped tokens (uppercase letters/digits, optional hyphen part)
_GENE_TOKEN = re.compile(r"\b[A-Z][A-Z0-9]{1,9}(?:-[A-Z0-9]{1,6})?\b")


def is_valid_identifier(identifier: str | None) -> bool:
    """Return True for non-empty identifiers carrying the rsID prefix."""
    return bool(identifier) and identifier.startswith(RSID_PREFIX)


def unique_in_order(values) -> list[str]:
    """De-duplicate while keeping the order of first occurrence."""
    return list(dict.fromkeys(values))


def extract_rsids(text: str) -> list[str]:
    """Find all rsIDs in text, de-duplicated in order of first occurrence."""
    return unique_in_order(RSID_PATTERN.findall(text))


def extract_gene_symbols(text: str) -> list[str]:
    """Find watchlist gene symbols mentioned in text, in order of first occurrence."""
    return unique_in_order(
        token for token in _GENE_TOKEN.findall(text) if token in WATCHLIST_GENES
    )


@dataclass
class ExtractedIdentifiers:
    """Identifiers found in free text."""

    rsids: list[str] = field(default_factory=list)
    gene_symbols: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.rsids or self.gene_symbols)


class IdentifierExtractor(ABC):
    """Pluggable identifier extraction capability."""

    @abstractmethod
    async def extract(self, text: str) -> ExtractedIdentifiers:
        """Extract rsIDs and gene symbols from text."""


class RegexIdentifierExtractor(IdentifierExtractor):
    """Extract identifiers with pattern matching only."""

    async def extract(self, text: str) -> ExtractedIdentifiers:
        return ExtractedIdentifiers(
            rsids=extract_rsids(text),
            gene_symbols=extract_gene_symbols(text),
        )


EXTRACTION_INSTRUCTION = """
ROLE: Clinical genomics data curator.
TASK: List every dbSNP rsID and every HGNC gene symbol mentioned in the text.
OUTPUT: JSON object {"rsids": [...], "geneSymbols": [...]} and nothing else.
"""


class LLMIdentifierExtractor(IdentifierExtractor):
    """Extract identifiers with a generative model.

    Model output is validated: rsIDs must carry the rsID prefix and gene
    symbols are upper-cased. Any provider or parse failure falls back to
    the regex extractor so extraction itself never fails.
    """

    def __init__(self, provider: SummarizationProvider, max_chars: int = 30000):
        self.provider = provider
        self.max_chars = max_chars
        self._fallback = RegexIdentifierExtractor()

    async def extract(self, text: str) -> ExtractedIdentifiers:
        try:
            raw = await self.provider.generate(
                text[:self.max_chars],
                system_instruction=EXTRACTION_INSTRUCTION,
            )
            data = parse_model_json(raw)
        except Exception as e:
            logger.warning("llm_extraction_failed", error=repr(e), fallback="regex")
            return await self._fallback.extract(text)

        if not isinstance(data, dict):
            logger.warning("llm_extraction_unexpected_shape", fallback="regex")
            return await self._fallback.extract(text)

        rsids = [str(v).strip() for v in data.get("rsids") or []]
        genes = [str(v).strip().upper() for v in data.get("geneSymbols") or []]
        return ExtractedIdentifiers(
            rsids=unique_in_order(r for r in rsids if RSID_PATTERN.fullmatch(r)),
            gene_symbols=unique_in_order(g for g in genes if g),
        )
