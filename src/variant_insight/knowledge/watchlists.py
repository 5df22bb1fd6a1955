"""Reference gene lists used for high-impact variant prioritisation."""

# ACMG SF v3.2 secondary findings genes (medically actionable)
ACMG_73 = (
    "BRCA1", "BRCA2", "TP53", "APC", "ATM", "BARD1", "BMPR1A", "BRIP1", "CDH1", "CDK4", "CDKN2A",
    "CHEK2", "EPCAM", "GREM1", "MLH1", "MSH2", "MSH6", "MUTYH", "NBN", "PALB2", "PMS2", "POLD1",
    "POLE", "PTEN", "RAD51C", "RAD51D", "SMAD4", "STK11", "ACTA2", "ACTC1", "ACVRL1", "BAG3",
    "DES", "DSC2", "DSG2", "DSP", "ENG", "FBN1", "FLNC", "GLA", "KCNH2", "KCNQ1", "LAMP2",
    "LDLR", "LMNA", "MYBPC3", "MYH7", "MYH11", "MYL2", "MYL3", "PCSK9", "PKP2", "PRKAG2",
    "RBM20", "RYR2", "SCN5A", "SMAD3", "TGFBR1", "TGFBR2", "TNNC1", "TNNI3", "TNNT2", "TPM1",
    "TRDN", "TTN", "TTR", "APOB", "CACNA1S", "COL3A1", "F8", "F9", "GAA", "HFE", "HNF1A",
    "MEN1", "NF1", "NF2", "OTC", "RB1", "RET", "RPE65", "RYR1", "SDHAF2", "SDHB", "SDHC",
    "SDHD", "TSC1", "TSC2", "VHL", "WT1",
)

# CPIC level A/B pharmacogenes (genes with prescribing guidelines)
CPIC_PRIORITY = (
    "CYP2D6", "CYP2C19", "CYP2C9", "CYP3A4", "CYP3A5", "CYP4F2", "CYP2B6",
    "SLCO1B1", "VKORC1", "TPMT", "NUDT15", "DPYD", "G6PD", "HLA-B", "HLA-A",
    "IFNL3", "RYR1", "CACNA1S", "MT-RNR1", "UGT1A1",
)

ACMG_GENES = frozenset(ACMG_73)
CPIC_GENES = frozenset(CPIC_PRIORITY)
WATCHLIST_GENES = ACMG_GENES | CPIC_GENES


def is_acmg_gene(gene_symbol: str | None) -> bool:
    return bool(gene_symbol) and gene_symbol.upper() in ACMG_GENES


def is_cpic_gene(gene_symbol: str | None) -> bool:
    return bool(gene_symbol) and gene_symbol.upper() in CPIC_GENES
