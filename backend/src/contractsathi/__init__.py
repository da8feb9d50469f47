"""ContractSathi - bilingual contract risk review."""

__version__ = "0.1.0"
