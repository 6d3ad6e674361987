from .worldbank import WorldBankProvider, reduce_indicator_records

__all__ = ["WorldBankProvider", "reduce_indicator_records"]
