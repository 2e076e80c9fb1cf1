"""Data subpackage - read-only pricing lookups."""
from .store import PricingStore, InMemoryPricingStore, CsvPricingStore

__all__ = ['PricingStore', 'InMemoryPricingStore', 'CsvPricingStore']
