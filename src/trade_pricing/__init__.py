"""
Trade Pricing Package

Order pricing for the print-finishing tools back-office.
Resolves unit prices using Custom → Distributor Standard → Base pipeline,
estimates shipping and applies UK VAT treatment (domestic, EU reverse charge, export).
"""

__version__ = "1.0.0"
