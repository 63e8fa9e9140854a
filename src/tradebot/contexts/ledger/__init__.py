"""
Ledger bounded context: append-only trade records and derived holdings.
"""
