"""
Execution bounded context: quote, allowance, broadcast, confirmation and ledger hand-off.
"""
