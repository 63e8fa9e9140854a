"""
tradebot — custodial swap execution service.
"""
