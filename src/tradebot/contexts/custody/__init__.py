"""
Custody bounded context: per-user wallets with encrypted private keys at rest.
"""
