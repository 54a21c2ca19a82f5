"""
Sales app for the salon ledger.
"""
