"""
Personal Finance Tracker

Records income and expense transactions in a local SQLite database and
keeps balances and a searchable transaction list up to date reactively.
"""

__version__ = "1.0.0"
