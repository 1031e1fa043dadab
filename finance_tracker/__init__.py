"""
Finance Tracker - Source Package

A personal finance tracker: record income, expense and investment
transactions, attach expenses to budgets, and watch totals and budget
utilization.

DESIGN PRINCIPLES:
1. One store owns all ledger state
2. Budget totals always match their linked expenses
3. Mutations apply fully or not at all
4. Storage is an external, swappable collaborator
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
