"""
CRM Finance Core

Pure pricing and analytics kernel for a services CRM:
- Quote line and global discounting, tax application, sequential numbering
- Project revenue/expense aggregation and budget allocation
- Time-windowed scheduling queries over payments, meetings and milestones
- Decimal-only money with explicit, display-time rounding
"""

__version__ = "0.1.0"
