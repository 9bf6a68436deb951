"""
Campaign Kernel

Budget allocation and reconciliation core for marketing operations:
- Team allocation validation against budget lines
- Budget vs. result reconciliation per period and platform
- KPI achievement reporting
- Campaign-level rollups with exact decimal arithmetic
"""

__version__ = "0.1.0"
