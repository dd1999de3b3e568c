from .catalog import Product
from .roster import Agent
from .cases import Case, CaseLineItem
from .commissions import ManualCommission
from .audit import LogEntry

__all__ = [
    'Product',
    'Agent',
    'Case', 'CaseLineItem',
    'ManualCommission',
    'LogEntry',
]
