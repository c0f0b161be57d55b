"""
fish_ledger: stock and account reconciliation for a fish-trading distributor.

Import the pieces you need from the subpackages:

    from fish_ledger.database import get_connection
    from fish_ledger.modules.reconciliation import ReconciliationCoordinator
    from fish_ledger.modules.reporting import ReportAggregator
"""

__version__ = "1.0.0"
