from .account_ledger import AccountLedger, RunningBalanceRow, running_balances

__all__ = [
    "AccountLedger",
    "RunningBalanceRow",
    "running_balances",
]
