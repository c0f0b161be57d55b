from .aggregator import (
    ClientRecoveryReport,
    ClientRecoveryRow,
    DailySalesDetailsReport,
    ReportAggregator,
    SupplierAdvanceRow,
    SupplierAdvances,
    build_client_recovery,
    build_daily_net_summary,
    build_register,
    build_stock_report,
    group_vendor_sales,
)

__all__ = [
    "ClientRecoveryReport",
    "ClientRecoveryRow",
    "DailySalesDetailsReport",
    "ReportAggregator",
    "SupplierAdvanceRow",
    "SupplierAdvances",
    "build_client_recovery",
    "build_daily_net_summary",
    "build_register",
    "build_stock_report",
    "group_vendor_sales",
]
