"""Business services"""

from .points_ledger import PointsLedger
from .redemption import RedemptionService, CodeStyle
from .bin_scan import BinScanService, ScanResult
from .recycling import RecyclingService
from .email import EmailService
from .storage import StorageService

__all__ = [
    "PointsLedger",
    "RedemptionService",
    "CodeStyle",
    "BinScanService",
    "ScanResult",
    "RecyclingService",
    "EmailService",
    "StorageService",
]
