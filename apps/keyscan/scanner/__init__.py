from .router import router
from .service import ScanContractError, exit_code, scan, scan_unit

__all__ = ["router", "scan", "scan_unit", "exit_code", "ScanContractError"]
