from review_scanner.models import Finding
from review_scanner.scanners import Analyzer, analyze

__version__ = "0.1.0"

__all__ = ["Analyzer", "Finding", "analyze", "__version__"]
