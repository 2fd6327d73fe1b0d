"""Drive Index - A tool for cataloguing the files on every volume of a host."""

__version__ = "0.1.0"

from driveindex.database import Database, FileStore
from driveindex.scanner import ScanOrchestrator, Scanner

__all__ = ["Database", "FileStore", "Scanner", "ScanOrchestrator"]
