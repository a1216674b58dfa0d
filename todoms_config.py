"""
Todoms MCP Server - configuration and logging setup.
"""

import logging
import os
import sys
import time
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configuration from environment variables
TODOMS_API_URL = os.getenv('TODOMS_API_URL', 'http://localhost:8080')
LOG_DIR = os.getenv('LOG_DIR', '/tmp/todoms_mcp_logs')
LOG_RETENTION_DAYS = int(os.getenv('LOG_RETENTION_DAYS', '30'))
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

# Optional login at startup
TODOMS_EMAIL = os.getenv('TODOMS_EMAIL')
TODOMS_PASSWORD = os.getenv('TODOMS_PASSWORD')

# HTTP configuration
HTTP_TIMEOUT = float(os.getenv('TODOMS_HTTP_TIMEOUT', '30.0'))  # seconds

# Response limits
CHARACTER_LIMIT = 25000  # Max characters in a single text content item

SERVER_NAME = "todoms"
SERVER_VERSION = "1.0.0"


def cleanup_old_logs(log_dir, days_old=30):
    """Remove log files older than specified days. If days_old=0, delete all logs."""
    try:
        log_path = Path(log_dir)
        if not log_path.exists():
            return 0

        deleted_count = 0

        if days_old == 0:
            for log_file in log_path.glob("*.log"):
                log_file.unlink()
                deleted_count += 1
        else:
            cutoff_time = time.time() - (days_old * 24 * 60 * 60)

            for log_file in log_path.glob("*.log"):
                if log_file.stat().st_mtime < cutoff_time:
                    log_file.unlink()
                    deleted_count += 1

        if deleted_count > 0:
            # stdout belongs to the MCP protocol
            print(f"Cleaned up {deleted_count} old log files from {log_dir}", file=sys.stderr)
        return deleted_count
    except OSError as e:
        print(f"Log cleanup failed: {e}", file=sys.stderr)
        return 0


def setup_logging(log_dir: str = LOG_DIR, retention_days: int = LOG_RETENTION_DAYS, level: str = LOG_LEVEL) -> str:
    """Configure file + stderr logging and return the path of the new log file."""
    os.makedirs(log_dir, exist_ok=True)

    cleanup_old_logs(log_dir, days_old=retention_days)

    log_file = os.path.join(log_dir, f"mcp_server_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log")

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stderr)
        ]
    )
    return log_file
