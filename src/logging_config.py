import logging
from src.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

def setup_logging(level: str = None):
    """Configure the root logger for the application"""
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT
    )
    # SQL echo is controlled separately from application logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
