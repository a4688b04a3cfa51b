"""FitCoach weekly plan engine."""

from fitcoach.config.settings import settings
from fitcoach.core.logger import setup_logger

setup_logger(level=settings.log_level, log_file=settings.log_file)
