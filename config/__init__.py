from config.settings import settings

LOG_LEVEL = settings.logging.level
