import logging

from config import LOG_LEVEL

levelMapping = logging.getLevelNamesMapping()

handler = logging.StreamHandler()
formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
handler.setFormatter(formatter)

logger = logging.getLogger("forum-schema")
logger.addHandler(handler)
logger.setLevel(levelMapping.get(LOG_LEVEL.upper(), logging.INFO))
