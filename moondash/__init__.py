import logging

from moondash.config import config

logging.basicConfig(
    format='%(asctime)s [%(name)s] %(levelname)s: %(message)s',
    level=logging.INFO,
)
if config.debug:
    logging.getLogger('moondash.runner').setLevel(logging.DEBUG)
    logging.getLogger('moondash.utils').setLevel(logging.DEBUG)
