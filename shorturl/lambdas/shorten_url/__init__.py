from shorturl.utils import initialize_logging


initialize_logging()
