import logging
import os
from logging.handlers import RotatingFileHandler

FORMATO = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def setup_logging(app):
    """Configura o logger raiz com arquivo rotativo (logs/app.log) e console."""
    log_dir = app.config.get('LOG_DIR')
    nivel = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    formatter = logging.Formatter(FORMATO)

    logger = logging.getLogger()
    logger.setLevel(nivel)

    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    # Em testes não gravamos arquivo
    if app.config.get('TESTING') or not log_dir:
        return

    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'app.log')

    # Evita handlers duplicados quando create_app é chamado mais de uma vez
    if not any(isinstance(h, RotatingFileHandler) and getattr(h, 'baseFilename', '') == log_file
               for h in logger.handlers):
        handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3, encoding='utf-8')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logging.getLogger('werkzeug').addHandler(handler)
