import os
import logging
from gunicorn.app.base import BaseApplication
from src.utils.logger import setup_logging
from config import config

logger = logging.getLogger(__name__)


class FlaskApplication(BaseApplication):
    def __init__(self, app, options=None):
        self.options = options or {}
        self.application = app
        super().__init__()

    def load_config(self):
        for key, value in self.options.items():
            self.cfg.set(key, value)

    def load(self):
        return self.application


def run_web_server():
    """Production web server runner using Gunicorn"""
    setup_logging(config.LOG_LEVEL, config.LOG_FILE)
    try:
        from app import create_app
        app = create_app()
        port = int(os.environ.get('PORT', config.PORT))
        logger.info(f"Starting web server on port {port}")

        options = {
            'bind': f'0.0.0.0:{port}',
            'workers': config.WEB_WORKERS,
            'worker_class': 'gthread',
            'threads': 4,
            'timeout': 60
        }
        FlaskApplication(app, options).run()

    except Exception as e:
        logger.critical(f"Web server failed: {e}")
        raise RuntimeError("Web server startup failed") from e


if __name__ == '__main__':
    run_web_server()
