"""
main.py
Entry point for folderplay
"""

import sys

from PySide6.QtWidgets import QApplication

from audio_engine import PygameEngine
from config import load_config
from logging_config import setup_logging, get_logger, ConfigurationError
from ui import PlayerWindow


def main():
    """Load settings, create the engine and window, run the event loop"""
    try:
        config = load_config()
    except ConfigurationError as e:
        setup_logging()
        get_logger('main').error(str(e))
        return 1

    setup_logging(config.log_level, config.log_file)
    logger = get_logger('main')

    app = QApplication(sys.argv)

    # Create the audio engine and hand it to the window
    engine = PygameEngine()
    window = PlayerWindow(engine, config)
    window.show()

    logger.info("folderplay started")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
