"""Desktop entry point."""

from __future__ import annotations

import sys

from PySide6.QtWidgets import QApplication

from formfill.config import get_settings
from formfill.logging_setup import setup_logging
from formfill.ui.main_window import MainWindow


def main() -> int:
    settings = get_settings()
    setup_logging(settings.log_level, settings.json_logs)

    app = QApplication(sys.argv)
    window = MainWindow(settings)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
