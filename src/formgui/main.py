"""
Main entry point for the record form application.
"""

from __future__ import annotations

import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication, QMessageBox

from formcore.config_manager import ConfigManager
from formcore.error_handler import init_logging, setup_error_handling
from formcore.errors import ConfigError
from formcore.fields import load_schema
from formgui.main_window import MainWindow

logger = logging.getLogger(__name__)

_active_window: MainWindow | None = None


def start_edit(record_id: str) -> None:
    """
    Load ``record_id`` into the active form for editing.

    Entry point for callers outside the form, such as a row action in a
    record list.
    """
    if _active_window is None:
        raise RuntimeError("No record form window is open")
    _active_window.start_edit(record_id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create and edit records through a validated form")
    parser.add_argument("--schema", help="Path to the JSON form schema (overrides the stored setting)")
    parser.add_argument("--base-url", help="Base URL of the record server (overrides the stored setting)")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    global _active_window

    app = QApplication.instance() or QApplication(sys.argv)
    args = build_parser().parse_args(argv if argv is not None else sys.argv[1:])

    config_manager = ConfigManager(overrides={"base_url": args.base_url})
    init_logging(config_manager.get("log_level"))
    error_handler = setup_error_handling()

    try:
        schema_path = args.schema or config_manager.get("schema_path")
        if not schema_path:
            QMessageBox.critical(None, "No Form Schema", "Start the application with --schema PATH.")
            return 2

        try:
            schema = load_schema(schema_path)
            form_config = config_manager.form_config()
        except ConfigError as e:
            error_handler.handle(e)
            QMessageBox.critical(None, "Configuration Error", error_handler.to_user_message(e))
            return 1
        config_manager.set("schema_path", str(schema_path))

        window = MainWindow(schema, form_config)
        _active_window = window
        window.show()
        logger.info(f"Record form for '{schema.table_name}' ready")
        return app.exec()
    finally:
        _active_window = None
        error_handler.restore_hooks()


if __name__ == "__main__":
    raise SystemExit(main())
