# Rev 0.3.0

# tasktree – logging setup (Rev 0.3.0)
from __future__ import annotations
import logging, os, sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .paths import APP_NAME, LOGS_DIR

from PySide6.QtCore import qInstallMessageHandler, QtMsgType


# Pipe Qt messages (signal/slot warnings) into Python logging
def _qt_handler(msg_type, context, message):
    lvl = {
        QtMsgType.QtDebugMsg: logging.DEBUG,
        QtMsgType.QtInfoMsg: logging.INFO,
        QtMsgType.QtWarningMsg: logging.WARNING,
        QtMsgType.QtCriticalMsg: logging.ERROR,
        QtMsgType.QtFatalMsg: logging.CRITICAL,
    }.get(msg_type, logging.INFO)
    logging.getLogger("qt").log(lvl, message)


_HANDLER_TAG = "_tasktree_handler"

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{APP_NAME}.{name}")


def _resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    level_name = (level or os.environ.get("TASKTREE_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, level_name, logging.INFO)


def setup_logging(
    app_name: str = APP_NAME,
    *,
    log_dir: Path | None = None,
    level: str | int | None = None,
    max_bytes: int = 5_000_000,
    backup_count: int = 7,
) -> Path:
    lvl = _resolve_level(level)

    log_dir = Path(log_dir) if log_dir is not None else LOGS_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / f"{app_name}.log"

    root = logging.getLogger()
    root.setLevel(lvl)

    # Re-running replaces our own handlers only
    for h in list(root.handlers):
        if getattr(h, _HANDLER_TAG, False):
            root.removeHandler(h)
            h.close()

    fh = RotatingFileHandler(logfile, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    fh.setFormatter(logging.Formatter(FORMAT, DATEFMT))
    fh.setLevel(lvl)
    setattr(fh, _HANDLER_TAG, True)
    root.addHandler(fh)

    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(logging.Formatter(FORMAT, DATEFMT))
    ch.setLevel(lvl)
    setattr(ch, _HANDLER_TAG, True)
    root.addHandler(ch)

    # Uncaught exceptions → log as ERROR
    def _excepthook(exctype, value, tb):
        logging.getLogger("unhandled").error("Uncaught exception", exc_info=(exctype, value, tb))
        sys.__excepthook__(exctype, value, tb)
    sys.excepthook = _excepthook

    qInstallMessageHandler(_qt_handler)

    logging.getLogger(__name__).info(
        "Logging initialized at %s; file: %s", logging.getLevelName(lvl), logfile
    )
    return logfile
