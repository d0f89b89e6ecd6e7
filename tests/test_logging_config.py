import logging

from tilemeta.logging_config import configure_logging


def test_configure_logging_replaces_handlers():
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        configure_logging(logging.DEBUG)
        configure_logging(logging.DEBUG)
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])


def test_configure_logging_accepts_level_names():
    import io

    root = logging.getLogger()
    saved = list(root.handlers), root.level
    buf = io.StringIO()
    try:
        configure_logging("warning", stream=buf)
        assert root.level == logging.WARNING
        logging.getLogger("tilemeta.test").warning("hello %s", "tiles")
        assert "tilemeta.test: hello tiles" in buf.getvalue()
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
