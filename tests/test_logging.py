import logging

from oer_search.core.logging import build_log_config, configure_logging


def test_console_only_by_default():
    config = build_log_config("DEBUG")

    assert list(config["handlers"]) == ["console"]
    assert config["loggers"]["oer"] == {"level": "DEBUG"}
    assert config["root"]["handlers"] == ["console"]


def test_file_handler_when_configured(tmp_path):
    log_file = tmp_path / "oer.log"
    config = build_log_config("INFO", str(log_file))

    assert config["handlers"]["file"]["filename"] == str(log_file)
    assert config["root"]["handlers"] == ["console", "file"]


def test_configure_logging_sets_package_level():
    configure_logging("warning")
    assert logging.getLogger("oer").level == logging.WARNING

    configure_logging("info")
    assert logging.getLogger("oer.search").getEffectiveLevel() == logging.INFO
