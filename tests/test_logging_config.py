"""
Tests for the package logger setup and the messages the engine emits.
"""
import logging

import pytest

from vectorsketch.logging_config import LOGGER_NAMESPACE, setup_logging


def test_level_by_name(clean_package_logger):
    logger = setup_logging("debug")
    assert logger is clean_package_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_repeated_setup_does_not_stack_handlers(clean_package_logger):
    setup_logging(logging.INFO)
    logger = setup_logging(logging.WARNING)
    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.WARNING


def test_unknown_level_name(clean_package_logger):
    with pytest.raises(ValueError, match="VERBOSE"):
        setup_logging("VERBOSE")


def test_log_file(clean_package_logger, tmp_path):
    path = tmp_path / "session.log"
    logger = setup_logging(logging.INFO, log_file=str(path))
    assert len(logger.handlers) == 2
    logging.getLogger(f"{LOGGER_NAMESPACE}.model.scene").info("hello from the scene")
    for handler in logger.handlers:
        handler.flush()
    assert "hello from the scene" in path.read_text(encoding="utf-8")


def test_scene_clear_is_logged(scene, caplog):
    with caplog.at_level(logging.INFO, logger=LOGGER_NAMESPACE):
        scene.clear()
    assert "Scene cleared." in caplog.messages


def test_discarded_polygon_is_logged(store, caplog):
    store.set_tool("polygon")
    store.click(0, 0)
    with caplog.at_level(logging.INFO, logger=LOGGER_NAMESPACE):
        store.finish_polygon()
    assert any("Polygon discarded" in m for m in caplog.messages)
