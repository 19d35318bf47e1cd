import logging

import numpy as np
import pytest

from bubblepack.logging_config import setup_logging
from bubblepack.scenarios import Scenario, scenario_ratios


def test_scenario_sizes():
    assert scenario_ratios("single") == [1.0]
    assert scenario_ratios(Scenario.two_equal) == [1.0, 1.0]
    assert scenario_ratios("many-small") == [0.1] * 30
    assert scenario_ratios("large-and-small") == [1.0, 0.5, 0.2]
    assert scenario_ratios("identical-50") == [1.0] * 50
    assert scenario_ratios("oversized") == [100.0] * 5


def test_random_ratios_are_seeded():
    ratios = scenario_ratios(Scenario.random_ratios, random_state=3)

    assert len(ratios) == 20
    assert all(0.1 <= ratio < 1.0 for ratio in ratios)
    np.testing.assert_array_equal(ratios, scenario_ratios(Scenario.random_ratios, random_state=3))


def test_unknown_scenario():
    with pytest.raises(ValueError, match="Invalid scenario"):
        scenario_ratios("nope")


def test_setup_logging_does_not_duplicate_handlers(tmp_path):
    log_file = tmp_path / "bubblepack.log"
    logger = setup_logging(logging.DEBUG, log_file=str(log_file))
    logger = setup_logging(logging.DEBUG, log_file=str(log_file))
    try:
        stream_handlers = [h for h in logger.handlers if type(h) is logging.StreamHandler]
        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(stream_handlers) == 1
        assert len(file_handlers) == 1
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)

        logging.getLogger("bubblepack.chart").info("run_layout strategy=force")
        for handler in logger.handlers:
            handler.flush()
        assert "run_layout strategy=force" in log_file.read_text()
    finally:
        for handler in list(logger.handlers):
            if not isinstance(handler, logging.NullHandler):
                handler.close()
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
