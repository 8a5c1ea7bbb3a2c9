import logging

import numpy as np
import pytest

from sfm_ba.ba.config import GradientCheckConfig
from sfm_ba.ba.cost_functions import make_cost_function
from sfm_ba.ba.gradient_checker import check_gradients
from sfm_ba.cameras.intrinsics import CameraModel
from sfm_ba.io.logging_utils import PACKAGE_LOGGER_NAME, get_logger, make_logger


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_make_logger_attaches_single_handler():
    logger = make_logger("sfm_ba.test_make_logger", level=logging.DEBUG)
    again = make_logger("sfm_ba.test_make_logger", level=logging.WARNING)

    assert logger is again
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_get_logger_nests_under_package():
    assert get_logger("sfm_ba.ba.cost_functions").name == "sfm_ba.ba.cost_functions"
    assert get_logger("tools").name == "sfm_ba.tools"


@pytest.mark.parametrize("verbose,level", [(True, logging.DEBUG), (False, logging.WARNING)])
def test_gradient_checker_sets_up_package_logger(package_logger, verbose, level):
    package_logger.handlers.clear()
    cost = make_cost_function(CameraModel.PINHOLE, (0.0, 0.0))
    blocks = [np.array([1000.0, 320.0, 240.0]), np.zeros(6), np.array([1.0, 2.0, 10.0])]

    check_gradients(cost, blocks, GradientCheckConfig(verbose=verbose))
    check_gradients(cost, blocks, GradientCheckConfig(verbose=verbose))

    assert len(package_logger.handlers) == 1
    assert package_logger.level == level


def test_verbose_gradient_check_reports_every_block(package_logger, caplog):
    cost = make_cost_function(CameraModel.PINHOLE, (0.0, 0.0))
    blocks = [np.array([1000.0, 320.0, 240.0]), np.zeros(6), np.array([1.0, 2.0, 10.0])]

    with caplog.at_level(logging.DEBUG, logger=PACKAGE_LOGGER_NAME):
        result = check_gradients(cost, blocks, GradientCheckConfig(verbose=True))

    assert result.ok
    for bi in range(3):
        assert f"block {bi} ok" in caplog.text
