"""Shared fixtures for imagesync tests."""

import logging
from unittest.mock import Mock

import pytest

from imagesync.retry import RetryPolicy


@pytest.fixture
def logger():
    test_logger = logging.getLogger("imagesync.tests")
    test_logger.setLevel(logging.DEBUG)
    test_logger.propagate = True
    return test_logger


@pytest.fixture
def sleep():
    return Mock()


@pytest.fixture
def retry_policy(sleep):
    return RetryPolicy(attempts=3, delay=5.0, sleep=sleep)
