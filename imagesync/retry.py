#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
重试策略
固定次数、固定间隔，每次调用显式传入，不使用全局默认值
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

import docker.errors
import requests
import urllib3.exceptions

from .exceptions import ClientConstructionError, ImageSyncError, StreamCancelledError

T = TypeVar('T')

DEFAULT_ATTEMPTS = 3
DEFAULT_DELAY = 5.0

RETRIABLE_ERRORS = (
    ImageSyncError,
    docker.errors.DockerException,
    requests.exceptions.RequestException,
    urllib3.exceptions.HTTPError,
    OSError,
)

NON_RETRIABLE_ERRORS = (
    StreamCancelledError,
    ClientConstructionError,
)


def fixed_delay(attempt: int, delay: float) -> float:
    return delay


@dataclass(frozen=True)
class RetryPolicy:
    """重试策略

    Args:
        attempts: 最大尝试次数（含第一次）
        delay: 两次尝试之间的基础等待秒数
        backoff: 根据第几次重试（从 1 开始）和基础延迟计算等待时间
        sleep: 等待函数，测试时可替换
    """

    attempts: int = DEFAULT_ATTEMPTS
    delay: float = DEFAULT_DELAY
    backoff: Callable[[int, float], float] = fixed_delay
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False)

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError(f"attempts 必须大于 0: {self.attempts}")
        if self.delay < 0:
            raise ValueError(f"delay 不能为负数: {self.delay}")

    def wait_time(self, attempt: int) -> float:
        return self.backoff(attempt, self.delay)


DEFAULT_RETRY_POLICY = RetryPolicy()


def retry_call(
    func: Callable[[], T],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    logger: Optional[logging.Logger] = None,
    description: str = '',
) -> T:
    """按照策略调用 func，全部失败时原样抛出最后一次的异常"""
    for attempt in range(policy.attempts):
        if attempt > 0:
            delay = policy.wait_time(attempt)
            if logger:
                logger.info(f"第 {attempt + 1} 次重试 {description}，等待 {delay:.2f} 秒...")
            policy.sleep(delay)

        try:
            return func()
        except NON_RETRIABLE_ERRORS:
            raise
        except RETRIABLE_ERRORS as e:
            if attempt >= policy.attempts - 1:
                if logger:
                    logger.error(f"{description} 失败，已尝试 {policy.attempts} 次: {e}")
                raise
            if logger:
                logger.warning(f"{description} 失败，将重试... ({attempt + 1}/{policy.attempts}): {e}")

    # attempts >= 1，循环内一定会返回或抛出
    raise AssertionError('unreachable')
