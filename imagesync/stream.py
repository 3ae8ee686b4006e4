#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Docker 拉取/推送输出流的消费
逐行读取直到结束，定期输出进度，发现错误立即中止
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional, Union

import docker.errors
import requests
import urllib3.exceptions

from .exceptions import RemoteError, StreamCancelledError, StreamIOError, StreamState
from .status import ErrorSignal, Status

DEFAULT_PROGRESS_EVERY = 25

# 读取流时视为连接层错误的异常
STREAM_IO_ERRORS = (
    OSError,
    requests.exceptions.RequestException,
    urllib3.exceptions.HTTPError,
    docker.errors.DockerException,
)


@dataclass(frozen=True)
class ProgressEvent:
    """一次进度通知"""

    command: str
    image: str
    index: int
    status: Status

    @property
    def message(self) -> str:
        return self.status.get_message()


@dataclass(frozen=True)
class StreamOutcome:
    """流正常结束时的结果"""

    image: str
    command: str
    lines: int
    last_status: Optional[Status] = None
    state: StreamState = StreamState.SUCCESS


def iter_lines(chunks: Iterable[Union[bytes, str]]) -> Iterator[bytes]:
    """把任意切分的数据块重新组合成完整的行，跳过空行"""
    buffer = b''
    for chunk in chunks:
        if isinstance(chunk, str):
            chunk = chunk.encode('utf-8')
        buffer += chunk
        while b'\n' in buffer:
            line, buffer = buffer.split(b'\n', 1)
            if line.strip():
                yield line.strip()

    if buffer.strip():
        yield buffer.strip()


class StreamConsumer:
    """输出流消费者

    每个实例可以重复使用，但每次 consume() 都有独立的计数器，
    不同线程应各自持有实例。
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
        on_progress: Optional[Callable[[ProgressEvent], None]] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        if progress_every < 1:
            raise ValueError(f"progress_every 必须大于 0: {progress_every}")
        self.logger = logger or logging.getLogger(__name__)
        self.progress_every = progress_every
        self.on_progress = on_progress or self._log_progress
        self.cancel_event = cancel_event

    def _log_progress(self, event: ProgressEvent) -> None:
        self.logger.info(f"[{event.command}] {event.image} ({event.message})")

    def _check_cancelled(self, image: str, command: str) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise StreamCancelledError(f"{command} {image} cancelled")

    def consume(self, lines: Iterable[Union[bytes, str]], image: str, command: str) -> StreamOutcome:
        """读取所有行直到流结束

        Raises:
            StreamDecodeError: 某一行无法解析
            RemoteError: 某一行包含 error 字段
            StreamIOError: 读取流时连接出错
            StreamCancelledError: 收到取消信号
        """
        iterator = iter(lines)
        scans = 0
        status = None

        while True:
            self._check_cancelled(image, command)
            try:
                line = next(iterator)
            except StopIteration:
                break
            except STREAM_IO_ERRORS as e:
                raise StreamIOError(f"scanner: {e}") from e

            status = Status.from_json(line)

            error = ErrorSignal.from_json(line)
            if error:
                raise RemoteError(error.error)

            # 每 N 行输出一次进度，避免刷屏
            if scans % self.progress_every == 0:
                self.on_progress(ProgressEvent(command=command, image=image, index=scans, status=status))

            scans += 1

        self.logger.info(f"[{command}] {image} complete.")
        return StreamOutcome(image=image, command=command, lines=scans, last_status=status)


def wait_for_stream_complete(
    logger: Optional[logging.Logger],
    lines: Iterable[Union[bytes, str]],
    image: str,
    command: str,
) -> StreamOutcome:
    """使用默认策略消费输出流"""
    return StreamConsumer(logger).consume(lines, image, command)
