#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Docker 引擎客户端
从环境变量创建客户端，自动协商 API 版本，对拉取/推送/打标签操作应用重试策略
"""

import logging
import threading
from typing import Callable, Dict, Iterable, Optional

import docker
import docker.errors
import docker.utils

from .exceptions import ClientConstructionError, TagError
from .registry_path import parse_reference
from .retry import DEFAULT_RETRY_POLICY, RetryPolicy, retry_call
from .stream import DEFAULT_PROGRESS_EVERY, StreamConsumer, StreamOutcome, iter_lines


class EngineClient:
    """带重试策略的 Docker 引擎客户端

    客户端创建失败直接抛出 ClientConstructionError，不重试；
    重试只作用于每一次 pull/push/tag 调用。每次重试都会重新发起请求，
    不会从中断的输出流继续读取。
    """

    def __init__(
        self,
        api: docker.APIClient,
        logger: Optional[logging.Logger] = None,
        retry_policy: Optional[RetryPolicy] = None,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.api = api
        self.logger = logger or logging.getLogger(__name__)
        self.retry_policy = retry_policy or DEFAULT_RETRY_POLICY
        self.progress_every = progress_every
        self.cancel_event = cancel_event

    @classmethod
    def from_env(
        cls,
        logger: Optional[logging.Logger] = None,
        retry_policy: Optional[RetryPolicy] = None,
        environment: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
        **kwargs,
    ) -> 'EngineClient':
        """根据 DOCKER_HOST 等环境变量创建客户端"""
        try:
            client_kwargs = docker.utils.kwargs_from_env(environment=environment)
            if timeout is not None:
                client_kwargs['timeout'] = timeout
            api = docker.APIClient(version='auto', **client_kwargs)
        except docker.errors.DockerException as e:
            raise ClientConstructionError(f"new docker client: {e}") from e

        if logger:
            logger.debug(f"已连接 Docker 引擎: {api.base_url} (API {api.api_version})")

        return cls(api, logger=logger, retry_policy=retry_policy, **kwargs)

    def close(self) -> None:
        self.api.close()

    def __enter__(self) -> 'EngineClient':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _consumer(self) -> StreamConsumer:
        return StreamConsumer(
            self.logger,
            progress_every=self.progress_every,
            cancel_event=self.cancel_event,
        )

    def _run_stream(
        self,
        command: str,
        image: str,
        open_stream: Callable[[], Iterable[bytes]],
        retry_policy: Optional[RetryPolicy],
    ) -> StreamOutcome:
        def attempt() -> StreamOutcome:
            chunks = open_stream()
            try:
                return self._consumer().consume(iter_lines(chunks), image, command)
            finally:
                # 释放连接，重试前不占用连接池
                close = getattr(chunks, 'close', None)
                if close is not None:
                    close()

        return retry_call(attempt, retry_policy or self.retry_policy, self.logger, f"[{command}] {image}")

    def pull(self, image: str, retry_policy: Optional[RetryPolicy] = None) -> StreamOutcome:
        """拉取镜像并等待完成"""
        return self._run_stream(
            'pull',
            image,
            lambda: self.api.pull(image, stream=True, decode=False),
            retry_policy,
        )

    def push(self, image: str, retry_policy: Optional[RetryPolicy] = None) -> StreamOutcome:
        """推送镜像并等待完成"""
        return self._run_stream(
            'push',
            image,
            lambda: self.api.push(image, stream=True, decode=False),
            retry_policy,
        )

    def tag(self, source: str, target: str, retry_policy: Optional[RetryPolicy] = None) -> None:
        """给本地镜像打上目标标签"""
        reference = parse_reference(target)
        if not reference.repository:
            raise ValueError(f"无效的目标镜像: {target!r}")

        def attempt() -> None:
            if not self.api.tag(source, reference.name, tag=reference.tag or None):
                raise TagError(f"tag {source} as {target}: rejected by docker engine")

        retry_call(attempt, retry_policy or self.retry_policy, self.logger, f"[tag] {source} -> {target}")
        self.logger.debug(f"已标记 {source} -> {target}")
