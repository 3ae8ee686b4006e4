#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
镜像同步工具
通过 Docker 引擎拉取源镜像、重新打标签并推送到目标仓库
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from .client import EngineClient
from .registry_path import mirror_path, parse_reference
from .retry import RETRIABLE_ERRORS, RetryPolicy


class MirrorSync:
    """镜像同步管理器

    每个工作线程持有自己的 EngineClient，线程之间只共享受锁保护的统计结果。
    """

    def __init__(
        self,
        registry: str,
        namespace: str = '',
        logger: Optional[logging.Logger] = None,
        max_workers: int = 1,
        retry_policy: Optional[RetryPolicy] = None,
        client_factory: Callable[..., EngineClient] = EngineClient.from_env,
    ):
        self.registry = registry
        self.namespace = namespace
        self.logger = logger or logging.getLogger(__name__)
        self.max_workers = max_workers
        self.retry_policy = retry_policy
        self.client_factory = client_factory
        self.mirrored_images = []
        self.success_count = 0
        self.fail_count = 0
        self._lock = threading.Lock()
        self._local = threading.local()
        self._clients: List[EngineClient] = []

    def _client(self) -> EngineClient:
        """获取当前线程的客户端，第一次使用时创建"""
        client = getattr(self._local, 'client', None)
        if client is None:
            client = self.client_factory(logger=self.logger, retry_policy=self.retry_policy)
            self._local.client = client
            with self._lock:
                self._clients.append(client)
        return client

    def close(self) -> None:
        with self._lock:
            clients, self._clients = self._clients, []
            self._local = threading.local()
        for client in clients:
            client.close()

    def target_for(self, source: str) -> str:
        return mirror_path(source, self.registry, self.namespace)

    def sync_image(self, source: str, target: Optional[str] = None) -> bool:
        """同步单个镜像：pull -> tag -> push"""
        try:
            target = target or self.target_for(source)
            reference = parse_reference(target)
            if not reference.repository:
                raise ValueError(f"无效的目标镜像: {target!r}")
        except ValueError as e:
            self.logger.error(f"无法确定目标镜像 {source}: {e}")
            with self._lock:
                self.fail_count += 1
            return False

        self.logger.info(f"🔄 Processing {source} -> {target}")

        try:
            client = self._client()
            client.pull(source)
            client.tag(source, target)
            client.push(target)
        except RETRIABLE_ERRORS as e:
            self.logger.error(f"❌ Failed to mirror {source}: {e}")
            with self._lock:
                self.fail_count += 1
            return False

        self.logger.info(f"✅ Successfully mirrored {source}")

        with self._lock:
            self.mirrored_images.append({
                'source': source,
                'target': target,
                'host': reference.host,
                'repository': reference.repository,
                'tag': reference.tag,
                'synced_at': datetime.now(timezone.utc).isoformat()
            })
            self.success_count += 1
        return True

    def sync_images(self, images: Iterable, use_concurrency: bool = True) -> Dict:
        """同步所有镜像

        Args:
            images: 源镜像字符串，或 (source, target) 元组
            use_concurrency: 是否使用并发同步

        Returns:
            同步结果字典
        """
        tasks = []
        for image in images:
            if isinstance(image, (tuple, list)):
                tasks.append((image[0], image[1]))
            else:
                tasks.append((image, None))

        try:
            if use_concurrency and self.max_workers > 1 and len(tasks) > 1:
                self.logger.info(f"🚀 开始并发同步 {len(tasks)} 个镜像，并发数: {self.max_workers}")

                with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                    future_to_task = {
                        executor.submit(self.sync_image, source, target): (source, target)
                        for source, target in tasks
                    }

                    for future in as_completed(future_to_task):
                        source, _ = future_to_task[future]
                        try:
                            future.result()
                        except Exception as e:
                            self.logger.error(f"同步 {source} 异常: {e}")
                            with self._lock:
                                self.fail_count += 1
            else:
                for source, target in tasks:
                    self.sync_image(source, target)
        finally:
            self.close()

        result = {
            'updated_at': datetime.now(timezone.utc).isoformat(),
            'registry': self.registry,
            'namespace': self.namespace,
            'total_count': len(tasks),
            'success_count': self.success_count,
            'fail_count': self.fail_count,
            'images': self.mirrored_images
        }

        self.logger.info(
            f"📊 Summary: total {len(tasks)}, success {self.success_count}, failed {self.fail_count}"
        )
        return result
