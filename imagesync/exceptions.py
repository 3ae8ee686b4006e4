#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
镜像同步相关的异常定义
"""

from enum import Enum


class StreamState(Enum):
    """流式输出消费的终止状态"""

    SUCCESS = "success"
    DECODE_FAILURE = "decode_failure"
    REMOTE_ERROR = "remote_error"
    STREAM_IO_FAILURE = "stream_io_failure"
    CANCELLED = "cancelled"


class ImageSyncError(Exception):
    """所有镜像同步错误的基类"""

    pass


class StreamError(ImageSyncError):
    """消费 Docker 流式输出失败"""

    state = None


class StreamDecodeError(StreamError):
    """某一行不是合法 JSON，或结构不符合预期"""

    state = StreamState.DECODE_FAILURE


class RemoteError(StreamError):
    """Docker 在输出流中明确返回了 error 字段"""

    state = StreamState.REMOTE_ERROR

    def __init__(self, remote_message: str):
        super().__init__(f"returned error: {remote_message}")
        self.remote_message = remote_message


class StreamIOError(StreamError):
    """读取输出流时底层连接出错"""

    state = StreamState.STREAM_IO_FAILURE


class StreamCancelledError(StreamError):
    """读取过程中收到取消信号"""

    state = StreamState.CANCELLED


class ClientConstructionError(ImageSyncError):
    """无法创建 Docker 客户端（不重试）"""

    pass


class TagError(ImageSyncError):
    """Docker 拒绝给镜像打标签"""

    pass


class ManifestError(ImageSyncError):
    """镜像清单文件不存在或格式错误"""

    pass
