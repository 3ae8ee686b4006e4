#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
容器镜像同步工具包
"""

from .client import EngineClient
from .exceptions import (
    ImageSyncError,
    StreamError,
    StreamDecodeError,
    RemoteError,
    StreamIOError,
    StreamCancelledError,
    ClientConstructionError,
    TagError,
    ManifestError,
    StreamState,
)
from .mirror import MirrorSync
from .registry_path import RegistryPath, ImageReference, parse_reference, mirror_path
from .retry import RetryPolicy, retry_call
from .status import ProgressDetail, Status, ErrorSignal
from .stream import StreamConsumer, StreamOutcome, ProgressEvent, iter_lines, wait_for_stream_complete
from .utils import setup_logger

__version__ = '0.1.0'

__all__ = [
    'EngineClient',
    'MirrorSync',
    'RegistryPath',
    'ImageReference',
    'parse_reference',
    'mirror_path',
    'RetryPolicy',
    'retry_call',
    'ProgressDetail',
    'Status',
    'ErrorSignal',
    'StreamConsumer',
    'StreamOutcome',
    'ProgressEvent',
    'iter_lines',
    'wait_for_stream_complete',
    'setup_logger',
    'ImageSyncError',
    'StreamError',
    'StreamDecodeError',
    'RemoteError',
    'StreamIOError',
    'StreamCancelledError',
    'ClientConstructionError',
    'TagError',
    'ManifestError',
    'StreamState',
]
