#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Docker 流式输出的单行解析
每一行是一个 JSON 对象，同一行分别解析为进度状态和错误信息
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Union

from .exceptions import StreamDecodeError


def _load_object(line: Union[bytes, str], context: str) -> Dict:
    try:
        data = json.loads(line)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise StreamDecodeError(f"{context}: {e}") from e

    if not isinstance(data, dict):
        raise StreamDecodeError(f"{context}: expected JSON object, got {type(data).__name__}")
    return data


def _string_field(data: Dict, key: str, context: str) -> str:
    value = data.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise StreamDecodeError(f"{context}: field {key!r} must be a string, got {type(value).__name__}")
    return value


def _int_field(data: Dict, key: str, context: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    # bool 是 int 的子类，需要单独排除
    if isinstance(value, bool) or not isinstance(value, int):
        raise StreamDecodeError(f"{context}: field {key!r} must be an integer, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class ProgressDetail:
    """单个镜像层的传输进度（字节）"""

    current: int = 0
    total: int = 0


@dataclass(frozen=True)
class Status:
    """Docker 输出的一行状态"""

    message: str = ''
    id: str = ''
    progress_detail: ProgressDetail = field(default_factory=ProgressDetail)

    @classmethod
    def from_json(cls, line: Union[bytes, str]) -> 'Status':
        """解析一行 JSON，缺失字段取零值"""
        context = 'unmarshal status'
        data = _load_object(line, context)

        detail = data.get('progressDetail')
        if detail is None:
            detail = {}
        elif not isinstance(detail, dict):
            raise StreamDecodeError(
                f"{context}: field 'progressDetail' must be an object, got {type(detail).__name__}"
            )

        return cls(
            message=_string_field(data, 'status', context),
            id=_string_field(data, 'id', context),
            progress_detail=ProgressDetail(
                current=_int_field(detail, 'current', context),
                total=_int_field(detail, 'total', context),
            ),
        )

    def get_message(self) -> str:
        """将 Docker 原始状态转换为简短的可读信息"""
        if 'Pulling from' in self.message or 'The push refers to' in self.message:
            return 'Started'

        if self.progress_detail.total > 0:
            return f"Processing {self.progress_detail.current}B of {self.progress_detail.total}B"

        return 'Processing'


@dataclass(frozen=True)
class ErrorSignal:
    """Docker 在输出流中返回的错误"""

    error: str = ''

    @classmethod
    def from_json(cls, line: Union[bytes, str]) -> 'ErrorSignal':
        context = 'unmarshal error'
        data = _load_object(line, context)
        return cls(error=_string_field(data, 'error', context))

    def __bool__(self) -> bool:
        return bool(self.error)
