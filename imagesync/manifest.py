#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
镜像清单加载
清单格式：

    images:
      - source: docker.io/library/nginx:1.21
      - source: quay.io/prometheus/node-exporter:v1.6.0
        target: registry.example.com/mirror/node-exporter:v1.6.0
      - source: alpine:3.18
        enabled: false
      - redis:7
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

from .exceptions import ManifestError


def load_manifest(manifest_file: Path, logger: Optional[logging.Logger] = None) -> List[Tuple[str, Optional[str]]]:
    """加载清单文件，返回启用的 (source, target) 列表，target 可能为 None"""
    try:
        with open(manifest_file, 'r', encoding='utf-8') as f:
            manifest = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ManifestError(f"清单文件不存在: {manifest_file}") from e
    except yaml.YAMLError as e:
        raise ManifestError(f"清单文件格式错误: {e}") from e

    if not isinstance(manifest, dict) or not isinstance(manifest.get('images', []), list):
        raise ManifestError(f"清单文件缺少 images 列表: {manifest_file}")

    images = []
    for index, img in enumerate(manifest.get('images', [])):
        if isinstance(img, str):
            images.append((img, None))
            continue

        if not isinstance(img, dict) or not isinstance(img.get('source'), str) or not img['source']:
            raise ManifestError(f"第 {index + 1} 个镜像缺少 source 字段")

        if not img.get('enabled', True):
            continue

        images.append((img['source'], img.get('target')))

    if logger:
        logger.debug(f"已加载清单文件: {manifest_file}，共 {len(images)} 个镜像")

    return images
