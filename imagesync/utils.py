#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
通用工具函数
"""

import logging
import os
import sys
from pathlib import Path
from datetime import datetime

# ANSI 颜色代码
COLOR_GREEN = "\033[92m"
COLOR_RED = "\033[91m"
COLOR_YELLOW = "\033[93m"
COLOR_BLUE = "\033[94m"
COLOR_CYAN = "\033[96m"
COLOR_RESET = "\033[0m"

LOGGER_NAMESPACE = 'imagesync'
PLAIN_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def use_color(stream) -> bool:
    """终端输出才加颜色；设置 NO_COLOR 或输出被重定向（CI 日志）时不加"""
    if 'NO_COLOR' in os.environ:
        return False
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


def setup_logger(name: str, debug: bool = False, log_dir: Path = None,
                 stream=None, color: bool = None) -> logging.Logger:
    """为子命令创建 imagesync.<name> 日志记录器

    pull/push 的进度行（[pull] nginx:1.21 (Processing ...)）会大量出现在 CI 日志中，
    因此颜色只在终端里启用；log_dir 下按命令和日期分文件保存无颜色日志。
    """
    logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    stream = stream or sys.stderr
    if color is None:
        color = use_color(stream)

    if color:
        console_format = (f'{COLOR_CYAN}%(asctime)s{COLOR_RESET} - '
                          f'{COLOR_YELLOW}%(levelname)s{COLOR_RESET} - %(message)s')
    else:
        console_format = PLAIN_FORMAT

    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(logging.Formatter(console_format, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{LOGGER_NAMESPACE}-{name}_{datetime.now().strftime('%Y%m%d')}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def colorize(text: str, color: str) -> str:
    """给终端输出文本加颜色"""
    return f"{color}{text}{COLOR_RESET}"
