#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
命令行接口
"""

import argparse
from functools import partial
from pathlib import Path

from .client import EngineClient
from .exceptions import ClientConstructionError, ManifestError
from .manifest import load_manifest
from .mirror import MirrorSync
from .retry import DEFAULT_ATTEMPTS, DEFAULT_DELAY, RETRIABLE_ERRORS, RetryPolicy
from .stream import DEFAULT_PROGRESS_EVERY
from .utils import setup_logger, colorize, COLOR_GREEN, COLOR_YELLOW, COLOR_BLUE, COLOR_RED

# ==================== 配置 ====================

PROJECT_ROOT = Path(__file__).parent.parent
MANIFEST_FILE = PROJECT_ROOT / "images-manifest.yml"


def _retry_policy(args) -> RetryPolicy:
    return RetryPolicy(attempts=args.max_retries, delay=args.retry_delay)


def _banner(title: str) -> None:
    print(f"\n{colorize('=' * 80, COLOR_BLUE)}")
    print(colorize(title, COLOR_GREEN))
    print(f"{colorize('=' * 80, COLOR_BLUE)}\n")


# ==================== 子命令处理函数 ====================

def _run_for_each(args, command: str) -> int:
    """对每个镜像执行 pull 或 push"""
    logger = setup_logger(command, args.debug, args.log_dir)

    try:
        client = EngineClient.from_env(
            logger=logger,
            retry_policy=_retry_policy(args),
            progress_every=args.progress_every,
        )
    except ClientConstructionError as e:
        logger.error(str(e))
        return 1

    failed = 0
    with client:
        operation = client.pull if command == 'pull' else client.push
        for image in args.images:
            try:
                operation(image)
            except RETRIABLE_ERRORS as e:
                logger.error(f"[{command}] {image} 失败: {e}")
                failed += 1

    if failed:
        print(colorize(f"✗ {failed} 个镜像 {command} 失败", COLOR_RED))
        return 1

    print(colorize(f"✓ 成功 {command} {len(args.images)} 个镜像", COLOR_GREEN))
    return 0


def cmd_pull(args):
    """拉取镜像"""
    _banner("⬇️  拉取镜像")
    return _run_for_each(args, 'pull')


def cmd_push(args):
    """推送镜像"""
    _banner("⬆️  推送镜像")
    return _run_for_each(args, 'push')


def cmd_sync(args):
    """同步镜像到目标仓库"""
    logger = setup_logger('sync', args.debug, args.log_dir)

    images = [(image, None) for image in args.images]
    manifest_file = args.manifest
    if manifest_file is None and not images and MANIFEST_FILE.exists():
        manifest_file = MANIFEST_FILE

    if manifest_file is not None:
        try:
            images.extend(load_manifest(manifest_file, logger))
        except ManifestError as e:
            logger.error(str(e))
            return 1

    if not images:
        logger.error("没有需要同步的镜像")
        return 1

    if not args.registry and any(target is None for _, target in images):
        logger.error("未指定 --registry，且部分镜像没有 target")
        return 1

    _banner("🚀 同步镜像到远程仓库")
    print(f"📍 目标仓库: {args.registry}/{args.namespace}".rstrip('/'))
    print(f"📦 镜像数量: {len(images)}\n")

    sync = MirrorSync(
        args.registry or '',
        args.namespace,
        logger,
        max_workers=args.max_workers,
        retry_policy=_retry_policy(args),
        client_factory=partial(EngineClient.from_env, progress_every=args.progress_every),
    )

    result = sync.sync_images(images, use_concurrency=args.max_workers > 1)

    if result['success_count'] > 0:
        print(colorize(f"\n✓ 成功同步 {result['success_count']} 个镜像", COLOR_GREEN))

    if result['fail_count'] > 0:
        print(colorize(f"✗ {result['fail_count']} 个镜像同步失败", COLOR_RED))

    print()
    return 0 if result['fail_count'] == 0 else 1


# ==================== 主函数 ====================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='容器镜像同步工具',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  # 拉取 / 推送
  python main.py pull docker.io/library/nginx:1.21
  python main.py push registry.example.com/mirror/nginx:1.21

  # 同步到目标仓库
  python main.py sync --registry registry.example.com --namespace mirror nginx:1.21 redis:7
  python main.py sync --registry registry.example.com --manifest images-manifest.yml --max-workers 3

注意:
  - Docker 连接参数读取 DOCKER_HOST / DOCKER_TLS_VERIFY / DOCKER_CERT_PATH 环境变量
  - 每次重试都会重新发起 pull/push，不会从中断处继续
        """
    )

    # 全局参数
    parser.add_argument('-D', '--debug',
                        action='store_true',
                        help='启用调试模式')
    parser.add_argument('--log-dir',
                        type=Path,
                        help='日志文件目录（默认只输出到终端）')

    # 子命令公共参数
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--max-retries',
                        type=int,
                        default=DEFAULT_ATTEMPTS,
                        help=f'最大尝试次数 (默认: {DEFAULT_ATTEMPTS})')
    common.add_argument('--retry-delay',
                        type=float,
                        default=DEFAULT_DELAY,
                        help=f'重试间隔（秒）(默认: {DEFAULT_DELAY})')
    common.add_argument('--progress-every',
                        type=int,
                        default=DEFAULT_PROGRESS_EVERY,
                        help=f'每多少行输出一次进度 (默认: {DEFAULT_PROGRESS_EVERY})')

    subparsers = parser.add_subparsers(dest='command', help='可用命令')

    parser_pull = subparsers.add_parser('pull', parents=[common], help='拉取镜像')
    parser_pull.add_argument('images', nargs='+', help='镜像路径')
    parser_pull.set_defaults(func=cmd_pull)

    parser_push = subparsers.add_parser('push', parents=[common], help='推送镜像')
    parser_push.add_argument('images', nargs='+', help='镜像路径')
    parser_push.set_defaults(func=cmd_push)

    parser_sync = subparsers.add_parser('sync', parents=[common], help='同步镜像到目标仓库')
    parser_sync.add_argument('images', nargs='*', help='源镜像路径')
    parser_sync.add_argument('--registry',
                             type=str,
                             help='目标镜像仓库')
    parser_sync.add_argument('--namespace',
                             type=str,
                             default='',
                             help='目标仓库下的命名空间')
    parser_sync.add_argument('--manifest',
                             type=Path,
                             help=f'清单文件路径 (默认: {MANIFEST_FILE})')
    parser_sync.add_argument('--max-workers',
                             type=int,
                             default=1,
                             help='最大并发数 (默认: 1)')
    parser_sync.set_defaults(func=cmd_sync)

    return parser


def main(argv=None):
    """主入口函数"""
    parser = build_parser()
    args = parser.parse_args(argv)

    # 如果没有指定子命令，显示帮助
    if not args.command:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print(colorize("\n\n⚠️  用户中断", COLOR_YELLOW))
        return 1
    except Exception as e:
        print(colorize(f"\n✗ 错误: {str(e)}", COLOR_RED))
        import traceback
        if args.debug:
            traceback.print_exc()
        return 1
