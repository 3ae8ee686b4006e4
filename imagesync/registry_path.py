#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
镜像仓库路径解析
将 [host[:port]/]repository[:tag][@digest] 形式的字符串拆分为各个组成部分
"""

from dataclasses import dataclass


class RegistryPath(str):
    """镜像仓库路径

    四个属性都是输入字符串的纯函数，任何输入都不会抛异常，
    解析不出来的部分返回空字符串。

    已知限制：带端口的主机（registry.example.com:5000/repo）中的 ':'
    会被当成标签分隔符，tag 返回 "5000/repo"。需要正确区分端口时
    请使用 parse_reference()。判断主机时只去掉标签，不去掉摘要。
    """

    __slots__ = ()

    @property
    def digest(self) -> str:
        """'@' 之后的摘要，没有则为空"""
        if '@' not in self:
            return ''
        return self.partition('@')[2]

    @property
    def tag(self) -> str:
        """第一个 ':' 之后的标签；存在摘要或没有 ':' 时为空"""
        if '@' in self or ':' not in self:
            return ''
        return self.split(':')[1]

    @property
    def host(self) -> str:
        """第一段包含 '.' 时视为仓库主机，否则为空（默认仓库）"""
        untagged = str(self)
        tag = self.tag
        if tag:
            untagged = untagged.replace(':' + tag, '')

        if '.' not in untagged.split('/')[0]:
            return ''

        # 主机取自原始字符串，保留端口
        return self.split('/')[0]

    @property
    def repository(self) -> str:
        """去掉主机、标签和摘要后的仓库路径"""
        repository = str(self)

        tag = self.tag
        if tag:
            repository = repository.replace(':' + tag, '')

        digest = self.digest
        if digest:
            repository = repository.replace('@' + digest, '')

        host = self.host
        if host and repository.startswith(host):
            repository = repository[len(host):]

        return repository.lstrip('/')

    def __repr__(self) -> str:
        return f"RegistryPath({str(self)!r})"


@dataclass(frozen=True)
class ImageReference:
    """严格解析后的镜像引用，可区分主机端口和标签"""

    host: str
    repository: str
    tag: str = ''
    digest: str = ''

    @property
    def name(self) -> str:
        """不含标签和摘要的完整名称"""
        if self.host:
            return f"{self.host}/{self.repository}"
        return self.repository

    def __str__(self) -> str:
        reference = self.name
        if self.tag:
            reference += f":{self.tag}"
        if self.digest:
            reference += f"@{self.digest}"
        return reference


def _is_host_segment(segment: str) -> bool:
    return '.' in segment or ':' in segment or segment == 'localhost'


def parse_reference(path: str) -> ImageReference:
    """逐段解析镜像路径

    依次经过三个阶段：
    1. 摘要：第一个 '@' 之后的内容
    2. 主机候选：第一段后面还有路径，且包含 '.'、':' 或为 localhost
    3. 仓库路径：剩余各段，最后一段中最后一个 ':' 之后是标签

    Examples:
        >>> parse_reference("registry.example.com:5000/team/app:1.0")
        ImageReference(host='registry.example.com:5000', repository='team/app', tag='1.0', digest='')
    """
    remainder, _, digest = path.partition('@')

    segments = remainder.split('/')
    host = ''
    if len(segments) > 1 and _is_host_segment(segments[0]):
        host = segments.pop(0)

    tag = ''
    last = segments[-1]
    if ':' in last:
        last, _, tag = last.rpartition(':')
        segments[-1] = last

    repository = '/'.join(segments).lstrip('/')
    return ImageReference(host=host, repository=repository, tag=tag, digest=digest)


def mirror_path(source: str, registry: str, namespace: str = '') -> str:
    """计算镜像同步到目标仓库后的路径

    源镜像的主机被替换为目标仓库，仓库路径和标签保持不变；
    没有标签时使用 latest。只有摘要的镜像无法推送，抛出 ValueError。
    """
    reference = parse_reference(source)
    if not reference.repository:
        raise ValueError(f"无法解析镜像仓库路径: {source!r}")
    if reference.digest and not reference.tag:
        raise ValueError(f"仅包含摘要的镜像无法推送到目标仓库: {source}")

    parts = [registry.rstrip('/'), namespace.strip('/'), reference.repository]
    target = '/'.join(part for part in parts if part)
    return f"{target}:{reference.tag or 'latest'}"
