"""
拓扑描述加载与（可选的）严格校验。

公开接口：
    - load_topology: 从 JSON / YAML 文件加载拓扑描述
    - parse_topology: 从已解析的 dict 构造拓扑描述
    - validate_topology: 严格模式下的拓扑校验
    - TopologyLoadError / TopologyValidationError
"""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Any, List

import yaml
from loguru import logger
from pydantic import ValidationError

from .core import resolve_topology
from .schemas import Topology

YAML_SUFFIXES = {".yaml", ".yml"}
JSON_SUFFIXES = {".json"}


class TopologyLoadError(ValueError):
    """拓扑文件无法读取或内容不符合模型。"""


class TopologyValidationError(ValueError):
    """严格模式下拓扑校验失败，problems 中列出全部问题。"""

    def __init__(self, problems: List[str]):
        self.problems = problems
        super().__init__("拓扑校验失败: " + "; ".join(problems))


def parse_topology(data: Any) -> Topology:
    """
    将 dict 转换为 Topology。
    :raises TopologyLoadError: 数据不是对象或不符合模型。
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TopologyLoadError("拓扑描述必须是一个对象")
    try:
        return Topology.model_validate(data)
    except ValidationError as e:
        raise TopologyLoadError(f"拓扑描述格式错误: {e}") from e


def load_topology(path: str | Path) -> Topology:
    """
    从文件加载拓扑描述，按扩展名选择 JSON 或 YAML。
    :param path: 文件路径。
    :return: 拓扑描述。
    :raises FileNotFoundError: 文件不存在。
    :raises TopologyLoadError: 扩展名不支持或内容无法解析。
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"拓扑文件不存在: {path}")

    suffix = path.suffix.lower()
    if suffix not in YAML_SUFFIXES | JSON_SUFFIXES:
        raise TopologyLoadError(f"不支持的拓扑文件类型: {suffix or '(无扩展名)'}")

    try:
        with path.open("r", encoding="utf-8") as f:
            if suffix in YAML_SUFFIXES:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        logger.warning(f"读取拓扑文件 {path} 失败: {e}")
        raise TopologyLoadError(f"无法读取拓扑文件 {path}: {e}") from e

    topology = parse_topology(data)
    logger.info(f"已加载拓扑文件: {path}")
    return topology


def validate_topology(topology: Topology) -> None:
    """
    严格模式校验，默认流程不会调用。
    检查域名与主机名非空、模板与用户数量非负、推导出的节点名称不重复。
    :raises TopologyValidationError: 存在任意问题时。
    """
    problems: List[str] = []

    for label, orgs in (("orderer", topology.orderer_orgs), ("peer", topology.peer_orgs)):
        for index, org in enumerate(orgs):
            where = f"{label} 组织 #{index} ({org.name or '未命名'})"
            if not org.domain:
                problems.append(f"{where}: domain 为空")
            for spec in org.specs or []:
                if not spec.hostname and not spec.common_name:
                    problems.append(f"{where}: 存在未设置 hostname 的成员")
            if org.template.count < 0 or org.template.start < 0:
                problems.append(f"{where}: template 的 count/start 不能为负数")
            if org.users.count < 0:
                problems.append(f"{where}: users.count 不能为负数")

    counts = Counter(node.name for node in resolve_topology(topology))
    for name, count in counts.items():
        if count > 1:
            problems.append(f"节点名称重复: {name} (出现 {count} 次)")

    if problems:
        raise TopologyValidationError(problems)
