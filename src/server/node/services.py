"""
节点解析与登记批次的业务逻辑层。
此模块串联加载、（可选）校验、解析与投影，供路由层和脚本调用。
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from loguru import logger

from ..config import config
from . import core, enrollment, loader
from .schemas import EnrollmentBatch, Node, NodeListResponse, NodeView, Topology


def _prepare(topology: Topology, strict: bool | None) -> Topology:
    if not topology.output:
        topology = topology.model_copy(update={"output": config.output_base})
    if config.strict_topology if strict is None else strict:
        loader.validate_topology(topology)
    return topology


def resolve_nodes_service(topology: Topology, strict: bool | None = None) -> List[Node]:
    """
    解析拓扑得到节点序列。拓扑未指定 Output 时使用配置中的 output_base。
    :param strict: 是否严格校验，None 表示使用配置 strict_topology。
    :raises TopologyValidationError: 严格模式下校验失败。
    """
    return core.resolve_topology(_prepare(topology, strict))


def node_list_service(topology: Topology, strict: bool | None = None) -> NodeListResponse:
    """解析拓扑并返回带 RFC 4514 主题的节点视图。"""
    nodes = resolve_nodes_service(topology, strict)
    return NodeListResponse(
        nodes=[
            NodeView(
                name=node.name,
                kind=node.kind,
                ca_file=node.ca_file,
                org_name=node.org_name,
                output=node.output,
                dn=core.subject_to_x509_name(node.subject).rfc4514_string(),
            )
            for node in nodes
        ]
    )


def enrollment_batch_service(topology: Topology, strict: bool | None = None) -> EnrollmentBatch:
    """解析拓扑并生成登记批次，使用配置中的 enroll_secret。"""
    nodes = resolve_nodes_service(topology, strict)
    return enrollment.project_nodes(nodes, secret=config.enroll_secret)


def load_nodes(path: str | Path, strict: bool | None = None) -> List[Node]:
    """从拓扑文件加载并解析节点序列。"""
    return resolve_nodes_service(loader.load_topology(path), strict)


def configured_enrollment_batch_service() -> EnrollmentBatch:
    """
    使用配置 topology_file 指定的拓扑文件生成登记批次。
    :raises FileNotFoundError: 未配置拓扑文件或文件不存在。
    """
    if not config.topology_file:
        raise FileNotFoundError("未配置拓扑文件 (TOPOLOGY_FILE)")
    topology = loader.load_topology(config.topology_file)
    return enrollment_batch_service(topology)


def export_enrollment_batch(batch: EnrollmentBatch, path: str | Path) -> Path:
    """
    将登记批次以 JSON 写入文件，键名使用原始配置格式（PascalCase）。
    :return: 写入的文件路径。
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(batch.model_dump(by_alias=True), f, ensure_ascii=False, indent=4)
    logger.info(f"登记批次已写入: {path} ({len(batch.nodes)} 个请求)")
    return path
