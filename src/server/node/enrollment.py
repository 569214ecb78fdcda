"""
登记请求投影：将节点序列逐个映射为注册 + 登记请求，组成登记批次。

注意：默认所有节点共享同一个引导密码 DEFAULT_ENROLL_SECRET，仅适用于测试/教学网络。
生产环境应通过 secret_provider 为每个身份生成独立密码。
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional

from loguru import logger

from .schemas import (
    AttrConfig,
    EnrollConfig,
    EnrollmentBatch,
    Node,
    NodeConfig,
    NodeKind,
    RegisterConfig,
    Subject,
    SubjectConfig,
)

DEFAULT_ENROLL_SECRET = "adminpwd"
ROOT_AFFILIATION = "."
UNLIMITED_ENROLLMENTS = -1

REGISTRAR_ROLES_ATTR = "hf.Registrar.Roles"
REVOKER_ATTR = "hf.Revoker"

# 节点类型到 CA 角色名的映射，是与 CA 约定的外部契约
REGISTRATION_ROLES: Dict[NodeKind, str] = {
    NodeKind.ORDERER: "orderer",
    NodeKind.PEER: "peer",
    NodeKind.ADMIN: "admin",
    NodeKind.USER: "client",
}

SecretProvider = Callable[[Node], str]


def registration_role(kind: NodeKind) -> str:
    """返回节点类型对应的 CA 角色名。"""
    return REGISTRATION_ROLES[kind]


def _first(values: tuple) -> str:
    return values[0] if values else ""


def flatten_subject(subject: Subject) -> SubjectConfig:
    """
    将列表形式的主题压平为标量：每个字段取第一个值，空列表得到空字符串。
    多值字段除第一个值外全部丢弃。
    """
    return SubjectConfig(
        country=_first(subject.country),
        province=_first(subject.province),
        locality=_first(subject.locality),
        organization=_first(subject.organization),
        organizational_unit=_first(subject.organizational_unit),
    )


def project_node(node: Node, secret: str = DEFAULT_ENROLL_SECRET) -> NodeConfig:
    """
    将单个节点映射为注册 + 登记请求。
    :param node: 节点身份。
    :param secret: 注册与登记共用的密码。
    :return: 登记请求。
    """
    role = registration_role(node.kind)
    return NodeConfig(
        name=node.name,
        ca_file=node.ca_file,
        output=node.output,
        registration=RegisterConfig(
            registered=False,
            enroll_id=node.name,
            type=role,
            secret=secret,
            max_enrollments=UNLIMITED_ENROLLMENTS,
            affiliation=ROOT_AFFILIATION,
            attrs=[
                AttrConfig(name=REGISTRAR_ROLES_ATTR, value=role),
                AttrConfig(name=REVOKER_ATTR, value="false"),
            ],
        ),
        enroll=EnrollConfig(
            enroll_id=node.name,
            secret=secret,
            subject=flatten_subject(node.subject),
        ),
    )


def project_nodes(
    nodes: Iterable[Node],
    secret: str = DEFAULT_ENROLL_SECRET,
    secret_provider: Optional[SecretProvider] = None,
) -> EnrollmentBatch:
    """
    将节点序列映射为登记批次，保持输入顺序。
    :param nodes: 节点序列。
    :param secret: 所有节点共用的引导密码。
    :param secret_provider: 可选，按节点返回独立密码，设置后优先于 secret。
    :return: 登记批次。
    """
    batch = EnrollmentBatch(
        nodes=[
            project_node(node, secret_provider(node) if secret_provider else secret)
            for node in nodes
        ]
    )
    logger.info(f"生成登记批次: {len(batch.nodes)} 个请求")
    return batch
