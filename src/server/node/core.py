"""
拓扑解析核心逻辑：将拓扑描述展开为有序的节点身份序列。

命名、默认身份注入以及输出路径的规则会被下游部署工具直接使用，
修改任何一条规则都会导致已生成的证书目录失配。
"""

from __future__ import annotations

from typing import Dict, List, Optional

from cryptography import x509
from cryptography.x509.oid import NameOID
from loguru import logger

from .schemas import (
    HostSpec,
    Node,
    NodeKind,
    NodeTemplate,
    OrgSpec,
    Subject,
    SubjectConfig,
    Topology,
)

ORDERER_ORGS_DIR = "ordererOrganizations"
PEER_ORGS_DIR = "peerOrganizations"

# orderer 组织无论规模大小都会追加这两个默认身份
ORDERER_DEFAULT_USERS = ("Admin", "User1")
ADMIN_USER = "Admin"

# 主题字段取值策略：省份与城市沿用国家字段，组织与部门一律留空
SUBJECT_POLICY: Dict[str, Optional[str]] = {
    "country": "country",
    "province": "country",
    "locality": "country",
    "organization": None,
    "organizational_unit": None,
}


def build_subject(template: SubjectConfig, common_name: str) -> Subject:
    """
    按 SUBJECT_POLICY 由全局主题模板构造节点主题。
    :param template: 全局主题模板。
    :param common_name: 节点名称，作为 CN。
    :return: 列表形式的主题。
    """
    fields = {
        attr: (getattr(template, source),) if source else ()
        for attr, source in SUBJECT_POLICY.items()
    }
    return Subject(common_name=common_name, **fields)


def subject_to_x509_name(subject: Subject) -> x509.Name:
    """
    将节点主题转换为 cryptography 的 x509.Name，空值属性会被跳过。
    不检查 X.509 长度约束（国家代码两位、CN 不超过 64 字符），与解析流程一样不拒绝畸形输入。
    """
    pairs = [
        (NameOID.COUNTRY_NAME, subject.country),
        (NameOID.STATE_OR_PROVINCE_NAME, subject.province),
        (NameOID.LOCALITY_NAME, subject.locality),
        (NameOID.ORGANIZATION_NAME, subject.organization),
        (NameOID.ORGANIZATIONAL_UNIT_NAME, subject.organizational_unit),
        (NameOID.COMMON_NAME, (subject.common_name,)),
    ]
    attributes = [
        x509.NameAttribute(oid, value, _validate=False)
        for oid, values in pairs
        for value in values
        if value
    ]
    return x509.Name(attributes)


def get_orderer_output(name: str, domain: str, kind: NodeKind, base_path: str) -> str:
    """orderer 组织内身份的输出路径。"""
    role_folder = "orderers" if kind == NodeKind.ORDERER else "users"
    return f"{base_path}/{ORDERER_ORGS_DIR}/{domain}/{role_folder}/{name}"


def get_peer_output(name: str, domain: str, kind: NodeKind, base_path: str) -> str:
    """peer 组织内身份的输出路径。"""
    role_folder = "peers" if kind == NodeKind.PEER else "users"
    return f"{base_path}/{PEER_ORGS_DIR}/{domain}/{role_folder}/{name}"


def _spec_name(spec: HostSpec, domain: str) -> str:
    if spec.common_name:
        return spec.common_name
    return f"{spec.hostname}.{domain}"


def get_peers(specs: Optional[List[HostSpec]], template: NodeTemplate, domain: str) -> List[str]:
    """
    生成 peer 名称列表。
    存在显式声明时只使用显式声明；否则按模板生成 peer<i>.<domain>，i 属于 [start, count)。
    count 不大于 start 时得到空列表。
    """
    if specs:
        return [_spec_name(spec, domain) for spec in specs]
    return [f"peer{i}.{domain}" for i in range(template.start, template.count)]


def get_users(count: int) -> List[str]:
    """生成 User1 ... User<count>，count <= 0 时为空。"""
    if count <= 0:
        return []
    return [f"User{i}" for i in range(1, count + 1)]


def _user_kind(entry: str) -> NodeKind:
    return NodeKind.ADMIN if entry == ADMIN_USER else NodeKind.USER


def resolve_orderer_org(org: OrgSpec, subject: SubjectConfig, base_path: str) -> List[Node]:
    """
    展开一个 orderer 组织：显式成员在前，随后固定追加 Admin 与 User1。
    :param org: orderer 组织声明。
    :param subject: 全局主题模板。
    :param base_path: 输出根目录。
    :return: 该组织的节点序列。
    """
    entries = [(_spec_name(spec, org.domain), NodeKind.ORDERER) for spec in org.specs or []]
    entries += [(f"{item}@{org.domain}", _user_kind(item)) for item in ORDERER_DEFAULT_USERS]

    nodes = [
        Node(
            name=name,
            kind=kind,
            ca_file=org.ca_file,
            subject=build_subject(subject, name),
            output=get_orderer_output(name, org.domain, kind, base_path),
            org_name=org.name,
        )
        for name, kind in entries
    ]
    logger.debug(f"orderer 组织 {org.name or org.domain} 展开为 {len(nodes)} 个节点")
    return nodes


def resolve_peer_org(org: OrgSpec, subject: SubjectConfig, base_path: str) -> List[Node]:
    """
    展开一个 peer 组织：peer 节点在前，随后是 Admin 与 User1..User<n>。
    :param org: peer 组织声明。
    :param subject: 全局主题模板。
    :param base_path: 输出根目录。
    :return: 该组织的节点序列。
    """
    entries = [(name, NodeKind.PEER) for name in get_peers(org.specs, org.template, org.domain)]
    users = [ADMIN_USER] + get_users(org.users.count)
    entries += [(f"{item}@{org.domain}", _user_kind(item)) for item in users]

    nodes = [
        Node(
            name=name,
            kind=kind,
            ca_file=org.ca_file,
            subject=build_subject(subject, name),
            output=get_peer_output(name, org.domain, kind, base_path),
            org_name=org.name,
        )
        for name, kind in entries
    ]
    logger.debug(f"peer 组织 {org.name or org.domain} 展开为 {len(nodes)} 个节点")
    return nodes


def resolve_topology(topology: Topology) -> List[Node]:
    """
    将整个拓扑展开为节点序列：先全部 orderer 组织，再全部 peer 组织，各自保持声明顺序。
    不做任何校验，畸形输入会得到畸形的名称与路径。
    """
    nodes: List[Node] = []
    for org in topology.orderer_orgs:
        nodes.extend(resolve_orderer_org(org, topology.subject, topology.output))
    for org in topology.peer_orgs:
        nodes.extend(resolve_peer_org(org, topology.subject, topology.output))
    logger.info(
        f"拓扑解析完成: {len(topology.orderer_orgs)} 个 orderer 组织, "
        f"{len(topology.peer_orgs)} 个 peer 组织, 共 {len(nodes)} 个节点"
    )
    return nodes
