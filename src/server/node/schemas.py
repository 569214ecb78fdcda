"""
文件功能：
    定义拓扑描述、节点身份与注册/登记请求批次的数据模型（Pydantic）。

公开接口：
    - NodeKind: 节点类型枚举
    - SubjectConfig: 标量形式的主题（全局模板与扁平化后的登记主题共用）
    - HostSpec / NodeTemplate / UsersSpec / OrgSpec / Topology: 拓扑描述
    - Subject: 列表形式的可分辨名称（对应 X.509 Name）
    - Node: 由拓扑推导出的节点身份（不可变）
    - AttrConfig / RegisterConfig / EnrollConfig / NodeConfig / EnrollmentBatch: 登记批次
    - NodeView / NodeListResponse: HTTP 接口返回的节点视图

内部方法：
    无

说明：
    拓扑与登记批次的字段同时接受 snake_case 名称与原始配置文件中的
    PascalCase 键名（如 OrdererOrgs、CaFile、EnrollID），序列化时按别名输出。
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class NodeKind(str, Enum):
    ORDERER = "orderer"
    PEER = "peer"
    ADMIN = "admin"
    USER = "user"


class SubjectConfig(BaseModel):
    """标量主题字段。作为全局主题模板输入，也作为登记请求中的扁平化主题输出。"""

    model_config = ConfigDict(populate_by_name=True)

    country: str = Field(default="", alias="Country")
    province: str = Field(default="", alias="Province")
    locality: str = Field(default="", alias="Locality")
    organization: str = Field(default="", alias="Organization")
    organizational_unit: str = Field(default="", alias="OrganizationalUnit")


class HostSpec(BaseModel):
    """显式声明的成员节点。common_name 为空字符串表示未设置。"""

    model_config = ConfigDict(populate_by_name=True)

    hostname: str = Field(default="", alias="Hostname")
    common_name: str = Field(default="", alias="CommonName")


class NodeTemplate(BaseModel):
    """按数量生成 peer 的模板，生成区间为 [start, count)。"""

    model_config = ConfigDict(populate_by_name=True)

    count: int = Field(default=0, alias="Count")
    start: int = Field(default=0, alias="Start")


class UsersSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    count: int = Field(default=0, alias="Count")


class OrgSpec(BaseModel):
    """一个 orderer 组织或 peer 组织的声明。"""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", alias="Name")
    domain: str = Field(default="", alias="Domain")
    ca_file: str = Field(default="", alias="CaFile")
    specs: Optional[List[HostSpec]] = Field(default=None, alias="Specs")
    template: NodeTemplate = Field(default_factory=NodeTemplate, alias="Template")
    users: UsersSpec = Field(default_factory=UsersSpec, alias="Users")


class Topology(BaseModel):
    """拓扑描述：orderer 组织、peer 组织、全局主题模板与输出根目录。"""

    model_config = ConfigDict(populate_by_name=True)

    orderer_orgs: List[OrgSpec] = Field(default_factory=list, alias="OrdererOrgs")
    peer_orgs: List[OrgSpec] = Field(default_factory=list, alias="PeerOrgs")
    subject: SubjectConfig = Field(default_factory=SubjectConfig, alias="Subject")
    output: str = Field(default="", alias="Output")


class Subject(BaseModel):
    """列表形式的可分辨名称，每个属性可能有多个取值。"""

    model_config = ConfigDict(frozen=True)

    country: Tuple[str, ...] = ()
    province: Tuple[str, ...] = ()
    locality: Tuple[str, ...] = ()
    organization: Tuple[str, ...] = ()
    organizational_unit: Tuple[str, ...] = ()
    common_name: str = ""


class Node(BaseModel):
    """由拓扑推导出的一个节点身份，创建后不可修改。"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="批次内唯一的节点名称，同时作为证书 CN")
    kind: NodeKind = Field(description="节点类型")
    ca_file: str = Field(description="所属组织的 CA 文件")
    subject: Subject = Field(description="证书主题")
    output: str = Field(description="证书材料的输出路径")
    org_name: str = Field(description="所属组织名称")


class AttrConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="Name")
    value: str = Field(alias="Value")


class RegisterConfig(BaseModel):
    """向 CA 注册身份时使用的参数。"""

    model_config = ConfigDict(populate_by_name=True)

    registered: bool = Field(default=False, alias="Registered")
    enroll_id: str = Field(alias="EnrollID")
    type: str = Field(alias="Type")
    secret: str = Field(alias="Secret")
    max_enrollments: int = Field(default=-1, alias="MaxEnrollments")
    affiliation: str = Field(default=".", alias="Affiliation")
    attrs: List[AttrConfig] = Field(default_factory=list, alias="Attrs")


class EnrollConfig(BaseModel):
    """向 CA 登记（申请证书）时使用的参数。"""

    model_config = ConfigDict(populate_by_name=True)

    enroll_id: str = Field(alias="EnrollID")
    secret: str = Field(alias="Secret")
    subject: SubjectConfig = Field(default_factory=SubjectConfig, alias="Subject")


class NodeConfig(BaseModel):
    """单个节点的注册 + 登记请求。"""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="Name")
    ca_file: str = Field(alias="CaFile")
    output: str = Field(alias="Output")
    registration: RegisterConfig = Field(alias="Register")
    enroll: EnrollConfig = Field(alias="Enroll")


class EnrollmentBatch(BaseModel):
    """登记请求批次，顺序与节点序列一致。"""

    model_config = ConfigDict(populate_by_name=True)

    nodes: List[NodeConfig] = Field(default_factory=list, alias="Nodes")


class NodeView(BaseModel):
    """HTTP 接口返回的节点视图。"""

    name: str
    kind: NodeKind
    ca_file: str
    org_name: str
    output: str
    dn: str = Field(description="RFC 4514 格式的证书主题")


class NodeListResponse(BaseModel):
    nodes: List[NodeView] = Field(default_factory=list)
