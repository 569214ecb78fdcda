"""
测试 router.py 模块。
"""

from fastapi import FastAPI
from fastapi.testclient import TestClient
from unittest.mock import patch

from src.server.config import config
from src.server.node.router import router
from src.server.node.schemas import EnrollmentBatch, Topology


# 创建一个 FastAPI 应用并包含我们的路由
app = FastAPI()
app.include_router(router)

# 创建测试客户端
client = TestClient(app)

TOPOLOGY = {
    "OrdererOrgs": [
        {"Name": "Orderer", "Domain": "example.com", "CaFile": "ca/o.pem", "Specs": [{"Hostname": "orderer0"}]}
    ],
    "PeerOrgs": [
        {"Name": "Org1", "Domain": "org1.com", "CaFile": "ca/org1.pem", "Template": {"Count": 2}, "Users": {"Count": 1}}
    ],
    "Subject": {"Country": "CN"},
    "Output": "/data/crypto",
}


def test_resolve_endpoint():
    response = client.post("/node/resolve", json=TOPOLOGY)

    assert response.status_code == 200
    nodes = response.json()["nodes"]
    assert [n["name"] for n in nodes] == [
        "orderer0.example.com",
        "Admin@example.com",
        "User1@example.com",
        "peer0.org1.com",
        "peer1.org1.com",
        "Admin@org1.com",
        "User1@org1.com",
    ]
    assert nodes[3]["kind"] == "peer"
    assert nodes[3]["output"] == "/data/crypto/peerOrganizations/org1.com/peers/peer0.org1.com"
    assert nodes[3]["dn"] == "CN=peer0.org1.com,L=CN,ST=CN,C=CN"


def test_enrollment_batch_endpoint():
    response = client.post("/node/enrollment-batch", json=TOPOLOGY)

    assert response.status_code == 200
    items = response.json()["Nodes"]
    assert len(items) == 7
    assert items[0]["Register"]["Type"] == "orderer"
    assert items[0]["Register"]["Attrs"][0] == {"Name": "hf.Registrar.Roles", "Value": "orderer"}
    assert items[0]["Enroll"]["EnrollID"] == "orderer0.example.com"
    assert items[2]["Register"]["Type"] == "client"


def test_enrollment_batch_endpoint_strict_validation(monkeypatch):
    monkeypatch.setattr(config, "strict_topology", True)
    bad = {"PeerOrgs": [{"Domain": "", "Users": {"Count": -1}}]}

    response = client.post("/node/enrollment-batch", json=bad)

    assert response.status_code == 400
    assert "domain" in response.json()["detail"]


def test_enrollment_batch_endpoint_validation_error():
    """字段类型错误由 Pydantic 拦截"""
    response = client.post("/node/enrollment-batch", json={"PeerOrgs": "not-a-list"})
    assert response.status_code == 422


def test_enrollment_batch_endpoint_unexpected_error():
    with patch("src.server.node.services.enrollment_batch_service") as mock_service:
        mock_service.side_effect = RuntimeError("boom")
        response = client.post("/node/enrollment-batch", json=TOPOLOGY)

    assert response.status_code == 500
    assert "内部服务器错误" in response.json()["detail"]
    mock_service.assert_called_once_with(Topology(**TOPOLOGY))


def test_configured_batch_endpoint_not_configured(monkeypatch):
    monkeypatch.setattr(config, "topology_file", None)
    response = client.get("/node/enrollment-batch")
    assert response.status_code == 404


def test_configured_batch_endpoint(tmp_path, monkeypatch):
    path = tmp_path / "crypto.yaml"
    path.write_text("PeerOrgs:\n  - Domain: org1.com\n    Template:\n      Count: 1\n", encoding="utf-8")
    monkeypatch.setattr(config, "topology_file", str(path))
    monkeypatch.setattr(config, "output_base", "/base")

    response = client.get("/node/enrollment-batch")

    assert response.status_code == 200
    batch = EnrollmentBatch.model_validate(response.json())
    assert [r.output for r in batch.nodes] == [
        "/base/peerOrganizations/org1.com/peers/peer0.org1.com",
        "/base/peerOrganizations/org1.com/users/Admin@org1.com",
    ]


def test_configured_batch_endpoint_bad_file(tmp_path, monkeypatch):
    path = tmp_path / "crypto.yaml"
    path.write_text("PeerOrgs: [\n", encoding="utf-8")
    monkeypatch.setattr(config, "topology_file", str(path))

    response = client.get("/node/enrollment-batch")
    assert response.status_code == 400


def test_resolve_endpoint_accepts_non_x509_compliant_subject():
    """国家代码不是两位、CN 超过 64 字符时仍然返回节点视图，与登记批次接口一致"""
    long_domain = "a" * 70 + ".com"
    body = {
        "PeerOrgs": [
            {"Domain": "org1.com", "Template": {"Count": 1}},
            {"Domain": long_domain, "Template": {"Count": 1}},
        ],
        "Subject": {"Country": "China"},
    }

    response = client.post("/node/resolve", json=body)

    assert response.status_code == 200
    nodes = response.json()["nodes"]
    assert nodes[0]["dn"] == "CN=peer0.org1.com,L=China,ST=China,C=China"
    assert nodes[2]["name"] == f"peer0.{long_domain}"
    assert nodes[2]["dn"].startswith(f"CN=peer0.{long_domain},")
    assert client.post("/node/enrollment-batch", json=body).status_code == 200


def test_configured_batch_endpoint_unreadable_file(tmp_path, monkeypatch):
    """拓扑路径是目录时返回 400 而不是 500"""
    path = tmp_path / "crypto.json"
    path.mkdir()
    monkeypatch.setattr(config, "topology_file", str(path))

    response = client.get("/node/enrollment-batch")
    assert response.status_code == 400
