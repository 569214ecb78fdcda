"""
节点解析与登记批次的 FastAPI 路由定义。
"""

from fastapi import APIRouter, HTTPException
from . import services
from .schemas import EnrollmentBatch, NodeListResponse, Topology

router = APIRouter(prefix="/node", tags=["Node"])


@router.post("/resolve", response_model=NodeListResponse)
async def resolve_nodes(topology: Topology) -> NodeListResponse:
    """
    解析拓扑描述，返回节点身份列表。
    """
    try:
        return services.node_list_service(topology)
    except ValueError as e:
        # 严格校验失败，返回 400
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"内部服务器错误: {str(e)}")


@router.post("/enrollment-batch", response_model=EnrollmentBatch)
async def create_enrollment_batch(topology: Topology) -> EnrollmentBatch:
    """
    解析拓扑描述并生成登记批次。
    """
    try:
        return services.enrollment_batch_service(topology)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"内部服务器错误: {str(e)}")


@router.get("/enrollment-batch", response_model=EnrollmentBatch)
async def get_configured_enrollment_batch() -> EnrollmentBatch:
    """
    使用服务端配置的拓扑文件生成登记批次。
    """
    try:
        return services.configured_enrollment_batch_service()
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"内部服务器错误: {str(e)}")
