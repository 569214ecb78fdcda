"""
FastAPI 应用入口点。
"""

from loguru import logger
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware

from fastapi import FastAPI
from src.server.node.router import router as node_router

from src.server.config import config


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 同时配置了拓扑文件与导出路径时，启动即生成一次登记批次
    if config.topology_file and config.export_file:
        from src.server.node import services

        try:
            batch = services.configured_enrollment_batch_service()
            services.export_enrollment_batch(batch, config.export_file)
        except (FileNotFoundError, ValueError) as e:
            logger.warning(f"启动时未能生成登记批次：{e}")
    yield
    logger.info("应用关闭")


app = FastAPI(title="Crypto Topology Enrollment Service", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(node_router, prefix="/v1")

logger.info(f"config: {config.model_dump_json(indent=4)}")
