"""
FastAPI 应用入口
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from saga.config import configure_logging, settings, validate_config
from saga.routers import combat_router

configure_logging()
logger = logging.getLogger(__name__)

# 创建 FastAPI 应用
app = FastAPI(
    title="Saga 战斗核心 API",
    description="回合制战斗结算：属性推导、掷骰、奖励与领地征服",
    version="0.1.0",
)

# 配置 CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(combat_router, prefix=settings.api_prefix, tags=["Combat"])


@app.on_event("startup")
async def startup_event():
    """应用启动时的初始化"""
    if validate_config():
        logger.info("配置验证通过")
    else:
        logger.warning("配置验证失败，请检查环境变量")
    logger.info("RPG mode: %s, RNG seed: %s", settings.rpg_mode, settings.rng_seed)


@app.get("/")
async def root():
    """根路径"""
    return {
        "message": "Saga 战斗核心 API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """健康检查"""
    return {"status": "healthy"}
