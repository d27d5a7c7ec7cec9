from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from starlette.responses import JSONResponse

from app.db.database import get_db, ping_db


class UtilsRouter:
    def __init__(self, router: APIRouter):
        self.router = router
        self._register_routes()

    def _register_routes(self):
        self.router.get("/")(self.root)
        self.router.get("/health")(self.health)

    @staticmethod
    async def root():
        """Информация о сервисе"""
        return {
            "message": "Welcome to Users API",
            "status": "running",
            "docs": "/docs",
        }

    @staticmethod
    async def health(db: AsyncIOMotorDatabase = Depends(get_db)):
        """Проверка здоровья"""
        if not await ping_db(db):
            return JSONResponse(
                content={"status": "unhealthy", "database": "disconnected"},
                status_code=503,
            )
        return {"status": "healthy", "database": "connected"}
