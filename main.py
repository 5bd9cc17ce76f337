import logging

from fastapi import FastAPI

from backend.routers.prep_router import router as prep_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="SkillBridge Prep",
    description="Turns a job description into a study plan, a quiz bank and coding challenges.",
)

app.include_router(prep_router, prefix="/api", tags=["prep"])

if __name__ == "__main__":
    import uvicorn
    from backend.config import HOST, PORT

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host=HOST, port=PORT)
