from fastapi import FastAPI, APIRouter
from starlette.middleware.cors import CORSMiddleware

from config import logger
from routers import scan

# Create the main app without a prefix
app = FastAPI(title="MyJantes - Scan carte grise")

# Create a router with the /api prefix
api_router = APIRouter(prefix="/api")


@api_router.get("/")
async def root():
    return {"message": "MyJantes API - scan carte grise"}


api_router.include_router(scan.router)

# Include the router in the main app
app.include_router(api_router)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("MyJantes API démarrée")
