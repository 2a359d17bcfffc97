from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from src.config import settings
from src.database import Base, engine
from src.exception_handlers import register_exception_handlers
from src.logger_config import logger
from src.auth import router as auth_router
from src.movies import router as movies_router
from src.theatres import router as theatres_router
from src.seats import router as seats_router
from src.screenings import router as screenings_router
from src.bookings import router as bookings_router

# Create tables that do not exist yet
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Theatre Management System API",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(
    auth_router.router,
    prefix=f"{settings.API_V1_STR}/auth",
    tags=["Authentication"]
)

app.include_router(
    movies_router.router,
    prefix=f"{settings.API_V1_STR}/movies",
    tags=["Movies"]
)

app.include_router(
    theatres_router.router,
    prefix=f"{settings.API_V1_STR}/theatres",
    tags=["Theatres"]
)

app.include_router(
    seats_router.router,
    prefix=f"{settings.API_V1_STR}/seats",
    tags=["Seats"]
)

app.include_router(
    screenings_router,
    prefix=f"{settings.API_V1_STR}/screenings",
    tags=["Screenings"]
)

app.include_router(
    bookings_router,
    prefix=f"{settings.API_V1_STR}/bookings",
    tags=["Bookings"]
)

logger.info(f"{settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Theatre Management System API",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
