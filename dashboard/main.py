from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dashboard.routers import health, widgets, columns, holdings

app = FastAPI(
    title="Wealth Dashboard Layout API",
    description="Widget layout, column layout and table view operations for the advisor dashboard.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS (Allow local frontend development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include Routers
app.include_router(health.router)
app.include_router(widgets.router)
app.include_router(columns.router)
app.include_router(holdings.router)

@app.get("/", tags=["Root"])
def root():
    return {"status": "ok", "message": "Dashboard Layout API is running", "docs": "/docs"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
