"""FastAPI entry point"""
from contextlib import asynccontextmanager
from datetime import date
from typing import Optional, Dict, Any, List

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from loguru import logger

from . import __version__
from .config import settings
from .inventory import InventorySnapshot
from .schedule import (
    ScheduleStore,
    ScheduleEntryRequest,
    SchedulePatch,
    BatchPlan,
    NotFoundError,
    PersistenceError,
    ValidationError,
    generate_batch_plans,
    plan_schedule_requests,
    check_availability,
)

# Global store instance
store: Optional[ScheduleStore] = None


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    """Application lifecycle"""
    global store

    logger.info("=" * 50)
    logger.info("  Roastledger schedule service")
    logger.info(f"  Schedule file: {settings.schedule_path}")
    logger.info("=" * 50)

    store = ScheduleStore.from_json_file(settings.schedule_path)
    store.on_event(lambda event: logger.debug(f"Schedule event: {event.to_dict()}"))

    logger.info(f"FastAPI docs: http://{settings.host}:{settings.port}/docs")

    yield

    logger.info("Shutting down...")
    store = None


app = FastAPI(
    title="Roastledger",
    description="Roast schedule service for coffee roasting operations",
    version=__version__,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============== Error mapping ==============

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):  # noqa: ARG001
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):  # noqa: ARG001
    return JSONResponse(status_code=400, content={"detail": str(exc), "field": exc.field})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):  # noqa: ARG001
    error = exc.errors()[0]
    names = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = names[-1] if names else "body"
    return JSONResponse(
        status_code=400,
        content={"detail": f"{field}: {error.get('msg', 'invalid value')}", "field": field},
    )


@app.exception_handler(PersistenceError)
async def persistence_handler(request: Request, exc: PersistenceError):  # noqa: ARG001
    logger.error(f"Schedule write failed: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": f"Schedule change was not saved: {exc}"},
    )


def _require_store() -> ScheduleStore:
    if not store:
        raise HTTPException(status_code=503, detail="Service not ready")
    return store


# ============== Pydantic Models ==============

# Schedule fields are typed Any so values reach the schedule validators uncoerced
class ScheduleCreateRequest(BaseModel):
    """Create a scheduled roast"""
    coffee_name: Any
    green_coffee_name: Any
    scheduled_date: Any
    green_weight: Any
    target_roast_level: Any
    equipment_id: Any
    notes: Any = None
    priority: Any = None


class SchedulePatchRequest(BaseModel):
    """Update a scheduled roast"""
    coffee_name: Any = None
    green_coffee_name: Any = None
    scheduled_date: Any = None
    green_weight: Any = None
    target_roast_level: Any = None
    equipment_id: Any = None
    notes: Any = None
    priority: Any = None


class CompleteRequest(BaseModel):
    """Roast outcome reported on completion"""
    outcome: Optional[Dict[str, Any]] = None


class GreenCoffeeItem(BaseModel):
    coffee_name: str
    current_amount: float
    origin: str = ""


class GreenInventoryRequest(BaseModel):
    """On-hand green coffee from the inventory ledger"""
    green: List[GreenCoffeeItem]
    batch_size_g: Optional[float] = None


class PlanScheduleRequest(BaseModel):
    """Schedule every batch of a plan"""
    plan: Dict[str, Any]
    start_date: Optional[str] = None
    equipment_id: str = ""
    spacing_days: Optional[int] = None


def _inventory(request: GreenInventoryRequest) -> InventorySnapshot:
    return InventorySnapshot.from_dict({"green": [item.model_dump() for item in request.green]})


# ============== REST API ==============

@app.get("/")
async def root():
    """Root"""
    return {"name": "roastledger", "version": __version__, "docs": "/docs"}


@app.get("/health")
@app.get("/api/health")
async def health():
    """Health check"""
    schedule_store = _require_store()
    summary = await schedule_store.summary(days=settings.upcoming_days)
    return {
        "status": "ok",
        "schedule": summary.to_dict(),
        "load_failures": schedule_store.state.load_failures,
    }


# ============== Schedule API ==============

@app.get("/api/schedule")
async def list_schedule():
    """List every scheduled roast by date"""
    entries = await _require_store().list()
    return {"entries": [e.to_dict() for e in entries], "total": len(entries)}


@app.get("/api/schedule/upcoming")
async def list_upcoming(days: Optional[int] = Query(None, ge=0)):
    """Incomplete roasts due within the upcoming window"""
    if days is None:
        days = settings.upcoming_days
    entries = await _require_store().upcoming(days=days)
    return {"entries": [e.to_dict() for e in entries], "total": len(entries)}


@app.get("/api/schedule/overdue")
async def list_overdue():
    """Incomplete roasts scheduled before today"""
    entries = await _require_store().overdue()
    return {"entries": [e.to_dict() for e in entries], "total": len(entries)}


@app.get("/api/schedule/summary")
async def schedule_summary():
    """Dashboard counts"""
    summary = await _require_store().summary(days=settings.upcoming_days)
    return summary.to_dict()


@app.post("/api/schedule/availability")
async def schedule_availability(request: GreenInventoryRequest):
    """Check incomplete roasts against on-hand green coffee"""
    entries = await _require_store().list()
    results = check_availability(entries, _inventory(request))
    return {
        "entries": [r.to_dict() for r in results],
        "insufficient": sum(1 for r in results if not r.sufficient),
    }


@app.get("/api/schedule/{entry_id}")
async def get_entry(entry_id: str):
    """Get a scheduled roast"""
    entry = await _require_store().get(entry_id)
    return {"entry": entry.to_dict()}


@app.post("/api/schedule", status_code=201)
async def create_entry(request: ScheduleCreateRequest):
    """Schedule a roast"""
    entry = await _require_store().create(
        ScheduleEntryRequest.from_dict(request.model_dump())
    )
    return {"entry": entry.to_dict()}


@app.patch("/api/schedule/{entry_id}")
async def update_entry(entry_id: str, request: SchedulePatchRequest):
    """Update a scheduled roast"""
    patch = SchedulePatch.from_dict(request.model_dump(exclude_none=True))
    entry = await _require_store().update(entry_id, patch)
    return {"entry": entry.to_dict()}


@app.post("/api/schedule/{entry_id}/complete")
async def complete_entry(entry_id: str, request: Optional[CompleteRequest] = None):
    """Mark a scheduled roast as completed"""
    outcome = request.outcome if request else None
    entry = await _require_store().complete(entry_id, outcome)
    return {"entry": entry.to_dict()}


@app.delete("/api/schedule/{entry_id}")
async def delete_entry(entry_id: str):
    """Delete a scheduled roast"""
    await _require_store().delete(entry_id)
    return {"status": "deleted", "entry_id": entry_id}


# ============== Planner API ==============

@app.post("/api/planner/plans")
async def batch_plans(request: GreenInventoryRequest):
    """Suggest batch plans for on-hand green coffee"""
    batch_size = request.batch_size_g or settings.batch_size_g
    if batch_size <= 0:
        raise HTTPException(status_code=400, detail="batch_size_g must be greater than zero")
    plans = generate_batch_plans(_inventory(request).green, batch_size)
    return {"plans": [p.to_dict() for p in plans], "total": len(plans)}


@app.post("/api/planner/schedule", status_code=201)
async def schedule_plan(request: PlanScheduleRequest):
    """Schedule every batch of a plan"""
    schedule_store = _require_store()

    try:
        plan = BatchPlan.from_dict(request.plan)
        start = date.fromisoformat(request.start_date) if request.start_date else date.today()
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid plan: {e}")

    requests = plan_schedule_requests(
        plan,
        start,
        spacing_days=request.spacing_days or settings.batch_spacing_days,
        equipment_id=request.equipment_id,
    )
    if not requests:
        raise HTTPException(status_code=400, detail="Plan contains no batches")

    entries = await schedule_store.create_many(requests)
    logger.info(f"Scheduled {len(entries)} roasts for {plan.coffee_name}")
    return {"entries": [e.to_dict() for e in entries], "total": len(entries)}


# ============== Entry point ==============

def main():
    """Start the FastAPI server"""
    import uvicorn

    uvicorn.run(
        "roastledger.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
