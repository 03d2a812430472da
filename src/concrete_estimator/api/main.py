import logging
from typing import Any, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from concrete_estimator import __version__
from concrete_estimator.engine import InvalidInput, get_preset_mix_ratios, validate_estimation_input
from concrete_estimator.services.export_service import (
    SUPPORTED_FORMATS,
    ExportOptions,
    generate_csv_export,
    generate_json_export,
    get_export_filename,
)
from concrete_estimator.api.state import engine

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Concrete Estimator API",
    description="Material quantities and cost for concrete pours (volumetric mix method)",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ExportRequest(BaseModel):
    results: Optional[dict] = None
    projectName: Optional[str] = None
    location: Optional[str] = None


@app.get("/")
async def root():
    return {"status": "online", "message": "Concrete Estimator API Active"}


@app.get("/api/v1/presets")
async def get_presets():
    return {label: ratio.to_dict() for label, ratio in get_preset_mix_ratios().items()}


@app.post("/api/v1/estimate")
async def create_estimate(payload: Any = Body(None)):
    # Raw JSON body: every shape or type problem is reported by the validator
    if isinstance(payload, dict):
        payload = {key: value for key, value in payload.items() if value is not None}

    errors = validate_estimation_input(payload)
    if errors:
        raise HTTPException(
            status_code=400,
            detail={"message": "Invalid input parameters", "errors": errors}
        )

    try:
        result = engine.estimate_from_dict(payload)
    except InvalidInput as e:
        raise HTTPException(
            status_code=400,
            detail={"message": "Invalid input parameters", "errors": [str(e)]}
        )
    except Exception as e:
        logger.exception("Estimation error")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "results": jsonable_encoder(result.to_dict()),
        "links": {
            "downloadCsv": "/api/v1/estimate/export/csv",
            "downloadJson": "/api/v1/estimate/export/json",
        }
    }


@app.post("/api/v1/estimate/export/{fmt}")
async def export_estimate(fmt: str, req: ExportRequest):
    if not req.results or not req.projectName:
        raise HTTPException(status_code=400, detail="Results and project name are required")
    if fmt not in SUPPORTED_FORMATS:
        raise HTTPException(status_code=400, detail="Unsupported export format")

    options = ExportOptions(project_name=req.projectName, location=req.location)
    filename = get_export_filename(req.projectName, fmt, options.date)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}

    try:
        if fmt == "csv":
            content = generate_csv_export(req.results, options)
            return Response(content=content, media_type="text/csv", headers=headers)
        content = generate_json_export(req.results, options)
        return JSONResponse(content=jsonable_encoder(content), headers=headers)
    except (KeyError, TypeError) as e:
        raise HTTPException(status_code=400, detail=f"Malformed results: {e}")
    except Exception:
        logger.exception("Export error")
        raise HTTPException(status_code=500, detail="Export failed")


@app.get("/system/status")
async def get_status():
    return {
        "engine_active": True,
        "version": __version__,
        "unit_costs": engine.unit_costs.to_dict(),
        "default_dry_factor": engine.settings.default_dry_factor,
        "default_wastage_factor": engine.settings.default_wastage_factor,
        "presets": list(get_preset_mix_ratios().keys()),
    }
