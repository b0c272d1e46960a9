import logging

from fastapi import Depends, FastAPI, HTTPException, Request

from .config import ConverterSettings, get_settings
from .converter import convert_csv_bytes, validate_csv_bytes
from .models import ConversionResult, ConversionStats, HealthResponse
from .transform import calculate_stats

logging.basicConfig(level=get_settings().log_level)

app = FastAPI(
    title="tariff-csv",
    description="Hierarchical price list CSV to normalized JSON conversion",
    version="0.1.0",
)


async def _read_body(request: Request, settings: ConverterSettings) -> bytes:
    raw = await request.body()
    if len(raw) > settings.max_content_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"CSV content exceeds {settings.max_content_bytes} bytes",
        )
    return raw


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/convert", response_model=ConversionResult, response_model_exclude_none=True)
async def convert(request: Request, settings: ConverterSettings = Depends(get_settings)):
    raw = await _read_body(request, settings)
    return convert_csv_bytes(raw, settings)


@app.post("/validate", response_model=ConversionResult, response_model_exclude_none=True)
async def validate(request: Request, settings: ConverterSettings = Depends(get_settings)):
    raw = await _read_body(request, settings)
    return validate_csv_bytes(raw, settings)


@app.post("/stats", response_model=ConversionStats)
async def stats(request: Request, settings: ConverterSettings = Depends(get_settings)):
    raw = await _read_body(request, settings)
    result = convert_csv_bytes(raw, settings)
    if not result.success:
        raise HTTPException(status_code=422, detail=result.to_payload()["errors"])
    return calculate_stats(result.data)
