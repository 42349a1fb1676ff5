import logging
import shutil
import tempfile
import time
from pathlib import Path

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import FileResponse, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.config import settings
from fleet_portal.database import get_db
from fleet_portal.excel.ledger_reader import read_ledger_workbook
from fleet_portal.excel.ledger_writer import write_ledger_workbook
from fleet_portal.models.car import Car
from fleet_portal.models.user import User
from fleet_portal.routers.auth import require_admin
from fleet_portal.schemas.common import ApiResponse, PageResponse
from fleet_portal.schemas.ledger import (
    DynamicSubcategoryCreate,
    DynamicSubcategoryRename,
    DynamicSubcategoryResponse,
    DynamicValueSet,
    FormulaSettingResponse,
    FormulaUpdate,
    ImportResult,
    LedgerLogResponse,
    LedgerReceiptResponse,
    LedgerResponse,
    LedgerUpdate,
)
from fleet_portal.services import ledger_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/income-expense",
    tags=["income-expense"],
    dependencies=[Depends(require_admin)],
)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# --- Helpers ---


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def _ledger_to_response(ledger: dict) -> LedgerResponse:
    return LedgerResponse(
        car_id=ledger["car_id"],
        year=ledger["year"],
        formula_setting=FormulaSettingResponse(**ledger["formula_setting"]),
        categories=ledger["categories"],
        remarks=ledger["remarks"],
        dynamic_subcategories={
            key: [DynamicSubcategoryResponse.model_validate(s) for s in subs]
            for key, subs in ledger["dynamic_subcategories"].items()
        },
    )


# --- Ledger ---


@router.get("/{car_id}/{year}")
async def get_ledger(
    car_id: int,
    year: int,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[LedgerResponse]:
    try:
        ledger = await ledger_service.get_ledger(db, car_id, year)
    except ValueError as e:
        return ApiResponse.fail(str(e))
    return ApiResponse.ok(_ledger_to_response(ledger))


@router.get("/totals/{car_id}/{year}")
async def get_totals(
    car_id: int,
    year: int,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[dict]:
    try:
        return ApiResponse.ok(await ledger_service.get_totals(db, car_id, year))
    except ValueError as e:
        return ApiResponse.fail(str(e))


@router.get("/log/{car_id}/{year}")
async def get_log(
    car_id: int,
    year: int,
    category: str | None = Query(default=None),
    search: str | None = Query(default=None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
) -> PageResponse[LedgerLogResponse]:
    rows, total = await ledger_service.get_log(
        db, car_id, year, category=category, search=search, page=page, limit=limit
    )
    return PageResponse.ok(
        [LedgerLogResponse.model_validate(r) for r in rows],
        total=total,
        page=page,
        limit=limit,
    )


@router.post("/formula")
async def save_formula(
    body: FormulaUpdate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[FormulaSettingResponse]:
    try:
        modes = await ledger_service.set_month_modes(db, body.car_id, body.year, body.month_modes)
    except ValueError as e:
        return ApiResponse.fail(str(e))
    return ApiResponse.ok(
        FormulaSettingResponse(car_id=body.car_id, year=body.year, month_modes=modes)
    )


# --- Dynamic subcategories ---


@router.get("/dynamic-subcategories/{car_id}/{year}/{category_type}")
async def list_dynamic_subcategories(
    car_id: int,
    year: int,
    category_type: str,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[DynamicSubcategoryResponse]]:
    subs = await ledger_service.list_dynamic_subcategories(db, car_id, year, category_type)
    return ApiResponse.ok([DynamicSubcategoryResponse.model_validate(s) for s in subs])


@router.post("/dynamic-subcategories")
async def add_dynamic_subcategory(
    body: DynamicSubcategoryCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[DynamicSubcategoryResponse]:
    try:
        sub = await ledger_service.add_dynamic_subcategory(
            db, body.car_id, body.year, body.category_type, body.name
        )
    except ValueError as e:
        return ApiResponse.fail(str(e))
    return ApiResponse.ok(DynamicSubcategoryResponse.model_validate(sub))


@router.put("/dynamic-subcategories/{sub_id}")
async def rename_dynamic_subcategory(
    sub_id: int,
    body: DynamicSubcategoryRename,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[DynamicSubcategoryResponse]:
    sub = await ledger_service.rename_dynamic_subcategory(db, sub_id, body.name)
    if sub is None:
        return ApiResponse.fail(f"Subcategory with id {sub_id} not found")
    return ApiResponse.ok(DynamicSubcategoryResponse.model_validate(sub))


@router.delete("/dynamic-subcategories/{sub_id}")
async def delete_dynamic_subcategory(
    sub_id: int,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    deleted = await ledger_service.delete_dynamic_subcategory(db, sub_id)
    if not deleted:
        return ApiResponse.fail(f"Subcategory with id {sub_id} not found")
    return ApiResponse.ok(None)


@router.post("/dynamic-subcategories/{sub_id}/values")
async def set_dynamic_value(
    sub_id: int,
    body: DynamicValueSet,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_admin),
) -> ApiResponse[DynamicSubcategoryResponse]:
    sub = await ledger_service.set_dynamic_value(
        db, sub_id, body.month, body.value, actor=user, ip_address=_client_ip(request)
    )
    if sub is None:
        return ApiResponse.fail(f"Subcategory with id {sub_id} not found")
    return ApiResponse.ok(DynamicSubcategoryResponse.model_validate(sub))


# --- Receipts ---


@router.post("/receipts/{car_id}/{year}/{month}/{category}/{field}")
async def upload_receipt(
    car_id: int,
    year: int,
    month: int,
    category: str,
    field: str,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_admin),
) -> ApiResponse[LedgerReceiptResponse]:
    if not 1 <= month <= 12:
        return ApiResponse.fail("Month must be between 1 and 12")

    ext = Path(file.filename or "").suffix.lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        return ApiResponse.fail(
            f"Invalid image format. Allowed: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}"
        )

    content = await file.read()
    if len(content) > MAX_IMAGE_SIZE:
        return ApiResponse.fail("Image too large. Maximum 5MB.")

    receipts_dir = settings.RECEIPTS_DIR
    receipts_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{car_id}_{year}_{month:02d}_{category}_{field}_{int(time.time() * 1000)}{ext}"
    file_path = receipts_dir / filename
    file_path.write_bytes(content)

    try:
        receipt = await ledger_service.add_receipt(
            db, car_id, year, month, category, field, filename, actor=user
        )
    except ValueError as e:
        file_path.unlink(missing_ok=True)
        return ApiResponse.fail(str(e))
    return ApiResponse.ok(LedgerReceiptResponse.model_validate(receipt))


@router.get("/receipts/{car_id}/{year}/{month}/{category}/{field}")
async def list_receipts(
    car_id: int,
    year: int,
    month: int,
    category: str,
    field: str,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[LedgerReceiptResponse]]:
    receipts = await ledger_service.list_receipts(db, car_id, year, month, category, field)
    return ApiResponse.ok([LedgerReceiptResponse.model_validate(r) for r in receipts])


@router.get("/receipts/file/{filename}")
async def get_receipt_image(filename: str):
    """Serve a receipt image file."""
    # Strip directories so only files inside RECEIPTS_DIR can be served
    safe_name = Path(filename).name
    file_path = settings.RECEIPTS_DIR / safe_name
    if not file_path.exists():
        return ApiResponse.fail("Receipt image not found")
    return FileResponse(file_path)


# --- Export / import ---


@router.get("/export/{car_id}/{year}")
async def export_ledger(
    car_id: int,
    year: int,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Car).where(Car.id == car_id))
    car = result.scalar_one_or_none()
    if car is None:
        return ApiResponse.fail(f"Car with id {car_id} not found")

    ledger = await ledger_service.get_ledger(db, car_id, year)
    totals = await ledger_service.get_totals(db, car_id, year)
    content = write_ledger_workbook(car, ledger, totals)
    filename = f"income_expense_{car_id}_{year}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import/{car_id}/{year}")
async def import_ledger(
    car_id: int,
    year: int,
    request: Request,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_admin),
) -> ApiResponse[ImportResult]:
    """Import a ledger workbook produced by the export endpoint."""
    suffix = Path(file.filename or "upload.xlsx").suffix or ".xlsx"
    fd, tmp_path = tempfile.mkstemp(suffix=suffix)
    try:
        with open(fd, "wb") as f:
            shutil.copyfileobj(file.file, f)
        parsed = read_ledger_workbook(tmp_path)
    except Exception as e:
        logger.warning("Ledger import for car %d/%d could not be read: %s", car_id, year, e)
        return ApiResponse.fail(f"Import failed: {e}")
    finally:
        Path(tmp_path).unlink(missing_ok=True)

    changed = 0
    errors = list(parsed["errors"])
    for (category, month), values in sorted(parsed["cells"].items()):
        try:
            changed += await ledger_service.write_category(
                db, car_id, year, month, category, values,
                actor=user, ip_address=_client_ip(request),
            )
        except ValueError as e:
            errors.append(f"{category} month {month}: {e}")

    logger.info("Import changed %d ledger cell(s) for car %d/%d", changed, car_id, year)
    return ApiResponse.ok(
        ImportResult(cells_changed=changed, skipped=parsed["skipped"], errors=errors)
    )


# Declared last so the fixed POST paths above take precedence.
@router.post("/{category}")
async def update_category(
    category: str,
    body: LedgerUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_admin),
) -> ApiResponse[dict]:
    try:
        row = await ledger_service.update_category(
            db,
            body.car_id,
            body.year,
            body.month,
            category,
            body.values,
            remarks=body.remarks,
            actor=user,
            ip_address=_client_ip(request),
        )
    except ValueError as e:
        logger.warning("Rejected ledger update for %s: %s", category, e)
        return ApiResponse.fail(str(e))
    return ApiResponse.ok(row)
