import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_portal.ledger_fields import (
    CATEGORIES,
    DEFAULT_MODE,
    DYNAMIC_CATEGORIES,
    INCOME_FIELDS,
    MONTHS,
    MODE_SPLITS,
    cell_value,
    empty_ledger,
    get_category,
    split_for_mode,
    validate_value,
)
from fleet_portal.models.car import Car
from fleet_portal.models.dynamic_subcategory import (
    DynamicSubcategory,
    DynamicSubcategoryValue,
)
from fleet_portal.models.formula_setting import FormulaSetting
from fleet_portal.models.ledger_log import LedgerLog
from fleet_portal.models.ledger_value import LedgerReceipt, LedgerValue
from fleet_portal.models.user import User
from fleet_portal.utils.currency import round_cents

logger = logging.getLogger(__name__)


async def _require_car(db: AsyncSession, car_id: int) -> Car:
    result = await db.execute(select(Car).where(Car.id == car_id))
    car = result.scalar_one_or_none()
    if car is None:
        raise ValueError(f"Car with id {car_id} not found")
    return car


def _remark_key(category: str, field: str, month: int) -> str:
    return f"{category}:{field}:{month}"


# --- Read ---


async def get_month_modes(db: AsyncSession, car_id: int, year: int) -> dict[int, int]:
    """Month -> mode for all twelve months, defaulting to 50."""
    result = await db.execute(
        select(FormulaSetting).where(
            FormulaSetting.car_id == car_id,
            FormulaSetting.year == year,
        )
    )
    setting = result.scalar_one_or_none()
    modes = {month: DEFAULT_MODE for month in MONTHS}
    if setting is not None:
        for key, mode in (setting.month_modes or {}).items():
            modes[int(key)] = int(mode)
    return modes


async def list_dynamic_subcategories(
    db: AsyncSession,
    car_id: int,
    year: int,
    category_type: str | None = None,
) -> list[DynamicSubcategory]:
    query = select(DynamicSubcategory).where(
        DynamicSubcategory.car_id == car_id,
        DynamicSubcategory.year == year,
    )
    if category_type is not None:
        query = query.where(DynamicSubcategory.category_type == category_type)
    query = query.order_by(DynamicSubcategory.display_order, DynamicSubcategory.id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_ledger(db: AsyncSession, car_id: int, year: int) -> dict:
    """Return the whole ledger for a car/year.

    Months and fields that were never written read as zero, so a year's
    ledger exists implicitly as soon as it is queried.
    """
    await _require_car(db, car_id)

    rows = empty_ledger()
    remarks: dict[str, str] = {}
    result = await db.execute(
        select(LedgerValue).where(
            LedgerValue.car_id == car_id,
            LedgerValue.year == year,
        )
    )
    for cell in result.scalars().all():
        spec = CATEGORIES.get(cell.category)
        if spec is None or spec.field(cell.field) is None or cell.month not in MONTHS:
            logger.warning(
                "Ignoring unknown ledger cell %s.%s for car %d/%d",
                cell.category, cell.field, car_id, year,
            )
            continue
        rows[cell.category][cell.month - 1][cell.field] = cell_value(
            spec, cell.field, cell.value
        )
        if cell.remarks:
            remarks[_remark_key(cell.category, cell.field, cell.month)] = cell.remarks

    dynamic = {key: [] for key in DYNAMIC_CATEGORIES}
    for sub in await list_dynamic_subcategories(db, car_id, year):
        dynamic.setdefault(sub.category_type, []).append(sub)

    return {
        "car_id": car_id,
        "year": year,
        "formula_setting": {
            "car_id": car_id,
            "year": year,
            "month_modes": await get_month_modes(db, car_id, year),
        },
        "categories": rows,
        "remarks": remarks,
        "dynamic_subcategories": dynamic,
    }


# --- Point update ---


async def write_category(
    db: AsyncSession,
    car_id: int,
    year: int,
    month: int,
    category: str,
    values: dict[str, float],
    remarks: str | None = None,
    actor: User | None = None,
    ip_address: str | None = None,
) -> int:
    """Write one month of one category and append a log row per changed field.

    Returns the number of fields whose value changed.

    Raises ValueError for unknown categories/fields or values that break the
    field's semantics; nothing is written in that case.
    """
    spec = get_category(category)
    if month not in MONTHS:
        raise ValueError("Month must be between 1 and 12")
    await _require_car(db, car_id)

    validated = {field: validate_value(spec, field, value) for field, value in values.items()}

    result = await db.execute(
        select(LedgerValue).where(
            LedgerValue.car_id == car_id,
            LedgerValue.year == year,
            LedgerValue.month == month,
            LedgerValue.category == category,
            LedgerValue.field.in_(list(validated)),
        )
    )
    existing = {cell.field: cell for cell in result.scalars().all()}

    changed = 0
    for field, new_value in validated.items():
        cell = existing.get(field)
        old_value = cell.value if cell is not None else 0.0
        if cell is None:
            cell = LedgerValue(
                car_id=car_id,
                year=year,
                month=month,
                category=category,
                field=field,
                value=new_value,
                remarks=remarks,
            )
            db.add(cell)
        else:
            cell.value = new_value
            if remarks is not None:
                cell.remarks = remarks

        if old_value != new_value:
            changed += 1
            db.add(
                LedgerLog(
                    car_id=car_id,
                    year=year,
                    month=month,
                    category=category,
                    field=field,
                    field_label=spec.field(field).label,
                    old_value=old_value,
                    new_value=new_value,
                    remarks=remarks,
                    changed_by=actor.id if actor else None,
                    changed_by_name=actor.full_name if actor else None,
                    ip_address=ip_address,
                )
            )

    await db.flush()
    logger.info(
        "Ledger %s car=%d %d/%02d: %d field(s) written, %d changed",
        category, car_id, year, month, len(validated), changed,
    )
    return changed


async def update_category(
    db: AsyncSession,
    car_id: int,
    year: int,
    month: int,
    category: str,
    values: dict[str, float],
    remarks: str | None = None,
    actor: User | None = None,
    ip_address: str | None = None,
) -> dict:
    """Write one month of one category and return the stored month row."""
    await write_category(
        db, car_id, year, month, category, values,
        remarks=remarks, actor=actor, ip_address=ip_address,
    )
    return await get_month_row(db, car_id, year, month, category)


async def get_month_row(
    db: AsyncSession, car_id: int, year: int, month: int, category: str
) -> dict:
    spec = get_category(category)
    row: dict = {"month": month}
    row.update({f.key: cell_value(spec, f.key, 0.0) for f in spec.fields})
    result = await db.execute(
        select(LedgerValue).where(
            LedgerValue.car_id == car_id,
            LedgerValue.year == year,
            LedgerValue.month == month,
            LedgerValue.category == category,
        )
    )
    for cell in result.scalars().all():
        if spec.field(cell.field) is not None:
            row[cell.field] = cell_value(spec, cell.field, cell.value)
    return row


# --- Log ---


async def get_log(
    db: AsyncSession,
    car_id: int,
    year: int,
    category: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[LedgerLog], int]:
    conditions = [LedgerLog.car_id == car_id, LedgerLog.year == year]
    if category:
        conditions.append(LedgerLog.category == category)
    if search:
        pattern = f"%{search.strip().lower()}%"
        conditions.append(
            or_(
                func.lower(LedgerLog.field_label).like(pattern),
                func.lower(LedgerLog.changed_by_name).like(pattern),
            )
        )

    count_result = await db.execute(select(func.count(LedgerLog.id)).where(*conditions))
    total = count_result.scalar() or 0

    result = await db.execute(
        select(LedgerLog)
        .where(*conditions)
        .order_by(LedgerLog.changed_at.desc(), LedgerLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total


# --- Totals ---


def _dynamic_total(subcategories: list[DynamicSubcategory], month: int) -> float:
    total = 0.0
    for sub in subcategories:
        for item in sub.values:
            if item.month == month:
                total += item.value
    return total


def _split_percents(income_row: dict, mode: int) -> tuple[float, float]:
    mgmt = float(income_row.get("car_management_split", 0) or 0)
    owner = float(income_row.get("car_owner_split", 0) or 0)
    if mgmt == 0 and owner == 0:
        return split_for_mode(mode if mode in MODE_SPLITS else DEFAULT_MODE)
    return mgmt, owner


async def get_totals(db: AsyncSession, car_id: int, year: int) -> dict:
    """Monthly and yearly totals per category plus the management split."""
    ledger = await get_ledger(db, car_id, year)
    rows = ledger["categories"]
    dynamic = ledger["dynamic_subcategories"]
    modes = ledger["formula_setting"]["month_modes"]

    months = []
    for month in MONTHS:
        idx = month - 1
        entry: dict = {"month": month}
        for key, spec in CATEGORIES.items():
            if not spec.summed:
                continue
            fixed = sum(float(rows[key][idx][f]) for f in spec.field_keys)
            entry[key] = round_cents(fixed + _dynamic_total(dynamic.get(key, []), month))

        income_row = rows["income"][idx]
        total_income = round_cents(sum(float(income_row[f]) for f in INCOME_FIELDS))
        mgmt_pct, owner_pct = _split_percents(income_row, modes[month])
        shared = entry["direct_delivery"] + entry["cogs"]
        mgmt_expenses = round_cents(entry["reimbursed_bills"] + shared * mgmt_pct / 100)
        owner_expenses = round_cents(shared * owner_pct / 100)
        net_income = round_cents(total_income - mgmt_expenses - owner_expenses)

        entry.update(
            total_income=total_income,
            management_percent=mgmt_pct,
            owner_percent=owner_pct,
            car_management_total_expenses=mgmt_expenses,
            car_owner_total_expenses=owner_expenses,
            total_expenses=round_cents(mgmt_expenses + owner_expenses),
            net_income=net_income,
            car_management_split_amount=round_cents(net_income * mgmt_pct / 100),
            car_owner_split_amount=round_cents(net_income * owner_pct / 100),
        )
        months.append(entry)

    skip = {"month", "management_percent", "owner_percent"}
    year_totals = {
        key: round_cents(sum(m[key] for m in months))
        for key in months[0]
        if key not in skip
    }
    return {"car_id": car_id, "year": year, "months": months, "year_totals": year_totals}


# --- Formula setting ---


async def set_month_modes(
    db: AsyncSession, car_id: int, year: int, month_modes: dict[int, int]
) -> dict[int, int]:
    """Merge ``month_modes`` into the stored setting and return all twelve."""
    for month, mode in month_modes.items():
        if month not in MONTHS:
            raise ValueError(f"Invalid month: {month}")
        split_for_mode(mode)
    await _require_car(db, car_id)

    result = await db.execute(
        select(FormulaSetting).where(
            FormulaSetting.car_id == car_id,
            FormulaSetting.year == year,
        )
    )
    setting = result.scalar_one_or_none()
    merged = dict((setting.month_modes or {}) if setting else {})
    merged.update({str(month): mode for month, mode in month_modes.items()})

    if setting is None:
        db.add(FormulaSetting(car_id=car_id, year=year, month_modes=merged))
    else:
        # Reassign so the JSON column is flagged dirty
        setting.month_modes = merged
    await db.flush()
    return await get_month_modes(db, car_id, year)


# --- Dynamic subcategories ---


async def _get_subcategory(db: AsyncSession, sub_id: int) -> DynamicSubcategory | None:
    result = await db.execute(
        select(DynamicSubcategory)
        .where(DynamicSubcategory.id == sub_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def add_dynamic_subcategory(
    db: AsyncSession, car_id: int, year: int, category_type: str, name: str
) -> DynamicSubcategory:
    if category_type not in DYNAMIC_CATEGORIES:
        raise ValueError(f"Category '{category_type}' does not accept subcategories")
    await _require_car(db, car_id)

    name = name.strip()
    siblings = await list_dynamic_subcategories(db, car_id, year, category_type)
    if any(s.name.lower() == name.lower() for s in siblings):
        raise ValueError(f"Subcategory '{name}' already exists")

    sub = DynamicSubcategory(
        car_id=car_id,
        year=year,
        category_type=category_type,
        name=name,
        display_order=max((s.display_order for s in siblings), default=0) + 1,
        values=[],
    )
    db.add(sub)
    await db.flush()
    return sub


async def rename_dynamic_subcategory(
    db: AsyncSession, sub_id: int, name: str
) -> DynamicSubcategory | None:
    sub = await _get_subcategory(db, sub_id)
    if sub is None:
        return None
    sub.name = name.strip()
    await db.flush()
    return sub


async def delete_dynamic_subcategory(db: AsyncSession, sub_id: int) -> bool:
    sub = await _get_subcategory(db, sub_id)
    if sub is None:
        return False
    await db.delete(sub)
    await db.flush()
    return True


async def set_dynamic_value(
    db: AsyncSession,
    sub_id: int,
    month: int,
    value: float,
    actor: User | None = None,
    ip_address: str | None = None,
) -> DynamicSubcategory | None:
    sub = await _get_subcategory(db, sub_id)
    if sub is None:
        return None
    value = round_cents(value)

    result = await db.execute(
        select(DynamicSubcategoryValue).where(
            DynamicSubcategoryValue.subcategory_id == sub_id,
            DynamicSubcategoryValue.month == month,
        )
    )
    item = result.scalar_one_or_none()
    old_value = item.value if item is not None else 0.0
    if item is None:
        db.add(DynamicSubcategoryValue(subcategory_id=sub_id, month=month, value=value))
    else:
        item.value = value

    if old_value != value:
        db.add(
            LedgerLog(
                car_id=sub.car_id,
                year=sub.year,
                month=month,
                category=sub.category_type,
                field=f"dynamic:{sub.id}",
                field_label=sub.name,
                old_value=old_value,
                new_value=value,
                changed_by=actor.id if actor else None,
                changed_by_name=actor.full_name if actor else None,
                ip_address=ip_address,
            )
        )
    await db.flush()
    return await _get_subcategory(db, sub_id)


# --- Receipts ---


async def add_receipt(
    db: AsyncSession,
    car_id: int,
    year: int,
    month: int,
    category: str,
    field: str,
    filename: str,
    actor: User | None = None,
) -> LedgerReceipt:
    spec = get_category(category)
    if spec.field(field) is None:
        raise ValueError(f"Unknown field '{field}' in category '{category}'")
    await _require_car(db, car_id)
    receipt = LedgerReceipt(
        car_id=car_id,
        year=year,
        month=month,
        category=category,
        field=field,
        filename=filename,
        uploaded_by=actor.id if actor else None,
    )
    db.add(receipt)
    await db.flush()
    await db.refresh(receipt)
    return receipt


async def list_receipts(
    db: AsyncSession, car_id: int, year: int, month: int, category: str, field: str
) -> list[LedgerReceipt]:
    result = await db.execute(
        select(LedgerReceipt)
        .where(
            LedgerReceipt.car_id == car_id,
            LedgerReceipt.year == year,
            LedgerReceipt.month == month,
            LedgerReceipt.category == category,
            LedgerReceipt.field == field,
        )
        .order_by(LedgerReceipt.uploaded_at)
    )
    return list(result.scalars().all())
