from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from core.database import get_db
from modules.costing import engine, schemas, service
from modules.products import service as product_service
from modules.reports.excel import build_cost_excel

router = APIRouter(prefix="/costing", tags=["costing"])


@router.get("/products/{product_id}", response_model=schemas.CostCalculation)
def calculate_cost(product_id: str, db: Session = Depends(get_db)):
    return service.calculate_for_product(db, product_id)


@router.post("/products/{product_id}/snapshot", response_model=schemas.CostSnapshotRead)
def save_snapshot(product_id: str, db: Session = Depends(get_db)):
    return service.save_cost_snapshot(db, product_id)


@router.get("/products/{product_id}/snapshot", response_model=schemas.CostSnapshotRead)
def get_snapshot(product_id: str, db: Session = Depends(get_db)):
    return service.get_cost_snapshot(db, product_id)


@router.get("/products/{product_id}/excel")
def download_cost_excel(product_id: str, db: Session = Depends(get_db)):
    product = product_service.get_product(db, product_id)
    calculation = engine.calculate_product_cost(product)
    stream = build_cost_excel(product, calculation)
    filename = f"custos_{product.code}.xlsx"
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/products/{product_id}/simulate/price", response_model=schemas.CostCalculation)
def simulate_price(product_id: str, request: schemas.PriceSimulationRequest, db: Session = Depends(get_db)):
    product = product_service.get_product(db, product_id)
    return engine.simulate_price_impact(product, request.new_sale_price)


@router.post("/products/{product_id}/simulate/volume", response_model=schemas.VolumeSimulationResult)
def simulate_volume(product_id: str, request: schemas.VolumeSimulationRequest, db: Session = Depends(get_db)):
    product = product_service.get_product(db, product_id)
    return schemas.VolumeSimulationResult(
        product_id=product.id,
        target_profit=request.target_profit,
        required_volume=engine.simulate_volume_for_target_profit(product, request.target_profit),
    )


@router.post("/products/{product_id}/simulate/raw-material", response_model=schemas.CostCalculation)
def simulate_raw_material(
    product_id: str, request: schemas.RawMaterialSimulationRequest, db: Session = Depends(get_db)
):
    product = product_service.get_product(db, product_id)
    return engine.simulate_raw_material_impact(product, request.raw_material_id, request.new_unit_cost)


@router.post("/break-even", response_model=schemas.BreakEvenResult)
def break_even(request: schemas.BreakEvenRequest):
    contribution_margin = request.sale_price - request.variable_cost_per_unit
    return schemas.BreakEvenResult(
        **request.model_dump(),
        contribution_margin=contribution_margin,
        break_even_point=engine.compute_break_even_point(
            request.fixed_costs, request.sale_price, request.variable_cost_per_unit
        ),
        viable=contribution_margin > 0,
    )
