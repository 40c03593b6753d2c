from io import BytesIO
from typing import Any, List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from core.settings import minutes_to_hours
from modules.costing.schemas import CostCalculation
from modules.products.schemas import ProductRead


def _create_styles():
    """Create reusable style definitions."""
    thin_border = Side(style="thin", color="000000")
    return {
        "title_font": Font(bold=True, size=14),
        "section_font": Font(bold=True, size=11),
        "header_font": Font(bold=True, size=10),
        "header_fill": PatternFill(start_color="D9E1F2", end_color="D9E1F2", fill_type="solid"),
        "warning_fill": PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid"),
        "subtotal_font": Font(bold=True),
        "border": Border(left=thin_border, right=thin_border, top=thin_border, bottom=thin_border),
        "center_align": Alignment(horizontal="center", vertical="center"),
        "right_align": Alignment(horizontal="right", vertical="center"),
        "left_align": Alignment(horizontal="left", vertical="center"),
    }


def _apply_header_row(ws, row: int, columns: List[str], styles: dict):
    for col_idx, col_name in enumerate(columns, start=1):
        cell = ws.cell(row=row, column=col_idx, value=col_name)
        cell.font = styles["header_font"]
        cell.fill = styles["header_fill"]
        cell.border = styles["border"]
        cell.alignment = styles["center_align"]


def _apply_data_row(ws, row: int, values: List[Any], styles: dict, alignments: List[str] = None):
    for col_idx, value in enumerate(values, start=1):
        cell = ws.cell(row=row, column=col_idx, value=value)
        cell.border = styles["border"]
        if alignments and col_idx <= len(alignments):
            align_type = alignments[col_idx - 1]
            cell.alignment = styles.get(f"{align_type}_align", styles["left_align"])


def _set_column_widths(ws, widths: List[int]):
    for col_idx, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width


def _format_number(value: float, decimals: int = 2) -> str:
    if value is None:
        return "-"
    return f"{value:,.{decimals}f}"


def _format_currency(value: float) -> str:
    if value is None:
        return "-"
    return f"R$ {value:,.2f}"


def _format_percentage(value: float) -> str:
    if value is None:
        return "-"
    return f"{value:.1f}%"


def build_cost_excel(product: ProductRead, calculation: CostCalculation) -> BytesIO:
    """Generate the cost sheet of one product as an .xlsx stream."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Ficha de Custos"
    styles = _create_styles()
    bom = product.bom

    current_row = 1

    # === SECTION 1: HEADER ===
    ws.cell(row=current_row, column=1, value="FICHA DE CUSTOS").font = styles["title_font"]
    ws.merge_cells(start_row=current_row, start_column=1, end_row=current_row, end_column=7)
    current_row += 2

    header_info = [
        ("Produto:", product.name),
        ("Código:", product.code),
        ("Categoria:", product.category),
        ("Data do Cálculo:", calculation.calculated_at.strftime("%Y-%m-%d %H:%M")),
    ]
    for label, value in header_info:
        ws.cell(row=current_row, column=1, value=label).font = Font(bold=True)
        ws.cell(row=current_row, column=2, value=value)
        current_row += 1

    current_row += 1

    # === SECTION 2: COST COMPOSITION ===
    ws.cell(row=current_row, column=1, value="COMPOSIÇÃO DO CUSTO UNITÁRIO").font = styles["section_font"]
    current_row += 1

    _apply_header_row(ws, current_row, ["Componente", "Valor", "Participação"], styles)
    current_row += 1

    components = [
        ("Matérias-primas", calculation.raw_materials_cost),
        ("Mão de obra", calculation.labor_cost),
        ("Custos indiretos", calculation.indirect_costs),
        ("Perdas", calculation.loss_cost),
        ("Custo fixo rateado", calculation.fixed_cost_allocation),
    ]
    for label, value in components:
        share = value / calculation.total_unit_cost * 100 if calculation.total_unit_cost > 0 else 0.0
        _apply_data_row(
            ws, current_row, [label, _format_currency(value), _format_percentage(share)], styles,
            ["left", "right", "right"],
        )
        current_row += 1

    _apply_data_row(
        ws, current_row, ["CUSTO UNITÁRIO TOTAL", _format_currency(calculation.total_unit_cost), "100%"], styles,
        ["left", "right", "right"],
    )
    for col in range(1, 4):
        ws.cell(row=current_row, column=col).font = styles["subtotal_font"]
    current_row += 2

    # === SECTION 3: UNIT ECONOMICS ===
    ws.cell(row=current_row, column=1, value="RENTABILIDADE").font = styles["section_font"]
    current_row += 1

    economics = [
        ("Preço de Venda:", _format_currency(product.sale_price)),
        ("Custo de Produção:", _format_currency(calculation.total_production_cost)),
        ("Margem de Contribuição:", _format_currency(calculation.contribution_margin)),
        ("Margem de Lucro:", _format_currency(calculation.profit_margin)),
        ("Margem de Lucro (%):", _format_percentage(calculation.profit_margin_percentage)),
        ("Ponto de Equilíbrio:", f"{_format_number(calculation.break_even_point)} un"),
    ]
    for label, value in economics:
        ws.cell(row=current_row, column=1, value=label).font = Font(bold=True)
        ws.cell(row=current_row, column=2, value=value)
        current_row += 1

    if calculation.contribution_margin <= 0:
        current_row += 1
        warning_cell = ws.cell(row=current_row, column=1, value="⚠ Margem de contribuição não positiva - sem ponto de equilíbrio")
        warning_cell.fill = styles["warning_fill"]
        ws.merge_cells(start_row=current_row, start_column=1, end_row=current_row, end_column=4)

    current_row += 2

    # === SECTION 4: BOM ITEMS ===
    if bom is not None and bom.items:
        ws.cell(row=current_row, column=1, value="MATÉRIAS-PRIMAS").font = styles["section_font"]
        current_row += 1

        item_columns = ["Matéria-prima", "Unidade", "Quantidade", "Qtd. c/ Desperdício", "Custo Unit.", "Total", "Part. (%)"]
        _apply_header_row(ws, current_row, item_columns, styles)
        current_row += 1

        item_alignments = ["left", "center", "right", "right", "right", "right", "right"]
        for item in bom.items:
            item_total = item.waste_adjusted_quantity * item.raw_material.unit_cost
            share = item_total / calculation.raw_materials_cost * 100 if calculation.raw_materials_cost > 0 else 0.0
            row_values = [
                item.raw_material.name,
                item.unit,
                _format_number(item.quantity, 3),
                _format_number(item.waste_adjusted_quantity, 3),
                _format_currency(item.raw_material.unit_cost),
                _format_currency(item_total),
                _format_percentage(share),
            ]
            _apply_data_row(ws, current_row, row_values, styles, item_alignments)
            current_row += 1

        current_row += 1

    # === SECTION 5: PRODUCTION STEPS ===
    if bom is not None and bom.production_steps:
        ws.cell(row=current_row, column=1, value="ETAPAS DE PRODUÇÃO").font = styles["section_font"]
        current_row += 1

        step_columns = ["Etapa", "Tempo (min)", "Custo/Hora", "Mão de Obra", "Indiretos"]
        _apply_header_row(ws, current_row, step_columns, styles)
        current_row += 1

        step_alignments = ["left", "right", "right", "right", "right"]
        for step in bom.production_steps:
            row_values = [
                step.name,
                _format_number(step.time_minutes, 1),
                _format_currency(step.labor_cost_per_hour),
                _format_currency(minutes_to_hours(step.time_minutes) * step.labor_cost_per_hour),
                _format_currency(step.indirect_costs),
            ]
            _apply_data_row(ws, current_row, row_values, styles, step_alignments)
            current_row += 1

        subtotal_values = [
            "TOTAL",
            _format_number(bom.total_production_time, 1),
            "",
            _format_currency(calculation.labor_cost),
            _format_currency(calculation.indirect_costs),
        ]
        _apply_data_row(ws, current_row, subtotal_values, styles, step_alignments)
        for col in range(1, 6):
            ws.cell(row=current_row, column=col).font = styles["subtotal_font"]
        current_row += 2

    _set_column_widths(ws, [28, 16, 14, 20, 16, 16, 12])

    stream = BytesIO()
    wb.save(stream)
    stream.seek(0)
    return stream
