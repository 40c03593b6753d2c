from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from ui import components as ui
from ui.api_client import APIError, download as api_download, get as api_get, post as api_post
from ui.texts_pt import (
    APP_TITLE,
    BTN_CREATE_ORDER,
    BTN_DOWNLOAD_REPORT,
    BTN_SAVE_SNAPSHOT,
    BTN_SIMULATE,
    BTN_VALIDATE,
    LBL_NEW_PRICE,
    LBL_PLANNED_DATE,
    LBL_PRODUCT,
    LBL_QUANTITY,
    LBL_TARGET_PROFIT,
    MSG_NEED_PRODUCT,
    MSG_NO_BOM,
    MSG_NO_BREAK_EVEN,
    MSG_NO_CRITICAL,
    MSG_ORDER_CREATED,
    MSG_REPORT_FAILED,
    MSG_SNAPSHOT_SAVED,
    MSG_STOCK_MISSING,
    MSG_STOCK_OK,
    PAGE_COSTS,
    PAGE_DASHBOARD,
    PAGE_ORDERS,
)

st.set_page_config(page_title=APP_TITLE, layout="wide")


def load_products() -> List[Dict[str, Any]]:
    try:
        return api_get("/products")
    except (APIError, OSError) as exc:
        ui.error(f"Não foi possível carregar os produtos: {exc}")
        return []


def load_cost(product_id: str) -> Optional[Dict[str, Any]]:
    """Cost calculation of a product, None when unavailable."""
    try:
        return api_get(f"/costing/products/{product_id}")
    except APIError as exc:
        if exc.code in ("missing_bom", "degenerate_input"):
            return None
        raise


def select_product(products: List[Dict[str, Any]], key: str) -> Optional[Dict[str, Any]]:
    labels = {f"{p['name']} ({p['code']})": p for p in products}
    selected = st.selectbox(LBL_PRODUCT, list(labels.keys()), key=key)
    return labels.get(selected)


def dashboard_tab():
    st.header(PAGE_DASHBOARD)
    try:
        metrics = api_get("/analytics/dashboard")
        critical = api_get("/raw-materials/critical")
    except (APIError, OSError) as exc:
        ui.error(f"Painel indisponível: {exc}")
        return

    ui.metric_row(
        [
            {"label": "Produtos", "value": metrics["total_products"]},
            {"label": "Lucrativos", "value": metrics["profitable_products"]},
            {"label": "Deficitários", "value": metrics["deficitary_products"]},
            {"label": "Margem média", "value": f"{metrics['average_profit_margin']:.1f}%"},
            {"label": "Valor do estoque", "value": ui.format_currency(metrics["total_inventory_value"])},
        ]
    )

    st.markdown("---")
    left, right = st.columns(2)
    with left:
        rows = [
            {
                "Produto": p["name"],
                "Margem": ui.format_currency(p["profit_margin"]),
                "Contribuição": ui.format_currency(p["contribution_margin"]),
            }
            for p in metrics["top_profitable_products"]
        ]
        ui.render_table("Mais lucrativos", rows, ["Produto", "Margem", "Contribuição"])
    with right:
        st.markdown("**Estoque crítico**")
        if not critical:
            ui.info(MSG_NO_CRITICAL)
        else:
            rows = [
                {
                    "Código": m["code"],
                    "Matéria-prima": m["name"],
                    "Estoque": f"{m['current_stock']:.2f} {m['unit']}",
                    "Mínimo": f"{m['minimum_stock']:.2f} {m['unit']}",
                }
                for m in critical
            ]
            st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


def costs_tab(products: List[Dict[str, Any]]):
    st.header(PAGE_COSTS)
    if not products:
        ui.warning(MSG_NEED_PRODUCT)
        return
    product = select_product(products, key="costs_product_select")
    calculation = load_cost(product["id"])
    if calculation is None:
        ui.warning(MSG_NO_BOM)
    elif calculation["contribution_margin"] <= 0:
        ui.warning(MSG_NO_BREAK_EVEN)
    ui.cost_block(calculation)

    if calculation is None:
        return

    cols = st.columns(2)
    if cols[0].button(BTN_SAVE_SNAPSHOT, key="costs_snapshot"):
        api_post(f"/costing/products/{product['id']}/snapshot")
        ui.success(MSG_SNAPSHOT_SAVED)
    report = api_download(f"/costing/products/{product['id']}/excel")
    if report:
        cols[1].download_button(
            label=BTN_DOWNLOAD_REPORT,
            data=report,
            file_name=f"custos_{product['code']}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            key=f"costs_excel_{product['id']}",
        )
    else:
        ui.warning(MSG_REPORT_FAILED)

    st.markdown("---")
    st.subheader("Simulações")
    sim_cols = st.columns(2)
    with sim_cols[0]:
        new_price = st.number_input(LBL_NEW_PRICE, min_value=0.01, value=float(product["sale_price"] or 0.01), key="sim_price")
        if st.button(BTN_SIMULATE, key="sim_price_btn"):
            try:
                simulated = api_post(f"/costing/products/{product['id']}/simulate/price", {"new_sale_price": new_price})
                ui.cost_block(simulated)
            except APIError as exc:
                ui.error(str(exc))
    with sim_cols[1]:
        target = st.number_input(LBL_TARGET_PROFIT, value=1000.0, key="sim_target")
        if st.button(BTN_SIMULATE, key="sim_volume_btn"):
            result = api_post(f"/costing/products/{product['id']}/simulate/volume", {"target_profit": target})
            st.metric("Volume necessário", f"{result['required_volume']} un")


def orders_tab(products: List[Dict[str, Any]]):
    st.header(PAGE_ORDERS)
    if not products:
        ui.warning(MSG_NEED_PRODUCT)
        return
    product = select_product(products, key="orders_product_select")
    cols = st.columns(2)
    quantity = cols[0].number_input(LBL_QUANTITY, min_value=1, value=1, step=1, key="orders_quantity")
    planned = cols[1].date_input(LBL_PLANNED_DATE, value=date.today(), key="orders_planned")
    payload = {"product_id": product["id"], "quantity": int(quantity), "planned_date": planned.isoformat()}

    validation = None
    if st.button(BTN_VALIDATE, key="orders_validate"):
        validation = api_post("/production-orders/validate", payload)
        if validation["is_valid"]:
            ui.success(MSG_STOCK_OK)
        elif validation["missing_bom"]:
            ui.error(MSG_NO_BOM)
        else:
            ui.error(f"{MSG_STOCK_MISSING} {', '.join(validation['insufficient_materials'])}")
        st.metric("Custo estimado", ui.format_currency(validation["estimated_cost"]))

    if st.button(BTN_CREATE_ORDER, type="primary", key="orders_create", disabled=bool(validation and not validation["is_valid"])):
        try:
            api_post("/production-orders", payload)
            ui.success(MSG_ORDER_CREATED)
        except APIError as exc:
            ui.error(str(exc))

    st.markdown("---")
    orders = api_get("/production-orders")
    names = {p["id"]: p["name"] for p in products}
    rows = [
        {
            "Produto": names.get(o["product_id"], o["product_id"]),
            "Quantidade": o["quantity"],
            "Status": o["status"],
            "Planejada": o["planned_date"][:10],
            "Custo estimado": ui.format_currency(o["estimated_cost"]),
        }
        for o in orders
    ]
    ui.render_table("Ordens", rows, ["Produto", "Quantidade", "Status", "Planejada", "Custo estimado"])


def main():
    st.title(APP_TITLE)
    products = load_products()
    tabs = st.tabs([PAGE_DASHBOARD, PAGE_COSTS, PAGE_ORDERS])
    with tabs[0]:
        dashboard_tab()
    with tabs[1]:
        costs_tab(products)
    with tabs[2]:
        orders_tab(products)


if __name__ == "__main__":
    main()
