from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from ui.texts_pt import LBL_NOT_AVAILABLE


def format_currency(value: Optional[float]) -> str:
    if value is None:
        return LBL_NOT_AVAILABLE
    return f"R$ {value:,.2f}"


def metric_row(metrics: List[Dict[str, Any]]):
    cols = st.columns(len(metrics))
    for col, m in zip(cols, metrics):
        col.metric(m["label"], m["value"])


def render_table(title: str, data: List[Dict[str, Any]], columns: List[str]):
    st.markdown(f"**{title}**")
    if not data:
        st.info("Nenhum registro")
        return
    df = pd.DataFrame(data)
    st.dataframe(df[columns], use_container_width=True, hide_index=True)


def cost_block(calculation: Optional[Dict[str, Any]]):
    """Cost breakdown, or N/A when the calculation is unavailable."""
    with st.container():
        st.markdown("**Composição do Custo**")
        def value(key: str) -> str:
            return format_currency(calculation.get(key)) if calculation else LBL_NOT_AVAILABLE

        cols = st.columns(4)
        cols[0].metric("Matérias-primas", value("raw_materials_cost"))
        cols[1].metric("Mão de obra", value("labor_cost"))
        cols[2].metric("Indiretos", value("indirect_costs"))
        cols[3].metric("Perdas", value("loss_cost"))
        cols2 = st.columns(4)
        cols2[0].metric("Custo unitário", value("total_unit_cost"))
        cols2[1].metric("Margem de contribuição", value("contribution_margin"))
        cols2[2].metric("Margem de lucro", value("profit_margin"))
        if calculation:
            cols2[3].metric("Ponto de equilíbrio", f"{calculation['break_even_point']:,.1f} un")
        else:
            cols2[3].metric("Ponto de equilíbrio", LBL_NOT_AVAILABLE)


def success(msg: str):
    st.success(msg)


def error(msg: str):
    st.error(msg)


def warning(msg: str):
    st.warning(msg)


def info(msg: str):
    st.info(msg)
