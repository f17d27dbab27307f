import json

import pandas as pd
import streamlit as st

from ttaaii import CompletionOptions, TableSetError, TtaaiiProvider, parse_context
from ttaaii.core.context import FIELD_ORDER
from ttaaii.core.provider import ProviderConfig
from ttaaii.core.table_loader import available_locales
from ttaaii.formatters.json_formatter import completion_rows, format_decoded_dict


GROUP_BY_OPTIONS = {
    "None": None,
    "Continent": "continent",
    "Table groups": "table",
}


@st.cache_resource
def _get_provider(locale: str) -> TtaaiiProvider:
    return TtaaiiProvider(config=ProviderConfig(locale=locale))


def _ensure_session_state():
    if "heading" not in st.session_state:
        st.session_state.heading = ""


def _clear_heading():
    st.session_state.heading = ""


def _append_code(code: str):
    st.session_state.heading = (st.session_state.heading + code)[:6]


def _field_breakdown(heading: str):
    context = parse_context(heading)
    cols = st.columns(len(FIELD_ORDER))
    for col, field_name in zip(cols, FIELD_ORDER):
        col.metric(field_name.value, context.get(field_name) or "·")


def _completion_panel(provider: TtaaiiProvider, heading: str, group_by, prefix: str):
    result = provider.complete(heading, CompletionOptions(group_by=group_by, prefix=prefix or None))
    st.subheader(f"Next: {result.field.value} (table {result.table_id or '-'})")

    if result.is_complete:
        st.success("Heading complete.")
        return
    if result.table_id is None:
        st.warning("No valid table in this context.")
        return

    rows = completion_rows(result)
    if not rows:
        st.info("No values match the filter.")
        return

    df = pd.DataFrame(rows)
    st.dataframe(df, width="stretch", hide_index=True)

    if len(result.items) <= 40 and len(result.items[0].code) == 1:
        cols = st.columns(8)
        for i, item in enumerate(result.items):
            cols[i % 8].button(
                item.code,
                key=f"pick_{i}_{item.code}",
                help=item.label,
                on_click=_append_code,
                args=(item.code,),
            )


def _validation_panel(provider: TtaaiiProvider, heading: str):
    result = provider.validate(heading)
    if not heading:
        return
    if result.valid:
        st.success("Complete and valid." if result.complete else "Valid so far.")
        return
    errors = pd.DataFrame([
        {
            "Position": e.position,
            "Field": e.field.value,
            "Character": e.character,
            "Code": e.code.value,
            "Message": e.message,
        }
        for e in result.errors
    ])
    st.error(f"{len(result.errors)} invalid position(s)")
    st.dataframe(errors, width="stretch", hide_index=True)


def _decode_panel(provider: TtaaiiProvider, heading: str):
    if not heading:
        return
    decoded = format_decoded_dict(provider.decode(heading), include_code_forms=True)
    with st.expander("Decoded heading", expanded=True):
        for name, value in decoded.items():
            if isinstance(value, dict):
                st.markdown(f"**{name}:** {value['value']}  \n`{value['code_form']}`")
            else:
                st.markdown(f"**{name}:** {value}")
        st.download_button(
            "Download JSON",
            data=json.dumps(decoded, indent=2, ensure_ascii=False),
            file_name=f"{heading or 'ttaaii'}.json",
            mime="application/json",
        )


def _playground_page(provider: TtaaiiProvider, group_by):
    st.title("TTAAII Playground")
    st.text_input("Heading (T1 T2 A1 A2 ii)", key="heading", max_chars=6)
    heading = st.session_state.heading.upper()

    c1, c2 = st.columns([1, 5])
    c1.button("Clear", on_click=_clear_heading)
    prefix = c2.text_input("Filter codes", value="", max_chars=2)

    _field_breakdown(heading)
    _validation_panel(provider, heading)
    _decode_panel(provider, heading)
    _completion_panel(provider, heading, group_by, prefix.upper())


def _tables_page(provider: TtaaiiProvider):
    st.title("Reference Tables")
    tables = provider.tables
    data = tables.to_dict()
    flat = [k for k, v in data.items() if isinstance(v, dict) and "entries" in v]
    table_id = st.selectbox("Table", flat)
    table = data[table_id]
    st.caption(table.get("description", ""))
    st.dataframe(pd.DataFrame(table["entries"]), width="stretch", hide_index=True)


def main():
    _ensure_session_state()

    st.sidebar.title("Navigation")
    page = st.sidebar.radio("Go to", ["Playground", "Reference Tables"])
    locales = available_locales() or ["en"]
    locale = st.sidebar.selectbox("Locale", locales)
    group_label = st.sidebar.selectbox("Group completions by", list(GROUP_BY_OPTIONS))

    try:
        provider = _get_provider(locale)
    except TableSetError as e:
        st.error(f"Cannot load tables: {e}")
        return

    if page == "Playground":
        _playground_page(provider, GROUP_BY_OPTIONS[group_label])
    else:
        _tables_page(provider)


st.set_page_config(page_title="TTAAII Abbreviated Heading Playground", layout="wide")

if __name__ == "__main__":
    main()
