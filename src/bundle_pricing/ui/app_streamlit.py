"""
Streamlit UI for bundle pricing.

Features:
- Bundle builder with live price preview and per-field validation
- Bundle list with search, price/service-count bounds, type filter and sort
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from bundle_pricing.config.settings import get_settings
from bundle_pricing.data.catalog import load_services
from bundle_pricing.engine.bundle_query import has_active_filters
from bundle_pricing.engine.currency import format_minor, from_minor, to_minor, currency_symbol
from bundle_pricing.engine.models import BundleFilterSpec, DiscountStrategy, FixedStrategy, PriceType, format_duration
from bundle_pricing.services.bundle_form import BundleForm
from bundle_pricing.services.bundle_service import BundleService, BundleValidationError


st.set_page_config(
    page_title="Service Bundles",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_bundle_service() -> BundleService:
    """Get cached bundle service with the catalog loaded."""
    settings = get_settings()
    return BundleService(catalog=load_services(), currency=settings.currency)


try:
    service = get_bundle_service()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()

currency = service.currency
symbol = currency_symbol(currency)

if 'bundle_form' not in st.session_state:
    st.session_state.bundle_form = BundleForm()
form: BundleForm = st.session_state.bundle_form

st.title("Service Bundles")
st.caption(f"Currency: {currency.upper()} | {datetime.now().strftime('%Y-%m-%d')}")

tab1, tab2 = st.tabs(["📦 Bundle Builder", "📚 Bundles"])


# ============================================================================
# TAB 1: BUNDLE BUILDER
# ============================================================================
with tab1:
    col1, col2 = st.columns([1.6, 1.4], gap="large")
    services_by_label = {f"{s.name} ({format_minor(to_minor(s.price, s.currency), s.currency)})": s.id
                         for s in service.catalog}

    with col1:
        st.subheader("Bundle Details")
        form.name = st.text_input("Name", value=form.name)
        form.description = st.text_area("Description", value=form.description, height=80)

        selected_labels = st.multiselect(
            "Services",
            options=list(services_by_label),
            default=[l for l, i in services_by_label.items() if i in form.service_ids],
        )
        selected_ids = [services_by_label[l] for l in selected_labels]
        if selected_ids != form.service_ids:
            form.set_services(selected_ids)

        price_type = st.radio(
            "Pricing",
            options=[t.value for t in PriceType],
            index=[t.value for t in PriceType].index(form.price_type.value),
            horizontal=True,
        )
        form.select_strategy(price_type)

        if isinstance(form.strategy, FixedStrategy):
            current = form.strategy.fixed_price_minor
            amount = st.number_input(
                f"Fixed price ({symbol})", min_value=0.0, step=0.5,
                value=None if current is None else float(from_minor(current, currency)),
            )
            form.set_fixed_price(None if amount is None else to_minor(amount, currency))
        elif isinstance(form.strategy, DiscountStrategy):
            current_pct = form.strategy.discount_percentage
            pct = st.number_input(
                "Discount (%)", min_value=0.0, max_value=100.0, step=1.0,
                value=None if current_pct is None else float(current_pct),
            )
            form.set_discount_percentage(pct)

    with col2:
        st.subheader("Price Preview")
        with st.container(border=True):
            quote = form.preview(service.catalog, currency)
            if quote is None:
                st.info("Select at least 2 services to see the bundle price.")
            else:
                m1, m2 = st.columns(2)
                m1.metric("Services Total", format_minor(quote.sum_minor, currency))
                m2.metric("Bundle Price", format_minor(quote.final_minor, currency))
                if quote.has_difference:
                    diff = format_minor(abs(quote.delta_minor), currency)
                    if quote.is_savings:
                        st.markdown(f":green[**Customer saves {diff}**]")
                    else:
                        st.markdown(f":orange[**Price increase of {diff}**]")
                with st.expander("🔍 Price Details"):
                    st.text(quote.get_trace_text())

        validation = form.validate()
        for issue in validation.errors:
            st.warning(issue.message)

        b1, b2 = st.columns(2)
        with b1:
            if st.button("💾 Save Bundle", type="primary", disabled=not form.can_submit(),
                         use_container_width=True):
                draft = form.to_draft()
                try:
                    if form.bundle_id is None:
                        service.create_bundle(draft)
                    else:
                        service.update_bundle(form.bundle_id, draft)
                    form.reset()
                    st.toast("Bundle saved")
                    st.rerun()
                except BundleValidationError as e:
                    for issue in e.result.errors:
                        st.error(issue.message)
        with b2:
            if st.button("🗑️ Clear", use_container_width=True):
                form.reset()
                st.rerun()


# ============================================================================
# TAB 2: BUNDLE LIST
# ============================================================================
with tab2:
    c1, c2, c3 = st.columns([2, 1, 1])
    with c1:
        search_term = st.text_input("Search Bundles", placeholder="Name or description...",
                                    label_visibility="collapsed")
    with c2:
        sort_field = st.selectbox("Sort by", ["createdAt", "updatedAt", "price", "serviceCount"])
    with c3:
        sort_direction = st.selectbox("Direction", ["desc", "asc"])

    with st.expander("Filters"):
        f1, f2, f3, f4 = st.columns(4)
        price_min = f1.text_input(f"Min price ({symbol})")
        price_max = f2.text_input(f"Max price ({symbol})")
        count_min = f3.text_input("Min services")
        count_max = f4.text_input("Max services")
        price_types = st.multiselect("Pricing", [t.value for t in PriceType])

    spec = BundleFilterSpec(
        search_term=search_term,
        price_min=price_min,
        price_max=price_max,
        service_count_min=count_min,
        service_count_max=count_max,
        price_types=price_types,
        sort_field=sort_field,
        sort_direction=sort_direction,
    )
    all_bundles = service.list_bundles()
    visible = service.list_bundles(spec)

    if not visible:
        if all_bundles and has_active_filters(spec):
            st.info("No bundles match the current filters.")
        else:
            st.info("No bundles yet. Create one in the Bundle Builder.")
    else:
        st.dataframe(pd.DataFrame([{
            'ID': b.id,
            'Name': b.name,
            'Pricing': b.price_type.value,
            'Price': format_minor(b.calculated_price_minor, currency),
            'Services': b.service_count,
            'Duration': format_duration(b.total_duration),
            'Updated': b.updated_at,
        } for b in visible]), use_container_width=True, hide_index=True)
        st.caption(f"Total bundles: {len(all_bundles):,} | Visible: {len(visible):,}")

        edit_id = st.selectbox("Edit bundle", [None] + [b.id for b in visible],
                               format_func=lambda i: "-" if i is None else f"#{i}")
        if edit_id is not None and st.button("✏️ Load into builder"):
            st.session_state.bundle_form = BundleForm.from_bundle(service.get_bundle(edit_id))
            st.rerun()
