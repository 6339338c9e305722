import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import streamlit as st
import os

from nursecalc.config import get_config
from nursecalc.valuation.strategy_factory import engine_from_config
from nursecalc.valuation.contracts import format_money
from nursecalc.valuation.engine import has_rating_inputs
from nursecalc.valuation.comparison import (
    comparison_frame, contract_name, contract_tips, expense_breakdown, rating_label, taxable_ratio,
)
from nursecalc.state.contract_list import ContractList
from nursecalc.market.insights import fetch_market_insights, fuel_prices
from nursecalc.market.housing import split_location
from nursecalc.geo.distance import GeocodingError, calculate_distance, simulated_distance, qualification
from nursecalc.chat.gateway import ChatGateway, ChatGatewayError, build_chat_context
from nursecalc.chat.contract_scorer import ContractScorer
from nursecalc.chat.models import ChatMessage
from nursecalc.storage import store
from nursecalc.storage.converters import export_json

import pandas as pd

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()


st.set_page_config(page_title="Travel Nurse Contract Calculator", layout="wide")
st.title("Travel Nurse Contract Calculator")


def _bridge_streamlit_secrets_to_env(keys=("OPENAI_API_KEY", "OPENAI_MODEL")):
    try:
        # Accessing st.secrets can raise FileNotFoundError if no secrets.toml exists.
        secrets = st.secrets
        for key in keys:
            val = secrets.get(key, None)
            if val is not None and val != "":
                os.environ[key] = str(val)
    except FileNotFoundError:
        pass
    except Exception as e:
        print("[secrets->env] Skipped bridging Streamlit secrets:", repr(e))

_bridge_streamlit_secrets_to_env()


def _safe_llm_status(api_key=None):
    try:
        from nursecalc.utils import llm_status as _llm
        return _llm.get_llm_status(api_key)
    except Exception as e:
        print("[llm_status] suppressed:", repr(e))
        return {
            "api_key_set": bool(api_key or os.environ.get("OPENAI_API_KEY")),
            "model": os.environ.get("OPENAI_MODEL", "gpt-4o-mini"),
            "last_call": None,
            "last_duration": None,
            "last_success": None,
            "last_error": None,
            "calls": 0,
            "failures": 0,
        }


_cfg = get_config()
engine = engine_from_config(_cfg)

if "contracts" not in st.session_state:
    st.session_state["contracts"] = ContractList(store.load_contracts())
if "chat" not in st.session_state:
    st.session_state["chat"] = store.load_chat_messages()

contracts: ContractList = st.session_state["contracts"]


# ---------------- Sidebar ---------------- #

with st.sidebar:
    st.header("Settings")
    saved_key = store.get_setting(store.API_KEY_SETTING, "") or ""
    key_in = st.text_input("OpenAI API key", value=saved_key, type="password")
    if st.button("Save API key"):
        store.set_setting(store.API_KEY_SETTING, key_in.strip())
        st.success("API key saved")
    api_key = key_in.strip() or os.environ.get("OPENAI_API_KEY") or None

    home_address = st.text_input("Home address (tax home)", value=store.get_setting("home_address", "") or "")
    if home_address != (store.get_setting("home_address", "") or ""):
        store.set_setting("home_address", home_address)

    st.sidebar.markdown("### LLM Status")
    llm_info = _safe_llm_status(api_key)
    if llm_info["api_key_set"]:
        st.sidebar.success("API key set")
    else:
        st.sidebar.error("No API key")
    st.sidebar.write(f"**Model:** {llm_info['model']}")
    st.sidebar.write(f"**Last Call:** {llm_info['last_call'] or '-'}")
    st.sidebar.write(f"**Duration:** {llm_info['last_duration'] or '-'}s")
    if llm_info["last_success"] is True:
        st.sidebar.success("Last call succeeded")
    elif llm_info["last_success"] is False:
        st.sidebar.error("Last call failed")
        if llm_info.get("last_error"):
            st.sidebar.caption(llm_info["last_error"])
    else:
        st.sidebar.info("No calls yet")
    st.sidebar.caption(f"Calls this session: {llm_info.get('calls', 0)} ({llm_info.get('failures', 0)} failed)")
    st.sidebar.caption(f"Tax estimate: {int(round(engine.tax_rate * 100))}% of taxable wages")


# ---------------- Form helpers ---------------- #

def _text(c, field: str, label: str, help: str = None):
    val = st.text_input(label, value=getattr(c, field), key=f"{c.id}:{field}", help=help)
    if val != getattr(c, field):
        contracts.update_field(c.id, field, val)


def _money_metric(label: str, value: float):
    st.metric(label, f"${format_money(value)}")


def _render_form(c):
    with st.expander("Assignment", expanded=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            _text(c, "facility_name", "Facility name")
            _text(c, "location", "Location (City, ST)")
            _text(c, "agency", "Agency")
        with col2:
            _text(c, "specialty", "Specialty")
            shift = st.selectbox("Shift", ["day", "night", "rotating"],
                                 index=["day", "night", "rotating"].index(c.shift_type)
                                 if c.shift_type in ("day", "night", "rotating") else 0,
                                 key=f"{c.id}:shift_type")
            if shift != c.shift_type:
                contracts.update_field(c.id, "shift_type", shift)
            _text(c, "years_of_experience", "Years of experience")
        with col3:
            _text(c, "start_date", "Start date")
            _text(c, "end_date", "End date")
            _text(c, "contract_length", "Contract length (weeks)", help="Blank or 0 counts as 13 weeks")

    with st.expander("Pay & stipends (weekly)", expanded=True):
        col1, col2 = st.columns(2)
        with col1:
            _text(c, "hourly_rate", "Hourly rate ($)")
            _text(c, "weekly_hours", "Weekly hours")
        with col2:
            _text(c, "housing_stipend", "Housing stipend ($/wk)")
            _text(c, "meal_stipend", "Meal stipend ($/wk)")
            _text(c, "transportation_stipend", "Transportation stipend ($/wk)")
            _text(c, "other_stipend", "Other stipend ($/wk)")

    with st.expander("Transportation", expanded=False):
        modes = ["personal", "public", "rideshare"]
        mode = st.radio("How will you get to work?", modes,
                        index=modes.index(c.transportation_type) if c.transportation_type in modes else 0,
                        horizontal=True, key=f"{c.id}:transportation_type")
        if mode != c.transportation_type:
            contracts.update_field(c.id, "transportation_type", mode)
        if mode == "personal":
            col1, col2 = st.columns(2)
            with col1:
                _text(c, "commute_distance", "One-way commute (miles)")
                _text(c, "vehicle_mpg", "Vehicle MPG")
                _text(c, "parking_cost", "Parking ($/month)")
            with col2:
                use_ref = st.checkbox("Use current gas price", value=c.use_current_gas_price,
                                      key=f"{c.id}:use_current_gas_price")
                if use_ref != c.use_current_gas_price:
                    contracts.update_field(c.id, "use_current_gas_price", use_ref)
                if use_ref:
                    _, state = split_location(c.location)
                    prices = fuel_prices(state)
                    st.caption(f"Regular ${prices['regular']:.2f} / gal "
                               f"(midgrade ${prices['midgrade']:.2f}, premium ${prices['premium']:.2f})")
                else:
                    _text(c, "fuel_cost_per_gallon", "Fuel cost ($/gal)")
        else:
            _text(c, "transportation_cost", "Transportation cost ($)")

    with st.expander("Living costs (weekly)", expanded=False):
        col1, col2, col3 = st.columns(3)
        with col1:
            _text(c, "housing_cost", "Housing ($/wk)")
        with col2:
            _text(c, "food_cost", "Food ($/wk)")
        with col3:
            _text(c, "other_cost", "Other ($/wk)")

    with st.expander("Bonuses (one-time)", expanded=False):
        col1, col2 = st.columns(2)
        with col1:
            _text(c, "sign_on_bonus", "Sign-on bonus ($)")
            _text(c, "completion_bonus", "Completion bonus ($)")
        with col2:
            _text(c, "referral_bonus", "Referral bonus ($)")
            _text(c, "other_bonus", "Other bonus ($)")


def _render_metrics(c):
    m = engine.evaluate(c)
    st.subheader("Weekly Summary")
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        _money_metric("Taxable income", m.weekly_taxable_income)
        _money_metric("Estimated taxes", m.weekly_taxes)
    with col2:
        _money_metric("Stipends (non-taxable)", m.weekly_non_taxable_income)
        _money_metric("Take-home", m.weekly_take_home)
    with col3:
        _money_metric("Expenses", m.weekly_total_expense)
        _money_metric("Net income", m.weekly_net_income)
    with col4:
        _money_metric("Bonuses", m.total_bonuses)
        _money_metric("Total contract value", m.total_contract_value)
    st.caption(f"{taxable_ratio(c, engine)}% of gross weekly pay is taxable")

    breakdown = pd.DataFrame(expense_breakdown(c, engine)).set_index("name")
    if breakdown["value"].sum() > 0:
        st.bar_chart(breakdown)

    if has_rating_inputs(c):
        st.subheader("Contract Rating")
        st.markdown(f"{'★' * m.rating_score}{'☆' * (5 - m.rating_score)}  **{rating_label(m.rating_score)}**")
        for d in m.rating_details:
            st.markdown(f"- {'✅' if d.positive else '⚠️'} {d.message}")
        tips = contract_tips(c, engine)
        if tips:
            st.caption("Tips: " + " · ".join(tips))
    else:
        st.caption("Enter hourly rate, weekly hours and contract length to see a rating.")


def _render_market(c):
    if not (c.location and c.specialty):
        st.caption("Add a location and specialty to see market insights.")
        return
    mi = fetch_market_insights(c.location, c.specialty, c.hourly_rate)
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Market average rate", f"${mi.average_rate}/hr")
        st.write(f"Demand: **{mi.seasonal_demand['current']}** ({mi.seasonal_demand['trend']}), "
                 f"next peak {mi.seasonal_demand['next_peak']}")
    with col2:
        st.metric("Cost of living index", mi.cost_of_living["index"])
        st.write(f"Median rent ${mi.cost_of_living['median_rent']}, "
                 f"suggested stipend ${mi.cost_of_living['median_stipend']}")
    with col3:
        st.metric("State tax", f"{mi.tax_info.state_tax_rate}%")
        st.write(f"Effective {mi.tax_info.effective_tax_rate}% · federal {mi.tax_info.federal_tax_rate}%")
        if mi.tax_info.special_notes:
            st.caption(mi.tax_info.special_notes)
    st.write(f"State rank #{mi.salary_comparison['state_rank']} · "
             f"cost-adjusted ${mi.salary_comparison['adjusted_rate']}/hr · "
             f"{mi.salary_comparison['national_percentile']}th percentile nationally")
    for r in mi.recommendations:
        st.markdown(f"- **{r.type}**: {r.message}")


def _render_distance(c):
    if not (home_address and c.location):
        st.caption("Set a home address in the sidebar and a contract location to check tax-home distance.")
        return
    try:
        dist = calculate_distance(home_address, c.location)
    except GeocodingError as e:
        dist = simulated_distance(home_address, c.location)
        st.warning(f"{e}. Showing an estimated distance.")
    q = qualification(dist, float(_cfg["min_tax_home_distance"]))
    st.metric("Distance from home", f"{dist} mi")
    {"red": st.error, "yellow": st.warning, "green": st.success}[q.status](q.message)
    st.progress(int(q.position))


# ---------------- Tabs ---------------- #

contract_list = list(contracts)
tabs = st.tabs([contract_name(c) if c.facility_name else f"Contract {i + 1}"
                for i, c in enumerate(contract_list)] + ["Compare", "Assistant"])

for tab, c in zip(tabs, contract_list):
    with tab:
        colA, colB, colC, colD = st.columns(4)
        with colA:
            if st.button("Add contract", key=f"{c.id}:add"):
                contracts.add()
                st.rerun()
        with colB:
            if st.button("Remove contract", key=f"{c.id}:remove", disabled=len(contracts) <= 1):
                if contracts.remove(c.id):
                    store.delete_contract(c.id)
                    st.rerun()
        with colC:
            if st.button("Save", key=f"{c.id}:save"):
                try:
                    store.save_contract(c)
                    st.success("Saved")
                except ValueError as e:
                    st.error(f"Could not save: {e}")
        with colD:
            selected = c.id in contracts.comparison_ids()
            if st.checkbox("Compare", value=selected, key=f"{c.id}:compare") != selected:
                contracts.toggle_comparison(c.id)

        _render_form(c)
        _render_metrics(c)

        with st.expander("Market insights", expanded=False):
            _render_market(c)
        with st.expander("Tax-home distance", expanded=False):
            _render_distance(c)

        with st.expander("AI contract score", expanded=False):
            if st.button("Score this contract", key=f"{c.id}:score"):
                if not api_key:
                    st.error("Add an OpenAI API key in the sidebar first.")
                else:
                    from openai import OpenAI
                    scorer = ContractScorer(client=OpenAI(api_key=api_key), model=_cfg["score_model"], engine=engine)
                    with st.spinner("Scoring..."):
                        result = scorer.score(c)
                    if result is None:
                        st.warning("Could not score this contract. Facility, location and hourly rate are required.")
                    else:
                        st.metric("AI score", f"{result.score}/10")
                        st.write(result.reasoning)
                        col1, col2 = st.columns(2)
                        with col1:
                            st.markdown("**Pros**\n" + "\n".join(f"- {p}" for p in result.pros))
                        with col2:
                            st.markdown("**Cons**\n" + "\n".join(f"- {x}" for x in result.cons))
                        if result.recommendations:
                            st.markdown("**Recommendations**\n" + "\n".join(f"- {r}" for r in result.recommendations))

        st.download_button("Download JSON-LD", data=export_json(c, engine),
                           file_name=f"contract-{c.id}.jsonld", mime="application/ld+json",
                           key=f"{c.id}:export")


# --- Compare --- #
with tabs[len(contract_list)]:
    st.subheader("Side-by-side comparison")
    df = comparison_frame(contracts.comparison_contracts(), engine)
    if df.empty:
        st.caption("Tick 'Compare' on two or more contracts.")
    else:
        st.dataframe(df.drop(columns=["id"]).set_index("name"), use_container_width=True)
        st.bar_chart(df.set_index("name")[["weekly_net", "weekly_expenses"]])


# --- Assistant --- #
with tabs[len(contract_list) + 1]:
    st.subheader("Contract Assistant")
    if st.button("Clear conversation"):
        store.clear_chat_messages()
        st.session_state["chat"] = []

    for msg in st.session_state["chat"]:
        with st.chat_message(msg.role):
            st.markdown(msg.content)

    prompt = st.chat_input("Ask about your contracts")
    if prompt:
        user_msg = ChatMessage(role="user", content=prompt)
        st.session_state["chat"].append(user_msg)
        store.append_chat_message(user_msg)
        with st.chat_message("user"):
            st.markdown(prompt)

        gateway = ChatGateway(api_key=api_key, model=_cfg["chat_model"])
        context = build_chat_context(contracts, engine)
        reply = None
        with st.chat_message("assistant"):
            if _cfg["chat_streaming"]:
                placeholder = st.empty()
                parts = []
                for event in gateway.send(st.session_state["chat"], context, stream=True):
                    if event["type"] == "chunk":
                        parts.append(event["content"])
                        placeholder.markdown("".join(parts))
                    elif event["type"] == "end":
                        reply = event["content"]
                    elif event["type"] == "error":
                        placeholder.error(event["error"])
                        if event.get("suggestion"):
                            st.caption(event["suggestion"])
            else:
                try:
                    reply = gateway.send(st.session_state["chat"], context)
                    st.markdown(reply)
                except ChatGatewayError as e:
                    st.error(str(e))

        if reply:
            bot_msg = ChatMessage(role="assistant", content=reply)
            st.session_state["chat"].append(bot_msg)
            store.append_chat_message(bot_msg)
