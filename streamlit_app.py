from __future__ import annotations

import logging

import streamlit as st

# Note: assuming the project root is on the Python path
from weather_lookup.config import settings
from weather_lookup.models import Failure, Loading, Success, WeatherRecord
from weather_lookup.presenter import WeatherPresenter


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

POLL_INTERVAL = 0.1


def _session_presenter() -> WeatherPresenter:
    """Return the presenter that lives for this browser session."""
    if "presenter" not in st.session_state:
        st.session_state["presenter"] = WeatherPresenter()
    return st.session_state["presenter"]


def render_record(record: WeatherRecord) -> None:
    with st.container(border=True):
        st.header(record.name)
        left, right = st.columns([1, 2])
        with left:
            st.image(record.icon_url, width=100)
        with right:
            st.subheader(record.description.title())

        temp, humidity, feels_like = st.columns(3)
        temp.metric("🌡️ Temperature", f"{record.temp:.1f}°F")
        humidity.metric("💧 Humidity", f"{record.humidity}%")
        feels_like.metric("☀️ Feels Like", f"{record.feels_like:.1f}°F")


def main() -> None:
    st.set_page_config(page_title="Weather App", page_icon="☁️")
    st.title("Weather App")

    if not settings.openweather_api_key:
        st.sidebar.warning("OPENWEATHER_API_KEY is not set. Lookups will fail until it is configured.")

    presenter = _session_presenter()

    with st.form("lookup", clear_on_submit=False):
        city = st.text_input("City", placeholder="Enter city name")
        submitted = st.form_submit_button("🔍 Search")

    if submitted and city:
        presenter.submit(city)

    # This script run is the rendering context: completions are applied here.
    if isinstance(presenter.state, Loading):
        with st.spinner("Fetching current weather..."):
            while isinstance(presenter.state, Loading):
                presenter.run_pending(timeout=POLL_INTERVAL)

    state = presenter.state
    if isinstance(state, Success):
        render_record(state.record)
    elif isinstance(state, Failure):
        st.error(state.reason)


if __name__ == "__main__":
    main()
